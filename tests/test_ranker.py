"""Tests for search result confidence scoring."""

from donotcontact.ranker import HIGH, LOW, MEDIUM, assess_confidence, match_ratio, significant_words


class TestSignificantWords:
    """Test name tokenization."""

    def test_drops_short_words(self):
        """Words of two characters or fewer are ignored."""
        assert significant_words("Friends of the Earth") == ["friends", "the", "earth"]

    def test_lower_cases(self):
        """Tokens are lower-cased."""
        assert significant_words("ACLU Foundation") == ["aclu", "foundation"]

    def test_no_significant_words(self):
        """A name made of short words has no tokens."""
        assert significant_words("A B of") == []


class TestAssessConfidence:
    """Test confidence tiers."""

    def test_all_words_in_title_is_high(self):
        """Every significant word found gives high confidence."""
        result = assess_confidence(
            "Doctors Without Borders",
            "Doctors Without Borders | Official Site",
            "https://www.doctorswithoutborders.org/",
        )
        assert result == HIGH

    def test_words_found_in_url(self):
        """Matches in the URL count as well as the title."""
        assert assess_confidence("Sierra Club", "Home", "https://www.sierraclub.org") == HIGH

    def test_half_match_is_medium(self):
        """A ratio between 0.4 and 0.7 is medium."""
        assert match_ratio("Red Cross Blood Drive", "Red Cross", "https://x.org") == 0.5
        assert assess_confidence("Red Cross Blood Drive", "Red Cross", "https://x.org") == MEDIUM

    def test_poor_match_is_low(self):
        """A ratio under 0.4 is low."""
        result = assess_confidence(
            "National Wildlife Federation Fund",
            "Wildlife photos",
            "https://photos.example.com",
        )
        assert result == LOW

    def test_no_significant_words_is_low(self):
        """A name with no significant words never scores above low."""
        assert match_ratio("A B", "A B", "https://ab.org") == 0.0
        assert assess_confidence("A B", "A B", "https://ab.org") == LOW

    def test_missing_title(self):
        """A missing title is treated as empty."""
        assert assess_confidence("Oxfam America", None, "https://www.oxfamamerica.org") == HIGH
