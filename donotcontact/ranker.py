"""
Confidence scoring for search results.

Compares the significant words of an organization name against a search
result's title and URL.
"""

HIGH = "high"
MEDIUM = "medium"
LOW = "low"

CONFIDENCE_TIERS = (HIGH, MEDIUM, LOW)

_HIGH_RATIO = 0.7
_MEDIUM_RATIO = 0.4


def significant_words(org_name: str) -> list[str]:
    """Lower-cased words of the name longer than two characters."""
    return [w for w in org_name.lower().split() if len(w) > 2]


def match_ratio(org_name: str, title: str, url: str) -> float:
    """
    Fraction of significant name words found in the title or URL.

    A name with no significant words scores 0.0.
    """
    words = significant_words(org_name)
    if not words:
        return 0.0

    title_lower = (title or "").lower()
    url_lower = (url or "").lower()
    matches = sum(1 for w in words if w in title_lower or w in url_lower)
    return matches / len(words)


def assess_confidence(org_name: str, title: str, url: str) -> str:
    """Map a search result to a confidence tier (high, medium or low)."""
    ratio = match_ratio(org_name, title, url)
    if ratio >= _HIGH_RATIO:
        return HIGH
    if ratio >= _MEDIUM_RATIO:
        return MEDIUM
    return LOW
