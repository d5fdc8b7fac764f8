"""Tests for contact channel selection."""

import pytest

from donotcontact.errors import NoActionableChannel
from donotcontact.selector import (
    BOTH,
    EMAIL,
    FORM,
    NONE,
    ContactChannel,
    ExtractionResult,
    contact_type_for,
    pick_best_email,
    require_channel,
    select_channel,
)

CONTACT_URL = "https://helpinghands.org/contact"


class TestContactType:
    """Test the email/form to contact type table."""

    @pytest.mark.parametrize("has_email, has_form, expected", [
        (True, True, BOTH),
        (True, False, EMAIL),
        (False, True, FORM),
        (False, False, NONE),
    ])
    def test_table(self, has_email, has_form, expected):
        """Every combination maps to exactly one type."""
        assert contact_type_for(has_email, has_form) == expected


class TestPickBestEmail:
    """Test email priority."""

    def test_priority_prefix_beats_earlier_address(self):
        """info@ wins even when a personal address comes first."""
        emails = ["jane.smith@org.org", "info@org.org"]
        assert pick_best_email(emails) == "info@org.org"

    def test_prefix_order_not_list_order(self):
        """info@ beats contact@ regardless of position."""
        emails = ["contact@org.org", "support@org.org", "info@org.org"]
        assert pick_best_email(emails) == "info@org.org"

    def test_prefix_match_is_case_insensitive(self):
        """Upper-case prefixes still count."""
        assert pick_best_email(["bob@org.org", "Hello@Org.org"]) == "Hello@Org.org"

    def test_first_email_fallback(self):
        """With no priority prefix, the first address wins."""
        assert pick_best_email(["bob@org.org", "amy@org.org"]) == "bob@org.org"

    def test_empty(self):
        """No candidates, no email."""
        assert pick_best_email([]) is None


class TestSelectChannel:
    """Test channel decisions for extracted pages."""

    def test_form_without_action_uses_contact_url(self):
        """A form that posts back to itself is reached through the contact page."""
        channel = select_channel("Acme", CONTACT_URL, ExtractionResult(has_form=True))
        assert channel.contact_type == FORM
        assert channel.form_url == CONTACT_URL
        assert channel.contact_value == CONTACT_URL

    def test_form_action_url_is_kept(self):
        """An explicit form URL is used as is."""
        extraction = ExtractionResult(has_form=True, form_url="https://forms.example.com/f/1")
        channel = select_channel("Acme", CONTACT_URL, extraction)
        assert channel.form_url == "https://forms.example.com/f/1"

    def test_both_prefers_email_as_value(self):
        """With email and form, the stored value is the email."""
        extraction = ExtractionResult(emails=["info@acme.org"], has_form=True)
        channel = select_channel("Acme", CONTACT_URL, extraction)
        assert channel.contact_type == BOTH
        assert channel.contact_value == "info@acme.org"
        assert channel.form_url == CONTACT_URL

    def test_blank_emails_ignored(self):
        """Whitespace-only entries do not count as email addresses."""
        channel = select_channel("Acme", CONTACT_URL, ExtractionResult(emails=["  ", ""]))
        assert channel.contact_type == NONE
        assert channel.contact_value is None

    def test_email_only(self):
        """Emails without a form give the email type and no form URL."""
        extraction = ExtractionResult(emails=[" bob@acme.org ", "info@acme.org"])
        channel = select_channel("Acme", CONTACT_URL, extraction)
        assert channel.contact_type == EMAIL
        assert channel.email == "info@acme.org"
        assert channel.form_url is None

    def test_to_dict(self):
        """Channels serialize to plain dicts."""
        channel = ContactChannel(EMAIL, "info@acme.org", None)
        assert channel.to_dict() == {"contact_type": EMAIL, "email": "info@acme.org", "form_url": None}


class TestRequireChannel:
    """Test the no-channel check."""

    def test_none_raises(self):
        """A page without email or form has no actionable channel."""
        with pytest.raises(NoActionableChannel):
            require_channel(ContactChannel())

    def test_channel_passes_through(self):
        """Actionable channels are returned unchanged."""
        channel = ContactChannel(FORM, None, CONTACT_URL)
        assert require_channel(channel) is channel
