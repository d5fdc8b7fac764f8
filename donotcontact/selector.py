"""
Pick the contact channel for an organization from an extracted contact page.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Optional

from donotcontact.errors import NoActionableChannel

logger = logging.getLogger(__name__)

NONE = "none"
EMAIL = "email"
FORM = "form"
BOTH = "both"

CONTACT_TYPES = (NONE, EMAIL, FORM, BOTH)

# Checked in order; general inboxes beat personal addresses
PRIORITY_PREFIXES = ["info@", "contact@", "support@", "help@", "hello@"]


@dataclass
class ExtractionResult:
    """What the extractor found on a contact page."""
    emails: list = field(default_factory=list)
    has_form: bool = False
    form_url: Optional[str] = None


@dataclass
class ContactChannel:
    contact_type: str = NONE
    email: Optional[str] = None
    form_url: Optional[str] = None

    @property
    def contact_value(self) -> Optional[str]:
        """The single address or URL stored for this channel."""
        if self.contact_type == NONE:
            return None
        return self.email or self.form_url

    def to_dict(self) -> dict:
        return asdict(self)


def contact_type_for(has_email: bool, has_form: bool) -> str:
    if has_email and has_form:
        return BOTH
    if has_email:
        return EMAIL
    if has_form:
        return FORM
    return NONE


def pick_best_email(emails: list[str]) -> Optional[str]:
    """
    Choose one address from the candidates.

    Every candidate is checked against each priority prefix in turn, so
    "info@" anywhere in the list beats "contact@" earlier in the list. With
    no prefix match the first candidate wins.
    """
    if not emails:
        return None

    for prefix in PRIORITY_PREFIXES:
        for email in emails:
            if email.lower().startswith(prefix):
                return email

    return emails[0]


def select_channel(
    org_name: str,
    contact_url: str,
    extraction: ExtractionResult,
) -> ContactChannel:
    """Decide the contact type and the best email / form URL for a page."""
    emails = [e.strip() for e in extraction.emails if e and e.strip()]
    has_email = bool(emails)
    has_form = bool(extraction.has_form)

    form_url = extraction.form_url or (contact_url if has_form else None)

    channel = ContactChannel(
        contact_type=contact_type_for(has_email, has_form),
        email=pick_best_email(emails),
        form_url=form_url,
    )
    logger.debug(
        "Channel for '%s': %s (email=%s, form=%s)",
        org_name, channel.contact_type, channel.email, channel.form_url,
    )
    return channel


def require_channel(channel: ContactChannel) -> ContactChannel:
    """Return the channel, or raise NoActionableChannel if there is none."""
    if channel.contact_type == NONE:
        raise NoActionableChannel("No email address or contact form found on contact page")
    return channel
