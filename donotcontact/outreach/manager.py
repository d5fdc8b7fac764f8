"""
Email run orchestration.

Coordinates:
- Choosing organizations with an email channel
- Verifying the SMTP transport before anything is sent
- Sending one removal request per organization, spaced out
- Recording an email attempt and a transcript entry per send
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from donotcontact.db import Organization, OrganizationStore
from donotcontact.errors import CollaboratorError, NotFound
from donotcontact.outreach.config import Identity
from donotcontact.outreach.sender import SendResult, SmtpMailer
from donotcontact.outreach.templates import render_opt_out_message, render_test_message
from donotcontact.outreach.transcript import TranscriptLog
from donotcontact.selector import BOTH, EMAIL
from donotcontact.throttle import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class EmailPreview:
    org_name: str
    to_email: str
    subject: str
    body: str


@dataclass
class SendTally:
    """Outcome of one email run."""
    sent: int = 0
    failed: int = 0
    skipped: list = field(default_factory=list)
    results: list = field(default_factory=list)
    previews: list = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.sent + self.failed


def select_recipients(
    store: OrganizationStore,
    org: Optional[str] = None,
    resend: bool = False,
) -> tuple[list[Organization], list[Organization]]:
    """
    Organizations to email, and those skipped because they were already emailed.

    Raises:
        NotFound: if a named organization does not exist or has no email
    """
    candidates = [
        o for o in store.get_all_organizations()
        if o.contact_type in (EMAIL, BOTH) and o.contact_value
    ]

    if org is not None:
        candidates = [o for o in candidates if o.name == org]
        if not candidates:
            raise NotFound(f"Organization not found or has no email: {org}")

    if resend:
        return candidates, []

    targets, skipped = [], []
    for o in candidates:
        if store.has_successful_attempt(o.name, "email"):
            skipped.append(o)
        else:
            targets.append(o)
    return targets, skipped


def send_opt_out_emails(
    store: OrganizationStore,
    mailer: SmtpMailer,
    identity: Identity,
    transcript: Optional[TranscriptLog] = None,
    limiter: Optional[RateLimiter] = None,
    org: Optional[str] = None,
    dry_run: bool = False,
    resend: bool = False,
    on_result: Optional[Callable[[SendResult], None]] = None,
) -> SendTally:
    """
    Send a removal request to every organization with an email channel.

    Dry runs render the messages into tally.previews without connecting.
    A failed send is recorded and the run carries on.

    Raises:
        NotFound: if `org` is given and has no email channel
        CollaboratorError: if the SMTP transport cannot be verified
    """
    targets, skipped = select_recipients(store, org=org, resend=resend)
    tally = SendTally(skipped=skipped)

    for o in skipped:
        logger.info("Skipping %s: already emailed", o.name)

    if dry_run:
        for o in targets:
            subject, text, _ = render_opt_out_message(o.name, identity)
            tally.previews.append(EmailPreview(o.name, o.contact_value, subject, text))
        logger.info("[DRY RUN] %d emails rendered", len(tally.previews))
        return tally

    if not targets:
        logger.info("No organizations to email")
        return tally

    transcript = transcript or TranscriptLog()
    transcript.log(f"From: {mailer.from_header}")
    transcript.log(f"Organizations to contact: {len(targets)}")

    try:
        mailer.verify()
    except CollaboratorError as e:
        transcript.log(f"ERROR: {e}")
        raise
    transcript.log("SMTP connection verified")

    limiter = limiter or RateLimiter(0)

    for o in targets:
        subject, text, html = render_opt_out_message(o.name, identity)
        limiter.wait()

        try:
            message_id = mailer.send(o.contact_value, subject, text, html)
            result = SendResult(o.name, o.contact_value, True, message_id=message_id)
        except CollaboratorError as e:
            result = SendResult(o.name, o.contact_value, False, error=str(e))
        except Exception as e:
            logger.exception("Unexpected error sending to %s", o.name)
            result = SendResult(o.name, o.contact_value, False, error=f"Unexpected error: {e}")

        transcript.log_email(
            org_name=o.name,
            to_email=o.contact_value,
            from_email=mailer.from_email,
            subject=subject,
            body=text,
            success=result.success,
            message_id=result.message_id,
            error=result.error,
        )
        store.append_attempt(o.name, "email", result.success, result.details())

        if result.success:
            tally.sent += 1
        else:
            tally.failed += 1
            logger.warning("Failed to email %s: %s", o.name, result.error)
        tally.results.append(result)
        if on_result:
            on_result(result)

    transcript.log_summary(tally.sent, tally.failed)
    logger.info("Email run complete: %d sent, %d failed", tally.sent, tally.failed)
    return tally


def send_test_email(mailer: SmtpMailer, to_email: str) -> SendResult:
    """
    Verify the transport and send the configuration test message.

    Raises:
        CollaboratorError: if the SMTP transport cannot be verified
    """
    mailer.verify()
    subject, text, html = render_test_message(mailer.from_email, to_email)
    try:
        message_id = mailer.send(to_email, subject, text, html)
    except CollaboratorError as e:
        return SendResult("TEST", to_email, False, error=str(e))
    return SendResult("TEST", to_email, True, message_id=message_id)
