"""
SMTP mail transport.

Handles:
- Verifying the SMTP connection and credentials before a run
- Building multipart (text + HTML) messages
- Sending, returning the Message-ID
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Optional

from donotcontact.errors import CollaboratorError
from donotcontact.outreach.config import Identity, SmtpSettings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT = 30


class SendResult:
    """Result of an email send attempt."""
    def __init__(
        self,
        org_name: str,
        to_email: str,
        success: bool,
        message_id: Optional[str] = None,
        error: Optional[str] = None,
    ):
        self.org_name = org_name
        self.to_email = to_email
        self.success = success
        self.message_id = message_id
        self.error = error

    def details(self) -> dict:
        """Attempt details recorded for this send."""
        if self.success:
            return {'messageId': self.message_id}
        return {'error': self.error}


class SmtpMailer:
    """
    Sends mail through one SMTP account.

    A fresh connection is opened per operation, so the mailer holds no
    socket between sends.

    Usage:
        mailer = SmtpMailer(load_smtp_settings(), load_identity())
        mailer.verify()
        message_id = mailer.send("info@acme.org", subject, text, html)
    """

    def __init__(self, settings: SmtpSettings, identity: Identity, timeout: int = SMTP_TIMEOUT):
        self.settings = settings
        self.identity = identity
        self.timeout = timeout

    @property
    def from_email(self) -> str:
        return self.settings.from_address(self.identity)

    @property
    def from_header(self) -> str:
        return formataddr((self.identity.full_name, self.from_email))

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated connection."""
        s = self.settings
        if s.secure:
            server = smtplib.SMTP_SSL(s.host, s.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(s.host, s.port, timeout=self.timeout)
        try:
            server.ehlo()
            if not s.secure:
                server.starttls()
                server.ehlo()
            server.login(s.user, s.password)
        except (smtplib.SMTPException, OSError):
            server.close()
            raise
        return server

    def verify(self) -> None:
        """Check that we can connect and log in. Raises CollaboratorError if not."""
        try:
            server = self._connect()
            server.quit()
        except (smtplib.SMTPException, OSError) as e:
            raise CollaboratorError(f"SMTP verification failed: {e}") from e
        logger.info("SMTP connection verified (%s:%d)", self.settings.host, self.settings.port)

    def build_message(self, to_email: str, subject: str, text: str, html: Optional[str] = None):
        if html:
            msg = MIMEMultipart('alternative')
            msg.attach(MIMEText(text, 'plain', 'utf-8'))
            msg.attach(MIMEText(html, 'html', 'utf-8'))
        else:
            msg = MIMEText(text, 'plain', 'utf-8')

        msg['From'] = self.from_header
        msg['To'] = to_email
        msg['Subject'] = subject
        msg['Message-ID'] = make_msgid(domain=self.from_email.rpartition('@')[2] or None)
        return msg

    def send(self, to_email: str, subject: str, text: str, html: Optional[str] = None) -> str:
        """
        Send one message.

        Returns:
            The Message-ID header of the sent message

        Raises:
            CollaboratorError: on any SMTP or connection failure
        """
        msg = self.build_message(to_email, subject, text, html)
        try:
            server = self._connect()
            try:
                server.sendmail(self.from_email, [to_email], msg.as_string())
            finally:
                server.quit()
        except smtplib.SMTPRecipientsRefused as e:
            logger.error("Recipients refused: %s", e)
            raise CollaboratorError(f"Recipient refused: {to_email}") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP error: %s", e)
            raise CollaboratorError(str(e)) from e

        logger.info("Email sent to %s", to_email)
        return msg['Message-ID']
