"""
Opt-out email sending for organizations with an email contact.

This module handles:
- Identity and SMTP configuration
- Rendering the removal request
- Sending through SMTP, one message per organization
- Writing a per-run delivery transcript
"""

from donotcontact.outreach.config import Identity, SmtpSettings, load_identity, load_smtp_settings
from donotcontact.outreach.manager import SendTally, send_opt_out_emails, send_test_email
from donotcontact.outreach.sender import SendResult, SmtpMailer
from donotcontact.outreach.templates import render_opt_out_message
from donotcontact.outreach.transcript import TranscriptLog

__all__ = [
    'Identity',
    'SmtpSettings',
    'load_identity',
    'load_smtp_settings',
    'SendTally',
    'send_opt_out_emails',
    'send_test_email',
    'SendResult',
    'SmtpMailer',
    'render_opt_out_message',
    'TranscriptLog',
]
