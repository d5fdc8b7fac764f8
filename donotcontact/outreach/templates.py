"""
Email template rendering for opt-out requests.

Templates:
- Opt-out request to an organization
- SMTP test message
"""

import logging
import os
from html import escape
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape, TemplateNotFound

from donotcontact.outreach.config import Identity

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "email_templates")

TEST_SUBJECT = "Test email from Do Not Contact app"

# Initialize Jinja2 environment
_env = None


def _get_env() -> Environment:
    """Get or create Jinja2 environment."""
    global _env
    if _env is None:
        _env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(['html']),
        )
    return _env


def _render(name: str, context: dict) -> Optional[str]:
    """Render a template by name, or None if it does not exist."""
    try:
        return _get_env().get_template(name).render(**context)
    except TemplateNotFound:
        logger.debug("Template %s not found, using fallback", name)
        return None


def opt_out_subject(identity: Identity) -> str:
    return f"Mailing list removal request - {identity.full_name}"


def render_opt_out_message(org_name: str, identity: Identity) -> tuple[str, str, str]:
    """
    Render the removal request for one organization.

    Returns:
        (subject, text_body, html_body)
    """
    context = {
        'org_name': org_name,
        'full_name': identity.full_name,
        'full_address': identity.full_address,
        'email': identity.email,
        'phone': identity.phone,
        'salutation': identity.salutation,
    }

    text = _render("optout.txt", context)
    if text is None:
        text = _render_opt_out_fallback(context)

    html = _render("optout.html", context)
    if html is None:
        html = _render_opt_out_html_fallback(context)

    return opt_out_subject(identity), text, html


def render_test_message(from_addr: str, to_addr: str) -> tuple[str, str, str]:
    """
    Render the SMTP configuration test message.

    Returns:
        (subject, text_body, html_body)
    """
    context = {'from_addr': from_addr, 'to_addr': to_addr}

    text = _render("test_email.txt", context)
    if text is None:
        text = (
            "This is a test email to verify SMTP configuration.\n\n"
            f"Sending from: {from_addr}\nSending to: {to_addr}\n\n"
            "If you received this, the email setup is working!"
        )

    html = _render("test_email.html", context)
    if html is None:
        html = (
            "<p>This is a test email to verify SMTP configuration.</p>"
            f"<p>Sending from: {from_addr}<br>Sending to: {to_addr}</p>"
            "<p>If you received this, the email setup is working!</p>"
        )

    return TEST_SUBJECT, text, html


# ---------------------------------------------------------------------------
# Fallback templates (used if Jinja2 templates not found)
# ---------------------------------------------------------------------------

def _render_opt_out_fallback(ctx: dict) -> str:
    """Fallback template for the opt-out request."""
    return f"""Hi there,

Thank you for all the great work {ctx['org_name']} does! I really appreciate your mission and the impact you have.

I'm writing with a small request: would you mind removing me from your postal mailing list? I want to make sure your outreach budget goes to people who will respond, and I'm just not able to contribute right now.

If it helps to have my info for your records:
Name: {ctx['full_name']}
Address: {ctx['full_address']}
Email: {ctx['email']}
Phone: {ctx['phone']}

Thanks so much for understanding, and keep up the wonderful work!

Warmly,
{ctx['salutation']}"""


def _render_opt_out_html_fallback(ctx: dict) -> str:
    """Fallback HTML body: the plain text split into paragraphs."""
    paragraphs = _render_opt_out_fallback(ctx).split("\n\n")
    return "\n\n".join(
        "<p>" + "<br>\n".join(escape(line) for line in p.split("\n")) + "</p>"
        for p in paragraphs
    )
