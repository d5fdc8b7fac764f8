"""
Contact page extraction.

Loads a contact page over HTTP and reports:
- email addresses (mailto: links first, then addresses in the page text)
- whether the page has a contact form
- the form's submission URL, if it declares one

The extractor owns a single requests.Session, created by the caller and
closed with close().
"""

import logging
import re
from typing import Optional
from urllib.parse import urljoin, unquote

import requests
from bs4 import BeautifulSoup

from donotcontact import config
from donotcontact.errors import CollaboratorError
from donotcontact.selector import ExtractionResult

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b')

# Things the email regex picks up that are not mailboxes
_JUNK_SUFFIXES = ('.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp', '.css', '.js')
_JUNK_PATTERNS = [
    '@example.', '@domain.com', '@email.com', 'sentry.io', 'wixpress.com',
    'noreply', 'no-reply', 'donotreply',
]

# Input names that mark a form as a site search box
_SEARCH_FIELD_NAMES = {'q', 's', 'query', 'search', 'keywords'}


def _is_junk_email(email: str) -> bool:
    email_lower = email.lower()
    if email_lower.endswith(_JUNK_SUFFIXES):
        return True
    return any(pat in email_lower for pat in _JUNK_PATTERNS)


def extract_emails(soup: BeautifulSoup) -> list[str]:
    """Email addresses on the page, deduplicated, in page order."""
    found: list[str] = []

    def add(candidate: str) -> None:
        candidate = candidate.strip().strip('.')
        if not _EMAIL_RE.fullmatch(candidate) or _is_junk_email(candidate):
            return
        if candidate.lower() not in (e.lower() for e in found):
            found.append(candidate)

    for link in soup.find_all('a', href=True):
        href = link['href'].strip()
        if href.lower().startswith('mailto:'):
            address = unquote(href[len('mailto:'):]).split('?')[0]
            for part in address.split(','):
                add(part)

    text = soup.get_text(' ')
    for match in _EMAIL_RE.findall(text):
        add(match)

    return found


def _is_search_form(form) -> bool:
    if (form.get('role') or '').lower() == 'search':
        return True
    if 'search' in ' '.join(form.get('class') or []).lower():
        return True
    fields = form.find_all(['input', 'textarea', 'select'])
    visible = [
        f for f in fields
        if (f.get('type') or 'text').lower() not in ('hidden', 'submit', 'button')
    ]
    if len(visible) == 1 and (visible[0].get('name') or '').lower() in _SEARCH_FIELD_NAMES:
        return True
    return any((f.get('type') or '').lower() == 'search' for f in visible)


def _is_contact_form(form) -> bool:
    if _is_search_form(form):
        return False
    if form.find('textarea'):
        return True
    return form.find('input', attrs={'type': 'email'}) is not None


def find_contact_form(soup: BeautifulSoup, page_url: str) -> tuple[bool, Optional[str]]:
    """
    Look for a contact form.

    Returns (has_form, form_url). form_url is the absolute action URL, or
    None when the form posts back to the page itself.
    """
    for form in soup.find_all('form'):
        if not _is_contact_form(form):
            continue
        action = (form.get('action') or '').strip()
        if not action or action.startswith('#') or action.lower().startswith('javascript:'):
            return True, None
        return True, urljoin(page_url, action)
    return False, None


def parse_contact_page(html: str, page_url: str) -> ExtractionResult:
    """Extract contact details from already-fetched HTML."""
    soup = BeautifulSoup(html, 'html.parser')
    emails = extract_emails(soup)
    has_form, form_url = find_contact_form(soup, page_url)
    return ExtractionResult(emails=emails, has_form=has_form, form_url=form_url)


class ContactExtractor:
    """
    Fetch and parse contact pages with one HTTP session.

    Usage:
        extractor = ContactExtractor()
        try:
            result = extractor.extract("https://acme.org/contact")
        finally:
            extractor.close()
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = config.REQUEST_TIMEOUT,
    ):
        self.session = session or requests.Session()
        self.session.headers.update(config.REQUEST_HEADERS)
        self.timeout = timeout

    def fetch(self, url: str) -> tuple[str, str]:
        """Load a page. Returns (final_url, html); final_url reflects any redirects."""
        try:
            resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            resp.raise_for_status()
        except requests.Timeout as exc:
            raise CollaboratorError(f"Timed out loading {url}") from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "HTTPError"
            raise CollaboratorError(f"HTTP {status} loading {url}") from exc
        except requests.RequestException as exc:
            raise CollaboratorError(f"Failed to load {url}: {exc}") from exc
        return resp.url or url, resp.text

    def extract(self, url: str) -> ExtractionResult:
        """Load a contact page and extract its contact details."""
        final_url, html = self.fetch(url)
        result = parse_contact_page(html, final_url)
        logger.debug(
            "Extracted from %s: %d emails, form=%s (%s)",
            final_url, len(result.emails), result.has_form, result.form_url,
        )
        return result

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
