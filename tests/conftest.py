"""
Pytest configuration and shared fixtures.
"""

import pytest

from donotcontact.db import OrganizationStore
from donotcontact.errors import CollaboratorError, NotFound
from donotcontact.outreach.config import Identity


class FakeSearch:
    """Search client returning canned contact pages (or raising canned errors)."""

    def __init__(self):
        self.pages = {}
        self.calls = []

    def find_contact_page(self, org_name):
        self.calls.append(org_name)
        result = self.pages.get(org_name, NotFound("No results found"))
        if isinstance(result, BaseException):
            raise result
        return result


class FakeExtractor:
    """Extractor returning canned results per URL."""

    def __init__(self):
        self.results = {}
        self.calls = []

    def extract(self, url):
        self.calls.append(url)
        result = self.results.get(url, CollaboratorError(f"HTTP 404 loading {url}"))
        if isinstance(result, BaseException):
            raise result
        return result


class FakeClock:
    """Monotonic clock whose sleep() advances time instead of blocking."""

    def __init__(self, start=1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds):
        self.now += seconds


class FakeMailer:
    """Mailer that records messages instead of talking to SMTP."""

    from_email = "jane@example.com"
    from_header = '"Jane Doe" <jane@example.com>'

    def __init__(self):
        self.sent = []
        self.verified = 0
        self.fail_verify = False
        self.fail_for = set()

    def verify(self):
        self.verified += 1
        if self.fail_verify:
            raise CollaboratorError("SMTP verification failed: (535, b'Bad credentials')")

    def send(self, to_email, subject, text, html=None):
        if to_email in self.fail_for:
            raise CollaboratorError(f"Recipient refused: {to_email}")
        self.sent.append((to_email, subject, text, html))
        return f"<msg-{len(self.sent)}@example.com>"


@pytest.fixture
def store(tmp_path) -> OrganizationStore:
    """Fresh SQLite store in a temporary directory."""
    s = OrganizationStore(str(tmp_path / "state.db"))
    s.init_db()
    return s


@pytest.fixture
def fake_search() -> FakeSearch:
    return FakeSearch()


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def identity() -> Identity:
    return Identity(
        full_name="Jane Doe",
        salutation="Jane",
        email="jane@example.com",
        phone="555-0100",
        street="1 Main St",
        city="Springfield",
        state="IL",
        zip="62701",
    )


@pytest.fixture
def outreach_env() -> dict:
    """A complete, valid outreach environment."""
    return {
        'DNC_FULL_NAME': 'Jane Doe',
        'DNC_EMAIL': 'jane@example.com',
        'DNC_PHONE': '555-0100',
        'DNC_STREET': '1 Main St',
        'DNC_CITY': 'Springfield',
        'DNC_STATE': 'IL',
        'DNC_ZIP': '62701',
        'SMTP_HOST': 'smtp.example.com',
        'SMTP_PORT': '587',
        'SMTP_USER': 'jane@example.com',
        'SMTP_PASSWORD': 'app-password',
    }


@pytest.fixture
def contact_page_html() -> str:
    """Contact page with a mailto link, a text address and a contact form."""
    return """
    <html>
    <head><title>Contact Us - Helping Hands</title></head>
    <body>
        <form role="search" action="/search"><input type="text" name="q"></form>
        <h1>Contact Us</h1>
        <p>Questions? Write to <a href="mailto:Donations@HelpingHands.org?subject=Hi">our team</a>
           or info@helpinghands.org.</p>
        <img src="logo@2x.png">
        <form action="/contact/submit" method="post">
            <input type="text" name="name">
            <input type="email" name="email">
            <textarea name="message"></textarea>
            <button type="submit">Send</button>
        </form>
    </body>
    </html>
    """
