"""Tests for email rendering."""

from donotcontact.outreach import templates
from donotcontact.outreach.templates import render_opt_out_message, render_test_message


class TestOptOutMessage:
    """Test the removal request."""

    def test_subject(self, identity):
        """The subject names the sender."""
        subject, _, _ = render_opt_out_message("Helping Hands", identity)
        assert subject == "Mailing list removal request - Jane Doe"

    def test_text_body(self, identity):
        """The body names the organization and carries the sender's details."""
        _, text, _ = render_opt_out_message("Helping Hands", identity)
        assert "great work Helping Hands does" in text
        assert "Name: Jane Doe" in text
        assert "Address: 1 Main St, Springfield, IL 62701" in text
        assert "Email: jane@example.com" in text
        assert "Phone: 555-0100" in text
        assert text.rstrip().endswith("Warmly,\nJane")

    def test_html_escapes_names(self, identity):
        """Organization names are escaped in the HTML body only."""
        _, text, html = render_opt_out_message("Bread & Roses", identity)
        assert "Bread & Roses" in text
        assert "Bread &amp; Roses" in html
        assert html.startswith("<p>Hi there,</p>")

    def test_fallback_when_templates_missing(self, identity, tmp_path, monkeypatch):
        """Inline templates are used when the template files are absent."""
        monkeypatch.setattr(templates, "TEMPLATE_DIR", str(tmp_path))
        monkeypatch.setattr(templates, "_env", None)

        subject, text, html = render_opt_out_message("Bread & Roses", identity)

        assert subject == "Mailing list removal request - Jane Doe"
        assert "great work Bread & Roses does" in text
        assert "Bread &amp; Roses" in html
        assert "Warmly,<br>\nJane" in html


class TestTestMessage:
    """Test the SMTP check message."""

    def test_addresses_in_body(self):
        """Both addresses are shown."""
        subject, text, html = render_test_message("jane@example.com", "me@example.net")
        assert subject == "Test email from Do Not Contact app"
        assert "Sending from: jane@example.com" in text
        assert "Sending to: me@example.net" in text
        assert "me@example.net" in html
