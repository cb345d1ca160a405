"""Tests for supervisor emails."""

import smtplib

from app.core.config import settings
from app.submissions import mailer


class TestBuildValidationEmail:
    """Tests for building the validation request message."""

    def test_renders_link_in_both_parts(self, monkeypatch):
        monkeypatch.setattr(settings, "mail_from", "noreply@example.com")

        msg = mailer.build_validation_email(
            "sam@example.com",
            "http://localhost:3000/app/validate-checklist/42",
            "data_42.json",
            "Dock Doors Daily",
        )

        assert msg["Subject"] == "Sanitation Checklist for Review: Dock Doors Daily"
        assert msg["To"] == "sam@example.com"
        assert msg["From"] == "noreply@example.com"
        text = msg.get_body(preferencelist=("plain",)).get_content()
        html = msg.get_body(preferencelist=("html",)).get_content()
        assert "/app/validate-checklist/42" in text
        assert "/app/validate-checklist/42" in html


class TestSendValidationRequest:
    """Tests for send_validation_request."""

    def test_missing_recipient(self):
        assert mailer.send_validation_request("", "http://x", "data_1.json", "T") is False

    def test_suppressed_send_succeeds(self, monkeypatch):
        monkeypatch.setattr(settings, "mail_suppress_send", True)
        assert mailer.send_validation_request("a@b.c", "http://x", "data_1.json", "T") is True

    def test_unconfigured_smtp_fails(self, monkeypatch):
        monkeypatch.setattr(settings, "mail_suppress_send", False)
        monkeypatch.setattr(settings, "smtp_host", "")
        assert mailer.send_validation_request("a@b.c", "http://x", "data_1.json", "T") is False

    def test_smtp_error_is_reported(self, monkeypatch):
        """SMTP failures return False instead of raising."""

        class BrokenSMTP:
            def __init__(self, *args, **kwargs):
                raise smtplib.SMTPConnectError(421, "unavailable")

        monkeypatch.setattr(settings, "mail_suppress_send", False)
        monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
        monkeypatch.setattr(settings, "mail_from", "noreply@example.com")
        monkeypatch.setattr(mailer.smtplib, "SMTP", BrokenSMTP)

        assert mailer.send_validation_request("a@b.c", "http://x", "data_1.json", "T") is False

    def test_sends_through_smtp(self, monkeypatch):
        sent = []

        class FakeSMTP:
            def __init__(self, host, port, timeout=None):
                self.host = host

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

            def starttls(self):
                pass

            def login(self, user, password):
                pass

            def send_message(self, msg):
                sent.append(msg)

        monkeypatch.setattr(settings, "mail_suppress_send", False)
        monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
        monkeypatch.setattr(settings, "smtp_user", "mailer")
        monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)

        assert mailer.send_validation_request("a@b.c", "http://x", "data_1.json", "T") is True
        assert sent[0]["To"] == "a@b.c"
