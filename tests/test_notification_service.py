"""
Tests for `services/notification_service.py`.

Covers contract rules:
- Booking emails are best-effort: failures are logged, never raised.
- Contact requests require the owner email; the auto-reply is best-effort.
- Display time is split into date and time for subjects and bodies.
- SMTP failures surface as NotificationError.
"""

from __future__ import annotations

import logging
import smtplib
from typing import List
from unittest.mock import MagicMock, patch

import pytest

from config.settings import Settings
from domain.booking import BookingSlot
from services.notification_service import (
    LoggingEmailSender,
    NotificationError,
    NotificationService,
    OutgoingEmail,
    SmtpEmailSender,
    create_email_sender,
)

LEAD = {
    "lead_first_name": "Jane",
    "lead_last_name": "Doe",
    "lead_email": "jane@example.com",
    "lead_phone": "555-0100",
    "lead_state": "TX",
    "session_type": "Discovery Call",
    "session_duration": 30,
    "lead_score": 85,
    "lead_tier": "A",
    "income_range": "$8,000+",
}


class RecordingSender:
    """Sender that records emails and fails for chosen recipients."""

    def __init__(self, fail_for: tuple = ()) -> None:
        self.sent: List[OutgoingEmail] = []
        self.fail_for = fail_for

    def send(self, email: OutgoingEmail) -> None:
        if email.to in self.fail_for:
            raise NotificationError(f"cannot deliver to {email.to}")
        self.sent.append(email)


def _service(sender, owner_email: str | None = "owner@example.com") -> NotificationService:
    return NotificationService(
        sender,
        owner_email=owner_email,
        business_name="Test Financial",
        advisor_name="Alex Advisor",
        booking_page_url="https://example.com/book",
    )


def _slot(display_time: str = "Fri, Dec 26 at 4:00 PM") -> BookingSlot:
    return BookingSlot(requested_time="2025-12-26T21:00:00Z", display_time=display_time, metadata=LEAD)


def test_notify_booking_sends_owner_and_lead_emails() -> None:
    """Verify both booking emails are composed from the slot and lead."""

    sender = RecordingSender()

    delivered = _service(sender).notify_booking(_slot(), LEAD)

    assert delivered == 2
    owner, lead = sender.sent
    assert owner.to == "owner@example.com"
    assert owner.subject == "New Discovery Call - Jane Doe - Fri, Dec 26 at 4:00 PM"
    assert "Lead Score: 85 (Tier A)" in owner.body
    assert "Income: $8,000+" in owner.body
    assert lead.to == "jane@example.com"
    assert lead.subject == "Confirmed: Your Call with Alex Advisor - Fri, Dec 26"
    assert "4:00 PM" in lead.body
    assert "555-0100" in lead.body


def test_notify_booking_uses_placeholders_without_display_time() -> None:
    """Verify missing display time falls back to Date TBD / Time TBD."""

    sender = RecordingSender()

    _service(sender).notify_booking(_slot(display_time=""), LEAD)

    assert sender.sent[0].subject.endswith("Date TBD at Time TBD")


def test_notify_booking_failure_is_logged_not_raised(caplog) -> None:
    """Verify a failed email is logged at ERROR and the other one still goes out."""

    sender = RecordingSender(fail_for=("jane@example.com",))

    with caplog.at_level(logging.ERROR, logger="services.notification_service"):
        delivered = _service(sender).notify_booking(_slot(), LEAD)

    assert delivered == 1
    assert [e.to for e in sender.sent] == ["owner@example.com"]
    assert any(getattr(r, "lead_phone", None) == "555-0100" for r in caplog.records)


def test_notify_booking_skips_missing_recipients() -> None:
    """Verify no email is attempted without an owner address or lead email."""

    sender = RecordingSender()

    delivered = _service(sender, owner_email=None).notify_booking(_slot(), {"lead_first_name": "Jane"})

    assert delivered == 0
    assert sender.sent == []


def test_notify_contact_sends_owner_email_with_reply_to() -> None:
    """Verify the owner notification replies to the sender and the auto-reply greets by first name."""

    sender = RecordingSender()

    _service(sender).notify_contact(
        name="Jane Doe",
        email="jane@example.com",
        phone="555-0100",
        message="Call me",
        coverages="Term Life, Whole Life",
    )

    owner, reply = sender.sent
    assert owner.subject == "New Contact: Jane Doe - Term Life"
    assert owner.reply_to == "jane@example.com"
    assert "Call me" in owner.body
    assert reply.to == "jane@example.com"
    assert reply.subject == "Got your message, Jane!"
    assert "https://example.com/book" in reply.body


def test_notify_contact_owner_failure_raises() -> None:
    """Verify the request fails when the owner cannot be notified."""

    sender = RecordingSender(fail_for=("owner@example.com",))

    with pytest.raises(NotificationError):
        _service(sender).notify_contact(name="Jane", email="jane@example.com")

    assert sender.sent == []


def test_notify_contact_requires_owner_address() -> None:
    """Verify contact requests fail without a configured owner address."""

    with pytest.raises(NotificationError):
        _service(RecordingSender(), owner_email=None).notify_contact(name="Jane", email="jane@example.com")


def test_notify_contact_auto_reply_failure_is_swallowed() -> None:
    """Verify a failed auto-reply does not fail the contact request."""

    sender = RecordingSender(fail_for=("jane@example.com",))

    _service(sender).notify_contact(name="Jane", email="jane@example.com")

    assert [e.to for e in sender.sent] == ["owner@example.com"]


def test_create_email_sender_without_credentials_logs_only() -> None:
    """Verify missing mail credentials select the logging sender."""

    assert isinstance(create_email_sender(Settings(store_backend="memory")), LoggingEmailSender)

    smtp = create_email_sender(Settings(store_backend="memory", email_user="me@example.com", email_password="abcd efgh"))
    assert isinstance(smtp, SmtpEmailSender)


def test_smtp_sender_uses_ssl_on_465() -> None:
    """Verify port 465 connects with implicit TLS and the configured timeout."""

    sender = SmtpEmailSender("smtp.example.com", 465, "me@example.com", "abcd efgh", timeout=7)

    with patch("services.notification_service.smtplib.SMTP_SSL") as smtp_ssl:
        server = smtp_ssl.return_value.__enter__.return_value
        sender.send(OutgoingEmail(to="owner@example.com", subject="Hi", body="Body", reply_to="jane@example.com"))

    assert smtp_ssl.call_args.kwargs["timeout"] == 7
    server.login.assert_called_once_with("me@example.com", "abcdefgh")
    message = server.sendmail.call_args[0][2]
    assert "Reply-To: jane@example.com" in message


def test_smtp_sender_uses_starttls_on_other_ports() -> None:
    """Verify non-465 ports upgrade with STARTTLS."""

    sender = SmtpEmailSender("smtp.example.com", 587, "me@example.com", "pw")

    with patch("services.notification_service.smtplib.SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        sender.send(OutgoingEmail(to="owner@example.com", subject="Hi", body="Body"))

    server.starttls.assert_called_once()
    server.sendmail.assert_called_once()


def test_smtp_failure_raises_notification_error() -> None:
    """Verify SMTP errors are wrapped in NotificationError."""

    sender = SmtpEmailSender("smtp.example.com", 465, "me@example.com", "pw")

    with patch("services.notification_service.smtplib.SMTP_SSL") as smtp_ssl:
        server = MagicMock()
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
        smtp_ssl.return_value.__enter__.return_value = server
        with pytest.raises(NotificationError):
            sender.send(OutgoingEmail(to="owner@example.com", subject="Hi", body="Body"))
