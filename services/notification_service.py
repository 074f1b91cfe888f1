"""
Notification service for bookings and contact requests.

Composes plain-text transactional emails and hands them to an EmailSender.

Delivery policy:
- Booking emails are best-effort. The booking is already recorded when they
  are sent; a failure is logged at ERROR level with the lead's contact details
  so the owner can follow up by hand.
- Contact requests exist only as the owner notification, so that email must
  go out; the auto-reply to the sender is best-effort.
"""

from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any, List, Mapping, Optional, Protocol

from config.settings import Settings
from domain.booking import BookingSlot
from domain.lead_profile import as_text

logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """Raised when an email could not be delivered to the mail server."""


@dataclass(frozen=True, slots=True)
class OutgoingEmail:
    """A single plain-text email."""

    to: str
    subject: str
    body: str
    from_name: Optional[str] = None
    reply_to: Optional[str] = None


class EmailSender(Protocol):
    def send(self, email: OutgoingEmail) -> None:
        """Deliver email or raise NotificationError."""
        ...


class SmtpEmailSender:
    """
    Sends email through an authenticated SMTP server.

    Port 465 uses implicit TLS; any other port uses STARTTLS. Every connection
    is bounded by timeout seconds. No retries.
    """

    def __init__(self, host: str, port: int, user: str, password: str, timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.user = user
        # App passwords are often copied with spaces for readability.
        self._password = password.replace(" ", "")
        self.timeout = timeout

    def _build(self, email: OutgoingEmail) -> MIMEMultipart:
        message = MIMEMultipart()
        message["Subject"] = email.subject
        message["From"] = formataddr((email.from_name or "", self.user))
        message["To"] = email.to
        if email.reply_to:
            message["Reply-To"] = email.reply_to
        message.attach(MIMEText(email.body, "plain", "utf-8"))
        return message

    def send(self, email: OutgoingEmail) -> None:
        message = self._build(email)
        context = ssl.create_default_context()
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                    server.login(self.user, self._password)
                    server.sendmail(self.user, [email.to], message.as_string())
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.starttls(context=context)
                    server.login(self.user, self._password)
                    server.sendmail(self.user, [email.to], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Failed to send email to {email.to}: {e}") from e
        logger.info("Email sent", extra={"to": email.to, "subject": email.subject})


class LoggingEmailSender:
    """Development sender: logs emails instead of delivering them."""

    def __init__(self) -> None:
        self.sent: List[OutgoingEmail] = []

    def send(self, email: OutgoingEmail) -> None:
        self.sent.append(email)
        logger.info("Email not sent (no mail credentials)", extra={"to": email.to, "subject": email.subject})


def create_email_sender(settings: Settings) -> EmailSender:
    if settings.email_enabled:
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.email_user or "",
            password=settings.email_password or "",
            timeout=settings.email_timeout_seconds,
        )
    return LoggingEmailSender()


def _field(lead: Mapping[str, Any], key: str) -> str:
    return as_text(lead.get(key)).strip()


def _optional_lines(lead: Mapping[str, Any], labels: Mapping[str, str], suffix: Mapping[str, str]) -> List[str]:
    lines = []
    for key, label in labels.items():
        value = _field(lead, key)
        if value:
            lines.append(f"{label}: {value}{suffix.get(key, '')}")
    return lines


_BOOKING_DETAIL_LABELS = {
    "income_range": "Income",
    "employment_type": "Employment",
    "occupation": "Occupation",
    "has_partner": "Relationship",
    "has_kids": "Children",
    "monthly_budget": "Budget",
    "timeline": "Timeline",
}


class NotificationService:
    """Composes and sends booking and contact emails."""

    def __init__(
        self,
        sender: EmailSender,
        *,
        owner_email: Optional[str],
        business_name: str,
        advisor_name: str,
        booking_page_url: Optional[str] = None,
    ) -> None:
        self._sender = sender
        self._owner_email = owner_email
        self._business_name = business_name
        self._advisor_name = advisor_name
        self._booking_page_url = booking_page_url

    @classmethod
    def from_settings(cls, settings: Settings, sender: Optional[EmailSender] = None) -> "NotificationService":
        return cls(
            sender or create_email_sender(settings),
            owner_email=settings.notification_recipient,
            business_name=settings.business_name,
            advisor_name=settings.advisor_name,
            booking_page_url=settings.booking_page_url,
        )

    # Booking emails

    def owner_booking_email(self, slot: BookingSlot, lead: Mapping[str, Any]) -> Optional[OutgoingEmail]:
        if not self._owner_email:
            return None

        first, last = _field(lead, "lead_first_name"), _field(lead, "lead_last_name")
        session_type = _field(lead, "session_type") or "Appointment"
        state = _field(lead, "lead_state")
        if _field(lead, "lead_state_other"):
            state = f"{state} ({_field(lead, 'lead_state_other')})"
        completion = "Quick Book (skipped questions)" if _field(lead, "chat_completion_type") == "quick" else "Full Questionnaire"

        lines = [
            f"New appointment booked: {session_type}",
            "",
            f"Date: {slot.display_date}",
            f"Time: {slot.display_clock}",
            f"Duration: {_field(lead, 'session_duration') or 'N/A'} minutes",
            "",
            "Contact Information",
            f"Name: {first} {last}".rstrip(),
            f"Email: {_field(lead, 'lead_email')}",
            f"Phone: {_field(lead, 'lead_phone')}",
            f"State: {state}",
            "",
            "Lead Details",
            f"Looking to protect: {_field(lead, 'primary_focus') or 'Not specified'}",
            f"Lead Score: {_field(lead, 'lead_score') or 'N/A'} (Tier {_field(lead, 'lead_tier') or 'N/A'})",
            f"Completion Type: {completion}",
        ]
        lines += _optional_lines(lead, _BOOKING_DETAIL_LABELS, {"monthly_budget": "/month"})
        if _field(lead, "notes"):
            lines += ["", "Notes", _field(lead, "notes")]
        if _field(lead, "utm_source"):
            lines += ["", "Source", f"UTM Source: {_field(lead, 'utm_source')}"]
            lines += _optional_lines(lead, {"utm_campaign": "Campaign", "utm_medium": "Medium"}, {})

        return OutgoingEmail(
            to=self._owner_email,
            subject=f"New {session_type} - {first} {last} - {slot.display_date} at {slot.display_clock}",
            body="\n".join(lines),
            from_name=self._business_name,
        )

    def lead_confirmation_email(self, slot: BookingSlot, lead: Mapping[str, Any]) -> Optional[OutgoingEmail]:
        to = _field(lead, "lead_email")
        if not to:
            return None

        first = _field(lead, "lead_first_name") or "there"
        phone = _field(lead, "lead_phone")
        body = "\n".join([
            f"Hi {first},",
            "",
            "Thank you for taking the time to schedule a call. I'm looking forward to connecting with you!",
            "",
            "YOUR APPOINTMENT",
            slot.display_date,
            slot.display_clock,
            "30-45 minutes",
            "",
            f"I'll reach out to you at {phone} at your scheduled time." if phone else "I'll reach out to you at your scheduled time.",
            "",
            "If you have any questions before our call, or need to reschedule, just reply to this email.",
            "",
            "Looking forward to speaking with you,",
            self._advisor_name,
            self._business_name,
        ])
        return OutgoingEmail(
            to=to,
            subject=f"Confirmed: Your Call with {self._advisor_name} - {slot.display_date}",
            body=body,
            from_name=f"{self._advisor_name} - {self._business_name}",
        )

    def notify_booking(self, slot: BookingSlot, lead: Mapping[str, Any]) -> int:
        """
        Send the owner notification and the lead confirmation.

        Never raises; failures are logged for manual follow-up.

        Returns:
            Number of emails delivered.
        """

        delivered = 0
        for email in (self.owner_booking_email(slot, lead), self.lead_confirmation_email(slot, lead)):
            if email is None:
                continue
            try:
                self._sender.send(email)
                delivered += 1
            except NotificationError as e:
                logger.error(
                    "Booking email failed; notify the lead manually",
                    extra={
                        "to": email.to,
                        "requested_time": slot.requested_time,
                        "lead_email": _field(lead, "lead_email"),
                        "lead_phone": _field(lead, "lead_phone"),
                        "error": str(e),
                    },
                )
        return delivered

    # Contact emails

    def notify_contact(
        self,
        name: str,
        email: str,
        phone: Optional[str] = None,
        message: Optional[str] = None,
        coverages: Optional[str] = None,
    ) -> None:
        """
        Forward a contact-form submission to the owner and auto-reply to the sender.

        Raises:
            NotificationError: the owner notification could not be sent (or no
                owner address is configured).
        """

        if not self._owner_email:
            raise NotificationError("No owner email configured for contact requests")

        subject = f"New Contact: {name}"
        if coverages:
            subject += f" - {coverages.split(',')[0].strip()}"
        lines = ["New contact form submission", "", f"Name: {name}", f"Email: {email}"]
        if phone:
            lines.append(f"Phone: {phone}")
        if coverages:
            lines += ["", "Interested In", coverages]
        if message:
            lines += ["", "Message", message]

        self._sender.send(OutgoingEmail(
            to=self._owner_email,
            subject=subject,
            body="\n".join(lines),
            from_name=f"{self._business_name} Website",
            reply_to=email,
        ))

        first_name = name.split(" ")[0] if name else "there"
        reply_lines = [
            f"Hi {first_name},",
            "",
            "Thanks for getting in touch! I've received your message and will personally get back to you within 24 hours.",
        ]
        if self._booking_page_url:
            reply_lines += [
                "",
                f"Want to chat sooner? Book a quick intro call on my calendar: {self._booking_page_url}",
            ]
        reply_lines += ["", "Talk soon,", self._advisor_name, self._business_name]

        try:
            self._sender.send(OutgoingEmail(
                to=email,
                subject=f"Got your message, {first_name}!",
                body="\n".join(reply_lines),
                from_name=f"{self._advisor_name} - {self._business_name}",
            ))
        except NotificationError as e:
            logger.warning("Contact auto-reply failed", extra={"to": email, "error": str(e)})


__all__ = [
    "EmailSender",
    "LoggingEmailSender",
    "NotificationError",
    "NotificationService",
    "OutgoingEmail",
    "SmtpEmailSender",
    "create_email_sender",
]
