import logging
from functools import lru_cache

from django.conf import settings
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, From

logger = logging.getLogger(__name__)


class EmailService:
    """
    Transactional email through SendGrid

    Delivery is attempt-once: failures are logged and reported as False,
    never raised to the caller.
    """

    def __init__(self, api_key: str = None, from_email: str = None, from_name: str = None):
        api_key = settings.SENDGRID_API_KEY if api_key is None else api_key
        self.from_email = from_email or settings.SENDGRID_FROM_EMAIL
        self.from_name = from_name or settings.SENDGRID_FROM_NAME

        if api_key:
            self.client = SendGridAPIClient(api_key)
        else:
            self.client = None
            logger.warning("SendGrid not configured - email delivery disabled")

    def send_email(self, to: str, subject: str, text: str) -> bool:
        """
        Send a plain-text email

        Args:
            to: Recipient email address
            subject: Subject line
            text: Plain-text body

        Returns:
            bool indicating the provider accepted the message
        """
        if self.client is None:
            logger.info(f"Email to {to} not sent (SendGrid disabled): {subject}")
            return False

        message = Mail(
            from_email=From(self.from_email, self.from_name),
            to_emails=to,
            subject=subject,
            plain_text_content=text,
        )

        try:
            response = self.client.send(message)
            logger.info(f"Email sent to {to}: {subject} (status {response.status_code})")
            return 200 <= response.status_code < 300

        except Exception as e:
            logger.warning(f"SendGrid email to {to} failed: {str(e)}")
            return False

    def send_inspection_scheduled(self, user, inspection) -> bool:
        listing = inspection.listing
        text = (
            f"Hi {user.name},\n\n"
            f"Your {inspection.type.lower()} inspection for \"{listing.title}\" is scheduled for "
            f"{inspection.scheduled_at:%A, %d %B %Y at %H:%M} UTC ({inspection.duration} minutes).\n"
            f"Inspection fee: NGN {inspection.fee:,}\n\n"
            f"We will let you know as soon as an inspector accepts the job.\n\n"
            f"View your inspections: {settings.APP_URL}/client/inspections\n"
        )
        return self.send_email(user.email, f"Inspection Scheduled - {listing.title}", text)

    def send_inspection_request(self, agent, inspection) -> bool:
        listing = inspection.listing
        text = (
            f"Hi {agent.name},\n\n"
            f"A client has scheduled a {inspection.type.lower()} inspection for your property \"{listing.title}\" "
            f"on {inspection.scheduled_at:%A, %d %B %Y at %H:%M} UTC.\n\n"
            f"View inspections: {settings.APP_URL}/agent/inspections\n"
        )
        return self.send_email(agent.email, f"New Inspection Request - {listing.title}", text)

    def send_inspector_assigned(self, user, inspection) -> bool:
        listing = inspection.listing
        lines = [
            f"Hi {user.name},\n",
            f"{inspection.inspector.name} has accepted your inspection request for \"{listing.title}\" "
            f"on {inspection.scheduled_at:%A, %d %B %Y at %H:%M} UTC.",
        ]
        if inspection.meeting_url:
            lines.append(f"Join the virtual inspection here: {inspection.meeting_url}")
        lines.append(f"\nView your inspections: {settings.APP_URL}/client/inspections\n")
        return self.send_email(user.email, f"Inspector Assigned - {listing.title}", "\n".join(lines))

    def send_inspection_completed(self, user, inspection) -> bool:
        listing = inspection.listing
        lines = [
            f"Hi {user.name},\n",
            f"The inspection for \"{listing.title}\" has been completed.",
        ]
        if inspection.recording_url:
            lines.append(f"Recording: {inspection.recording_url}")
        lines.append(f"\nView your inspections: {settings.APP_URL}/client/inspections\n")
        return self.send_email(user.email, f"Inspection Completed - {listing.title}", "\n".join(lines))


@lru_cache(maxsize=None)
def get_email_service() -> EmailService:
    """Process-wide email service built from settings"""
    return EmailService()
