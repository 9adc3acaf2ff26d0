"""
Email Service using SMTP
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from app.config import settings
from app.models.email_record import SendResult

logger = logging.getLogger(__name__)


class EmailService:
    """Service to send guest emails over SMTP"""

    def __init__(self):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = (settings.smtp_user or "").strip()
        self.password = (settings.smtp_password or "").strip()
        self.from_address = (settings.email_from or "").strip() or self.user

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    def _build_message(self, to: str, subject: str, body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to
        msg.attach(MIMEText(body, "plain", "utf-8"))
        return msg

    def send(self, to: str, subject: str, body: str) -> SendResult:
        """
        Send a plain-text email.

        Args:
            to: Recipient address
            subject: Subject line
            body: Plain-text body

        Returns:
            SendResult with ok flag and error message on failure
        """
        to = (to or "").strip()
        if not to:
            return SendResult(ok=False, error="Missing recipient address")

        if not self.configured:
            logger.info("SMTP not configured - test mode, email to %s not sent: %s", to, subject)
            return SendResult(ok=True)

        msg = self._build_message(to, subject, body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                server.starttls()
                server.login(self.user, self.password)
                server.sendmail(self.from_address, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.exception("Failed to send email to %s", to)
            return SendResult(ok=False, error=f"Error sending email: {e}")

        logger.info("Email sent to %s: %s", to, subject)
        return SendResult(ok=True)


# Global instance
_email_service = None


def get_email_service() -> EmailService:
    """Get or create email service instance"""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
