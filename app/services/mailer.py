"""Delivery of password reset links."""

import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage

from app.config import Settings, get_settings

logger = logging.getLogger("user_accounts")

RESET_SUBJECT = "Your password reset link (valid for {minutes} minutes)"
RESET_BODY = (
    "Forgot your password? Submit a request with your new password to:\n\n"
    "{reset_url}\n\n"
    "If you didn't ask for a password reset, please ignore this email."
)


class Mailer(ABC):
    """Sends reset links to users. Raises on delivery failure."""

    @abstractmethod
    def send_reset_link(self, to_address: str, reset_url: str) -> None:
        ...


class ConsoleMailer(Mailer):
    """Development mailer: writes the reset link to the application log."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def send_reset_link(self, to_address: str, reset_url: str) -> None:
        if self.settings.is_production:
            logger.warning("Password reset link for %s not delivered: MAIL_BACKEND is 'console'", to_address)
            return
        logger.info("PASSWORD RESET for %s: %s", to_address, reset_url)


class SMTPMailer(Mailer):
    """Sends reset links through an SMTP relay."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _build_message(self, to_address: str, reset_url: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = RESET_SUBJECT.format(minutes=self.settings.PASSWORD_RESET_EXPIRE_MINUTES)
        message["From"] = self.settings.MAIL_FROM
        message["To"] = to_address
        message.set_content(RESET_BODY.format(reset_url=reset_url))
        return message

    def send_reset_link(self, to_address: str, reset_url: str) -> None:
        message = self._build_message(to_address, reset_url)
        with smtplib.SMTP(host=self.settings.SMTP_HOST, port=self.settings.SMTP_PORT, timeout=10) as conn:
            if self.settings.SMTP_USE_TLS:
                conn.starttls()
            if self.settings.SMTP_USERNAME:
                conn.login(self.settings.SMTP_USERNAME, self.settings.SMTP_PASSWORD)
            conn.send_message(message)
        logger.info("Password reset mail sent to %s", to_address)


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """Get singleton mailer for the configured backend."""
    global _mailer
    if _mailer is None:
        settings = get_settings()
        if settings.MAIL_BACKEND == "smtp":
            _mailer = SMTPMailer(settings)
        else:
            _mailer = ConsoleMailer(settings)
    return _mailer
