import asyncio
import logging
import smtplib
from email.message import EmailMessage

from planner.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Mailer:
    """SMTP sender. Delivery errors are logged and reported as ``False``."""

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings

    def _build_message(self, to: str, subject: str, text: str | None, html: str | None) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.settings.SMTP_FROM
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text or "")
        if html:
            msg.add_alternative(html, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        s = self.settings
        if s.SMTP_SECURE:
            smtp = smtplib.SMTP_SSL(s.SMTP_HOST, s.SMTP_PORT, timeout=10)
        else:
            smtp = smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=10)
        with smtp:
            if not s.SMTP_SECURE:
                smtp.starttls()
            if s.SMTP_USER:
                smtp.login(s.SMTP_USER, s.SMTP_PASSWORD or "")
            smtp.send_message(msg)

    async def send_email(self, to: str, subject: str, text: str | None = None, html: str | None = None) -> bool:
        msg = self._build_message(to, subject, text, html)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to=%s subject=%s", to, subject)
            return False
        logger.info("Email sent to=%s subject=%s", to, subject)
        return True

    async def send_password_reset_email(self, email: str, temp_password: str) -> bool:
        subject = "Planner - Password Reset"

        text = (
            "Planner - Password Reset\n\n"
            "Hello,\n\n"
            "A temporary password was generated for your account:\n\n"
            f"{temp_password}\n\n"
            "Sign in with it and change your password from the profile page.\n\n"
            "If you did not ask for a reset, you can ignore this email.\n\n"
            "The Planner Team\n"
        )

        html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #4a6cf7;">Planner - Password Reset</h2>
          <p>Hello,</p>
          <p>A temporary password was generated for your account:</p>
          <div style="background-color: #f4f4f4; padding: 12px; border-radius: 4px; margin: 20px 0; font-family: monospace; font-size: 18px;">
            {temp_password}
          </div>
          <p>Sign in with it and change your password from the profile page.</p>
          <p>If you did not ask for a reset, you can ignore this email.</p>
          <p>The Planner Team</p>
        </div>
        """

        return await self.send_email(email, subject, text=text, html=html)
