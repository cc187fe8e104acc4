"""Email service backed by a transactional email HTTP API."""

import logging
from urllib.parse import quote

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending single-recipient HTML emails."""

    def __init__(self, config: Settings, http_client: httpx.AsyncClient | None = None):
        """Initialize email service with API configuration."""
        self.api_url = config.email_api_url
        self.api_key = config.email_api_key
        self.from_email = config.email_from
        self.app_name = config.app_name
        self.app_base_url = config.app_base_url
        self.timeout = config.email_request_timeout
        self._http_client = http_client

    def _validate_config(self) -> bool:
        """Validate email configuration."""
        if not (self.api_url and self.api_key):
            logger.warning("Email service not configured properly")
            return False
        return True

    async def send_email(self, to_email: str, subject: str, html_content: str) -> bool:
        """Send an email through the provider API.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email

        Returns:
            True if the provider accepted the email, False otherwise
        """
        if not self._validate_config():
            logger.error("Cannot send email - configuration invalid")
            return False

        payload = {
            "from": self.from_email,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        logger.info("Sending email to %s with subject: %s", to_email, subject)
        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self.api_url, json=payload, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Email API rejected message to %s: %s %s",
                to_email,
                e.response.status_code,
                e.response.text,
            )
            return False
        except httpx.HTTPError as e:
            logger.error("Error sending email to %s: %s", to_email, e)
            return False

        logger.info("Email sent successfully to %s", to_email)
        return True

    def confirmation_link(self, email: str) -> str:
        return f"{self.app_base_url}/auth/confirm?email={quote(email, safe='')}"

    async def send_confirmation_email(self, email: str, name: str | None = None) -> bool:
        """Send the signup confirmation email."""
        link = self.confirmation_link(email)
        subject = f"Confirm your {self.app_name} account"

        html_content = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #007AFF;">Welcome to {self.app_name}!</h2>
          <p>Hi {name or "there"},</p>
          <p>Thank you for signing up. To complete your registration, please confirm your email address:</p>
          <div style="text-align: center; margin: 30px 0;">
            <a href="{link}"
               style="background-color: #007AFF; color: white; padding: 12px 24px; text-decoration: none; border-radius: 8px; display: inline-block;">
              Confirm Email Address
            </a>
          </div>
          <p>If the button doesn't work, copy and paste this link into your browser:</p>
          <p style="word-break: break-all; color: #666;">{link}</p>
          <p>This link will expire in 24 hours.</p>
        </div>
        """

        return await self.send_email(email, subject, html_content)
