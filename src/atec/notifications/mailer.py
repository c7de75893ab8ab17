"""
Brevo Transactional Mail Client

Sends account verification and password reset mails through Brevo's
(formerly Sendinblue) SMTP API.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from atec.config import Settings, settings

logger = logging.getLogger(__name__)


class MailError(Exception):
    """Mail API error."""

    pass


class BrevoMailer:
    """Client for Brevo's transactional email endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        sender_name: str,
        sender_email: str,
        enabled: bool = True,
        base_url: str = "https://api.brevo.com/v3",
        timeout: float = 30.0,
    ):
        """Initialize mail client.

        Args:
            api_key: Brevo API key
            sender_name: Display name used in From
            sender_email: Address used in From
            enabled: When False, mails are logged instead of sent (local development)
            base_url: API base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.sender_name = sender_name
        self.sender_email = sender_email
        self.enabled = enabled
        self.endpoint = f"{base_url}/smtp/email"
        self.timeout = timeout

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> BrevoMailer:
        """Create client from application settings.

        Args:
            config: Settings to read (module settings when None)
        """
        config = config or settings
        return cls(
            api_key=config.BREVO_API_KEY,
            sender_name=config.MAIL_SENDER_NAME,
            sender_email=config.MAIL_SENDER_EMAIL,
            enabled=config.MAIL_ENABLED,
        )

    async def send(self, *, to_email: str, to_name: str, subject: str, html_content: str) -> str | None:
        """Send one HTML mail.

        Returns:
            Brevo message id (None when delivery is disabled)

        Raises:
            MailError: If the API request fails
        """
        if not self.enabled:
            logger.info(f"Mail delivery disabled, skipping '{subject}'", extra={"to": to_email})
            return None

        payload: dict[str, Any] = {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": to_email, "name": to_name}],
            "subject": subject,
            "htmlContent": html_content,
        }
        return await self._send_request(payload)

    async def send_account_verification(self, *, to_email: str, username: str, link: str) -> str | None:
        html = (
            f"<p>Hi {username},</p>"
            "<p>Please verify your account by following the link below.</p>"
            f'<p><a href="{link}">{link}</a></p>'
        )
        return await self.send(
            to_email=to_email, to_name=username, subject="Verify your account", html_content=html
        )

    async def send_reset_password(self, *, to_email: str, username: str, link: str) -> str | None:
        html = (
            f"<p>Hi {username},</p>"
            "<p>Someone asked to reset your password. If it was you, follow the link below.</p>"
            f'<p><a href="{link}">{link}</a></p>'
            "<p>Otherwise you can ignore this mail.</p>"
        )
        return await self.send(
            to_email=to_email, to_name=username, subject="Reset your password", html_content=html
        )

    async def _send_request(self, payload: dict[str, Any]) -> str:
        headers = {
            "api-key": self.api_key,
            "accept": "application/json",
            "content-type": "application/json",
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.endpoint, json=payload, headers=headers, timeout=self.timeout
                )
        except httpx.HTTPError as e:
            logger.error(f"Network error calling Brevo: {e}")
            raise MailError(f"Network error: {e}") from e

        if response.status_code not in (200, 201, 202):
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"message": response.text}
            error_message = error_data.get("message", "Unknown error")
            error_code = error_data.get("code", response.status_code)
            logger.error(
                f"Brevo API error: {error_code} - {error_message}",
                extra={"subject": payload.get("subject"), "response": error_data},
            )
            raise MailError(f"Brevo API error ({error_code}): {error_message}")

        message_id: str = response.json().get("messageId", "")
        logger.info(f"Mail sent: {message_id}", extra={"subject": payload.get("subject")})
        return message_id
