"""
Tests for the Brevo Mail Client

Tests transactional mail sending and API error handling.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from atec.config import Settings
from atec.notifications import BrevoMailer, MailError


def make_mailer(enabled: bool = True) -> BrevoMailer:
    return BrevoMailer(
        api_key="test_key",
        sender_name="ATEC",
        sender_email="no-reply@example.com",
        enabled=enabled,
    )


class TestBrevoMailerInitialization:
    """Test BrevoMailer initialization."""

    def test_client_initialization_with_credentials(self):
        mailer = make_mailer()

        assert mailer.api_key == "test_key"
        assert mailer.endpoint == "https://api.brevo.com/v3/smtp/email"

    def test_client_initialization_from_settings(self):
        config = Settings(BREVO_API_KEY="settings_key", MAIL_SENDER_NAME="Clinic", MAIL_ENABLED=True)

        mailer = BrevoMailer.from_settings(config)

        assert mailer.api_key == "settings_key"
        assert mailer.sender_name == "Clinic"
        assert mailer.enabled is True


class TestSend:
    """Test sending mail."""

    async def test_send_success(self):
        mailer = make_mailer()

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_response = MagicMock()
            mock_response.status_code = 201
            mock_response.json.return_value = {"messageId": "<msg-1@brevo>"}
            mock_post.return_value = mock_response

            message_id = await mailer.send(
                to_email="parent@example.com",
                to_name="Parent",
                subject="Hello",
                html_content="<p>Hi</p>",
            )

            assert message_id == "<msg-1@brevo>"
            call_kwargs = mock_post.call_args.kwargs
            assert call_kwargs["headers"]["api-key"] == "test_key"
            assert call_kwargs["json"]["to"] == [{"email": "parent@example.com", "name": "Parent"}]
            assert call_kwargs["json"]["sender"]["email"] == "no-reply@example.com"

    async def test_verification_mail_contains_link(self):
        mailer = make_mailer()

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_response = MagicMock()
            mock_response.status_code = 201
            mock_response.json.return_value = {"messageId": "m"}
            mock_post.return_value = mock_response

            await mailer.send_account_verification(
                to_email="parent@example.com",
                username="parent",
                link="http://localhost/verify?validation_token=abc",
            )

            payload = mock_post.call_args.kwargs["json"]
            assert payload["subject"] == "Verify your account"
            assert "validation_token=abc" in payload["htmlContent"]

    async def test_disabled_mailer_skips_request(self):
        mailer = make_mailer(enabled=False)

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            result = await mailer.send_reset_password(
                to_email="parent@example.com", username="parent", link="http://x"
            )

            assert result is None
            mock_post.assert_not_called()

    async def test_api_error_raises(self):
        mailer = make_mailer()

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_response = MagicMock()
            mock_response.status_code = 401
            mock_response.json.return_value = {"code": "unauthorized", "message": "Key not found"}
            mock_post.return_value = mock_response

            with pytest.raises(MailError, match="Key not found"):
                await mailer.send(
                    to_email="a@example.com", to_name="A", subject="s", html_content="h"
                )

    async def test_network_error_raises(self):
        mailer = make_mailer()

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ConnectError("refused")

            with pytest.raises(MailError, match="Network error"):
                await mailer.send(
                    to_email="a@example.com", to_name="A", subject="s", html_content="h"
                )
