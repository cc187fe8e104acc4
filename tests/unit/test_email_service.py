"""
Unit tests for EmailService.

Requests go through ``httpx.MockTransport`` so the provider API is never
contacted.
"""

import json

import httpx
import pytest

from app.core.config import Settings
from app.services.email_service import EmailService


def make_service(handler, **overrides):
    values = {
        "email_api_key": "re_test_key",
        "email_api_url": "https://mail.example.com/emails",
        "app_base_url": "https://app.example.com/",
        "_env_file": None,
    }
    values.update(overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EmailService(Settings(**values), http_client=client)


class TestEmailService:
    """Test cases for EmailService."""

    @pytest.mark.asyncio
    async def test_send_email_success(self):
        """The provider receives the payload and the bearer key."""
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "msg_1"})

        service = make_service(handler)

        assert await service.send_email("jane@example.com", "Hello", "<p>Hi</p>") is True
        assert captured["url"] == "https://mail.example.com/emails"
        assert captured["auth"] == "Bearer re_test_key"
        assert captured["body"]["to"] == ["jane@example.com"]
        assert captured["body"]["subject"] == "Hello"
        assert captured["body"]["html"] == "<p>Hi</p>"

    @pytest.mark.asyncio
    async def test_send_email_rejected(self):
        service = make_service(lambda request: httpx.Response(422, json={"error": "bad address"}))

        assert await service.send_email("nope", "Hello", "<p>Hi</p>") is False

    @pytest.mark.asyncio
    async def test_send_email_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(handler)

        assert await service.send_email("jane@example.com", "Hello", "<p>Hi</p>") is False

    @pytest.mark.asyncio
    async def test_send_email_not_configured(self):
        """Without an API key nothing is sent."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        service = make_service(handler, email_api_key=None)

        assert await service.send_email("jane@example.com", "Hello", "<p>Hi</p>") is False
        assert calls == []

    def test_confirmation_link_encodes_email(self):
        service = make_service(lambda request: httpx.Response(200))

        assert service.confirmation_link("a+b@example.com") == (
            "https://app.example.com/auth/confirm?email=a%2Bb%40example.com"
        )

    @pytest.mark.asyncio
    async def test_send_confirmation_email(self):
        """The confirmation email greets the user and carries the link."""
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "msg_2"})

        service = make_service(handler)

        assert await service.send_confirmation_email("jane@example.com", "Jane") is True
        body = captured["body"]
        assert body["subject"] == "Confirm your TaskMaster API account"
        assert "Hi Jane," in body["html"]
        assert "https://app.example.com/auth/confirm?email=jane%40example.com" in body["html"]
