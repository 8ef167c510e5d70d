"""Tests for comms_gateway.client against the in-process app."""

from __future__ import annotations

import httpx
import pytest

from comms_gateway.client import GatewayClient
from tests.conftest import API_KEY


@pytest.fixture
async def gateway(app):
    async with GatewayClient(
        "http://test",
        API_KEY,
        transport=httpx.ASGITransport(app=app),
    ) as gw:
        yield gw


class TestGatewayClient:
    @pytest.mark.asyncio
    async def test_send_email(self, gateway: GatewayClient, email_sender):
        result = await gateway.send_email(to="a@b.com", subject="Hi", text_content="hello")
        assert result["success"] is True
        assert result["messageId"] == "mock-message-id-123"
        (message,) = email_sender.send.await_args.args
        assert message.to == ["a@b.com"]
        assert message.html_body is None

    @pytest.mark.asyncio
    async def test_send_email_error_returned(self, gateway: GatewayClient, email_sender):
        result = await gateway.send_email(to="not-an-address", subject="Hi", text_content="hello")
        assert result["success"] is False
        assert result["error"] == "Invalid email format: not-an-address"
        email_sender.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_notification(self, gateway: GatewayClient, notification_sender):
        result = await gateway.send_notification(platform="fcm", message="hi", device_handle="dev-1")
        assert result["success"] is True
        assert result["notificationId"] == "notif-1"
        notification_sender.send_to_device.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_wrong_key(self, app):
        async with GatewayClient("http://test", "wrong", transport=httpx.ASGITransport(app=app)) as gw:
            result = await gw.send_notification(platform="fcm", message="hi")
        assert result["success"] is False
        assert result["error"] == "Invalid API key"
