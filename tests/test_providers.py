"""Tests for the Azure email and Notification Hubs senders."""

from __future__ import annotations

import base64
import hashlib
import hmac
from unittest.mock import AsyncMock
from urllib.parse import unquote

import httpx
import pytest
import respx

from comms_gateway.config import NotificationHubConfig
from comms_gateway.models import EmailAttachment, EmailMessage, NotificationPayload
from comms_gateway.providers import AzureEmailSender, NotificationHubSender
from comms_gateway.providers.email import to_acs_message
from comms_gateway.providers.notification_hub import generate_sas_token, parse_connection_string
from tests.conftest import HUB_CONNECTION_STRING

HUB_MESSAGES_URL = "https://test-ns.servicebus.windows.net/test-hub/messages/"


def _message(**overrides) -> EmailMessage:
    fields = {
        "sender_address": "DoNotReply@example.com",
        "subject": "Hello",
        "text_body": "plain",
        "to": ["a@example.com"],
    }
    fields.update(overrides)
    return EmailMessage(**fields)


def _payload() -> NotificationPayload:
    return NotificationPayload(
        body='{"aps":{"alert":{"title":"T","body":"B"}}}',
        headers={"apns-priority": "10"},
        content_type="application/json;charset=utf-8",
        service_format="apple",
    )


class TestAcsMessage:
    def test_minimal(self):
        assert to_acs_message(_message()) == {
            "senderAddress": "DoNotReply@example.com",
            "content": {"subject": "Hello", "plainText": "plain"},
            "recipients": {"to": [{"address": "a@example.com"}], "cc": [], "bcc": []},
        }

    def test_full(self):
        acs = to_acs_message(
            _message(
                html_body="<p>hi</p>",
                cc=["c@example.com"],
                bcc=["b@example.com"],
                reply_to="r@example.com",
                attachments=[
                    EmailAttachment(name="a.txt", content_type="text/plain", content_in_base64="YQ=="),
                ],
            )
        )
        assert acs["content"]["html"] == "<p>hi</p>"
        assert acs["recipients"]["cc"] == [{"address": "c@example.com"}]
        assert acs["recipients"]["bcc"] == [{"address": "b@example.com"}]
        assert acs["replyTo"] == [{"address": "r@example.com"}]
        assert acs["attachments"] == [
            {"name": "a.txt", "contentType": "text/plain", "contentInBase64": "YQ=="},
        ]


class TestAzureEmailSender:
    @pytest.mark.asyncio
    async def test_send_waits_for_poller(self):
        poller = AsyncMock()
        poller.result.return_value = {"id": "acs-1", "status": "Succeeded"}
        client = AsyncMock()
        client.begin_send.return_value = poller

        result = await AzureEmailSender(client).send(_message())

        assert result.id == "acs-1"
        assert result.status == "Succeeded"
        (sent,) = client.begin_send.await_args.args
        assert sent["senderAddress"] == "DoNotReply@example.com"
        poller.result.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_send_propagates_errors(self):
        client = AsyncMock()
        client.begin_send.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(RuntimeError, match="quota exceeded"):
            await AzureEmailSender(client).send(_message())

    @pytest.mark.asyncio
    async def test_close_closes_credential(self):
        client = AsyncMock()
        credential = AsyncMock()
        await AzureEmailSender(client, credential).close()
        client.close.assert_awaited_once()
        credential.close.assert_awaited_once()


class TestConnectionString:
    def test_parse(self):
        parts = parse_connection_string(HUB_CONNECTION_STRING)
        assert parts["Endpoint"] == "sb://test-ns.servicebus.windows.net/"
        assert parts["SharedAccessKeyName"] == "DefaultFullSharedAccessSignature"
        assert parts["SharedAccessKey"] == "c2VjcmV0LWtleQ=="

    def test_missing_parts(self):
        with pytest.raises(ValueError, match="SharedAccessKey"):
            parse_connection_string("Endpoint=sb://ns/;SharedAccessKeyName=n")


class TestSasToken:
    def test_token_shape(self):
        token = generate_sas_token("https://ns.example.net/Hub", "listen", "key", 1700000000)
        assert token.startswith("SharedAccessSignature sr=https%3a%2f%2fns.example.net%2fhub&sig=")
        assert token.endswith("&se=1700000000&skn=listen")

    def test_signature(self):
        token = generate_sas_token("https://ns.example.net/hub", "listen", "key", 1700000000)
        sig = unquote(token.split("&sig=", 1)[1].split("&", 1)[0])
        expected = hmac.new(
            b"key",
            b"https%3a%2f%2fns.example.net%2fhub\n1700000000",
            hashlib.sha256,
        ).digest()
        assert base64.b64decode(sig) == expected


@pytest.fixture
def hub_config() -> NotificationHubConfig:
    return NotificationHubConfig(connection_string=HUB_CONNECTION_STRING, name="test-hub")


class TestNotificationHubSender:
    @pytest.mark.asyncio
    @respx.mock
    async def test_send_to_tags(self, hub_config):
        route = respx.post(url__startswith=HUB_MESSAGES_URL).respond(
            201,
            headers={
                "Location": f"{HUB_MESSAGES_URL}abc123?api-version=2015-01",
                "TrackingId": "trk-9",
            },
        )
        sender = NotificationHubSender(hub_config)
        try:
            outcome = await sender.send_to_tags(_payload(), ["news", "sports"])
        finally:
            await sender.close()

        assert outcome.notification_id == "abc123"
        assert outcome.state == "Enqueued"
        assert outcome.tracking_id == "trk-9"

        request = route.calls[0].request
        assert request.url.params["api-version"] == "2015-01"
        assert "direct" not in request.url.params
        assert request.headers["ServiceBusNotification-Format"] == "apple"
        assert request.headers["ServiceBusNotification-Tags"] == "news || sports"
        assert request.headers["apns-priority"] == "10"
        assert request.headers["content-type"] == "application/json;charset=utf-8"
        assert request.headers["authorization"].startswith("SharedAccessSignature sr=")

    @pytest.mark.asyncio
    @respx.mock
    async def test_broadcast_has_no_tag_header(self, hub_config):
        route = respx.post(url__startswith=HUB_MESSAGES_URL).respond(201)
        sender = NotificationHubSender(hub_config)
        try:
            outcome = await sender.send_to_tags(_payload(), [])
        finally:
            await sender.close()

        assert "ServiceBusNotification-Tags" not in route.calls[0].request.headers
        assert outcome.notification_id is None
        assert outcome.tracking_id is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_to_device(self, hub_config):
        route = respx.post(url__startswith=HUB_MESSAGES_URL).respond(201)
        sender = NotificationHubSender(hub_config)
        try:
            await sender.send_to_device(_payload(), "dev-1")
        finally:
            await sender.close()

        request = route.calls[0].request
        assert "direct" in request.url.params
        assert request.headers["ServiceBusNotification-DeviceHandle"] == "dev-1"
        assert "ServiceBusNotification-Tags" not in request.headers

    @pytest.mark.asyncio
    @respx.mock
    @pytest.mark.parametrize("status", [401, 500])
    async def test_error_status_raises(self, hub_config, status):
        respx.post(url__startswith=HUB_MESSAGES_URL).respond(status)
        sender = NotificationHubSender(hub_config)
        try:
            with pytest.raises(httpx.HTTPStatusError):
                await sender.send_to_tags(_payload(), [])
        finally:
            await sender.close()
