"""Shared test fixtures for the gateway test suite."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from comms_gateway.app import create_app
from comms_gateway.config import EmailConfig, NotificationHubConfig, ServicePrincipalConfig, Settings
from comms_gateway.deps import get_email_sender, get_notification_sender
from comms_gateway.models import NotificationOutcome, SendResult
from comms_gateway.providers.base import EmailSender, NotificationSender

API_KEY = "test-api-key-0123456789"

HUB_CONNECTION_STRING = (
    "Endpoint=sb://test-ns.servicebus.windows.net/;"
    "SharedAccessKeyName=DefaultFullSharedAccessSignature;"
    "SharedAccessKey=c2VjcmV0LWtleQ=="
)


def _test_settings(**overrides) -> Settings:
    """Create Settings with test defaults."""
    defaults = {
        "api_key": API_KEY,
        "allowed_origins": "*",
        "email": EmailConfig(
            connection_string="endpoint=https://mock.communication.azure.com/;accesskey=mock-key",
            sender_address="DoNotReply@example.com",
        ),
        "service_principal": ServicePrincipalConfig(),
        "notification_hub": NotificationHubConfig(
            connection_string=HUB_CONNECTION_STRING,
            name="test-hub",
        ),
    }
    defaults.update(overrides)
    return Settings(**defaults)


def make_request(
    method: str = "POST",
    path: str = "/email",
    headers: dict[str, str] | None = None,
    query_string: str = "",
) -> Request:
    """Build a bare Starlette request for unit-testing header/query helpers."""
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "query_string": query_string.encode(),
    }
    return Request(scope)


@pytest.fixture
def settings() -> Settings:
    return _test_settings()


@pytest.fixture
def email_sender() -> AsyncMock:
    sender = AsyncMock(spec=EmailSender)
    sender.send.return_value = SendResult(id="mock-message-id-123", status="Succeeded")
    return sender


@pytest.fixture
def notification_sender() -> AsyncMock:
    sender = AsyncMock(spec=NotificationSender)
    outcome = NotificationOutcome(notification_id="notif-1", state="Enqueued", tracking_id="track-1")
    sender.send_to_device.return_value = outcome
    sender.send_to_tags.return_value = outcome
    return sender


def override_senders(app, email_sender=None, notification_sender=None):
    """Point the sender dependencies at stubs (``None`` means not configured)."""
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_notification_sender] = lambda: notification_sender
    return app


@pytest.fixture
def app(settings: Settings, email_sender: AsyncMock, notification_sender: AsyncMock):
    application = create_app(settings)
    return override_senders(application, email_sender, notification_sender)


@pytest.fixture
async def client(app):
    """Async HTTP test client. Lifespan is not started; senders come from overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {API_KEY}", "Content-Type": "application/json"}
