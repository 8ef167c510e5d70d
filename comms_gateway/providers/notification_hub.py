"""Azure Notification Hubs sender over the hub's REST send endpoint.

Requests are signed with a Shared Access Signature derived from the
namespace connection string.  Only the two send calls the gateway needs
are covered: tag/broadcast sends and direct sends to one device handle.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from urllib.parse import quote, urlsplit

import httpx
import structlog

from ..config import NotificationHubConfig
from ..models import NotificationOutcome, NotificationPayload
from .base import NotificationSender

logger = structlog.get_logger()


def parse_connection_string(connection_string: str) -> dict[str, str]:
    """Split ``Key=Value;Key=Value`` pairs; values may themselves contain ``=``."""
    parts: dict[str, str] = {}
    for segment in connection_string.split(";"):
        if not segment.strip():
            continue
        key, _, value = segment.partition("=")
        parts[key.strip()] = value.strip()
    missing = {"Endpoint", "SharedAccessKeyName", "SharedAccessKey"} - parts.keys()
    if missing:
        raise ValueError(f"Notification hub connection string lacks {', '.join(sorted(missing))}")
    return parts


def generate_sas_token(resource_uri: str, key_name: str, key: str, expiry: int) -> str:
    """Return a ``SharedAccessSignature`` authorization header value."""
    encoded_uri = quote(resource_uri, safe="").lower()
    string_to_sign = f"{encoded_uri}\n{expiry}".encode("utf-8")
    digest = hmac.new(key.encode("utf-8"), string_to_sign, hashlib.sha256).digest()
    signature = quote(base64.b64encode(digest).decode("ascii"), safe="")
    return f"SharedAccessSignature sr={encoded_uri}&sig={signature}&se={expiry}&skn={key_name}"


class NotificationHubSender(NotificationSender):
    """Send notifications to one hub through ``httpx.AsyncClient``."""

    def __init__(self, config: NotificationHubConfig) -> None:
        assert config.connection_string is not None and config.name, "Notification hub not configured"
        parts = parse_connection_string(config.connection_string.get_secret_value())

        endpoint = parts["Endpoint"].replace("sb://", "https://", 1)
        if not endpoint.endswith("/"):
            endpoint += "/"

        self._config = config
        self._key_name = parts["SharedAccessKeyName"]
        self._key = parts["SharedAccessKey"]
        self._resource_uri = f"{endpoint}{config.name}"
        self._client = httpx.AsyncClient(
            base_url=endpoint,
            timeout=httpx.Timeout(config.timeout_seconds),
        )
        logger.info("notification_hub_client_created", hub=config.name, endpoint=endpoint)

    def _authorization(self) -> str:
        expiry = int(time.time()) + self._config.token_ttl_seconds
        return generate_sas_token(self._resource_uri, self._key_name, self._key, expiry)

    async def _post(
        self,
        payload: NotificationPayload,
        *,
        query: str,
        extra_headers: dict[str, str],
    ) -> NotificationOutcome:
        headers = {
            **payload.headers,
            **extra_headers,
            "Authorization": self._authorization(),
            "Content-Type": payload.content_type,
            "ServiceBusNotification-Format": payload.service_format,
        }
        response = await self._client.post(
            f"{self._config.name}/messages/?{query}api-version={self._config.api_version}",
            content=payload.body.encode("utf-8"),
            headers=headers,
        )
        response.raise_for_status()

        notification_id = None
        location = response.headers.get("location")
        if location:
            notification_id = urlsplit(location).path.rstrip("/").rsplit("/", 1)[-1]
        return NotificationOutcome(
            notification_id=notification_id,
            state="Enqueued",
            tracking_id=response.headers.get("trackingid"),
        )

    async def send_to_tags(
        self,
        payload: NotificationPayload,
        tags: list[str],
    ) -> NotificationOutcome:
        extra = {"ServiceBusNotification-Tags": " || ".join(tags)} if tags else {}
        return await self._post(payload, query="", extra_headers=extra)

    async def send_to_device(
        self,
        payload: NotificationPayload,
        device_handle: str,
    ) -> NotificationOutcome:
        return await self._post(
            payload,
            query="direct&",
            extra_headers={"ServiceBusNotification-DeviceHandle": device_handle},
        )

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("notification_hub_client_closed")
