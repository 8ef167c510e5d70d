"""Async HTTP client for calling a deployed gateway."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

logger = structlog.get_logger()


class GatewayClient:
    """Posts email and notification requests to a gateway.

    The API key travels as ``Authorization: Bearer <key>``.  Every response
    carries the JSON envelope, so error statuses are returned rather than
    raised; check ``result["success"]``.

    Usage::

        async with GatewayClient("https://gateway.example.com", api_key) as gw:
            result = await gw.send_email(to="a@b.com", subject="Hi", text_content="hello")
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    async def __aenter__(self) -> GatewayClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(path, json=body)
        result = response.json()
        logger.debug(
            "gateway_response",
            path=path,
            status_code=response.status_code,
            success=result.get("success"),
        )
        return result

    async def send_email(
        self,
        *,
        to: str | list[str],
        subject: str,
        html_content: str | None = None,
        text_content: str | None = None,
        cc: str | list[str] | None = None,
        bcc: str | list[str] | None = None,
        reply_to: str | None = None,
        attachments: list[dict[str, str]] | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "to": to,
            "subject": subject,
            "htmlContent": html_content,
            "textContent": text_content,
            "cc": cc,
            "bcc": bcc,
            "replyTo": reply_to,
            "attachments": attachments,
        }
        return await self._post("/email", {k: v for k, v in body.items() if v is not None})

    async def send_notification(
        self,
        *,
        platform: str | None = None,
        message: str | None = None,
        title: str | None = None,
        tags: list[str] | None = None,
        device_handle: str | None = None,
        template_name: str | None = None,
        template_properties: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "platform": platform,
            "message": message,
            "title": title,
            "tags": tags,
            "deviceHandle": device_handle,
            "templateName": template_name,
            "templateProperties": template_properties,
        }
        return await self._post("/notifications", {k: v for k, v in body.items() if v is not None})
