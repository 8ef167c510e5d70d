"""Azure Communication Services email sender.

Wraps ``azure.communication.email.aio.EmailClient``.  The client is built
from a connection string when one is configured, otherwise from the
endpoint plus a service-principal credential.
"""

from __future__ import annotations

from typing import Any

import structlog

from ..config import EmailConfig, ServicePrincipalConfig
from ..models import EmailMessage, SendResult
from .base import EmailSender

logger = structlog.get_logger()


def to_acs_message(message: EmailMessage) -> dict[str, Any]:
    """Translate an :class:`EmailMessage` into the ACS ``begin_send`` payload."""
    content: dict[str, str] = {"subject": message.subject}
    if message.text_body is not None:
        content["plainText"] = message.text_body
    if message.html_body is not None:
        content["html"] = message.html_body

    payload: dict[str, Any] = {
        "senderAddress": message.sender_address,
        "content": content,
        "recipients": {
            "to": [{"address": a} for a in message.to],
            "cc": [{"address": a} for a in message.cc],
            "bcc": [{"address": a} for a in message.bcc],
        },
    }
    if message.reply_to:
        payload["replyTo"] = [{"address": message.reply_to}]
    if message.attachments:
        payload["attachments"] = [
            {
                "name": att.name,
                "contentType": att.content_type,
                "contentInBase64": att.content_in_base64,
            }
            for att in message.attachments
        ]
    return payload


class AzureEmailSender(EmailSender):
    """Send email through ACS and wait for the send operation to finish."""

    def __init__(self, client: Any, credential: Any = None) -> None:
        self._client = client
        self._credential = credential

    @classmethod
    def from_config(
        cls,
        config: EmailConfig,
        principal: ServicePrincipalConfig,
    ) -> AzureEmailSender:
        from azure.communication.email.aio import EmailClient

        if config.connection_string and config.connection_string.get_secret_value():
            client = EmailClient.from_connection_string(config.connection_string.get_secret_value())
            logger.info("email_client_created", auth="connection_string")
            return cls(client)

        from azure.identity.aio import ClientSecretCredential

        assert principal.client_secret is not None
        credential = ClientSecretCredential(
            tenant_id=principal.tenant_id,
            client_id=principal.client_id,
            client_secret=principal.client_secret.get_secret_value(),
        )
        client = EmailClient(config.endpoint, credential)
        logger.info("email_client_created", auth="service_principal", endpoint=config.endpoint)
        return cls(client, credential)

    async def send(self, message: EmailMessage) -> SendResult:
        poller = await self._client.begin_send(to_acs_message(message))
        result = await poller.result()
        return SendResult(id=result["id"], status=result.get("status"))

    async def close(self) -> None:
        await self._client.close()
        if self._credential is not None:
            await self._credential.close()
        logger.info("email_client_closed")
