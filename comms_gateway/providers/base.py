"""Sender interfaces: the ABCs each provider adapter implements."""

from __future__ import annotations

import abc

from ..models import EmailMessage, NotificationOutcome, NotificationPayload, SendResult


class EmailSender(abc.ABC):
    """Delivers an :class:`EmailMessage` through an email provider.

    ``send`` raises on any provider failure; the gateway reports the
    exception message back to the caller unchanged.
    """

    @abc.abstractmethod
    async def send(self, message: EmailMessage) -> SendResult:
        ...

    async def close(self) -> None:
        """Release network resources.  Default: nothing to release."""


class NotificationSender(abc.ABC):
    """Delivers a :class:`NotificationPayload` through a push provider."""

    @abc.abstractmethod
    async def send_to_tags(
        self,
        payload: NotificationPayload,
        tags: list[str],
    ) -> NotificationOutcome:
        """Send to every registration matching any of *tags*; broadcast if empty."""
        ...

    @abc.abstractmethod
    async def send_to_device(
        self,
        payload: NotificationPayload,
        device_handle: str,
    ) -> NotificationOutcome:
        """Send straight to one device handle, bypassing registrations."""
        ...

    async def close(self) -> None:
        """Release network resources.  Default: nothing to release."""
