"""FastAPI dependency-injection helpers for settings and provider senders.

Senders are ``None`` when their provider is not configured; handlers
report that only once the request itself has passed validation.
"""

from __future__ import annotations

from fastapi import Request

from .config import Settings
from .providers.base import EmailSender, NotificationSender


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_email_sender(request: Request) -> EmailSender | None:
    return getattr(request.app.state, "email_sender", None)


def get_notification_sender(request: Request) -> NotificationSender | None:
    return getattr(request.app.state, "notification_sender", None)
