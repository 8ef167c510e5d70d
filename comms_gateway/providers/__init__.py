"""Provider adapters behind the :class:`EmailSender` / :class:`NotificationSender` interfaces."""

from .base import EmailSender, NotificationSender
from .email import AzureEmailSender
from .notification_hub import NotificationHubSender

__all__ = [
    "AzureEmailSender",
    "EmailSender",
    "NotificationHubSender",
    "NotificationSender",
]
