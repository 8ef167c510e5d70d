"""Request-scoped data models.

Nothing here outlives a request: payloads are parsed, validated, handed
to one provider call and dropped when the response is written.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2025-06-01T12:00:00.000Z``."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ------------------------------------------------------------------
# Email
# ------------------------------------------------------------------


class EmailAttachment(BaseModel):
    """An attachment forwarded to the provider as-is."""

    name: str
    content_type: str = Field(validation_alias=AliasChoices("contentType", "content_type"))
    content_in_base64: str = Field(
        validation_alias=AliasChoices("contentInBase64", "base64Content", "content_in_base64"),
    )


class EmailMessage(BaseModel):
    """Provider-agnostic email, built only from a payload that passed validation."""

    sender_address: str
    subject: str
    html_body: str | None = None
    text_body: str | None = None
    to: list[str] = Field(min_length=1)
    cc: list[str] = Field(default_factory=list)
    bcc: list[str] = Field(default_factory=list)
    reply_to: str | None = None
    attachments: list[EmailAttachment] = Field(default_factory=list)

    @property
    def recipients(self) -> list[str]:
        return [*self.to, *self.cc, *self.bcc]


class SendResult(BaseModel):
    """What the email provider reports back."""

    id: str
    status: str | None = None


# ------------------------------------------------------------------
# Notifications
# ------------------------------------------------------------------


class Platform(str, Enum):
    """Push platforms a notification hub can target."""

    APNS = "apns"
    FCM = "fcm"
    WNS = "wns"
    MPNS = "mpns"
    ADM = "adm"
    BAIDU = "baidu"


class NotificationRequest(BaseModel):
    """Validated body of ``POST /notifications``."""

    model_config = ConfigDict(populate_by_name=True)

    platform: Platform | None = None
    message: str | None = None
    title: str | None = None
    tags: list[str] = Field(default_factory=list)
    device_handle: str | None = Field(default=None, alias="deviceHandle")
    template_name: str | None = Field(default=None, alias="templateName")
    template_properties: dict[str, str] | None = Field(default=None, alias="templateProperties")

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @property
    def is_template(self) -> bool:
        return bool(self.template_name) and self.template_properties is not None


class NotificationPayload(BaseModel):
    """Platform-shaped notification handed to the notification sender.

    ``service_format`` is the hub's name for the target platform
    (``apple``, ``gcm``, ``windows``, ``template``).
    """

    body: str
    headers: dict[str, str] = Field(default_factory=dict)
    content_type: str
    service_format: str


class NotificationOutcome(BaseModel):
    """What the notification provider reports back."""

    notification_id: str | None = None
    state: str | None = None
    tracking_id: str | None = None


# ------------------------------------------------------------------
# Response envelope
# ------------------------------------------------------------------


class ApiResult(BaseModel):
    """Uniform response envelope; endpoint-specific keys ride along as extras."""

    model_config = ConfigDict(extra="allow")

    success: bool
    id: str | None = None
    status: str | None = None
    error: str | None = None
    message: str | None = None
    timestamp: str = Field(default_factory=utc_timestamp)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
