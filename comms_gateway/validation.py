"""Per-endpoint request validation ladders.

Each ladder runs top to bottom and stops at the first failing rule by
raising the matching :class:`~comms_gateway.errors.GatewayError`.  Only
models that made it through a ladder are handed to a provider.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import TypeAdapter, ValidationError
from starlette.requests import Request

from .errors import (
    InvalidContentType,
    InvalidJson,
    InvalidRequest,
    MethodNotAllowed,
    PayloadValidationError,
    UnauthorizedOrigin,
    UnsupportedPlatform,
)
from .models import EmailAttachment, EmailMessage, NotificationRequest, Platform
from .security import validate_content_type, validate_origin

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_PLATFORM_VALUES = frozenset(p.value for p in Platform)
_attachments_adapter = TypeAdapter(list[EmailAttachment])


def is_valid_email(address: object) -> bool:
    return isinstance(address, str) and EMAIL_PATTERN.fullmatch(address) is not None


def require_post(request: Request) -> None:
    if request.method != "POST":
        raise MethodNotAllowed()


async def read_json_object(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object."""
    raw = await request.body()
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidJson()
    if not isinstance(data, dict):
        raise InvalidJson(message="Request body must be a JSON object")
    return data


def _address_list(value: Any) -> list[Any]:
    """Recipients may be sent as a single string or a list."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if isinstance(value, str) and value:
        return value
    return None


# ------------------------------------------------------------------
# Email
# ------------------------------------------------------------------


async def check_email_request(request: Request, allowed_origins: list[str]) -> dict[str, Any]:
    """Transport-level rules for ``POST /email``: method, JSON, content type, origin."""
    require_post(request)
    data = await read_json_object(request)
    if not validate_content_type(request):
        raise InvalidContentType()
    if not validate_origin(request, allowed_origins):
        raise UnauthorizedOrigin(message=f"Origin {request.headers.get('origin')!r} is not allowed")
    return data


def build_email_message(data: dict[str, Any], sender_address: str) -> EmailMessage:
    """Business rules for an email payload; returns the provider-agnostic message."""
    to = _address_list(data.get("to"))
    if not to:
        raise PayloadValidationError("Recipient email address is required")

    subject = _text(data, "subject")
    if subject is None:
        raise PayloadValidationError("Email subject is required")

    html_body = _text(data, "htmlContent")
    text_body = _text(data, "textContent")
    if html_body is None and text_body is None:
        raise PayloadValidationError("Either HTML content or text content is required")

    cc = _address_list(data.get("cc"))
    bcc = _address_list(data.get("bcc"))
    for address in (*to, *cc, *bcc):
        if not is_valid_email(address):
            raise PayloadValidationError(f"Invalid email format: {address}")

    try:
        attachments = _attachments_adapter.validate_python(data.get("attachments") or [])
    except ValidationError:
        raise PayloadValidationError(
            "Invalid attachments",
            "Each attachment needs name, contentType and contentInBase64",
        )

    return EmailMessage(
        sender_address=sender_address,
        subject=subject,
        html_body=html_body,
        text_body=text_body,
        to=to,
        cc=cc,
        bcc=bcc,
        reply_to=_text(data, "replyTo"),
        attachments=attachments,
    )


# ------------------------------------------------------------------
# Notifications
# ------------------------------------------------------------------


async def read_notification_request(request: Request) -> NotificationRequest:
    """Method and JSON rules for ``POST /notifications``, then field rules."""
    require_post(request)
    data = await read_json_object(request)
    return parse_notification_request(data)


def parse_notification_request(data: dict[str, Any]) -> NotificationRequest:
    """Field rules for a notification payload.

    ``platform`` and ``message`` may be omitted only on the template path,
    i.e. when both ``templateName`` and ``templateProperties`` are given.
    """
    is_template = bool(data.get("templateName")) and data.get("templateProperties") is not None
    platform = data.get("platform")

    if not is_template and (not platform or not data.get("message")):
        raise InvalidRequest("Missing required fields: platform, message")

    if platform and (not isinstance(platform, str) or platform not in _PLATFORM_VALUES):
        raise UnsupportedPlatform(platform)

    try:
        return NotificationRequest.model_validate(data)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise InvalidRequest("Invalid notification request", f"Invalid fields: {', '.join(fields)}")
