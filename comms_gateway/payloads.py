"""Platform-specific notification payload builders.

:data:`PAYLOAD_BUILDERS` maps each platform that has a payload shape to a
pure builder function.  Platforms without an entry are rejected.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from xml.sax.saxutils import escape

from .errors import UnsupportedPlatform
from .models import NotificationPayload, NotificationRequest, Platform, utc_timestamp

DEFAULT_TITLE = "Notification"
JSON_CONTENT_TYPE = "application/json;charset=utf-8"


def _title(request: NotificationRequest) -> str:
    return request.title or DEFAULT_TITLE


def build_apns_payload(request: NotificationRequest) -> NotificationPayload:
    body = {
        "aps": {
            "alert": {"title": _title(request), "body": request.message},
            "sound": "default",
        },
    }
    return NotificationPayload(
        body=json.dumps(body),
        headers={"apns-priority": "10"},
        content_type=JSON_CONTENT_TYPE,
        service_format="apple",
    )


def build_fcm_payload(request: NotificationRequest) -> NotificationPayload:
    body = {
        "notification": {"title": _title(request), "body": request.message},
        "data": {"timestamp": utc_timestamp()},
    }
    return NotificationPayload(
        body=json.dumps(body),
        content_type=JSON_CONTENT_TYPE,
        service_format="gcm",
    )


def build_wns_payload(request: NotificationRequest) -> NotificationPayload:
    toast = (
        "<toast>"
        "<visual>"
        '<binding template="ToastText02">'
        f'<text id="1">{escape(_title(request))}</text>'
        f'<text id="2">{escape(request.message or "")}</text>'
        "</binding>"
        "</visual>"
        "</toast>"
    )
    return NotificationPayload(
        body=toast,
        headers={"X-WNS-Type": "wns/toast"},
        content_type="text/xml",
        service_format="windows",
    )


def build_template_payload(request: NotificationRequest) -> NotificationPayload:
    """Template sends carry only the caller's properties; the hub fills the template."""
    return NotificationPayload(
        body=json.dumps(request.template_properties or {}),
        content_type=JSON_CONTENT_TYPE,
        service_format="template",
    )


PAYLOAD_BUILDERS: dict[Platform, Callable[[NotificationRequest], NotificationPayload]] = {
    Platform.APNS: build_apns_payload,
    Platform.FCM: build_fcm_payload,
    Platform.WNS: build_wns_payload,
}


def build_payload(request: NotificationRequest) -> NotificationPayload:
    """Pick the template path when requested, else the platform's builder."""
    if request.is_template:
        return build_template_payload(request)
    builder = PAYLOAD_BUILDERS.get(request.platform)  # type: ignore[arg-type]
    if builder is None:
        platform = request.platform.value if request.platform else None
        raise UnsupportedPlatform(platform)
    return builder(request)
