"""Notification endpoint: shape the platform payload and dispatch it."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..auth import require_api_key
from ..deps import get_notification_sender
from ..errors import CollaboratorFailure, ServerMisconfigured
from ..payloads import build_payload
from ..providers.base import NotificationSender
from ..responses import success_response
from ..validation import read_notification_request
from . import ALL_METHODS

logger = structlog.get_logger()
router = APIRouter(tags=["notifications"], dependencies=[Depends(require_api_key)])


@router.api_route("/notifications", methods=ALL_METHODS)
@router.api_route("/notifications/", methods=ALL_METHODS, include_in_schema=False)
async def send_notification(
    request: Request,
    sender: Annotated[NotificationSender | None, Depends(get_notification_sender)],
) -> JSONResponse:
    """Send one push notification.

    A ``deviceHandle`` targets a single device; otherwise ``tags`` select
    registrations, and no tags means broadcast.
    """
    notification = await read_notification_request(request)
    payload = build_payload(notification)

    if sender is None:
        raise ServerMisconfigured("Missing Azure Notification Hub configuration")

    try:
        if notification.device_handle:
            outcome = await sender.send_to_device(payload, notification.device_handle)
            target = "device"
        else:
            outcome = await sender.send_to_tags(payload, notification.tags)
            target = "tags" if notification.tags else "broadcast"
    except Exception as exc:
        logger.exception("notification_send_failed", format=payload.service_format)
        raise CollaboratorFailure(str(exc) or type(exc).__name__, "Failed to send notification")

    logger.info(
        "notification_sent",
        notification_id=outcome.notification_id,
        format=payload.service_format,
        target=target,
        template=notification.is_template,
    )
    return success_response(
        notificationId=outcome.notification_id,
        state=outcome.state,
        trackingId=outcome.tracking_id,
    )
