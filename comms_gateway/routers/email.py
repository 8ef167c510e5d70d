"""Email endpoint: validate, build the message, hand it to the email sender."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..auth import require_api_key
from ..config import Settings
from ..deps import get_email_sender, get_settings
from ..errors import CollaboratorFailure, ServerMisconfigured
from ..providers.base import EmailSender
from ..responses import success_response
from ..validation import build_email_message, check_email_request
from . import ALL_METHODS

logger = structlog.get_logger()
router = APIRouter(tags=["email"], dependencies=[Depends(require_api_key)])


@router.api_route("/email", methods=ALL_METHODS)
@router.api_route("/email/", methods=ALL_METHODS, include_in_schema=False)
async def send_email(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    sender: Annotated[EmailSender | None, Depends(get_email_sender)],
) -> JSONResponse:
    """Send one email.

    Body: ``to`` (string or list), ``subject``, ``htmlContent`` and/or
    ``textContent``, optional ``cc``, ``bcc``, ``replyTo``, ``attachments``.
    """
    data = await check_email_request(request, settings.origin_allow_list)
    message = build_email_message(data, settings.email.sender_address or "")

    if sender is None:
        raise ServerMisconfigured(
            "Missing required Azure Communication Services configuration",
            "Set AZURE_COMMUNICATION_SENDER_ADDRESS and either a connection string "
            "or an endpoint with service principal credentials",
        )

    try:
        result = await sender.send(message)
    except Exception as exc:
        logger.exception("email_send_failed", recipients=len(message.recipients))
        raise CollaboratorFailure(str(exc) or type(exc).__name__, "Failed to send email")

    logger.info(
        "email_sent",
        message_id=result.id,
        status=result.status,
        recipients=len(message.recipients),
        attachments=len(message.attachments),
    )
    return success_response(id=result.id, messageId=result.id, status=result.status)
