"""Gateway error taxonomy.

Every failure the gateway reports is a :class:`GatewayError` subclass.
Handlers raise them; a single exception handler in :mod:`comms_gateway.app`
renders them into the JSON envelope, so no error escapes unshaped.
"""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base class: an HTTP status, a short ``error`` and an optional ``message``."""

    status_code: int = 500
    error: str = "Internal server error"
    message: str | None = None

    def __init__(
        self,
        error: str | None = None,
        message: str | None = None,
        *,
        headers: dict[str, str] | None = None,
        **extra: Any,
    ) -> None:
        if error is not None:
            self.error = error
        if message is not None:
            self.message = message
        self.headers = headers or {}
        self.extra = extra
        super().__init__(self.error)


class MethodNotAllowed(GatewayError):
    status_code = 405
    error = "Method not allowed"
    message = "Use POST."


class InvalidJson(GatewayError):
    status_code = 400
    error = "Invalid JSON in request body"


class InvalidContentType(GatewayError):
    status_code = 400
    error = "Invalid content type"
    message = "Content-Type must be application/json"


class UnauthorizedOrigin(GatewayError):
    status_code = 403
    error = "Unauthorized origin"


class MissingCredential(GatewayError):
    status_code = 401
    error = "Authentication required"
    message = (
        "API key must be provided via Authorization header, "
        "x-api-key header, or api_key query parameter"
    )

    def __init__(self) -> None:
        super().__init__(headers={"WWW-Authenticate": "Bearer"})


class InvalidCredential(GatewayError):
    status_code = 403
    error = "Invalid API key"
    message = "The provided API key is not valid"


class ServerMisconfigured(GatewayError):
    status_code = 500
    error = "Server configuration error"


class PayloadValidationError(GatewayError):
    """A business rule on the payload failed.

    Reported as 500, which is what existing clients of the email endpoint
    expect.
    """

    status_code = 500


class InvalidRequest(GatewayError):
    """Required fields are absent or carry the wrong type."""

    status_code = 400


class UnsupportedPlatform(GatewayError):
    status_code = 400

    def __init__(self, platform: object) -> None:
        super().__init__(f"Unsupported platform: {platform}")


class CollaboratorFailure(GatewayError):
    """The email or notification provider raised; its message is passed through."""

    status_code = 500


class RouteNotFound(GatewayError):
    status_code = 404
    error = "Not found"
