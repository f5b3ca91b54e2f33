"""Error taxonomy shared by the store adapters, services and HTTP layer."""
from typing import Any, Optional


class PortalError(Exception):
    status_code = 500
    code = "internal_error"
    retryable = False

    def __init__(self, message: str, *, details: Optional[str] = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra

    def to_payload(self, *, hide_details: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = "Something went wrong" if hide_details else self.details
        payload.update(self.extra)
        return payload


class ValidationError(PortalError):
    """Missing or malformed input the caller can fix."""
    status_code = 400
    code = "validation_error"


class AuthenticationError(PortalError):
    status_code = 401
    code = "authentication_failed"


class AuthorizationError(PortalError):
    """Caller is known but may not act on this record or in this state."""
    status_code = 403
    code = "forbidden"


class NotFoundError(PortalError):
    status_code = 404
    code = "not_found"


class ConflictError(PortalError):
    """Duplicate identity or a state transition that is no longer allowed."""
    status_code = 409
    code = "conflict"


class UpstreamError(PortalError):
    """Record store or storage provider failure."""
    status_code = 502
    code = "upstream_error"
    retryable = True
