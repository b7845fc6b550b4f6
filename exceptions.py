# order_workflow/exceptions.py

from enum import Enum
from typing import Any, Dict, Optional

from config import utc_now_iso


class ErrorKind(str, Enum):
    TRANSPORT_UNREACHABLE = "TRANSPORT_UNREACHABLE"
    CLIENT_REJECTED = "CLIENT_REJECTED"
    SERVER_INTERNAL = "SERVER_INTERNAL"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_REJECTED = "VALIDATION_REJECTED"
    BUSINESS_SAGA_FAILED = "BUSINESS_SAGA_FAILED"
    SAGA_IN_PROGRESS = "SAGA_IN_PROGRESS"
    HTTP_ERROR = "HTTP_ERROR"


SAGA_IN_PROGRESS_LABEL = "SAGA_IN_PROGRESS"
UNREACHABLE_LABEL = "UNREACHABLE"
CLIENT_REJECTED_LABEL = "CLIENT_REJECTED"
BAD_PAYLOAD_LABEL = "BAD_PAYLOAD"


class ApiError(Exception):
    """
    The single error shape the rest of the application sees.

    Built by services.error_normalizer from whatever went wrong (no response,
    HTTP error body, client-side rejection) and by the store for business
    outcomes of create-order. ``details`` maps form field keys (including
    indexed keys such as ``items[0].quantity``) to messages.
    """
    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        error: Optional[str] = None,
        details: Optional[Dict[str, str]] = None,
        is_business_error: bool = False,
        timestamp: Optional[str] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.error = error
        self.details = details or None
        self.is_business_error = is_business_error
        self.timestamp = timestamp or utc_now_iso()
        self.path = path

    @property
    def kind(self) -> ErrorKind:
        if self.is_business_error:
            return ErrorKind.BUSINESS_SAGA_FAILED
        if self.status == 202 or self.error == SAGA_IN_PROGRESS_LABEL:
            return ErrorKind.SAGA_IN_PROGRESS
        if self.error == BAD_PAYLOAD_LABEL:
            # server answered with something unparseable
            return ErrorKind.HTTP_ERROR
        if self.status is None:
            if self.error == UNREACHABLE_LABEL:
                return ErrorKind.TRANSPORT_UNREACHABLE
            return ErrorKind.CLIENT_REJECTED
        if self.status >= 500:
            return ErrorKind.SERVER_INTERNAL
        if self.status == 404:
            return ErrorKind.NOT_FOUND
        if self.status == 400 and self.details:
            return ErrorKind.VALIDATION_REJECTED
        return ErrorKind.HTTP_ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "status": self.status,
            "error": self.error,
            "details": dict(self.details) if self.details else None,
            "isBusinessError": self.is_business_error,
            "timestamp": self.timestamp,
            "path": self.path,
            "kind": self.kind.value,
        }

    def __repr__(self) -> str:
        return f"ApiError(status={self.status!r}, kind={self.kind.value}, message={self.message!r})"


class TransportFailure(Exception):
    """
    Provisional failure raised by the transport adapter (api.py).

    Carries the raw facts only; services.error_normalizer turns it into an ApiError.
    """
    def __init__(
        self,
        message: str,
        *,
        method: str,
        path: str,
        status: Optional[int] = None,
        reason: str = "",
        body: Any = None,
        unreachable: bool = False,
    ):
        super().__init__(message)
        self.method = method
        self.path = path
        self.status = status
        self.reason = reason
        self.body = body
        self.unreachable = unreachable

    @property
    def has_response(self) -> bool:
        return self.status is not None


class RequestValidationError(ValueError):
    """Request rejected on the client before it was sent. ``details`` uses backend field keys."""
    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.details = details or {}


class InvalidIdempotencyKey(RequestValidationError):
    def __init__(self, key: Any):
        super().__init__(
            f"Invalid idempotency key {key!r}: expected a UUID v4",
            {"idempotencyKey": "Idempotency key must be a UUID v4"},
        )
        self.key = key
