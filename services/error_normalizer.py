# order_workflow/services/error_normalizer.py

from dataclasses import dataclass
from typing import Any, Dict, Optional

from exceptions import (
    ApiError,
    ErrorKind,
    TransportFailure,
    CLIENT_REJECTED_LABEL,
    UNREACHABLE_LABEL,
)
from logger import get_logger

log = get_logger("error_normalizer")

MSG_UNREACHABLE = (
    "Server did not respond. Check that the order backend is running and reachable."
)
MSG_INTERNAL = (
    "Internal server error. The backend answered but failed to process the request."
)
MSG_NOT_FOUND = "Resource not found."
MSG_INVALID_INPUT = "Invalid data. Check the form fields."
MSG_UNKNOWN = "Unknown error"


def _default_message(status: int, reason: str) -> str:
    if status == 500:
        return MSG_INTERNAL
    if status == 404:
        return MSG_NOT_FOUND
    if status == 400:
        return MSG_INVALID_INPUT
    return f"Error {status}: {reason}" if reason else f"Error {status}"


def _field_details(body: Dict[str, Any]) -> Optional[Dict[str, str]]:
    details = body.get("details")
    if isinstance(details, dict):
        return {str(k): str(v) for k, v in details.items()}

    # Alternative shape: {"errors": {"field": ["msg", ...]}}; keep the first message per field
    errors = body.get("errors")
    if isinstance(errors, dict) and errors:
        out: Dict[str, str] = {}
        for k, v in errors.items():
            if isinstance(v, list) and v:
                out[str(k)] = str(v[0])
            elif isinstance(v, str):
                out[str(k)] = v
        return out or None

    return None


def _from_http(failure: TransportFailure) -> ApiError:
    status = int(failure.status)
    body = failure.body if isinstance(failure.body, dict) else {}

    message = body.get("message")
    if not isinstance(message, str) or not message.strip():
        message = _default_message(status, failure.reason)

    details = _field_details(body)
    if details and status == 400:
        message = f"Validation failed on {len(details)} field(s). Check the details below."

    label = body.get("error")
    return ApiError(
        message,
        status=status,
        error=label if isinstance(label, str) and label else (failure.reason or None),
        details=details,
        path=failure.path,
    )


def normalize_error(exc: BaseException) -> ApiError:
    """
    Map any failure to exactly one ApiError. Never raises.

    - ApiError: returned as is
    - TransportFailure without a response: unreachable (network/timeout) or request-setup message
    - TransportFailure with a response: status, body message or per-status default, field details
    - anything else: its own message, plus ``details`` when it carries them (client validation)
    """
    try:
        if isinstance(exc, ApiError):
            return exc

        if isinstance(exc, TransportFailure):
            if exc.has_response:
                return _from_http(exc)
            if exc.unreachable:
                return ApiError(MSG_UNREACHABLE, error=UNREACHABLE_LABEL, path=exc.path)
            return ApiError(str(exc) or MSG_UNKNOWN, error=CLIENT_REJECTED_LABEL, path=exc.path)

        details = getattr(exc, "details", None)
        return ApiError(
            str(exc) or MSG_UNKNOWN,
            error=CLIENT_REJECTED_LABEL,
            details=dict(details) if isinstance(details, dict) else None,
        )
    except Exception as e:
        log.error(f"Error normalization failed for {type(exc).__name__}: {e}")
        return ApiError(MSG_UNKNOWN, error=CLIENT_REJECTED_LABEL)


# ---------------- Presentation ----------------

@dataclass(frozen=True)
class ErrorPresentation:
    title: str
    message: str
    action: str     # fix_fields | retry | view_failed_payments | wait | dismiss


def describe_error(err: ApiError) -> ErrorPresentation:
    """What the UI should show for an ApiError, and which affordance to offer."""
    kind = err.kind

    if kind == ErrorKind.VALIDATION_REJECTED or (kind == ErrorKind.CLIENT_REJECTED and err.details):
        count = len(err.details or {})
        return ErrorPresentation("Validation error", f"Validation failed on {count} field(s)", "fix_fields")
    if kind == ErrorKind.BUSINESS_SAGA_FAILED:
        return ErrorPresentation(
            "Order accepted but not completed",
            f"{err.message} The order was recorded; check failed payments.",
            "view_failed_payments",
        )
    if kind == ErrorKind.SAGA_IN_PROGRESS:
        return ErrorPresentation("Order in progress", err.message, "wait")
    if kind == ErrorKind.NOT_FOUND:
        return ErrorPresentation("Resource not found", err.message, "dismiss")
    if kind == ErrorKind.SERVER_INTERNAL:
        return ErrorPresentation("Internal server error", err.message, "retry")
    if kind == ErrorKind.TRANSPORT_UNREACHABLE:
        return ErrorPresentation("Server unreachable", err.message, "retry")
    return ErrorPresentation("Error processing request", err.message, "retry")
