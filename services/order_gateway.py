# order_workflow/services/order_gateway.py

from typing import Any, List, Optional
from urllib.parse import quote

from api import send_request, decode_body
from exceptions import ApiError, InvalidIdempotencyKey, TransportFailure, BAD_PAYLOAD_LABEL
from logger import get_logger
from models import (
    Completed,
    CreateOrderRequest,
    Failed,
    InProgress,
    Order,
    OrderStatus,
    PaymentStatusInfo,
    WorkflowOutcome,
)
from services.error_normalizer import normalize_error
from services.idempotency import validate as is_valid_key

log = get_logger("order_gateway")

MSG_SAGA_FAILED = "Order could not be processed."


def _seg(value: Any) -> str:
    return quote(str(value), safe="")


# ---------------- Saga outcome classification ----------------

def is_saga_outcome_body(body: Any) -> bool:
    """
    True when an HTTP 400 body is a create-order saga outcome rather than a
    validation error.

    The backend answers "accepted, then a downstream step failed" with 400 as
    well; the body shape is the only way to tell the two apart. Saga bodies
    carry ``success`` and ``sagaExecutionId``; validation bodies carry a
    ``details`` map.
    """
    if not isinstance(body, dict):
        return False
    if isinstance(body.get("details"), dict):
        return False
    return "success" in body and "sagaExecutionId" in body


def classify_create_order_response(body: Any, status: Optional[int] = None) -> WorkflowOutcome:
    if not isinstance(body, dict):
        raise ApiError(
            "Unexpected response from server while creating the order.",
            status=status,
            error=BAD_PAYLOAD_LABEL,
            path="/orders",
        )

    saga_id = body.get("sagaExecutionId")
    saga_id = str(saga_id) if saga_id is not None else None
    error_message = body.get("errorMessage") or None
    order_data = body.get("order")
    order = Order.from_dict(order_data) if isinstance(order_data, dict) else None

    if body.get("inProgress") is True and saga_id:
        return InProgress(saga_id, error_message, order)

    if body.get("success") is True and order is not None:
        return Completed(order, saga_id)

    if saga_id and error_message:
        return Failed(saga_id, error_message, order)

    if saga_id and body.get("success") is False:
        # a finished saga says so (inProgress: false) or hands back the order it touched
        if body.get("inProgress") is False or order is not None:
            return Failed(saga_id, MSG_SAGA_FAILED, order)
        return InProgress(saga_id, None, None)

    raise ApiError(
        "Unexpected response from server while creating the order.",
        status=status,
        error=BAD_PAYLOAD_LABEL,
        path="/orders",
    )


# ---------------- Operations ----------------

def create_order(req: CreateOrderRequest) -> WorkflowOutcome:
    req.validate()
    key = req.effective_idempotency_key()
    if key is not None and not is_valid_key(key):
        raise InvalidIdempotencyKey(key)

    log.info(f"Creating order for customer {req.customer_id} ({len(req.items)} item(s)), idempotencyKey={key}")

    try:
        resp = send_request("POST", "/orders", payload=req.to_dict())
    except TransportFailure as e:
        if e.status == 400 and is_saga_outcome_body(e.body):
            outcome = classify_create_order_response(e.body, e.status)
            log.info(f"Create order returned saga outcome on 400: {type(outcome).__name__} saga={outcome.saga_execution_id}")
            return outcome
        raise normalize_error(e) from e

    outcome = classify_create_order_response(decode_body(resp), resp.status_code)
    log.info(f"Create order {resp.status_code}: {type(outcome).__name__} saga={outcome.saga_execution_id}")
    return outcome


def _get_order(method: str, path: str) -> Order:
    try:
        resp = send_request(method, path)
    except TransportFailure as e:
        raise normalize_error(e) from e
    return Order.from_dict(decode_body(resp))


def get_order_by_id(order_id: str) -> Order:
    return _get_order("GET", f"/orders/{_seg(order_id)}")


def get_order_by_number(order_number: str) -> Order:
    return _get_order("GET", f"/orders/number/{_seg(order_number)}")


def list_orders(status: Optional[OrderStatus] = None) -> List[Order]:
    params = {"status": OrderStatus(status).value} if status else None
    try:
        resp = send_request("GET", "/orders", params=params)
    except TransportFailure as e:
        raise normalize_error(e) from e

    body = decode_body(resp)
    if body is None:
        return []
    if not isinstance(body, list):
        raise ApiError(
            "Unexpected response from server while listing orders.",
            status=resp.status_code,
            error=BAD_PAYLOAD_LABEL,
            path="/orders",
        )
    orders = [Order.from_dict(o) for o in body]
    log.info(f"Listed {len(orders)} order(s) status={params['status'] if params else 'ALL'}")
    return orders


def refresh_payment_status(order_id: str) -> Order:
    order = _get_order("POST", f"/payments/orders/{_seg(order_id)}/refresh-status")
    log.info(f"Payment status refreshed for order {order_id}: {order.status.value}")
    return order


def analyze_risk(order_id: str) -> Order:
    order = _get_order("POST", f"/orders/{_seg(order_id)}/analyze-risk")
    log.info(f"Risk analysis for order {order_id}: {order.risk_level.value if order.risk_level else None}")
    return order


def check_payment_status(payment_id: str) -> PaymentStatusInfo:
    try:
        resp = send_request("GET", f"/payments/{_seg(payment_id)}/status")
    except TransportFailure as e:
        raise normalize_error(e) from e
    return PaymentStatusInfo.from_dict(decode_body(resp))
