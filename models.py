#models.py
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from exceptions import ApiError, RequestValidationError, BAD_PAYLOAD_LABEL

CENTS = Decimal("0.01")


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    CANCELED = "CANCELED"


class RiskLevel(str, Enum):
    LOW = "LOW"
    HIGH = "HIGH"
    PENDING = "PENDING"       # analysis not run yet


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"


class LoadingState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


def money(value: Any) -> Decimal:
    """Backend money: 2 decimal places, HALF_UP."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def line_subtotal(quantity: int, unit_price: Any) -> Decimal:
    return money(Decimal(str(unit_price)) * quantity)


def _parse_ts(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    s = str(value).strip()
    # handles "2025-12-22T03:35:00Z", "...+00:00" and zone-less LocalDateTime
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _format_ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _unexpected(what: str, payload: Any) -> ApiError:
    return ApiError(f"Unexpected {what} payload from server: {payload!r}", error=BAD_PAYLOAD_LABEL)


# ---------------- Orders ----------------

@dataclass(frozen=True)
class OrderItem:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderItem":
        quantity = int(data["quantity"])
        unit_price = money(data["unitPrice"])
        sub = data.get("subtotal")
        return cls(
            product_id=str(data.get("productId") or ""),
            product_name=data.get("productName") or "",
            quantity=quantity,
            unit_price=unit_price,
            subtotal=money(sub) if sub is not None else line_subtotal(quantity, unit_price),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": str(self.unit_price),
            "subtotal": str(self.subtotal),
        }


@dataclass(frozen=True)
class Order:
    id: str
    order_number: str
    status: OrderStatus
    customer_id: str
    customer_name: str
    customer_email: str
    items: List[OrderItem]
    total_amount: Decimal
    payment_id: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Order":
        if not isinstance(data, dict):
            raise _unexpected("order", data)
        try:
            items = [OrderItem.from_dict(i) for i in (data.get("items") or [])]
            total = data.get("totalAmount")
            return cls(
                id=str(data["id"]),
                order_number=data.get("orderNumber") or "",
                status=OrderStatus(data["status"]),
                customer_id=str(data.get("customerId") or ""),
                customer_name=data.get("customerName") or "",
                customer_email=data.get("customerEmail") or "",
                items=items,
                total_amount=money(total) if total is not None else sum_subtotals(items),
                payment_id=data.get("paymentId"),
                risk_level=RiskLevel(data["riskLevel"]) if data.get("riskLevel") else None,
                created_at=_parse_ts(data.get("createdAt")),
                updated_at=_parse_ts(data.get("updatedAt")),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise _unexpected("order", data) from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "orderNumber": self.order_number,
            "status": self.status.value,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "items": [i.to_dict() for i in self.items],
            "totalAmount": str(self.total_amount),
            "paymentId": self.payment_id,
            "riskLevel": self.risk_level.value if self.risk_level else None,
            "createdAt": _format_ts(self.created_at),
            "updatedAt": _format_ts(self.updated_at),
        }

    def computed_total(self) -> Decimal:
        return sum_subtotals(self.items)

    def total_matches_items(self) -> bool:
        return self.total_amount == self.computed_total()


def sum_subtotals(items) -> Decimal:
    return money(sum((i.subtotal for i in items), Decimal("0")))


@dataclass(frozen=True)
class PaymentStatusInfo:
    payment_id: str
    status: PaymentStatus

    @classmethod
    def from_dict(cls, data: Any) -> "PaymentStatusInfo":
        try:
            return cls(payment_id=str(data["paymentId"]), status=PaymentStatus(data["status"]))
        except (KeyError, TypeError, ValueError) as e:
            raise _unexpected("payment status", data) from e


# ---------------- Create order request ----------------

@dataclass
class OrderItemRequest:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            # JSON number; the backend binds it to BigDecimal
            "unitPrice": float(self.unit_price),
        }


@dataclass
class CreateOrderRequest:
    customer_id: str
    customer_name: str
    customer_email: str
    items: List[OrderItemRequest]
    payment_method: str
    currency: Optional[str] = None
    idempotency_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreateOrderRequest":
        items = [
            OrderItemRequest(
                product_id=str(i.get("productId") or ""),
                product_name=i.get("productName") or "",
                quantity=int(i.get("quantity") or 0),
                unit_price=Decimal(str(i.get("unitPrice") or 0)),
            )
            for i in (data.get("items") or [])
        ]
        return cls(
            customer_id=str(data.get("customerId") or ""),
            customer_name=data.get("customerName") or "",
            customer_email=data.get("customerEmail") or "",
            items=items,
            payment_method=data.get("paymentMethod") or "",
            currency=data.get("currency"),
            idempotency_key=data.get("idempotencyKey"),
        )

    def with_idempotency_key(self, key: Optional[str]) -> "CreateOrderRequest":
        return replace(self, idempotency_key=key)

    def effective_idempotency_key(self) -> Optional[str]:
        key = (self.idempotency_key or "").strip()
        return key or None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "items": [i.to_dict() for i in self.items],
            "paymentMethod": self.payment_method,
        }
        if self.currency:
            body["currency"] = self.currency
        key = self.effective_idempotency_key()
        if key:
            body["idempotencyKey"] = key
        return body

    def estimated_total(self) -> Decimal:
        return money(sum((line_subtotal(i.quantity, i.unit_price) for i in self.items), Decimal("0")))

    def validate(self) -> None:
        """Same rules the backend enforces, keyed the same way, so nothing obviously bad is sent."""
        details: Dict[str, str] = {}
        if not self.customer_id:
            details["customerId"] = "Customer ID is required"
        if not (self.customer_name or "").strip():
            details["customerName"] = "Customer name is required"
        email = (self.customer_email or "").strip()
        if not email:
            details["customerEmail"] = "Customer email is required"
        elif "@" not in email or "." not in email.split("@")[-1] or " " in email:
            details["customerEmail"] = "Customer email must be valid"
        if not self.items:
            details["items"] = "Order must have at least one item"
        for n, item in enumerate(self.items):
            if not item.product_id:
                details[f"items[{n}].productId"] = "Product ID is required"
            if not (item.product_name or "").strip():
                details[f"items[{n}].productName"] = "Product name is required"
            if item.quantity is None or item.quantity < 1:
                details[f"items[{n}].quantity"] = "Quantity must be at least 1"
            if item.unit_price is None or Decimal(str(item.unit_price)) <= 0:
                details[f"items[{n}].unitPrice"] = "Unit price must be positive"
        if not (self.payment_method or "").strip():
            details["paymentMethod"] = "Payment method is required"

        if details:
            raise RequestValidationError(
                f"Order request has {len(details)} invalid field(s)", details
            )


# ---------------- Workflow outcome ----------------

@dataclass(frozen=True)
class Completed:
    order: Order
    saga_execution_id: Optional[str] = None


@dataclass(frozen=True)
class InProgress:
    saga_execution_id: str
    message: Optional[str] = None
    order: Optional[Order] = None


@dataclass(frozen=True)
class Failed:
    saga_execution_id: str
    reason: str
    order: Optional[Order] = None


WorkflowOutcome = Union[Completed, InProgress, Failed]


# ---------------- Store state ----------------

@dataclass
class WorkflowState:
    orders: List[Order] = field(default_factory=list)
    current_order: Optional[Order] = None
    failed_payment_orders: List[Order] = field(default_factory=list)
    loading: LoadingState = LoadingState.IDLE
    error: Optional[ApiError] = None
    validation_errors: Optional[Dict[str, str]] = None
