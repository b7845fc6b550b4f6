import os
import sys
import tempfile

# Must be set before config is imported anywhere
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="order_workflow_logs_"))
os.environ["ORDER_API_URL"] = "http://orders.test/api/v1"

_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from decimal import Decimal

import pytest

from config import API_BASE_URL
from models import CreateOrderRequest, OrderItemRequest
from store import reset_store


@pytest.fixture
def api_url():
    return API_BASE_URL


@pytest.fixture
def order_json():
    """Factory for backend OrderResponse bodies."""
    def _make(order_id="11111111-1111-4111-8111-111111111111", status="PAID", **overrides):
        body = {
            "id": order_id,
            "orderNumber": f"ORD-{order_id[:8]}",
            "status": status,
            "customerId": "22222222-2222-4222-8222-222222222222",
            "customerName": "Ana Souza",
            "customerEmail": "ana@example.com",
            "items": [
                {
                    "productId": "33333333-3333-4333-8333-333333333333",
                    "productName": "Notebook",
                    "quantity": 2,
                    "unitPrice": 1500.25,
                    "subtotal": 3000.50,
                },
                {
                    "productId": "44444444-4444-4444-8444-444444444444",
                    "productName": "Mouse",
                    "quantity": 3,
                    "unitPrice": 19.99,
                    "subtotal": 59.97,
                },
            ],
            "totalAmount": 3060.47,
            "paymentId": "bill_abc123",
            "riskLevel": "LOW",
            "createdAt": "2024-05-01T10:30:00",
            "updatedAt": "2024-05-01T10:31:00",
        }
        body.update(overrides)
        return body
    return _make


@pytest.fixture
def create_request():
    def _make(**overrides):
        fields = dict(
            customer_id="22222222-2222-4222-8222-222222222222",
            customer_name="Ana Souza",
            customer_email="ana@example.com",
            items=[
                OrderItemRequest("33333333-3333-4333-8333-333333333333", "Notebook", 2, Decimal("1500.25")),
                OrderItemRequest("44444444-4444-4444-8444-444444444444", "Mouse", 3, Decimal("19.99")),
            ],
            payment_method="PIX",
        )
        fields.update(overrides)
        return CreateOrderRequest(**fields)
    return _make


@pytest.fixture
def store():
    return reset_store()
