import importlib.util
import json
import os

import pytest

from store import reset_store

_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _load_script(name):
    path = os.path.join(_REPO_ROOT, "scripts", f"{name}.py")
    spec = importlib.util.spec_from_file_location(f"script_{name}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def fresh_store():
    reset_store()


@pytest.fixture
def order_file(tmp_path):
    path = tmp_path / "order.json"
    path.write_text(json.dumps({
        "customerId": "22222222-2222-4222-8222-222222222222",
        "customerName": "Ana Souza",
        "customerEmail": "ana@example.com",
        "items": [{"productId": "p1", "productName": "Pen", "quantity": 2, "unitPrice": 3.5}],
        "paymentMethod": "PIX",
    }))
    return str(path)


def test_place_order_completed(requests_mock, api_url, order_json, order_file, capsys):
    requests_mock.post(f"{api_url}/orders", status_code=201,
                       json={"success": True, "order": order_json(), "sagaExecutionId": "s1"})

    assert _load_script("place_order").main([order_file]) == 0

    assert "ORD-11111111" in capsys.readouterr().out
    # a key was generated for the submission
    assert len(requests_mock.last_request.json()["idempotencyKey"]) == 36


def test_place_order_retries_with_same_key(requests_mock, api_url, order_json, order_file):
    requests_mock.post(f"{api_url}/orders", [
        {"status_code": 500, "reason": "Internal Server Error", "json": {}},
        {"status_code": 201, "json": {"success": True, "order": order_json(), "sagaExecutionId": "s1"}},
    ])
    key = "7c9e6679-7425-40de-944b-e07fc1f90ae7"

    assert _load_script("place_order").main([order_file, "--key", key, "--retries", "1"]) == 0

    assert [r.json()["idempotencyKey"] for r in requests_mock.request_history] == [key, key]


def test_place_order_saga_failed(requests_mock, api_url, order_file, capsys):
    requests_mock.post(f"{api_url}/orders", status_code=400,
                       json={"success": False, "sagaExecutionId": "x", "errorMessage": "declined"})
    assert _load_script("place_order").main([order_file]) == 2
    assert "declined" in capsys.readouterr().out


def test_place_order_bad_key(requests_mock, order_file):
    assert _load_script("place_order").main([order_file, "--key", "nope"]) == 1
    assert not requests_mock.called


def test_list_orders(requests_mock, api_url, order_json, capsys):
    requests_mock.get(f"{api_url}/orders", json=[order_json()])
    assert _load_script("list_orders").main(["--status", "PAID"]) == 0
    out = capsys.readouterr().out
    assert "1 order(s)" in out
    assert "ORD-11111111" in out
