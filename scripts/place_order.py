# order_workflow/scripts/place_order.py
#
# Usage: python scripts/place_order.py order.json [--key <uuid-v4>] [--retries N]

import os, sys
import argparse
import asyncio
import json

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from exceptions import ApiError
from models import CreateOrderRequest, Completed, InProgress, Failed
from services.error_normalizer import describe_error
from services.idempotency import IdempotencyKeyManager
from store import get_store


async def submit(request: CreateOrderRequest, keys: IdempotencyKeyManager, retries: int) -> int:
    store = get_store()
    request = keys.attach(request)
    print(f"Submitting order, idempotency key {request.idempotency_key}")

    for attempt in range(retries + 1):
        try:
            outcome = await store.create_order(request)
        except ApiError as err:
            p = describe_error(err)
            print(f"❌ {p.title}: {p.message}")
            for field_key, msg in (store.state.validation_errors or {}).items():
                print(f"   - {field_key}: {msg}")
            if p.action == "retry" and attempt < retries:
                # same request object, same key: the backend dedupes it
                print(f"Retrying ({attempt + 1}/{retries}) with the same key...")
                continue
            return 1

        if isinstance(outcome, Completed):
            o = outcome.order
            print(f"✅ Order {o.order_number} {o.status.value} total={o.total_amount} saga={outcome.saga_execution_id}")
            return 0
        if isinstance(outcome, InProgress):
            print(f"⏳ Saga {outcome.saga_execution_id} still running: {store.state.error.message}")
            return 0
        if isinstance(outcome, Failed):
            print(f"⚠️ Saga {outcome.saga_execution_id} failed after acceptance: {outcome.reason}")
            return 2
    return 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Place an order through the order workflow API")
    parser.add_argument("order_file", help="JSON file with a CreateOrderRequest body")
    parser.add_argument("--key", help="idempotency key to reuse (UUID v4)")
    parser.add_argument("--retries", type=int, default=0, help="manual retries on server/transport errors")
    args = parser.parse_args(argv)

    with open(args.order_file, "r", encoding="utf-8") as f:
        request = CreateOrderRequest.from_dict(json.load(f))

    try:
        keys = IdempotencyKeyManager(args.key or request.effective_idempotency_key())
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    return asyncio.run(submit(request, keys, max(args.retries, 0)))


if __name__ == "__main__":
    sys.exit(main())
