# order_workflow/scripts/list_orders.py

import os, sys
import argparse
import asyncio

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from models import LoadingState, OrderStatus
from store import get_store


async def run(status, failed_only: bool, refresh: bool) -> int:
    store = get_store()

    if failed_only:
        await store.fetch_failed_payment_orders()
        orders = store.state.failed_payment_orders
    else:
        await store.fetch_orders(status)
        orders = store.state.orders

    if store.state.loading == LoadingState.ERROR:
        print(f"❌ {store.state.error.message}")
        return 1

    if refresh:
        for o in list(orders):
            await store.refresh_payment_status(o.id)
        orders = store.state.failed_payment_orders if failed_only else store.state.orders

    print(f"{len(orders)} order(s)")
    for o in orders:
        risk = o.risk_level.value if o.risk_level else "-"
        print(f"{o.order_number:<20} {o.status.value:<15} {o.total_amount:>12} risk={risk:<8} {o.customer_email}")

    if store.state.error:
        print(f"⚠️ {store.state.error.message}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="List orders from the order workflow API")
    parser.add_argument("--status", choices=[s.value for s in OrderStatus])
    parser.add_argument("--failed-payments", action="store_true", help="only PAYMENT_FAILED orders")
    parser.add_argument("--refresh", action="store_true", help="refresh payment status of each listed order")
    args = parser.parse_args(argv)

    status = OrderStatus(args.status) if args.status else None
    return asyncio.run(run(status, args.failed_payments, args.refresh))


if __name__ == "__main__":
    sys.exit(main())
