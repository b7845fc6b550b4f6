# order_workflow/store.py

import asyncio
from typing import List, Optional

from exceptions import ApiError, SAGA_IN_PROGRESS_LABEL
from logger import get_logger
from models import (
    Completed,
    CreateOrderRequest,
    Failed,
    InProgress,
    LoadingState,
    Order,
    OrderStatus,
    WorkflowOutcome,
    WorkflowState,
)
from services import order_gateway
from services.error_normalizer import normalize_error
from services.order_gateway import MSG_SAGA_FAILED

log = get_logger("store")

MSG_IN_PROGRESS = "Order creation is already in progress. Check back shortly."


def _replace_by_id(orders: List[Order], order: Order) -> List[Order]:
    return [order if o.id == order.id else o for o in orders]


def _upsert_front(orders: List[Order], order: Order) -> List[Order]:
    return [order] + [o for o in orders if o.id != order.id]


class OrderStore:
    """
    The single owner of order workflow state.

    State is only mutated by the actions below, always on the event loop
    thread after the gateway call returns; the blocking HTTP call itself runs
    in a worker thread. Overlapping actions are not serialized: the last one to
    finish wins.
    """

    def __init__(self):
        self.state = WorkflowState()

    # ---------------- internals ----------------

    def _set(self, **changes) -> None:
        for k, v in changes.items():
            setattr(self.state, k, v)

    def _begin(self, **changes) -> None:
        self._set(loading=LoadingState.LOADING, error=None, validation_errors=None, **changes)

    def _fail(self, exc: BaseException, *, keep_loading: bool = False, **changes) -> ApiError:
        err = normalize_error(exc)
        log.warning(f"Action failed: {err.kind.value} status={err.status} message={err.message} path={err.path}")
        if err.details:
            log.debug(f"Validation details: {err.details}")
        if not keep_loading:
            changes["loading"] = LoadingState.ERROR
        self._set(error=err, validation_errors=dict(err.details) if err.details else None, **changes)
        return err

    def _apply_order_update(self, order: Order) -> None:
        st = self.state
        failed = _replace_by_id(st.failed_payment_orders, order)
        if order.status != OrderStatus.PAYMENT_FAILED:
            failed = [o for o in failed if o.id != order.id]
        self._set(
            orders=_replace_by_id(st.orders, order),
            current_order=order if st.current_order and st.current_order.id == order.id else st.current_order,
            failed_payment_orders=failed,
        )

    # ---------------- actions ----------------

    async def fetch_orders(self, status: Optional[OrderStatus] = None) -> None:
        self._begin()
        try:
            orders = await asyncio.to_thread(order_gateway.list_orders, status)
        except Exception as e:
            self._fail(e)
            return
        self._set(orders=orders, loading=LoadingState.SUCCESS, error=None)

    async def fetch_order_by_id(self, order_id: str) -> None:
        self._begin(current_order=None)
        try:
            order = await asyncio.to_thread(order_gateway.get_order_by_id, order_id)
        except Exception as e:
            self._fail(e, current_order=None)
            return
        self._set(current_order=order, loading=LoadingState.SUCCESS, error=None)

    async def fetch_failed_payment_orders(self) -> None:
        self._begin()
        try:
            orders = await asyncio.to_thread(order_gateway.list_orders, OrderStatus.PAYMENT_FAILED)
        except Exception as e:
            self._fail(e)
            return
        self._set(failed_payment_orders=orders, loading=LoadingState.SUCCESS, error=None)

    async def create_order(self, request: CreateOrderRequest) -> WorkflowOutcome:
        """
        Submit an order and settle state from the saga outcome.

        Failures that never produced an outcome (validation, transport, server)
        leave the store in ``error`` and are raised again as ApiError.
        """
        self._begin()
        try:
            outcome = await asyncio.to_thread(order_gateway.create_order, request)
        except Exception as e:
            err = self._fail(e)
            if err is e:
                raise
            raise err from e

        if isinstance(outcome, Completed):
            self._set(
                orders=_upsert_front(self.state.orders, outcome.order),
                current_order=outcome.order,
                loading=LoadingState.SUCCESS,
                error=None,
            )
            log.info(f"Order {outcome.order.order_number} completed (saga {outcome.saga_execution_id})")

        elif isinstance(outcome, InProgress):
            # not a failure: the error slot carries a 202 so callers can show the pending branch
            self._set(
                loading=LoadingState.SUCCESS,
                error=ApiError(
                    outcome.message or MSG_IN_PROGRESS,
                    status=202,
                    error=SAGA_IN_PROGRESS_LABEL,
                    path="/orders",
                ),
            )
            log.info(f"Order saga {outcome.saga_execution_id} still in progress")

        elif isinstance(outcome, Failed):
            changes = {}
            if outcome.order is not None:
                changes["failed_payment_orders"] = _upsert_front(self.state.failed_payment_orders, outcome.order)
            self._set(
                loading=LoadingState.ERROR,
                error=ApiError(
                    outcome.reason or MSG_SAGA_FAILED,
                    status=400,
                    error="SAGA_FAILED",
                    is_business_error=True,
                    path="/orders",
                ),
                **changes,
            )
            log.warning(f"Order saga {outcome.saga_execution_id} failed: {outcome.reason}")

        return outcome

    async def refresh_payment_status(self, order_id: str) -> Optional[Order]:
        try:
            order = await asyncio.to_thread(order_gateway.refresh_payment_status, order_id)
        except Exception as e:
            self._fail(e, keep_loading=True)
            return None
        self._apply_order_update(order)
        return order

    async def analyze_risk(self, order_id: str) -> Optional[Order]:
        try:
            order = await asyncio.to_thread(order_gateway.analyze_risk, order_id)
        except Exception as e:
            self._fail(e, keep_loading=True)
            return None
        self._apply_order_update(order)
        return order

    def clear_error(self) -> None:
        self._set(error=None, validation_errors=None)

    def clear_current_order(self) -> None:
        self._set(current_order=None)

    def reset(self) -> None:
        self.state = WorkflowState()


_store: Optional[OrderStore] = None


def get_store() -> OrderStore:
    global _store
    if _store is None:
        _store = OrderStore()
    return _store


def reset_store() -> OrderStore:
    global _store
    _store = OrderStore()
    return _store
