import asyncio
from typing import Optional

from exceptions import ApiError
from logger import get_logger
from models import Order
from services import order_gateway
from services.error_normalizer import normalize_error

log = get_logger("order_search")

MSG_BLANK = "Enter an order number"
MSG_NOT_FOUND = "Order not found"
MSG_SEARCH_FAILED = "Error searching for order"


class OrderSearch:
    """Lookup by human order number; kept apart from the store so a search never clobbers the list."""

    def __init__(self):
        self.result: Optional[Order] = None
        self.searching: bool = False
        self.error: Optional[str] = None
        self.api_error: Optional[ApiError] = None

    async def search_by_number(self, order_number: str) -> Optional[Order]:
        number = (order_number or "").strip()
        if not number:
            self.result = None
            self.api_error = None
            self.error = MSG_BLANK
            return None

        self.searching = True
        self.error = None
        self.api_error = None
        self.result = None
        try:
            self.result = await asyncio.to_thread(order_gateway.get_order_by_number, number)
        except Exception as e:
            err = normalize_error(e)
            self.api_error = err
            self.error = MSG_NOT_FOUND if err.status == 404 else (err.message or MSG_SEARCH_FAILED)
            log.info(f"Search for order {number} failed: {self.error}")
        finally:
            self.searching = False
        return self.result

    def clear(self) -> None:
        self.result = None
        self.error = None
        self.api_error = None
