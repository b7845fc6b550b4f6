# order_workflow/services/idempotency.py

import re
import uuid
from typing import Any, Optional

from exceptions import InvalidIdempotencyKey
from logger import get_logger

log = get_logger("idempotency")

UUID_V4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def generate() -> str:
    # uuid4 draws its 122 random bits from os.urandom
    return str(uuid.uuid4())


def validate(key: Any) -> bool:
    return isinstance(key, str) and bool(UUID_V4_RE.match(key))


class IdempotencyKeyManager:
    """
    Holds the idempotency key for one order form session.

    Every retry of the same in-flight submission goes out with the same key;
    call new_attempt() when the user starts a new logical order.
    """

    def __init__(self, key: Optional[str] = None):
        self._key: Optional[str] = None
        if key is not None:
            self.override(key)

    @property
    def current(self) -> str:
        if self._key is None:
            self._key = generate()
            log.debug(f"Generated idempotency key {self._key}")
        return self._key

    def new_attempt(self) -> str:
        self._key = generate()
        log.debug(f"New submission attempt, idempotency key {self._key}")
        return self._key

    def override(self, key: str) -> str:
        key = (key or "").strip()
        if not validate(key):
            raise InvalidIdempotencyKey(key)
        self._key = key
        return self._key

    def key_for_submit(self) -> str:
        return self.current

    def attach(self, request):
        """Request carrying this session's key, unless the caller already set one."""
        if request.effective_idempotency_key():
            return request
        return request.with_idempotency_key(self.key_for_submit())
