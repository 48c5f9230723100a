"""Last-write-wins holder for the currently displayed dataset.

A page may request data for one landing site and, before that load returns,
request another. Each request takes a token; only the result of the most
recent request is applied, so a slow, stale load never overwrites a newer one.
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Executor, Future
from typing import Any, Callable, Generic, Hashable, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class LatestResultSlot(Generic[T]):
    """Holds the result of the most recent load request.

    Usage::

        token = slot.begin("palma")
        data = load(...)
        slot.resolve(token, data)   # ignored if a newer begin() happened

    or, with the load running on an executor::

        slot.submit(pool, "palma", load, "palma")
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self._latest_token = 0
        self._latest_key: Hashable | None = None
        self._value: T | None = None
        self._value_key: Hashable | None = None
        self._error: str | None = None

    def begin(self, key: Hashable) -> int:
        """Register a new request for `key` and return its token."""
        with self._lock:
            token = next(self._counter)
            self._latest_token = token
            self._latest_key = key
            self._error = None
            return token

    def submit(
        self,
        executor: Executor,
        key: Hashable,
        fn: Callable[..., T],
        *args: Any,
    ) -> tuple[int, Future]:
        """Start loading `key` on `executor` and settle the slot when it finishes.

        Returns:
            The request token and the future running `fn(*args)`.
        """
        token = self.begin(key)
        future = executor.submit(fn, *args)
        future.add_done_callback(lambda f: self._settle(token, f))
        return token, future

    def _settle(self, token: int, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            self.resolve(token, future.result())
        else:
            log.warning("Load for token %d failed: %s", token, exc)
            self.fail(token, str(exc))

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest_token

    def resolve(self, token: int, value: T) -> bool:
        """Apply `value` if `token` is the latest request.

        Returns:
            True when the value was applied, False when it was superseded.
        """
        with self._lock:
            if token != self._latest_token:
                log.debug("Dropping superseded result (token %d, latest %d)", token, self._latest_token)
                return False
            self._value = value
            self._value_key = self._latest_key
            self._error = None
            return True

    def fail(self, token: int, message: str) -> bool:
        """Record a load error for `token` if it is still the latest request."""
        with self._lock:
            if token != self._latest_token:
                return False
            self._error = message
            return True

    @property
    def value(self) -> T | None:
        with self._lock:
            return self._value

    @property
    def key(self) -> Hashable | None:
        """Key the current value was loaded for."""
        with self._lock:
            return self._value_key

    @property
    def error(self) -> str | None:
        with self._lock:
            return self._error
