"""
Base service class for the leaderboard ranking core.

Provides bounded store access for the services that talk to the score and
profile stores: every call holds a slot from a shared limiter, is cut off
after a caller-supplied timeout, and has store failures mapped to
TransientStoreError. Retrying is left to the caller.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from leaderboard.utils.exceptions import TransientStoreError
from leaderboard.utils.metrics import MetricsRecorder, NullMetrics

logger = logging.getLogger(__name__)


class StoreCallLimiter:
    """Caps concurrent in-flight store calls at the connection pool capacity.

    Callers beyond capacity queue for at most ``acquire_timeout`` seconds, and
    at most ``max_waiting`` of them may queue at once. Anything beyond that is
    rejected with TransientStoreError instead of piling up.
    """

    def __init__(self, max_in_flight: int, acquire_timeout: float, max_waiting: Optional[int] = None):
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
        self.max_in_flight = max_in_flight
        self.acquire_timeout = acquire_timeout
        self.max_waiting = max_waiting
        self._semaphore = asyncio.Semaphore(max_in_flight)
        self._in_flight = 0
        self._waiting = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @asynccontextmanager
    async def slot(self, operation: str):
        if self._semaphore.locked():
            if self.max_waiting is not None and self._waiting >= self.max_waiting:
                raise TransientStoreError(operation, "store call queue is full")
        self._waiting += 1
        try:
            await asyncio.wait_for(self._semaphore.acquire(), self.acquire_timeout)
        except asyncio.TimeoutError:
            raise TransientStoreError(
                operation, f"no store connection free within {self.acquire_timeout}s"
            ) from None
        finally:
            self._waiting -= 1

        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1
            self._semaphore.release()


class BaseService:
    """Base class for services that call an external store."""

    def __init__(self, timeout: float, limiter: Optional[StoreCallLimiter] = None,
                 metrics: Optional[MetricsRecorder] = None):
        """
        Initialize base service.

        Args:
            timeout: Seconds a single store call may take before it fails
            limiter: Shared cap on in-flight store calls (optional)
            metrics: Sink for store error events (optional)
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self.limiter = limiter
        self.metrics = metrics or NullMetrics()

    async def call_store(self, operation: str, func: Callable[[], Awaitable[Any]]) -> Any:
        """Run one store round-trip under the limiter and timeout."""
        try:
            if self.limiter is None:
                return await asyncio.wait_for(func(), self.timeout)
            async with self.limiter.slot(operation):
                return await asyncio.wait_for(func(), self.timeout)
        except TransientStoreError as e:
            self._record_error(operation, e)
            raise
        except asyncio.TimeoutError:
            error = TransientStoreError(operation, f"timed out after {self.timeout}s")
            self._record_error(operation, error)
            raise error from None
        except (SQLAlchemyError, OSError) as e:
            error = TransientStoreError(operation, str(e) or e.__class__.__name__)
            self._record_error(operation, error)
            raise error from e

    def _record_error(self, operation: str, error: TransientStoreError):
        logger.warning(f"Store call {operation} failed: {error.details}")
        self.metrics.increment("store.error", operation=operation)
