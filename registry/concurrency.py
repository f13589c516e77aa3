"""
NFT Registry - Call Serialization

The registry core runs every operation to completion without internal locks
and relies on its host to execute calls one at a time. This module provides
that host side: a wrapper that imposes a total order on calls arriving from
many threads and keeps simple lock metrics.
"""

import logging
import threading
import time
from collections import deque
from threading import Lock
from typing import Any, Dict, Optional

from .manager import NFTRegistry


class LockMetrics:
    """Lock performance metrics."""

    def __init__(self):
        self.acquisition_count = 0
        self.contention_count = 0
        self.total_wait_time = 0.0
        self.max_wait_time = 0.0
        self.lock_history = deque(maxlen=100)  # Last 100 lock events

    def record_acquisition(self, wait_time: float, contended: bool, operation: str) -> None:
        """Record lock acquisition metrics."""
        self.acquisition_count += 1
        self.total_wait_time += wait_time
        self.max_wait_time = max(self.max_wait_time, wait_time)

        if contended:
            self.contention_count += 1

        self.lock_history.append({
            'operation': operation,
            'wait_time': wait_time,
            'contended': contended,
            'thread_id': threading.get_ident()
        })

    def get_contention_ratio(self) -> float:
        """Get lock contention ratio."""
        if self.acquisition_count == 0:
            return 0.0
        return self.contention_count / self.acquisition_count

    def get_average_wait_time(self) -> float:
        """Get average wait time."""
        if self.acquisition_count == 0:
            return 0.0
        return self.total_wait_time / self.acquisition_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'acquisition_count': self.acquisition_count,
            'contention_count': self.contention_count,
            'contention_ratio': round(self.get_contention_ratio(), 4),
            'average_wait_time': self.get_average_wait_time(),
            'max_wait_time': self.max_wait_time,
        }


class SerializedRegistry:
    """
    Thread-safe front for an NFTRegistry.

    Every call, query or mutation, holds a single lock for its whole
    duration, so concurrent callers observe the registry as if calls had been
    submitted one after another. Notifications are delivered inside the lock
    and therefore keep the order of their mutations.
    """

    def __init__(self, registry: NFTRegistry, timeout: Optional[float] = None):
        self.registry = registry
        self.timeout = timeout
        self.metrics = LockMetrics()
        self.logger = logging.getLogger(__name__)
        self._lock = Lock()
        self._call_count = 0

    @property
    def call_count(self) -> int:
        """Number of calls executed so far, successful or not."""
        return self._call_count

    def execute(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        """
        Run a registry operation under the serialization lock.

        Properties such as total_supply may be named too; their value is
        read under the lock.

        Args:
            operation: Name of an NFTRegistry method or property
            *args, **kwargs: Passed to the method unchanged

        Raises:
            AttributeError: unknown operation
            TimeoutError: lock not acquired within the configured timeout
        """
        if operation.startswith('_') or not hasattr(type(self.registry), operation):
            raise AttributeError(f"Unknown registry operation: {operation}")

        start_time = time.perf_counter()
        contended = self._lock.locked()
        acquired = self._lock.acquire(timeout=-1 if self.timeout is None else self.timeout)
        if not acquired:
            self.logger.warning(f"Lock timeout for {operation} after {self.timeout}s")
            raise TimeoutError(f"Failed to acquire registry lock within {self.timeout} seconds")

        try:
            self.metrics.record_acquisition(time.perf_counter() - start_time, contended, operation)
            self._call_count += 1
            target = getattr(self.registry, operation)
            if callable(target):
                return target(*args, **kwargs)
            return target
        finally:
            self._lock.release()

    def __getattr__(self, operation: str) -> Any:
        # Route registry members through execute(), e.g. host.mint(...)
        if operation.startswith('_'):
            raise AttributeError(operation)

        member = getattr(type(self.registry), operation, None)
        if member is None:
            raise AttributeError(f"Unknown registry operation: {operation}")
        if isinstance(member, property):
            return self.execute(operation)

        def call(*args: Any, **kwargs: Any) -> Any:
            return self.execute(operation, *args, **kwargs)

        call.__name__ = operation
        return call
