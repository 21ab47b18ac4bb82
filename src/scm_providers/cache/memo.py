"""
In-memory memoization of provider results.

Each provider instance owns one ``Memoizer``. A key is computed at most once
for the memoizer's lifetime: concurrent callers asking for the same key wait
for the first caller and then receive the very same object. A failed
computation stores nothing, so the next caller starts over.
"""
import functools
import threading
from typing import Any, Callable, Dict, Hashable, TypeVar

from scm_providers.utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING = object()


class Memoizer:
    """Thread-safe compute-once cache keyed by arbitrary hashable keys."""

    def __init__(self):
        self._values: Dict[Hashable, Any] = {}
        self._key_locks: Dict[Hashable, threading.Lock] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        """
        Return the cached value for ``key``, computing it on first use.

        Args:
            key: Cache key
            compute: Zero-argument callable producing the value

        Returns:
            The stored value; identical object for every caller

        Raises:
            Whatever ``compute`` raises. The key stays empty in that case.
        """
        # Populated entries are never replaced, so reading without the lock is safe
        value = self._values.get(key, _MISSING)
        if value is not _MISSING:
            self._record(hit=True)
            return value

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            value = self._values.get(key, _MISSING)
            if value is not _MISSING:
                self._record(hit=True)
                return value

            logger.debug(f"Cache miss for {key!r}, computing")
            self._record(hit=False)
            value = compute()

            with self._lock:
                self._values[key] = value
                # Later callers take the fast path
                self._key_locks.pop(key, None)

            return value

    def contains(self, key: Hashable) -> bool:
        """Check whether ``key`` has been populated."""
        return key in self._values

    def stats(self) -> Dict[str, int]:
        """
        Get cache statistics.

        Returns:
            Dictionary with entry, hit and miss counts
        """
        with self._lock:
            return {
                'entries': len(self._values),
                'hits': self._hits,
                'misses': self._misses,
            }

    def _record(self, hit: bool) -> None:
        with self._lock:
            if hit:
                self._hits += 1
            else:
                self._misses += 1

    def __len__(self) -> int:
        return len(self._values)


def memoized(method):
    """
    Memoize an instance method in the instance's ``_memo`` Memoizer.

    The key is the method name plus its arguments, so each provider
    instance keeps its own results.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        key = (method.__name__, args, tuple(sorted(kwargs.items())))
        return self._memo.get_or_compute(key, lambda: method(self, *args, **kwargs))

    return wrapper
