"""
Lazily built, lock-guarded derived state.

A ``CachedValue`` holds either nothing or one built value. The first reader
after an invalidation builds the value while holding the lock; concurrent
readers block on the lock and then reuse the built value, so no reader ever
sees a half-built object.
"""

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class CachedValue(Generic[T]):
    """Single-writer get-or-build cache cell."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._is_built = False
        self.build_count = 0

    def get_or_build(self, builder: Callable[[], T]) -> T:
        """Return the cached value, building it first if absent."""
        with self._lock:
            if not self._is_built:
                self._value = builder()
                self._is_built = True
                self.build_count += 1
            return self._value

    def invalidate(self) -> None:
        """Drop the cached value; the next reader rebuilds it."""
        with self._lock:
            self._value = None
            self._is_built = False

    @property
    def is_built(self) -> bool:
        return self._is_built


__all__ = ["CachedValue"]
