"""
Binding plan cache.

A binding plan maps each result column position to the record field it
binds to (or to nothing). Plans depend only on the record type and the
column names of the result set, so they are built on the first row and
reused for every later row of the same shape.
"""
import logging
import threading
from collections.abc import Callable, Hashable
from typing import TypeVar

import cachetools

logger = logging.getLogger(__name__)

T = TypeVar('T')


class PlanCache:
    """Thread-safe LRU cache of binding plans.
    """

    def __init__(self, maxsize: int = 128) -> None:
        self._cache: cachetools.LRUCache = cachetools.LRUCache(maxsize=maxsize)
        self._lock = threading.RLock()

    def get_or_build(self, key: Hashable, builder: Callable[[], T]) -> T:
        """Cached plan for `key`, built with `builder()` on a miss.
        """
        with self._lock:
            try:
                return self._cache[key]
            except KeyError:
                pass
            plan = builder()
            self._cache[key] = plan
            logger.debug(f'Built binding plan for {key[0] if isinstance(key, tuple) else key!r}')
            return plan

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

