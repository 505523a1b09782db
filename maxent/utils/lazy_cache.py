#!filepath: maxent/utils/lazy_cache.py
from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Dict, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LazyCache(Generic[K, V]):
    """
    LazyCache (FINAL)

    Thread-safe per-key lazy map.

    Contract:
    - loader(key) runs at most once per key
    - concurrent requesters of an in-flight key block on the same Future
    - a failed load is NOT cached; the exception reaches every waiter
      and the next request retries
    """

    def __init__(self, loader: Callable[[K], V]):
        self._loader = loader
        self._lock = threading.Lock()
        self._entries: Dict[K, Future] = {}

    def get(self, key: K) -> V:
        with self._lock:
            fut = self._entries.get(key)
            owner = fut is None
            if owner:
                fut = Future()
                self._entries[key] = fut

        if owner:
            try:
                fut.set_result(self._loader(key))
            except BaseException as e:
                with self._lock:
                    self._entries.pop(key, None)
                fut.set_exception(e)
                raise

        return fut.result()

    def __contains__(self, key: K) -> bool:
        with self._lock:
            fut = self._entries.get(key)
        return fut is not None and fut.done() and fut.exception() is None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
