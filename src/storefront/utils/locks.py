"""Keyed in-process locks.

Stock and cart mutations are check-then-write sequences. Each writer holds
the lock for every key it touches across the whole unit of work, commit
included, so a competing writer always reads committed state.

A key's lock exists only while some thread holds or waits for it, so the
registry stays as small as the number of in-flight writers.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

import structlog

logger = structlog.get_logger(__name__)


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.RLock()
        self.users = 0


class KeyedLocks:
    def __init__(self, name: str):
        self.name = name
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _checkout(self, key: str) -> threading.RLock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            return entry.lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._entries[key]
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, keys: Iterable) -> Iterator[None]:
        """Hold the locks for ``keys``.

        Keys are de-duplicated and acquired in sorted order, so two writers
        asking for overlapping sets cannot deadlock.
        """
        ordered = sorted({str(key) for key in keys})
        checked_out = []
        acquired = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                checked_out.append(key)
                lock.acquire()
                acquired.append(lock)
            logger.debug("locks_acquired", registry=self.name, keys=ordered)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in checked_out:
                self._checkin(key)


stock_locks = KeyedLocks("stock")
cart_locks = KeyedLocks("cart")
