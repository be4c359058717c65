from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager
from typing import Hashable, Iterator


class KeyedLocks:
    """Per-key mutual exclusion for check-then-insert sequences.

    Only needed when the storage layer cannot enforce uniqueness itself.
    Keys are always acquired in sorted order so two callers holding
    overlapping key sets cannot deadlock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def _acquire_ref(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _release_ref(self, key: Hashable) -> None:
        with self._guard:
            remaining = self._users[key] - 1
            if remaining:
                self._users[key] = remaining
            else:
                del self._users[key]
                del self._locks[key]

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        ordered = sorted(set(keys), key=repr)
        with ExitStack() as stack:
            for key in ordered:
                lock = self._acquire_ref(key)
                stack.callback(self._release_ref, key)
                lock.acquire()
                stack.callback(lock.release)
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
