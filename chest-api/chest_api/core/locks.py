"""
Per-chest mutual exclusion.

Sync handlers run in the FastAPI threadpool, so two requests touching the same
chest can interleave between "load entries" and "commit". Every read-modify-write
on a chest runs inside ``chest_locks.hold(chest_id)``; the ledger additionally
loads the chest row ``FOR UPDATE`` so writers in other processes serialize on
PostgreSQL as well.
"""
import threading
import uuid
from contextlib import contextmanager


class ChestLockRegistry:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[uuid.UUID, threading.Lock] = {}

    def _lock_for(self, chest_id: uuid.UUID) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(chest_id)
            if lock is None:
                lock = self._locks[chest_id] = threading.Lock()
            return lock

    def discard(self, chest_id: uuid.UUID) -> None:
        """Forget the lock of a chest that no longer exists (ids are never reused)."""
        with self._guard:
            self._locks.pop(chest_id, None)

    def __len__(self):
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, *chest_ids: uuid.UUID):
        """Acquire the locks of several chests in a stable order."""
        ordered = sorted(set(chest_ids), key=str)
        locks = [self._lock_for(cid) for cid in ordered]
        acquired = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


chest_locks = ChestLockRegistry()
