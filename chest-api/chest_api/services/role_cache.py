"""
Process-scoped cache of Discord role checks.

Lifecycle: put() after every successful provider call, get() on every role
check, expire() from the scheduler (core/scheduler.py) to drop entries older
than the stale window, evict() on logout.
"""
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from chest_api.core.config import settings


@dataclass
class RoleEntry:
    roles: list[str]
    has_required_role: bool
    username: str
    checked_at: float = field(default=0.0)


class RoleCache:
    def __init__(
        self,
        ttl_seconds: float = settings.ROLE_CACHE_TTL_SECONDS,
        stale_seconds: float = settings.ROLE_CACHE_STALE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.stale_seconds = stale_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, RoleEntry] = {}

    def get(self, user_id: str) -> Optional[RoleEntry]:
        with self._lock:
            return self._entries.get(user_id)

    def put(self, user_id: str, entry: RoleEntry) -> RoleEntry:
        entry.checked_at = self.clock()
        with self._lock:
            self._entries[user_id] = entry
        return entry

    def evict(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def age(self, entry: RoleEntry) -> float:
        return self.clock() - entry.checked_at

    def is_fresh(self, entry: RoleEntry) -> bool:
        return self.age(entry) < self.ttl_seconds

    def is_usable(self, entry: RoleEntry) -> bool:
        """Stale but still acceptable when the provider is down."""
        return self.age(entry) < self.stale_seconds

    def expire(self) -> int:
        now = self.clock()
        with self._lock:
            expired = [uid for uid, e in self._entries.items() if now - e.checked_at >= self.stale_seconds]
            for uid in expired:
                del self._entries[uid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


role_cache = RoleCache()
