"""
In-memory storage for per-attempt tracking sessions.
Data is lost on server restart (by design - no persistent storage).
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional

from ...platform.config import settings
from .models import TrackingSession

logger = logging.getLogger(__name__)


class TrackerRegistry:
    """Thread-safe store of tracking sessions keyed by attempt id."""

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        session_factory: Callable[[], TrackingSession] = TrackingSession,
    ):
        self._sessions: Dict[str, TrackingSession] = {}
        self._touched: Dict[str, float] = {}
        self._lock = threading.RLock()
        self._ttl_seconds = ttl_seconds
        self._session_factory = session_factory

    @property
    def ttl_seconds(self) -> int:
        if self._ttl_seconds is not None:
            return self._ttl_seconds
        return settings.INTEGRITY_SESSION_TTL_SECONDS

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, attempt_id: str) -> Optional[TrackingSession]:
        with self._lock:
            session = self._sessions.get(attempt_id)
            if session is not None:
                self._touched[attempt_id] = time.time()
            return session

    def get_or_create(self, attempt_id: str) -> TrackingSession:
        with self._lock:
            session = self._sessions.get(attempt_id)
            if session is None:
                session = self._session_factory()
                self._sessions[attempt_id] = session
                logger.info("Created tracking session", extra={"attempt_id": attempt_id})
            self._touched[attempt_id] = time.time()
            return session

    @contextmanager
    def locked(self, attempt_id: str, create: bool = False) -> Iterator[Optional[TrackingSession]]:
        """Yield the session for ``attempt_id`` while holding the registry lock."""
        with self._lock:
            session = self.get_or_create(attempt_id) if create else self.get(attempt_id)
            yield session

    def discard(self, attempt_id: str) -> bool:
        with self._lock:
            self._touched.pop(attempt_id, None)
            return self._sessions.pop(attempt_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._touched.clear()

    def cleanup_expired(self) -> int:
        """Remove sessions idle for longer than the TTL. Returns the number removed."""
        cutoff = time.time() - self.ttl_seconds
        with self._lock:
            expired = [key for key, ts in self._touched.items() if ts < cutoff]
            for key in expired:
                del self._sessions[key]
                del self._touched[key]
        if expired:
            logger.info("Evicted %d idle tracking sessions", len(expired))
        return len(expired)


# Global instance
tracker_registry = TrackerRegistry()
