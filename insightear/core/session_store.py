"""
In-memory chat session store. Keyed by session key (X-Session-ID header or client address).

Sessions are memory-resident and expire: a periodic sweep removes every session
older than SESSION_TTL_SECONDS, counted from creation and not from last activity.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from insightear.core.config import SESSION_SWEEP_INTERVAL_SECONDS, SESSION_TTL_SECONDS

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Conversation state for one client."""

    session_id: str
    thread_id: str | None = None
    last_query: str | None = None
    last_response: str | None = None
    created_at: float = field(default_factory=time.time)
    uploaded_files: list[dict[str, Any]] = field(default_factory=list)
    # Serializes thread creation so overlapping turns share one thread
    thread_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def has_report(self) -> bool:
        """True when a research turn completed and its answer can be turned into a report."""
        return bool(self.last_query) and bool(self.last_response)


class SessionStore:
    """Lock-guarded map of session key -> Session."""

    def __init__(self, ttl: float = SESSION_TTL_SECONDS) -> None:
        self.ttl = ttl
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get(self, session_id: str) -> Session | None:
        """Return the session if it exists; never creates one."""
        with self._lock:
            return self._sessions.get(session_id)

    def get_or_create(self, session_id: str, now: float | None = None) -> Session:
        """Return the session for session_id, creating an empty one on first contact."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = Session(session_id=session_id, created_at=now if now is not None else time.time())
                self._sessions[session_id] = session
                created = True
            else:
                created = False
        if created:
            logger.info("[session_store:get_or_create] created session_id=%s", session_id[:16])
        return session

    def sweep(self, now: float | None = None, ttl: float | None = None) -> int:
        """Remove sessions created before now - ttl. Returns the number removed."""
        now = now if now is not None else time.time()
        ttl = ttl if ttl is not None else self.ttl
        cutoff = now - ttl
        with self._lock:
            expired = [key for key, s in self._sessions.items() if s.created_at < cutoff]
            for key in expired:
                del self._sessions[key]
            remaining = len(self._sessions)
        if expired:
            logger.info("[session_store:sweep] removed=%d remaining=%d", len(expired), remaining)
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


async def run_sweeper(
    store: "SessionStore",
    interval: float = SESSION_SWEEP_INTERVAL_SECONDS,
    ttl: float | None = None,
) -> None:
    """Sweep expired sessions every `interval` seconds until cancelled."""
    logger.info("[session_store:run_sweeper] START interval=%.0fs ttl=%.0fs", interval, ttl or store.ttl)
    while True:
        await asyncio.sleep(interval)
        store.sweep(ttl=ttl)


# Process-wide store shared by all request handlers
session_store = SessionStore()
