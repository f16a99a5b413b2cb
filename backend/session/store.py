import asyncio
from datetime import datetime, timedelta
from typing import Optional
from backend.session.models import SimulationSession, utc_now


class InMemorySessionStore:
    """Process-local sessions; a session idle for longer than the TTL is gone.

    Expiry is enforced on access: lookups treat an expired session as missing,
    and creating or listing sessions prunes every expired entry.
    """

    def __init__(self, ttl_hours: float = 24):
        self._sessions: dict[str, SimulationSession] = {}
        self._lock = asyncio.Lock()
        self._ttl = timedelta(hours=ttl_hours)

    def _is_expired(self, session: SimulationSession, now: datetime) -> bool:
        return now - session.updated_at > self._ttl

    def _prune(self, now: datetime) -> int:
        expired = [sid for sid, s in self._sessions.items() if self._is_expired(s, now)]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    async def create_session(self) -> SimulationSession:
        session = SimulationSession()
        async with self._lock:
            self._prune(session.created_at)
            self._sessions[session.id] = session
        return session

    async def get_session(self, session_id: str) -> Optional[SimulationSession]:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and self._is_expired(session, utc_now()):
                del self._sessions[session_id]
                return None
            return session

    async def update_session(self, session: SimulationSession) -> None:
        session.updated_at = utc_now()
        async with self._lock:
            self._sessions[session.id] = session

    async def delete_session(self, session_id: str) -> bool:
        async with self._lock:
            return self._sessions.pop(session_id, None) is not None

    async def list_sessions(self) -> list[SimulationSession]:
        async with self._lock:
            self._prune(utc_now())
            return list(self._sessions.values())

    async def cleanup_expired(self, now: Optional[datetime] = None) -> int:
        async with self._lock:
            return self._prune(now or utc_now())

    def __len__(self) -> int:
        return len(self._sessions)
