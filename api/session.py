"""In-memory session management with signed session tokens."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from config import config

logger = logging.getLogger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the signer with a secret key."""
        self._secret_key = secret_key or config.security.secret_key
        self._serializer = URLSafeTimedSerializer(self._secret_key, salt="table-session")

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract session_id from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID if valid, None otherwise
        """
        max_age = max_age or config.session_ttl
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired):
            logger.debug("Rejected session token")
            return None


# Global signer instance
_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class SessionStore(ABC):
    """Where live game sessions are kept between requests."""

    @abstractmethod
    async def get(self, session_id: str) -> dict[str, Any] | None:
        """Get session data, or None if unknown or expired."""
        ...

    @abstractmethod
    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        """Store session data, restarting its TTL."""
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Forget a session."""
        ...

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """Drop every expired session and return how many went."""
        ...

    def new_token(self) -> str:
        """Create a signed token for a fresh session."""
        return get_session_signer().sign(str(uuid4()))


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    Values are kept as live objects, so a session can hold its game engine
    directly. Nothing survives a restart.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, tuple[dict[str, Any], datetime]] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None

        data, expiry = entry
        if expiry < datetime.now():
            await self.delete(session_id)
            return None
        return data

    async def set(
        self,
        session_id: str,
        data: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        expiry = datetime.now() + timedelta(seconds=ttl or config.session_ttl)
        self._sessions[session_id] = (data, expiry)

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def cleanup_expired(self) -> int:
        now = datetime.now()
        expired = [sid for sid, (_, expiry) in self._sessions.items() if expiry < now]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Expired %d sessions", len(expired))
        return len(expired)


# Global session store instance
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get or create the session store."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore()
    return _session_store


async def create_session(data: dict[str, Any] | None = None) -> str:
    """
    Create a new session and return its signed token.

    Abandoned sessions are pruned here, so the store never grows past the
    sessions opened within one TTL.
    """
    store = get_session_store()
    await store.cleanup_expired()
    session_id = store.new_token()
    await store.set(session_id, data or {})
    return session_id


async def get_session(session_id: str) -> dict[str, Any] | None:
    """Get session data."""
    return await get_session_store().get(session_id)


async def update_session(session_id: str, data: dict[str, Any]) -> None:
    """Store session data again, restarting its TTL."""
    await get_session_store().set(session_id, data)


def extract_session_id(token: str) -> str | None:
    """Return the raw session ID inside a signed token, or None if forged or expired."""
    return get_session_signer().unsign(token)
