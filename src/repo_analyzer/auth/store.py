"""Storage for in-flight CSRF state tokens.

Two implementations of the same protocol:

- ``InMemoryAuthSessionStore`` keeps states in a process-local dict guarded by
  an ``asyncio.Lock``. Suitable for a single instance.
- ``RedisAuthSessionStore`` keeps them in Redis under ``oauth_state:<token>``
  with a TTL, so several instances can share login attempts. Single use is
  enforced with ``GETDEL``.

Both return the state as it was *before* consumption from ``consume`` so the
caller can tell unknown, replayed and expired tokens apart.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Any, Final, Protocol, runtime_checkable

import orjson

from repo_analyzer.auth.models import CsrfState, utcnow
from repo_analyzer.observability.logging import get_logger, redact


if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)


@runtime_checkable
class AuthSessionStore(Protocol):
    """Table of CSRF states keyed by their own token."""

    ttl_seconds: int

    async def put(self, state: CsrfState) -> None:
        """Insert a new state."""
        ...

    async def get(self, token: str) -> CsrfState | None:
        """Look up a state without changing it."""
        ...

    async def consume(self, token: str) -> CsrfState | None:
        """Atomically invalidate a state and return it as it was before.

        Returns None for unknown tokens.
        """
        ...

    async def sweep(self, now: datetime | None = None) -> int:
        """Drop expired states and return how many were removed."""
        ...


class InMemoryAuthSessionStore:
    """Process-local state table."""

    def __init__(self, ttl_seconds: int = 600) -> None:
        self.ttl_seconds = ttl_seconds
        self._states: dict[str, CsrfState] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._states)

    async def put(self, state: CsrfState) -> None:
        async with self._lock:
            self._states[state.token] = state

    async def get(self, token: str) -> CsrfState | None:
        return self._states.get(token)

    async def consume(self, token: str) -> CsrfState | None:
        async with self._lock:
            state = self._states.get(token)
            if state is None:
                return None
            # Kept until expiry so a replay is reported as consumed
            self._states[token] = state.mark_consumed()
            return state

    async def sweep(self, now: datetime | None = None) -> int:
        now = now or utcnow()
        async with self._lock:
            expired = [
                token
                for token, state in self._states.items()
                if state.is_expired(self.ttl_seconds, now)
            ]
            for token in expired:
                del self._states[token]

        if expired:
            logger.debug("Swept expired OAuth states", count=len(expired))
        return len(expired)


class RedisAuthSessionStore:
    """State table shared through Redis.

    Redis key TTLs do the sweeping; ``sweep`` is a no-op kept for the
    protocol.
    """

    KEY_PREFIX: Final[str] = "oauth_state"

    def __init__(self, redis_client: Redis[Any], ttl_seconds: int = 600) -> None:
        self._redis = redis_client
        self.ttl_seconds = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}:{token}"

    @staticmethod
    def _dump(state: CsrfState) -> bytes:
        return orjson.dumps(
            {
                "token": state.token,
                "created_at": state.created_at.isoformat(),
                "consumed": state.consumed,
            }
        )

    @staticmethod
    def _load(raw: str | bytes) -> CsrfState:
        data = orjson.loads(raw)
        return CsrfState(
            token=data["token"],
            created_at=datetime.fromisoformat(data["created_at"]),
            consumed=bool(data.get("consumed", False)),
        )

    async def put(self, state: CsrfState) -> None:
        await self._redis.set(self._key(state.token), self._dump(state), ex=self.ttl_seconds)
        logger.debug(
            "OAuth state stored",
            state=redact(state.token),
            ttl_seconds=self.ttl_seconds,
        )

    async def get(self, token: str) -> CsrfState | None:
        raw = await self._redis.get(self._key(token))
        return self._load(raw) if raw else None

    async def consume(self, token: str) -> CsrfState | None:
        raw = await self._redis.getdel(self._key(token))
        if not raw:
            return None
        return self._load(raw)

    async def sweep(self, now: datetime | None = None) -> int:
        return 0
