"""
Session cache with per-user bulk invalidation.

    session:{token}          -> SessionRecord (JSON), sliding TTL
    user_sessions:{user_id}  -> [token, ...]

The token list is maintained by read-modify-write, not atomically:
concurrent logins for one user may drop a token from the list (the
session itself stays valid until it expires).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional

import structlog
from pydantic import ValidationError

from ecoscore.domain.cache.models import CachedUser, SessionRecord
from ecoscore.infrastructure.cache.cache_store import CacheStore

logger = structlog.get_logger(__name__)

SESSION_PREFIX = "session:"
USER_SESSIONS_PREFIX = "user_sessions:"

DEFAULT_SESSION_TTL_SECONDS = 86400


class SessionIndex:
    """
    Session records keyed by token.

    ``get_session`` slides the expiration: every successful read pushes
    ``expires_at`` and the key TTL forward by the full session TTL.

    Example:
        >>> sessions = SessionIndex(store)
        >>> await sessions.create_session("tok_1", user)
        True
        >>> await sessions.invalidate_user_sessions(user.id)
        1
    """

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self.ttl = ttl_seconds
        self._clock = clock

    @staticmethod
    def _session_key(token: str) -> str:
        return f"{SESSION_PREFIX}{token}"

    @staticmethod
    def _user_key(user_id: str) -> str:
        return f"{USER_SESSIONS_PREFIX}{user_id}"

    async def create_session(self, token: str, user: CachedUser) -> bool:
        now = self._clock()
        record = SessionRecord(
            user_id=user.id,
            user=user,
            is_active=True,
            last_access=now,
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl),
        )
        if not await self.store.set(self._session_key(token), record, self.ttl):
            return False

        await self._add_user_token(user.id, token)
        logger.info("Session created", user_id=user.id)
        return True

    async def _read(self, token: str) -> Optional[SessionRecord]:
        raw = await self.store.get(self._session_key(token))
        if raw is None:
            return None
        try:
            return SessionRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning("Corrupt session record", error=str(e))
            return None

    async def get_session(self, token: str) -> Optional[SessionRecord]:
        """Return the session and slide its expiration."""
        record = await self._read(token)
        if record is None:
            return None

        now = self._clock()
        refreshed = record.model_copy(
            update={"last_access": now, "expires_at": now + timedelta(seconds=self.ttl)}
        )
        await self.store.set(self._session_key(token), refreshed, self.ttl)
        return refreshed

    async def is_session_valid(self, token: str) -> bool:
        record = await self.get_session(token)
        return record is not None and record.is_active and record.expires_at > self._clock()

    async def invalidate_session(self, token: str) -> bool:
        """Delete one session and remove it from its user's list."""
        record = await self._read(token)
        if record is None:
            return False

        await self.store.delete(self._session_key(token))
        await self._remove_user_token(record.user_id, token)
        logger.info("Session invalidated", user_id=record.user_id)
        return True

    async def invalidate_user_sessions(self, user_id: str) -> int:
        """Delete every session of a user. Returns the number of tokens listed."""
        tokens = await self.get_user_tokens(user_id)
        for token in tokens:
            await self.store.delete(self._session_key(token))
        await self.store.delete(self._user_key(user_id))

        logger.info("User sessions invalidated", user_id=user_id, count=len(tokens))
        return len(tokens)

    async def update_user_in_sessions(self, user_id: str, partial_user: Mapping[str, Any]) -> int:
        """
        Merge ``partial_user`` into the user snapshot of every session.

        Each session keeps its remaining TTL; sessions at or past expiry are
        skipped. Returns the number updated.
        """
        updated = 0
        for token in await self.get_user_tokens(user_id):
            record = await self._read(token)
            if record is None:
                continue
            try:
                user = CachedUser.model_validate({**record.user.model_dump(), **partial_user})
            except ValidationError as e:
                logger.warning("Invalid user update", user_id=user_id, error=str(e))
                return updated

            remaining = await self.store.ttl(self._session_key(token))
            if remaining <= 0:
                # Expired or gone since the read; writing would revive it
                continue
            if await self.store.set(self._session_key(token), record.model_copy(update={"user": user}), remaining):
                updated += 1

        logger.info("User updated in sessions", user_id=user_id, count=updated)
        return updated

    async def get_user_tokens(self, user_id: str) -> list[str]:
        tokens = await self.store.get(self._user_key(user_id))
        if not isinstance(tokens, list):
            return []
        return [t for t in tokens if isinstance(t, str)]

    async def _add_user_token(self, user_id: str, token: str) -> None:
        tokens = await self.get_user_tokens(user_id)
        if token not in tokens:
            tokens.append(token)
            await self.store.set(self._user_key(user_id), tokens, self.ttl)

    async def _remove_user_token(self, user_id: str, token: str) -> None:
        tokens = [t for t in await self.get_user_tokens(user_id) if t != token]
        if tokens:
            await self.store.set(self._user_key(user_id), tokens, self.ttl)
        else:
            await self.store.delete(self._user_key(user_id))
