"""
In-memory confirmation store.

Entries expire ``ttl_seconds`` after they were written; an expired entry is
reported as absent and removed on the next read of its key or the next
write to the store. Keys are the (user, conversation) pair so entries never
collide across users.
"""

import asyncio
import time
from typing import Callable, Dict, Generic, Optional, Tuple

from loguru import logger

from contractdesk.dbs.interfaces.confirmation_store import AbstractConfirmationStore, EntryT


class MemoryConfirmationAdapter(AbstractConfirmationStore[EntryT], Generic[EntryT]):
    def __init__(self, ttl_seconds: float = 600, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[Tuple[str, str], Tuple[float, EntryT]] = {}
        self._lock = asyncio.Lock()

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired pending entries")

    async def put(self, user_id: str, conversation_id: str, entry: EntryT) -> None:
        async with self._lock:
            now = self.clock()
            self._purge_expired(now)
            self._entries[(user_id, conversation_id)] = (now + self.ttl_seconds, entry)
        logger.debug(f"Stored pending entry for user={user_id} conversation={conversation_id}")

    async def get(self, user_id: str, conversation_id: str) -> Optional[EntryT]:
        key = (user_id, conversation_id)
        async with self._lock:
            stored = self._entries.get(key)
            if stored is None:
                return None
            expires_at, entry = stored
            if self.clock() >= expires_at:
                del self._entries[key]
                logger.info(f"Pending entry for user={user_id} conversation={conversation_id} expired")
                return None
            return entry

    async def discard(self, user_id: str, conversation_id: str) -> bool:
        async with self._lock:
            return self._entries.pop((user_id, conversation_id), None) is not None

    def __len__(self) -> int:
        return len(self._entries)
