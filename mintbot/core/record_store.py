"""
Record Store

Key-value storage for per-participant NFT records with expiry, plus the
per-key lock registry used to serialize read-modify-write of one record.

Two backends are provided:
- InMemoryRecordStore: process-local dict, suitable for a single agent process
- SqliteRecordStore: aiosqlite-backed table that survives restarts
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Optional, Tuple

import aiosqlite

from ..exceptions import CacheAccessError
from .records import StoredRecord, stored_record_adapter

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Abstract key-value store for NftRecord / MintResult values."""

    @abstractmethod
    async def get(self, key: str) -> Optional[StoredRecord]:
        """Return the live record stored at key, or None if absent or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, record: StoredRecord, expires_at: float) -> None:
        """Store record at key until the epoch time expires_at."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass


class InMemoryRecordStore(RecordStore):
    """Process-local record store. Expired entries are dropped on read and on every write."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[StoredRecord, float]] = {}

    async def get(self, key: str) -> Optional[StoredRecord]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        record, expires_at = entry
        if expires_at <= self._clock():
            logger.debug(f"InMemoryRecordStore: Entry for {key} expired")
            del self._entries[key]
            return None
        return record.model_copy()

    async def set(self, key: str, record: StoredRecord, expires_at: float) -> None:
        self._purge_expired()
        self._entries[key] = (record.model_copy(), expires_at)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"InMemoryRecordStore: Purged {len(expired)} expired entries")

    def __len__(self) -> int:
        return len(self._entries)


class SqliteRecordStore(RecordStore):
    """SQLite-backed record store. Records are kept as JSON text."""

    def __init__(self, db_path: str, clock: Callable[[], float] = time.time):
        self.db_path = db_path
        self._clock = clock
        self._initialized = False

    async def initialize(self) -> None:
        """Create the records table if it does not exist."""
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS nft_records (
                        cache_key TEXT PRIMARY KEY,
                        record_json TEXT NOT NULL,
                        expires_at REAL NOT NULL
                    )
                    """
                )
                await db.commit()
            self._initialized = True
            logger.debug(f"SqliteRecordStore: Initialized database at {self.db_path}")
        except aiosqlite.Error as e:
            raise CacheAccessError("*", e, "Failed to initialize record store") from e

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    async def get(self, key: str) -> Optional[StoredRecord]:
        await self._ensure_initialized()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute(
                    "SELECT record_json, expires_at FROM nft_records WHERE cache_key = ?",
                    (key,),
                ) as cursor:
                    row = await cursor.fetchone()
                if row is None:
                    return None
                record_json, expires_at = row
                if expires_at <= self._clock():
                    await db.execute("DELETE FROM nft_records WHERE cache_key = ?", (key,))
                    await db.commit()
                    return None
        except aiosqlite.Error as e:
            raise CacheAccessError(key, e) from e

        try:
            return stored_record_adapter.validate_json(record_json)
        except ValueError as e:
            raise CacheAccessError(key, e, "Stored record could not be decoded") from e

    async def set(self, key: str, record: StoredRecord, expires_at: float) -> None:
        await self._ensure_initialized()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("DELETE FROM nft_records WHERE expires_at <= ?", (self._clock(),))
                await db.execute(
                    "INSERT OR REPLACE INTO nft_records (cache_key, record_json, expires_at) VALUES (?, ?, ?)",
                    (key, record.model_dump_json(), expires_at),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise CacheAccessError(key, e) from e

    async def delete(self, key: str) -> None:
        await self._ensure_initialized()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("DELETE FROM nft_records WHERE cache_key = ?", (key,))
                await db.commit()
        except aiosqlite.Error as e:
            raise CacheAccessError(key, e) from e


class KeyedLocks:
    """Registry of asyncio locks, one per record key.

    A key's lock lives only while some task holds or waits for it, so the
    registry does not grow with every participant ever seen.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for key for the duration of the block."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
