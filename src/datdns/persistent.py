"""SQLite persistent name cache.

The durable store behind the resolver's last-resort fallback. Writes are
best-effort: ``aiosqlite.Error`` is logged and swallowed so a broken database
never fails a resolution that already succeeded. Reads either return a stored
key or re-raise the resolution error they were handed, so a database failure
surfaces as the original "not found" rather than an SQLite error.

Stored keys are returned even after their TTL has elapsed. The store is only
consulted once live resolution has failed, and a stale key is more useful to
the caller than no key at all. Staleness is logged.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import aiosqlite
import structlog

log = structlog.get_logger()

_CREATE_NAMES_TABLE = """
CREATE TABLE IF NOT EXISTS names (
    name        TEXT PRIMARY KEY,
    key         TEXT NOT NULL,
    ttl         INTEGER NOT NULL,
    resolved_at TEXT NOT NULL,
    expires_at  TEXT NOT NULL
)
"""

_CREATE_NAMES_INDEX = "CREATE INDEX IF NOT EXISTS idx_names_expires ON names(expires_at)"


class SqlitePersistentCache:
    """SQLite-backed store implementing PersistentCacheProtocol."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_NAMES_TABLE)
        await self._db.execute(_CREATE_NAMES_INDEX)
        await self._db.commit()

    async def read(self, name: str, error: Exception) -> str:
        """Return the last key stored for ``name``, else raise ``error``."""
        try:
            cursor = await self._db.execute(
                "SELECT key, expires_at FROM names WHERE name = ?",
                (name,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error:
            log.warning("persistent_cache_read_error", name=name, exc_info=True)
            raise error from None

        if row is None:
            raise error

        stale = datetime.now(UTC) > datetime.fromisoformat(row[1])
        log.info("persistent_cache_hit", name=name, key=row[0], stale=stale)
        return row[0]

    async def write(self, name: str, key: str, ttl: int) -> None:
        """Upsert ``name`` → ``key``. Non-fatal on failure."""
        try:
            now = datetime.now(UTC)
            expires_at = now + timedelta(seconds=ttl)
            await self._db.execute(
                "INSERT OR REPLACE INTO names (name, key, ttl, resolved_at, expires_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (name, key, ttl, now.isoformat(), expires_at.isoformat()),
            )
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("persistent_cache_write_error", name=name, exc_info=True)

    async def cleanup_expired(self, retention_days: int = 30) -> int:
        """Delete entries expired more than ``retention_days`` ago. Non-fatal on failure."""
        try:
            cutoff = (datetime.now(UTC) - timedelta(days=retention_days)).isoformat()
            cursor = await self._db.execute("DELETE FROM names WHERE expires_at < ?", (cutoff,))
            deleted = cursor.rowcount
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("persistent_cache_cleanup_error", exc_info=True)
            return 0

        log.info("persistent_cache_cleanup_complete", deleted=deleted)
        return deleted
