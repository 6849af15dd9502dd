"""
World State Storage Layer

RESPONSIBILITY: Durable key-value persistence with ordered range scans
ALLOWED INPUTS: Keys (str) and already-serialized values (bytes)
OUTPUTS: Raw bytes, ordered (key, value) iterators

WHAT THIS LAYER MUST NOT DO:
============================
- Decode, validate or interpret stored values
- Compute alerts or check ownership
- Retry failed operations (failures propagate to the caller)

BOUNDARY ENFORCEMENT:
=====================
- The core sees only the KeyValueBackend interface
- Range scans are lazy; callers consume them to completion
- Empty scan bounds mean the whole key space
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple
import logging
import sqlite3

logger = logging.getLogger(__name__)

KeyValue = Tuple[str, bytes]


# =============================================================================
# STORAGE INTERFACE (Dependency Inversion)
# =============================================================================

class KeyValueBackend:
    """
    Abstract key-value backend interface.

    Implementations can use different storage systems (memory, SQLite,
    a replicated ledger) while keeping the same point/range semantics.
    """

    def get(self, key: str) -> Optional[bytes]:
        """Return the value at key, or None when absent."""
        raise NotImplementedError

    def put(self, key: str, value: bytes) -> None:
        """Write value at key, replacing any previous value."""
        raise NotImplementedError

    def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is a no-op."""
        raise NotImplementedError

    def scan(self, start_key: str = "", end_key: str = "") -> Iterator[KeyValue]:
        """
        Yield (key, value) pairs in ascending key order.

        start_key is inclusive, end_key exclusive; an empty bound is open.
        """
        raise NotImplementedError


def _in_range(key: str, start_key: str, end_key: str) -> bool:
    if start_key and key < start_key:
        return False
    if end_key and key >= end_key:
        return False
    return True


# =============================================================================
# IN-MEMORY BACKEND (Reference Implementation)
# =============================================================================

class InMemoryKeyValueBackend(KeyValueBackend):
    """
    In-memory implementation of the world state.

    Suitable for testing and single-process runs.
    """

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._state: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._state.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._state[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._state.pop(key, None)

    def scan(self, start_key: str = "", end_key: str = "") -> Iterator[KeyValue]:
        # Snapshot the key set so writers during iteration cannot break it
        for key in sorted(self._state):
            if not _in_range(key, start_key, end_key):
                continue
            value = self._state.get(key)
            if value is not None:
                yield key, value

    def __len__(self) -> int:
        return len(self._state)

    def keys(self):
        return sorted(self._state)


# =============================================================================
# SQLITE BACKEND
# =============================================================================

class SqliteKeyValueBackend(KeyValueBackend):
    """
    SQLite implementation of the world state.

    One table, one row per key. Range scans are keyset-paginated so a
    long enumeration never holds a connection (or a read lock) for its
    whole duration.
    """

    def __init__(self, db_path: str, page_size: int = 100):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._db_path = Path(db_path)
        self._page_size = page_size

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with self._get_conn() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS world_state (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL
                )
            ''')

    @contextmanager
    def _get_conn(self):
        """Get database connection."""
        conn = sqlite3.connect(self._db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[bytes]:
        with self._get_conn() as conn:
            row = conn.execute(
                'SELECT value FROM world_state WHERE key = ?', (key,)
            ).fetchone()
        return bytes(row[0]) if row else None

    def put(self, key: str, value: bytes) -> None:
        with self._get_conn() as conn:
            conn.execute(
                'INSERT OR REPLACE INTO world_state (key, value) VALUES (?, ?)',
                (key, sqlite3.Binary(value))
            )

    def delete(self, key: str) -> None:
        with self._get_conn() as conn:
            conn.execute('DELETE FROM world_state WHERE key = ?', (key,))

    def _fetch_page(self, after: Optional[str], start_key: str, end_key: str):
        clauses = []
        params: list = []
        if after is not None:
            clauses.append('key > ?')
            params.append(after)
        elif start_key:
            clauses.append('key >= ?')
            params.append(start_key)
        if end_key:
            clauses.append('key < ?')
            params.append(end_key)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(self._page_size)

        with self._get_conn() as conn:
            return conn.execute(
                f'SELECT key, value FROM world_state {where} ORDER BY key LIMIT ?',
                params
            ).fetchall()

    def scan(self, start_key: str = "", end_key: str = "") -> Iterator[KeyValue]:
        after: Optional[str] = None
        page_count = 0
        while True:
            rows = self._fetch_page(after, start_key, end_key)
            page_count += 1
            for key, value in rows:
                yield key, bytes(value)
            if len(rows) < self._page_size:
                break
            after = rows[-1][0]
        logger.debug("Range scan [%r, %r) finished after %d page(s)", start_key, end_key, page_count)


# =============================================================================
# BACKEND FACTORY
# =============================================================================

@dataclass
class StorageConfig:
    """Configuration for world state storage."""
    backend_type: str = "memory"  # "memory" or "sqlite"
    db_path: Optional[str] = None
    scan_page_size: int = 100


def create_backend(config: Optional[StorageConfig] = None) -> KeyValueBackend:
    """Create storage backend based on configuration."""
    config = config or StorageConfig()
    if config.backend_type == "sqlite":
        if not config.db_path:
            raise ValueError("sqlite backend requires db_path")
        return SqliteKeyValueBackend(config.db_path, page_size=config.scan_page_size)
    if config.backend_type == "memory":
        return InMemoryKeyValueBackend()
    raise ValueError(f"Unknown backend_type: {config.backend_type!r}")


__all__ = [
    'KeyValueBackend',
    'InMemoryKeyValueBackend',
    'SqliteKeyValueBackend',
    'StorageConfig',
    'create_backend',
]
