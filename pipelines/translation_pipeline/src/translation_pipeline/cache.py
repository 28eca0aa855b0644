"""
Key-value stores for translation results.

Keys are request hashes (hex SHA-256); values are JSON objects. A store
offers single get/put atomicity and nothing more: there is no locking and no
expiry, and a put always replaces what was there.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from interlinea_core.db.models import QueryCacheEntry

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def put(self, key: str, value: dict[str, Any]) -> None: ...


class MemoryCacheStore:
    """
    In-process cache, optionally in front of a persistent store.

    Reads fall through to `backing` on a miss and are remembered; writes go
    to both. Create one per scope that should share hits and `clear()` it to
    start over. With `max_entries` set, the least recently used entries are
    dropped from memory (never from `backing`) once the limit is reached.
    """

    def __init__(self, backing: CacheStore | None = None, *, max_entries: int | None = None) -> None:
        self.backing = backing
        self.max_entries = max_entries
        self._data: OrderedDict[str, dict[str, Any]] = OrderedDict()

    async def get(self, key: str) -> dict[str, Any] | None:
        if key in self._data:
            self._data.move_to_end(key)
            return self._data[key]
        if self.backing is None:
            return None
        value = await self.backing.get(key)
        if value is not None:
            self._remember(key, value)
        return value

    async def put(self, key: str, value: dict[str, Any]) -> None:
        if self.backing is not None:
            await self.backing.put(key, value)
        self._remember(key, value)

    def clear(self) -> None:
        self._data.clear()

    def _remember(self, key: str, value: dict[str, Any]) -> None:
        self._data[key] = value
        self._data.move_to_end(key)
        if self.max_entries is not None:
            while len(self._data) > max(0, self.max_entries):
                self._data.popitem(last=False)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        # An empty store is still a store.
        return True


class DiskCacheStore:
    """One JSON file per key under `cache_dir`, fanned out by key prefix."""

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = cache_dir

    def path_for(self, key: str) -> Path:
        # keep directory fanout shallow for large caches
        return self.cache_dir / key[:2] / f"{key}.json"

    async def get(self, key: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read, key)

    async def put(self, key: str, value: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, key, value)

    def _read(self, key: str) -> dict[str, Any] | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring corrupt cache entry %s", path)
            return None
        value = entry.get("value") if isinstance(entry, dict) else None
        return value if isinstance(value, dict) else None

    def _write(self, key: str, value: dict[str, Any]) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        entry = {
            "hash": key,
            "stored_at": datetime.now(timezone.utc).isoformat(),
            "value": value,
        }
        # Write to a sibling temp file and rename so readers never see a partial entry.
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key[:8]}", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(entry, fh, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class SqlCacheStore:
    """Cache entries in the `query_cache` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    async def get(self, key: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read, key)

    async def put(self, key: str, value: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, key, value)

    def _read(self, key: str) -> dict[str, Any] | None:
        with self.session_factory() as session:
            entry = session.get(QueryCacheEntry, key)
            return dict(entry.value) if entry is not None else None

    def _write(self, key: str, value: dict[str, Any]) -> None:
        with self.session_factory() as session:
            entry = session.get(QueryCacheEntry, key)
            if entry is None:
                session.add(QueryCacheEntry(hash=key, value=value))
            else:
                entry.value = value
                entry.updated_at = datetime.now(timezone.utc)
            session.commit()


def create_cache_store(backend: str, *, cache_dir: Path, session_factory: sessionmaker[Session] | None = None) -> CacheStore:
    if backend == "disk":
        return DiskCacheStore(cache_dir)
    if backend == "sql":
        if session_factory is None:
            raise ValueError("sql cache backend needs a session factory")
        return SqlCacheStore(session_factory)
    if backend == "memory":
        return MemoryCacheStore()
    raise ValueError(f"Unknown cache backend {backend!r}")
