"""Key/value backends for the link caches.

Every store expires entries passively: an entry past its TTL reads as
``None`` and is left in place until it is overwritten.
"""

import hashlib
import json
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from linkcards.core.config import Settings
from linkcards.db.session import SessionLocal
from linkcards.models.cache_entry import CacheEntry

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _expires_at(now: datetime, ttl: timedelta | None) -> datetime | None:
    return now + ttl if ttl is not None else None


def _is_live(expires_at: datetime | None, now: datetime) -> bool:
    return expires_at is None or as_utc(expires_at) > now


class CacheStoreError(Exception):
    """Raised by a store when its backend cannot be read or written."""


class CacheStore(Protocol):
    def get(self, key: str) -> dict[str, Any] | None: ...

    def set(self, key: str, value: dict[str, Any], ttl: timedelta | None = None) -> None: ...


class MemoryCacheStore:
    def __init__(self, clock: Clock = utcnow) -> None:
        self.clock = clock
        self._entries: dict[str, tuple[dict[str, Any], datetime | None]] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if not _is_live(expires_at, self.clock()):
            return None
        return json.loads(json.dumps(value))

    def set(self, key: str, value: dict[str, Any], ttl: timedelta | None = None) -> None:
        self._entries[key] = (json.loads(json.dumps(value)), _expires_at(self.clock(), ttl))

    def __len__(self) -> int:
        return len(self._entries)


class SqlCacheStore:
    """Stores entries as rows of ``cache_entries`` through SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session], clock: Clock = utcnow) -> None:
        self.session_factory = session_factory
        self.clock = clock

    def get(self, key: str) -> dict[str, Any] | None:
        db = self.session_factory()
        try:
            row = db.query(CacheEntry).filter(CacheEntry.key == key).first()
            if row is None or not _is_live(row.expires_at, self.clock()):
                return None
            if not isinstance(row.value, dict):
                raise CacheStoreError(f'Cache entry {key!r} does not hold an object')
            return dict(row.value)
        except SQLAlchemyError as exc:
            raise CacheStoreError(f'Failed to read cache entry {key!r}') from exc
        finally:
            db.close()

    def set(self, key: str, value: dict[str, Any], ttl: timedelta | None = None) -> None:
        db = self.session_factory()
        try:
            row = db.query(CacheEntry).filter(CacheEntry.key == key).first()
            if row is None:
                row = CacheEntry(key=key, value=value)
                db.add(row)
            row.value = value
            row.expires_at = _expires_at(self.clock(), ttl)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise CacheStoreError(f'Failed to write cache entry {key!r}') from exc
        finally:
            db.close()


class FileCacheStore:
    """One JSON document per key under ``directory``, named by the key's sha256."""

    def __init__(self, directory: str | Path, clock: Clock = utcnow) -> None:
        self.directory = Path(directory)
        self.clock = clock

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode('utf-8')).hexdigest()
        return self.directory / f'{digest}.json'

    def get(self, key: str) -> dict[str, Any] | None:
        path = self.path_for(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CacheStoreError(f'Failed to read cache file {path}') from exc

        try:
            document = json.loads(raw.decode('utf-8'))
            if not isinstance(document, dict) or not isinstance(document.get('value'), dict):
                raise ValueError('cache document is not an object with an object value')
            expires_at = datetime.fromisoformat(document['expires_at']) if document.get('expires_at') else None
        except (KeyError, TypeError, ValueError) as exc:
            # ValueError covers JSONDecodeError and UnicodeDecodeError.
            raise CacheStoreError(f'Corrupt cache file {path}') from exc

        if document.get('key') != key or not _is_live(expires_at, self.clock()):
            return None
        return document['value']

    def set(self, key: str, value: dict[str, Any], ttl: timedelta | None = None) -> None:
        expires_at = _expires_at(self.clock(), ttl)
        document = {
            'key': key,
            'expires_at': expires_at.isoformat() if expires_at else None,
            'value': value,
        }
        path = self.path_for(key)
        tmp_name = None
        try:
            payload = json.dumps(document, ensure_ascii=False)
            self.directory.mkdir(parents=True, exist_ok=True)
            # Each writer gets its own temp file; replace() swaps it in atomically.
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=self.directory, prefix=f'{path.stem}.', suffix='.tmp', delete=False
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise CacheStoreError(f'Failed to write cache file {path}') from exc


def build_cache_store(config: Settings) -> CacheStore:
    if config.cache_backend == 'memory':
        return MemoryCacheStore()
    if config.cache_backend == 'file':
        return FileCacheStore(config.cache_dir)

    return SqlCacheStore(SessionLocal)
