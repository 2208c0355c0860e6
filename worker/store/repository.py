"""Scan record repositories.

Records are keyed by scan token. Writers replace whole records per key,
so readers never see a partially merged update.
"""

import copy
import json
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any

import structlog
from redis import Redis
from redis.exceptions import WatchError

from worker.store.records import ScanRecord

logger = structlog.get_logger(__name__)

# Default record TTL: 24 hours
DEFAULT_RECORD_TTL_SECONDS = 86400


class ScanRepository(ABC):
    """Key-value store for scan records."""

    @abstractmethod
    def create(self, scan_token: str, record: ScanRecord) -> None:
        """Store a new record."""
        ...

    @abstractmethod
    def get(self, scan_token: str) -> ScanRecord | None:
        """Return a snapshot of a record, or None."""
        ...

    @abstractmethod
    def update(self, scan_token: str, **fields: Any) -> ScanRecord | None:
        """Merge fields into an existing record. No-op when absent."""
        ...

    @abstractmethod
    def delete(self, scan_token: str) -> bool:
        """Remove a record. Returns True if it existed."""
        ...


class InMemoryScanRepository(ScanRepository):
    """Process-local repository guarded by a lock."""

    def __init__(self) -> None:
        self._records: dict[str, ScanRecord] = {}
        self._lock = threading.Lock()

    def create(self, scan_token: str, record: ScanRecord) -> None:
        with self._lock:
            self._records[scan_token] = copy.deepcopy(record)

    def get(self, scan_token: str) -> ScanRecord | None:
        with self._lock:
            record = self._records.get(scan_token)
        return copy.deepcopy(record) if record is not None else None

    def update(self, scan_token: str, **fields: Any) -> ScanRecord | None:
        with self._lock:
            existing = self._records.get(scan_token)
            if existing is None:
                return None
            updated = replace(existing, **copy.deepcopy(fields))
            self._records[scan_token] = updated
        return copy.deepcopy(updated)

    def delete(self, scan_token: str) -> bool:
        with self._lock:
            return self._records.pop(scan_token, None) is not None

    def __len__(self) -> int:
        return len(self._records)


class RedisScanRepository(ScanRepository):
    """
    Redis-backed repository.

    Each record is one JSON document with a TTL. Updates use optimistic
    WATCH/MULTI and retry when the key changes underneath them.
    """

    def __init__(
        self,
        redis: Redis | None = None,
        ttl_seconds: int = DEFAULT_RECORD_TTL_SECONDS,
        prefix: str = "citable:scan:",
    ):
        if redis is None:
            from worker.redis import get_redis_connection

            redis = get_redis_connection()
        self._redis = redis
        self.ttl_seconds = ttl_seconds
        self._prefix = prefix

    def _key(self, scan_token: str) -> str:
        return f"{self._prefix}{scan_token}"

    def create(self, scan_token: str, record: ScanRecord) -> None:
        self._redis.set(
            self._key(scan_token),
            json.dumps(record.to_dict()),
            ex=self.ttl_seconds,
        )

    def get(self, scan_token: str) -> ScanRecord | None:
        data = self._redis.get(self._key(scan_token))
        if not data:
            return None
        return ScanRecord.from_dict(json.loads(data))

    def update(self, scan_token: str, **fields: Any) -> ScanRecord | None:
        key = self._key(scan_token)

        with self._redis.pipeline() as pipe:
            while True:
                try:
                    pipe.watch(key)
                    data = pipe.get(key)
                    if not data:
                        pipe.unwatch()
                        return None

                    updated = replace(ScanRecord.from_dict(json.loads(data)), **fields)

                    pipe.multi()
                    pipe.set(key, json.dumps(updated.to_dict()), ex=self.ttl_seconds)
                    pipe.execute()
                    return updated
                except WatchError:
                    logger.debug("scan_record_update_retry", scan_token=scan_token)
                    continue

    def delete(self, scan_token: str) -> bool:
        return bool(self._redis.delete(self._key(scan_token)))


_default_repository: ScanRepository | None = None


def get_repository(settings=None) -> ScanRepository:
    """Return the process-wide repository for the configured backend."""
    global _default_repository

    if _default_repository is None:
        if settings is None:
            from api.config import get_settings

            settings = get_settings()

        if settings.scan_store_backend == "redis":
            _default_repository = RedisScanRepository(ttl_seconds=settings.scan_record_ttl_seconds)
        else:
            _default_repository = InMemoryScanRepository()

    return _default_repository


def reset_repository() -> None:
    """Drop the process-wide repository (tests)."""
    global _default_repository
    _default_repository = None
