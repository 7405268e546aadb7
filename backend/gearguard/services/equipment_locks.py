"""Per-equipment mutual exclusion for stage transitions.

Transitions on requests of the same equipment must not interleave between
reading the sibling stages and writing the equipment scrap state. Different
equipment ids never share a lock.
"""

from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager
from functools import lru_cache
from typing import ContextManager, Iterator, Protocol
from uuid import UUID

import redis
from redis.exceptions import LockError, RedisError

from ..config import settings
from ..domain_errors import DomainError

logger = logging.getLogger(__name__)

REDIS_LOCK_PREFIX = "gearguard:equipment-lock:"


class EquipmentLocks(Protocol):
    def hold(self, equipment_id: UUID) -> ContextManager[None]: ...


def _busy_error(equipment_id: UUID) -> DomainError:
    return DomainError(
        code="EQUIPMENT_BUSY",
        http_status=409,
        message="Equipment is being updated by another request, retry shortly",
        details={"equipment_id": str(equipment_id)},
    )


class LocalEquipmentLocks:
    """One `threading.Lock` per equipment id, valid within a single process."""

    def __init__(self, *, wait_seconds: float | None = None) -> None:
        self._guard = threading.Lock()
        # Entries vanish once no holder or waiter references the lock.
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._wait_seconds = wait_seconds

    def _lock_for(self, equipment_id: UUID) -> threading.Lock:
        key = str(equipment_id)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, equipment_id: UUID) -> Iterator[None]:
        lock = self._lock_for(equipment_id)
        timeout = -1 if self._wait_seconds is None else self._wait_seconds
        if not lock.acquire(timeout=timeout):
            raise _busy_error(equipment_id)
        try:
            yield
        finally:
            lock.release()


class RedisEquipmentLocks:
    """Redis-backed locks shared by every worker process pointing at the same Redis."""

    def __init__(self, client: "redis.Redis", *, timeout_seconds: float, wait_seconds: float) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._wait_seconds = wait_seconds

    @contextmanager
    def hold(self, equipment_id: UUID) -> Iterator[None]:
        lock = self._client.lock(
            f"{REDIS_LOCK_PREFIX}{equipment_id}",
            timeout=self._timeout_seconds,
            blocking_timeout=self._wait_seconds,
        )
        try:
            acquired = lock.acquire()
        except RedisError as exc:
            logger.exception("Redis error while locking equipment %s", equipment_id)
            raise DomainError(
                code="EQUIPMENT_LOCK_UNAVAILABLE",
                http_status=503,
                message="Equipment lock service unavailable",
            ) from exc
        if not acquired:
            raise _busy_error(equipment_id)
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                # Lease expired mid-transition; the committed state is still self-consistent.
                logger.warning("Equipment lock %s expired before release", equipment_id)


@lru_cache()
def get_equipment_locks() -> EquipmentLocks:
    """Process-wide lock provider selected by EQUIPMENT_LOCK_BACKEND."""
    backend = settings.EQUIPMENT_LOCK_BACKEND.strip().lower()
    if backend == "local":
        return LocalEquipmentLocks(wait_seconds=settings.EQUIPMENT_LOCK_WAIT_SECONDS)
    if backend == "redis":
        return RedisEquipmentLocks(
            redis.from_url(settings.REDIS_URL),
            timeout_seconds=settings.EQUIPMENT_LOCK_TIMEOUT_SECONDS,
            wait_seconds=settings.EQUIPMENT_LOCK_WAIT_SECONDS,
        )
    raise RuntimeError(f"Unsupported EQUIPMENT_LOCK_BACKEND: {settings.EQUIPMENT_LOCK_BACKEND}")
