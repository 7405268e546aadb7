from __future__ import annotations

import gc
import threading
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError

from gearguard.domain_errors import DomainError
from gearguard.services.equipment_locks import (
    REDIS_LOCK_PREFIX,
    LocalEquipmentLocks,
    RedisEquipmentLocks,
)


class _RedisLockStub:
    def __init__(self, *, acquired=True, acquire_error=None, release_error=None) -> None:
        self._acquired = acquired
        self._acquire_error = acquire_error
        self._release_error = release_error
        self.released = False

    def acquire(self):
        if self._acquire_error is not None:
            raise self._acquire_error
        return self._acquired

    def release(self) -> None:
        self.released = True
        if self._release_error is not None:
            raise self._release_error


class _RedisClientStub:
    def __init__(self, lock: _RedisLockStub) -> None:
        self._lock = lock
        self.calls: list[tuple[str, float, float]] = []

    def lock(self, name, timeout=None, blocking_timeout=None):
        self.calls.append((name, timeout, blocking_timeout))
        return self._lock


def test_local_locks_serialize_same_equipment() -> None:
    locks = LocalEquipmentLocks(wait_seconds=0.05)
    equipment_id = uuid4()

    with locks.hold(equipment_id):
        result: list[str] = []

        def _contender() -> None:
            try:
                with locks.hold(equipment_id):
                    result.append("acquired")
            except DomainError as exc:
                result.append(exc.code)

        thread = threading.Thread(target=_contender)
        thread.start()
        thread.join()

    assert result == ["EQUIPMENT_BUSY"]
    with locks.hold(equipment_id):
        pass


def test_local_locks_do_not_block_other_equipment() -> None:
    locks = LocalEquipmentLocks(wait_seconds=0.05)

    with locks.hold(uuid4()):
        with locks.hold(uuid4()):
            pass


def test_local_lock_registry_forgets_idle_equipment() -> None:
    locks = LocalEquipmentLocks(wait_seconds=0.05)
    equipment_id = uuid4()

    with locks.hold(equipment_id):
        assert str(equipment_id) in locks._locks
    gc.collect()

    assert str(equipment_id) not in locks._locks


def test_local_lock_is_released_when_body_raises() -> None:
    locks = LocalEquipmentLocks(wait_seconds=0.05)
    equipment_id = uuid4()

    with pytest.raises(RuntimeError):
        with locks.hold(equipment_id):
            raise RuntimeError("boom")

    with locks.hold(equipment_id):
        pass


def test_redis_locks_use_prefixed_name_and_release() -> None:
    lock = _RedisLockStub()
    client = _RedisClientStub(lock)
    equipment_id = uuid4()

    with RedisEquipmentLocks(client, timeout_seconds=30, wait_seconds=5).hold(equipment_id):
        assert lock.released is False

    assert client.calls == [(f"{REDIS_LOCK_PREFIX}{equipment_id}", 30, 5)]
    assert lock.released is True


def test_redis_lock_timeout_maps_to_busy_error() -> None:
    locks = RedisEquipmentLocks(_RedisClientStub(_RedisLockStub(acquired=False)), timeout_seconds=30, wait_seconds=5)

    with pytest.raises(DomainError) as exc_info:
        with locks.hold(uuid4()):
            pass

    assert exc_info.value.code == "EQUIPMENT_BUSY"
    assert exc_info.value.http_status == 409


def test_redis_outage_maps_to_unavailable_error() -> None:
    lock = _RedisLockStub(acquire_error=RedisConnectionError("connection refused"))
    locks = RedisEquipmentLocks(_RedisClientStub(lock), timeout_seconds=30, wait_seconds=5)

    with pytest.raises(DomainError) as exc_info:
        with locks.hold(uuid4()):
            pass

    assert exc_info.value.code == "EQUIPMENT_LOCK_UNAVAILABLE"
    assert exc_info.value.http_status == 503


def test_redis_expired_lease_on_release_is_not_fatal() -> None:
    lock = _RedisLockStub(release_error=LockError("Cannot release an unlocked lock"))
    locks = RedisEquipmentLocks(_RedisClientStub(lock), timeout_seconds=30, wait_seconds=5)

    with locks.hold(uuid4()):
        pass

    assert lock.released is True
