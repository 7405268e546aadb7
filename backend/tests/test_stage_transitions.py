from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from uuid import uuid4

import pytest

from gearguard.domain_errors import InconsistentStateError, NotFoundError, ValidationError
from gearguard.models import AuditEvent, Equipment, MaintenanceRequest, WorkCenter
from gearguard.schemas import MaintenanceRequestUpdate
from gearguard.services.equipment_registry import EquipmentRegistry
from gearguard.use_cases.equipment_lifecycle import scrap_equipment_manually_use_case
from gearguard.use_cases.stage_transitions import (
    WorkflowHooks,
    transition_stage_use_case,
    update_request_fields_use_case,
)


TODAY = date(2026, 3, 16)


class _RecordingLocks:
    def __init__(self) -> None:
        self.held: list[object] = []

    @contextmanager
    def hold(self, equipment_id):
        self.held.append(equipment_id)
        yield


def _audit_actions(db, action: str | None = None) -> list[AuditEvent]:
    query = db.query(AuditEvent)
    if action is not None:
        query = query.filter(AuditEvent.action == action)
    return query.all()


def _scrap_fields(equipment: Equipment):
    return equipment.is_scrapped, equipment.scrap_date, equipment.scrap_reason, equipment.scrap_origin


def test_same_stage_transition_is_a_no_op(db, hooks, make_equipment, make_request) -> None:
    equipment = make_equipment()
    request = make_request(equipment_id=equipment.id, stage="in_progress")
    updated_at = request.updated_at

    result = transition_stage_use_case(db=db, request_id=request.id, new_stage="In Progress", hooks=hooks)

    assert result.stage == "in_progress"
    assert result.updated_at == updated_at
    assert _audit_actions(db) == []
    db.refresh(equipment)
    assert _scrap_fields(equipment) == (False, None, None, None)


def test_last_request_to_scrap_scraps_equipment(db, hooks, make_equipment, make_request) -> None:
    equipment = make_equipment()
    first = make_request(equipment_id=equipment.id, subject="Bearing noise")
    second = make_request(equipment_id=equipment.id, subject="Frame cracked")

    transition_stage_use_case(db=db, request_id=first.id, new_stage="scrap", hooks=hooks)
    db.refresh(equipment)
    assert equipment.is_scrapped is False

    transition_stage_use_case(db=db, request_id=second.id, new_stage="scrap", hooks=hooks)
    db.refresh(equipment)
    assert _scrap_fields(equipment) == (
        True,
        TODAY,
        "Scrapped via maintenance request: Frame cracked",
        "workflow",
    )

    scrapped_events = _audit_actions(db, "equipment_scrapped")
    assert len(scrapped_events) == 1
    assert scrapped_events[0].entity_id == equipment.id
    assert scrapped_events[0].details["requestId"] == str(second.id)
    assert len(_audit_actions(db, "request_stage_changed")) == 2


def test_moving_a_request_out_of_scrap_unscraps_workflow_scrap(db, hooks, make_equipment, make_request) -> None:
    equipment = make_equipment()
    first = make_request(equipment_id=equipment.id)
    second = make_request(equipment_id=equipment.id)
    for request in (first, second):
        transition_stage_use_case(db=db, request_id=request.id, new_stage="scrap", hooks=hooks)

    transition_stage_use_case(db=db, request_id=first.id, new_stage="repaired", hooks=hooks)

    db.refresh(equipment)
    assert _scrap_fields(equipment) == (False, None, None, None)
    assert len(_audit_actions(db, "equipment_unscrapped")) == 1


def test_transitions_do_not_leak_across_equipment(db, hooks, make_equipment, make_request) -> None:
    target = make_equipment(name="Press")
    bystander = make_equipment(name="Lathe")
    target_request = make_request(equipment_id=target.id)
    make_request(equipment_id=bystander.id, stage="scrap")
    locks = _RecordingLocks()

    transition_stage_use_case(
        db=db,
        request_id=target_request.id,
        new_stage="scrap",
        hooks=WorkflowHooks(locks=locks, today=lambda: TODAY),
    )

    db.refresh(target)
    db.refresh(bystander)
    assert target.is_scrapped is True
    # The bystander's only request is Scrap too, but nothing transitioned it.
    assert _scrap_fields(bystander) == (False, None, None, None)
    assert locks.held == [target.id]


def test_work_center_requests_never_take_equipment_locks(db, make_request) -> None:
    work_center = WorkCenter(name="Assembly Line 1")
    db.add(work_center)
    db.commit()
    request = make_request(work_center_id=work_center.id)
    locks = _RecordingLocks()

    result = transition_stage_use_case(
        db=db,
        request_id=request.id,
        new_stage="scrap",
        hooks=WorkflowHooks(locks=locks, today=lambda: TODAY),
    )

    assert result.stage == "scrap"
    assert locks.held == []
    assert _audit_actions(db, "equipment_scrapped") == []


def test_manual_scrap_is_never_undone_by_transitions(db, hooks, make_equipment, make_request) -> None:
    equipment = make_equipment()
    request = make_request(equipment_id=equipment.id, stage="scrap")
    scrap_equipment_manually_use_case(db=db, equipment_id=equipment.id, reason="Sold for parts", hooks=hooks)

    transition_stage_use_case(db=db, request_id=request.id, new_stage="new", hooks=hooks)
    transition_stage_use_case(db=db, request_id=request.id, new_stage="scrap", hooks=hooks)
    transition_stage_use_case(db=db, request_id=request.id, new_stage="in_progress", hooks=hooks)

    db.refresh(equipment)
    assert _scrap_fields(equipment) == (True, TODAY, "Sold for parts", "manual")
    assert _audit_actions(db, "equipment_unscrapped") == []


def test_manual_rescrap_keeps_date_and_claims_origin(db, hooks, make_equipment, make_request) -> None:
    equipment = make_equipment()
    request = make_request(equipment_id=equipment.id)
    transition_stage_use_case(db=db, request_id=request.id, new_stage="scrap", hooks=hooks)

    later = WorkflowHooks(locks=hooks.locks, today=lambda: date(2026, 5, 1))
    scrap_equipment_manually_use_case(db=db, equipment_id=equipment.id, reason="", hooks=later)
    transition_stage_use_case(db=db, request_id=request.id, new_stage="repaired", hooks=later)

    db.refresh(equipment)
    assert equipment.is_scrapped is True
    assert equipment.scrap_date == TODAY
    assert equipment.scrap_origin == "manual"
    assert equipment.scrap_reason == "Scrapped via maintenance request: Spindle vibration"


def test_unknown_stage_raises_validation_error(db, hooks, make_request) -> None:
    request = make_request()

    with pytest.raises(ValidationError) as exc_info:
        transition_stage_use_case(db=db, request_id=request.id, new_stage="archived", hooks=hooks)

    assert exc_info.value.code == "REQUEST_STAGE_INVALID"


def test_unknown_request_raises_not_found(db, hooks) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        transition_stage_use_case(db=db, request_id=uuid4(), new_stage="scrap", hooks=hooks)

    assert exc_info.value.code == "REQUEST_NOT_FOUND"


def test_missing_equipment_raises_before_any_mutation(db, hooks, make_request) -> None:
    request = make_request(equipment_id=uuid4())

    with pytest.raises(InconsistentStateError) as exc_info:
        transition_stage_use_case(db=db, request_id=request.id, new_stage="scrap", hooks=hooks)

    assert exc_info.value.http_status == 409
    stored = db.query(MaintenanceRequest).populate_existing().filter(MaintenanceRequest.id == request.id).one()
    assert stored.stage == "new"
    assert _audit_actions(db) == []


def test_failure_during_scrap_write_rolls_back_stage_change(
    db, hooks, make_equipment, make_request, monkeypatch
) -> None:
    equipment = make_equipment()
    request = make_request(equipment_id=equipment.id)

    def _explode(self, *_args, **_kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(EquipmentRegistry, "set_scrap_state", _explode)

    with pytest.raises(RuntimeError):
        transition_stage_use_case(db=db, request_id=request.id, new_stage="scrap", hooks=hooks)

    stored = db.query(MaintenanceRequest).populate_existing().filter(MaintenanceRequest.id == request.id).one()
    assert stored.stage == "new"
    assert _audit_actions(db) == []


def test_update_fields_with_stage_runs_through_transition_rules(
    db, hooks, make_equipment, make_request, make_team
) -> None:
    team = make_team(name="Heavy Equipment", technicians=("Deepak Verma",))
    technician = team.technicians[0]
    equipment = make_equipment()
    request = make_request(equipment_id=equipment.id)

    updated = update_request_fields_use_case(
        db=db,
        request_id=request.id,
        data=MaintenanceRequestUpdate(stage="scrap", technician_id=technician.id, duration=4),
        hooks=hooks,
    )

    assert updated.stage == "scrap"
    assert updated.technician_id == technician.id
    assert updated.duration == 4
    db.refresh(equipment)
    assert equipment.is_scrapped is True
    assert [event.details["fields"] for event in _audit_actions(db, "request_updated")] == [
        ["duration", "technician_id"]
    ]


def test_update_fields_rejects_unknown_technician(db, hooks, make_request) -> None:
    request = make_request()

    with pytest.raises(NotFoundError) as exc_info:
        update_request_fields_use_case(
            db=db,
            request_id=request.id,
            data={"technician_id": uuid4()},
            hooks=hooks,
        )

    assert exc_info.value.code == "TECHNICIAN_NOT_FOUND"


def test_update_fields_without_stage_skips_equipment(db, make_equipment, make_request) -> None:
    equipment = make_equipment()
    request = make_request(equipment_id=equipment.id)
    locks = _RecordingLocks()

    updated = update_request_fields_use_case(
        db=db,
        request_id=request.id,
        data={"notes": "Ordered spare belt", "priority": None},
        hooks=WorkflowHooks(locks=locks, today=lambda: TODAY),
    )

    assert updated.notes == "Ordered spare belt"
    assert updated.priority == "medium"
    assert locks.held == []


def test_end_to_end_scrap_and_recovery(db, hooks, make_equipment, make_request) -> None:
    equipment = make_equipment(name="Conveyor C3")
    requests = [make_request(equipment_id=equipment.id, subject=f"Issue {index}") for index in range(3)]

    transition_stage_use_case(db=db, request_id=requests[0].id, new_stage="in_progress", hooks=hooks)
    transition_stage_use_case(db=db, request_id=requests[0].id, new_stage="scrap", hooks=hooks)
    transition_stage_use_case(db=db, request_id=requests[1].id, new_stage="scrap", hooks=hooks)
    db.refresh(equipment)
    assert equipment.is_scrapped is False

    transition_stage_use_case(db=db, request_id=requests[2].id, new_stage="scrap", hooks=hooks)
    db.refresh(equipment)
    assert equipment.is_scrapped is True
    assert equipment.scrap_reason == "Scrapped via maintenance request: Issue 2"

    transition_stage_use_case(db=db, request_id=requests[1].id, new_stage="repaired", hooks=hooks)
    db.refresh(equipment)
    assert _scrap_fields(equipment) == (False, None, None, None)

    transition_stage_use_case(db=db, request_id=requests[1].id, new_stage="scrap", hooks=hooks)
    db.refresh(equipment)
    assert equipment.is_scrapped is True
    assert equipment.scrap_reason == "Scrapped via maintenance request: Issue 1"
    assert len(_audit_actions(db, "equipment_scrapped")) == 2
    assert len(_audit_actions(db, "equipment_unscrapped")) == 1
