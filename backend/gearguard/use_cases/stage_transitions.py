"""Stage transition use-cases: request workflow and its coupling to equipment scrap state."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..constants import RequestStage, ScrapOrigin
from ..domain_errors import InconsistentStateError, ValidationError
from ..models import AuditEvent, Equipment, MaintenanceRequest
from ..services.equipment_locks import EquipmentLocks, get_equipment_locks
from ..services.equipment_registry import EquipmentRegistry
from ..services.request_store import RequestStore
from ..services.scrap_rules import (
    SCRAP_ACTION_SCRAP,
    all_requests_scrapped,
    decide_scrap_action,
    derive_scrap_reason,
    normalize_stage,
    today_utc,
)
from ..services.team_directory import TeamDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowHooks:
    """Collaborators shared by workflow use-cases."""

    locks: EquipmentLocks | None = None
    today: Callable[[], date] = today_utc

    def resolve_locks(self) -> EquipmentLocks:
        return self.locks or get_equipment_locks()


@dataclass(frozen=True)
class ReconcileResult:
    checked: int
    corrected: int


def _target_stage(stage: RequestStage | str) -> str:
    try:
        return normalize_stage(stage)
    except ValueError as error:
        raise ValidationError(str(error), code="REQUEST_STAGE_INVALID") from error


def _stage_changed_event(request: MaintenanceRequest, old_stage: str, new_stage: str) -> AuditEvent:
    return AuditEvent(
        action="request_stage_changed",
        entity_type="request",
        entity_id=request.id,
        entity_name=request.subject,
        details={
            "oldStage": old_stage,
            "newStage": new_stage,
            "equipmentId": str(request.equipment_id) if request.equipment_id else None,
        },
    )


def _fields_updated_event(request: MaintenanceRequest, fields: list[str]) -> AuditEvent:
    return AuditEvent(
        action="request_updated",
        entity_type="request",
        entity_id=request.id,
        entity_name=request.subject,
        details={"fields": fields},
    )


def apply_scrap_consistency(
    *,
    db: Session,
    equipment: Equipment,
    today: date,
    trigger: MaintenanceRequest | None = None,
) -> str | None:
    """Recompute scrap-by-exhaustion for `equipment` from the current request stages.

    Caller must hold the equipment lock and own the transaction.
    """
    stages = RequestStore(db).stages_for_equipment(equipment.id)
    all_scrap = all_requests_scrapped(stages)
    action = decide_scrap_action(
        all_scrap=all_scrap,
        is_scrapped=bool(equipment.is_scrapped),
        scrap_origin=equipment.scrap_origin,
    )
    if action is None:
        return None

    registry = EquipmentRegistry(db)
    details: dict[str, Any] = {
        "origin": ScrapOrigin.WORKFLOW.value,
        "requestCount": len(stages),
        "requestId": str(trigger.id) if trigger is not None else None,
    }
    if action == SCRAP_ACTION_SCRAP:
        registry.set_scrap_state(
            equipment.id,
            is_scrapped=True,
            scrap_date=today,
            scrap_reason=derive_scrap_reason(trigger.subject if trigger is not None else None),
            scrap_origin=ScrapOrigin.WORKFLOW,
        )
        audit_action = "equipment_scrapped"
    else:
        registry.set_scrap_state(equipment.id, is_scrapped=False)
        audit_action = "equipment_unscrapped"

    db.add(
        AuditEvent(
            action=audit_action,
            entity_type="equipment",
            entity_id=equipment.id,
            entity_name=equipment.name,
            details=details,
        )
    )
    logger.info(
        "equipment.%s id=%s requests=%d trigger=%s",
        action,
        equipment.id,
        len(stages),
        details["requestId"],
    )
    return action


def _validate_assignment(db: Session, changes: dict[str, Any]) -> None:
    directory = TeamDirectory(db)
    if changes.get("team_id") is not None:
        directory.get_team(changes["team_id"])
    if changes.get("technician_id") is not None:
        directory.get_technician(changes["technician_id"])


def _apply_changes(
    *,
    db: Session,
    request: MaintenanceRequest,
    target_stage: str | None,
    changes: dict[str, Any],
    today: date,
    equipment: Equipment | None,
) -> MaintenanceRequest:
    """Write field and stage changes, then the equipment side-effect, in one transaction."""
    store = RequestStore(db)
    old_stage = request.stage
    stage_changes = target_stage is not None and target_stage != old_stage

    updates = dict(changes)
    if stage_changes:
        updates["stage"] = target_stage
    if not updates:
        # Nothing to write; end the read transaction so row locks are released.
        db.rollback()
        return request

    try:
        store.update(request.id, updates)
        if changes:
            db.add(_fields_updated_event(request, sorted(changes)))
        if stage_changes:
            db.add(_stage_changed_event(request, old_stage, target_stage))
            if equipment is not None:
                apply_scrap_consistency(db=db, equipment=equipment, today=today, trigger=request)
        db.commit()
    except Exception:
        db.rollback()
        raise

    if stage_changes:
        logger.info("request.stage_changed id=%s %s->%s", request.id, old_stage, target_stage)
    return request


def _change_request(
    *,
    db: Session,
    request_id: UUID,
    stage: RequestStage | str | None,
    changes: dict[str, Any],
    hooks: WorkflowHooks,
) -> MaintenanceRequest:
    store = RequestStore(db)
    request = store.get(request_id)
    target_stage = _target_stage(stage) if stage is not None else None
    _validate_assignment(db, changes)

    # Re-fired drops onto the same column change nothing.
    if (target_stage is None or target_stage == request.stage) and not changes:
        return request

    stage_changes = target_stage is not None and target_stage != request.stage
    if not stage_changes or request.equipment_id is None:
        return _apply_changes(
            db=db,
            request=request,
            target_stage=target_stage,
            changes=changes,
            today=hooks.today(),
            equipment=None,
        )

    equipment_id = request.equipment_id
    with hooks.resolve_locks().hold(equipment_id):
        # Another transition may have landed while this one waited for the lock.
        request = store.get(request_id, fresh=True)
        equipment = EquipmentRegistry(db).find(equipment_id, for_update=True)
        if equipment is None:
            db.rollback()
            raise InconsistentStateError(
                "Request references equipment that no longer exists",
                details={"request_id": str(request_id), "equipment_id": str(equipment_id)},
            )
        return _apply_changes(
            db=db,
            request=request,
            target_stage=target_stage,
            changes=changes,
            today=hooks.today(),
            equipment=equipment,
        )


def transition_stage_use_case(
    *,
    db: Session,
    request_id: UUID,
    new_stage: RequestStage | str,
    hooks: WorkflowHooks | None = None,
) -> MaintenanceRequest:
    """Move a request to `new_stage` and keep its equipment's scrap state consistent."""
    return _change_request(
        db=db,
        request_id=request_id,
        stage=new_stage,
        changes={},
        hooks=hooks or WorkflowHooks(),
    )


def update_request_fields_use_case(
    *,
    db: Session,
    request_id: UUID,
    data: BaseModel | dict[str, Any],
    hooks: WorkflowHooks | None = None,
) -> MaintenanceRequest:
    """Apply a partial update; a stage change goes through the transition rules."""
    changes = data.model_dump(exclude_unset=True) if isinstance(data, BaseModel) else dict(data)
    stage = changes.pop("stage", None)
    if "subject" in changes and changes["subject"] is None:
        raise ValidationError("Request subject is required", code="REQUEST_SUBJECT_REQUIRED")
    if "priority" in changes and changes["priority"] is None:
        changes.pop("priority")
    return _change_request(
        db=db,
        request_id=request_id,
        stage=stage,
        changes=changes,
        hooks=hooks or WorkflowHooks(),
    )


def reconcile_equipment_scrap_use_case(
    *,
    db: Session,
    hooks: WorkflowHooks | None = None,
) -> ReconcileResult:
    """Recompute derived scrap state for every equipment that has requests."""
    hooks = hooks or WorkflowHooks()
    locks = hooks.resolve_locks()
    registry = EquipmentRegistry(db)
    equipment_ids = RequestStore(db).equipment_ids_with_requests()

    corrected = 0
    for equipment_id in equipment_ids:
        with locks.hold(equipment_id):
            try:
                equipment = registry.find(equipment_id, for_update=True)
                if equipment is None:
                    logger.warning("Requests reference missing equipment %s", equipment_id)
                    db.rollback()
                    continue
                action = apply_scrap_consistency(db=db, equipment=equipment, today=hooks.today())
                db.commit()
            except Exception:
                db.rollback()
                raise
        if action is not None:
            corrected += 1

    logger.info("equipment.reconcile checked=%d corrected=%d", len(equipment_ids), corrected)
    return ReconcileResult(checked=len(equipment_ids), corrected=corrected)
