"""Maintenance request creation and listing use-cases."""
from __future__ import annotations

import logging
from contextlib import nullcontext
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import RequestStage, RequestType
from ..domain_errors import DomainError, NotFoundError, ValidationError
from ..models import AuditEvent, MaintenanceRequest, WorkCenter
from ..schemas import MaintenanceRequestCreate
from ..services.equipment_registry import EquipmentRegistry
from ..services.request_store import RequestStore
from ..services.team_directory import TeamDirectory
from .stage_transitions import WorkflowHooks

logger = logging.getLogger(__name__)


def _resolve_team_id(*, db: Session, data: MaintenanceRequestCreate, department: str | None) -> UUID | None:
    directory = TeamDirectory(db)
    if data.team_id is not None:
        return directory.get_team(data.team_id).id
    team = directory.find_team_by_department(department)
    return team.id if team else None


def create_request_use_case(
    *,
    db: Session,
    data: MaintenanceRequestCreate,
    hooks: WorkflowHooks | None = None,
) -> MaintenanceRequest:
    """Create a request in stage New, defaulting the team from the equipment department.

    Scrapped equipment does not accept new requests: creation fails with 409
    `EQUIPMENT_SCRAPPED` rather than storing a New request against it. Only
    a missing subject or type is rejected for other targets.
    """
    hooks = hooks or WorkflowHooks()

    if data.equipment_id is not None and data.work_center_id is not None:
        raise ValidationError(
            "Request targets either equipment or a work center, not both",
            code="REQUEST_TARGET_CONFLICT",
        )
    if data.technician_id is not None:
        TeamDirectory(db).get_technician(data.technician_id)

    department: str | None = None
    if data.equipment_id is not None:
        department = EquipmentRegistry(db).get(data.equipment_id).department
    elif data.work_center_id is not None:
        if not db.query(WorkCenter.id).filter(WorkCenter.id == data.work_center_id).first():
            raise NotFoundError("Work center not found", code="WORK_CENTER_NOT_FOUND")

    team_id = _resolve_team_id(db=db, data=data, department=department)

    # Holding the equipment lock keeps a concurrent last-request-to-Scrap from
    # scrapping the equipment underneath the new request.
    guard = hooks.resolve_locks().hold(data.equipment_id) if data.equipment_id is not None else nullcontext()
    with guard:
        try:
            if data.equipment_id is not None:
                equipment = EquipmentRegistry(db).find(data.equipment_id, for_update=True)
                if equipment is None:
                    raise NotFoundError("Equipment not found", code="EQUIPMENT_NOT_FOUND")
                if equipment.is_scrapped:
                    raise DomainError(
                        code="EQUIPMENT_SCRAPPED",
                        http_status=409,
                        message="Cannot raise maintenance for scrapped equipment",
                        details={"equipment_id": str(equipment.id)},
                    )

            request = RequestStore(db).create(
                request_type=data.type,
                subject=data.subject,
                equipment_id=data.equipment_id,
                work_center_id=data.work_center_id,
                team_id=team_id,
                technician_id=data.technician_id,
                scheduled_date=data.scheduled_date,
                duration=data.duration,
                priority=data.priority,
                notes=data.notes,
                instructions=data.instructions,
            )
            db.add(
                AuditEvent(
                    action="request_created",
                    entity_type="request",
                    entity_id=request.id,
                    entity_name=request.subject,
                    details={
                        "type": request.type,
                        "equipmentId": str(request.equipment_id) if request.equipment_id else None,
                        "teamId": str(team_id) if team_id else None,
                    },
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info("request.created id=%s equipment=%s team=%s", request.id, request.equipment_id, team_id)
    return request


def list_requests_use_case(
    *,
    db: Session,
    stage: RequestStage | str | None = None,
    request_type: RequestType | str | None = None,
    team_id: UUID | None = None,
    equipment_id: UUID | None = None,
) -> list[MaintenanceRequest]:
    return RequestStore(db).list(
        stage=stage,
        request_type=request_type,
        team_id=team_id,
        equipment_id=equipment_id,
    )
