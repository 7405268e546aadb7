"""Request Store: persistence primitives for maintenance requests.

The store only merges fields. Keeping equipment scrap state consistent with
request stages is the job of the stage transition use-case layered on top.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..constants import OPEN_STAGES, RequestPriority, RequestStage, RequestType
from ..domain_errors import NotFoundError, ValidationError
from ..models import MaintenanceRequest, RequestPosition
from .scrap_rules import normalize_request_type, normalize_stage

UPDATABLE_FIELDS: frozenset[str] = frozenset({
    "stage",
    "subject",
    "team_id",
    "technician_id",
    "scheduled_date",
    "duration",
    "priority",
    "notes",
    "instructions",
})


def _normalize_priority(priority: RequestPriority | str | None) -> str:
    if priority is None:
        return RequestPriority.MEDIUM.value
    value = priority.value if isinstance(priority, RequestPriority) else str(priority).strip().lower()
    if value not in {p.value for p in RequestPriority}:
        raise ValidationError(f"Unknown request priority: {priority}", code="REQUEST_PRIORITY_INVALID")
    return value


def _validate_subject(subject: str | None) -> str:
    if subject is None or not str(subject).strip():
        raise ValidationError("Request subject is required", code="REQUEST_SUBJECT_REQUIRED")
    return str(subject).strip()


def _validate_duration(duration: float | None) -> float | None:
    if duration is None:
        return None
    try:
        hours = float(duration)
    except (TypeError, ValueError) as error:
        raise ValidationError("Duration must be a number of hours", code="REQUEST_DURATION_INVALID") from error
    if hours < 0:
        raise ValidationError("Duration cannot be negative", code="REQUEST_DURATION_INVALID")
    return hours


def _stage_or_validation_error(stage: RequestStage | str | None) -> str:
    try:
        return normalize_stage(stage)
    except ValueError as error:
        raise ValidationError(str(error), code="REQUEST_STAGE_INVALID") from error


class RequestStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def next_position(self) -> int:
        """Reserve the next listing position; concurrent creates never share one."""
        issued = RequestPosition()
        self.db.add(issued)
        self.db.flush()
        return issued.id

    def create(
        self,
        *,
        request_type: RequestType | str | None,
        subject: str | None,
        equipment_id: UUID | None = None,
        work_center_id: UUID | None = None,
        team_id: UUID | None = None,
        technician_id: UUID | None = None,
        scheduled_date: date | None = None,
        duration: float | None = None,
        priority: RequestPriority | str | None = None,
        notes: str | None = None,
        instructions: str | None = None,
    ) -> MaintenanceRequest:
        """Persist a new request in stage New."""
        try:
            normalized_type = normalize_request_type(request_type)
        except ValueError as error:
            raise ValidationError(str(error), code="REQUEST_TYPE_INVALID") from error

        request = MaintenanceRequest(
            position=self.next_position(),
            equipment_id=equipment_id,
            work_center_id=work_center_id,
            team_id=team_id,
            technician_id=technician_id,
            type=normalized_type,
            subject=_validate_subject(subject),
            stage=RequestStage.NEW.value,
            priority=_normalize_priority(priority),
            scheduled_date=scheduled_date,
            duration=_validate_duration(duration),
            notes=notes,
            instructions=instructions,
        )
        self.db.add(request)
        self.db.flush()
        return request

    def find(self, request_id: UUID, *, fresh: bool = False) -> MaintenanceRequest | None:
        query = self.db.query(MaintenanceRequest).filter(MaintenanceRequest.id == request_id)
        if fresh:
            query = query.populate_existing()
        return query.first()

    def get(self, request_id: UUID, *, fresh: bool = False) -> MaintenanceRequest:
        request = self.find(request_id, fresh=fresh)
        if not request:
            raise NotFoundError("Maintenance request not found", code="REQUEST_NOT_FOUND")
        return request

    def list(
        self,
        *,
        stage: RequestStage | str | None = None,
        request_type: RequestType | str | None = None,
        team_id: UUID | None = None,
        equipment_id: UUID | None = None,
    ) -> list[MaintenanceRequest]:
        """Exact-match filtering on the provided fields, in insertion order."""
        query = self.db.query(MaintenanceRequest)
        if stage is not None:
            query = query.filter(MaintenanceRequest.stage == _stage_or_validation_error(stage))
        if request_type is not None:
            try:
                normalized_type = normalize_request_type(request_type)
            except ValueError as error:
                raise ValidationError(str(error), code="REQUEST_TYPE_INVALID") from error
            query = query.filter(MaintenanceRequest.type == normalized_type)
        if team_id is not None:
            query = query.filter(MaintenanceRequest.team_id == team_id)
        if equipment_id is not None:
            query = query.filter(MaintenanceRequest.equipment_id == equipment_id)
        return query.order_by(MaintenanceRequest.position.asc()).all()

    def update(self, request_id: UUID, changes: dict[str, Any]) -> MaintenanceRequest:
        """Merge `changes` into the stored request."""
        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Fields cannot be updated: " + ", ".join(unknown),
                code="REQUEST_FIELDS_NOT_UPDATABLE",
                details={"fields": unknown},
            )

        request = self.get(request_id)
        for field, value in changes.items():
            if field == "stage":
                value = _stage_or_validation_error(value)
            elif field == "subject":
                value = _validate_subject(value)
            elif field == "priority":
                value = _normalize_priority(value)
            elif field == "duration":
                value = _validate_duration(value)
            setattr(request, field, value)

        self.db.flush()
        return request

    def stages_for_equipment(self, equipment_id: UUID) -> list[str]:
        rows = (
            self.db.query(MaintenanceRequest.stage)
            .filter(MaintenanceRequest.equipment_id == equipment_id)
            .all()
        )
        return [str(row[0]) for row in rows]

    def count_open_for_equipment(self, equipment_id: UUID) -> int:
        return int(
            self.db.query(func.count(MaintenanceRequest.id))
            .filter(
                MaintenanceRequest.equipment_id == equipment_id,
                MaintenanceRequest.stage.in_(sorted(OPEN_STAGES)),
            )
            .scalar()
            or 0
        )

    def equipment_ids_with_requests(self) -> list[UUID]:
        rows = (
            self.db.query(MaintenanceRequest.equipment_id)
            .filter(MaintenanceRequest.equipment_id.isnot(None))
            .distinct()
            .all()
        )
        return [row[0] for row in rows]
