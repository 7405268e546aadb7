"""Reporting aggregations over maintenance requests."""

from __future__ import annotations

from collections import defaultdict
from datetime import date

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from ..constants import OPEN_STAGES, STAGE_ORDER, RequestType
from ..models import Equipment, MaintenanceRequest, MaintenanceTeam, Technician
from ..schemas import (
    EquipmentBreakdownItem,
    RequestAgingItem,
    TeamProductivityItem,
    TechnicianWorkloadItem,
    TypeImpactResponse,
    VolumeTrendItem,
)

UNASSIGNED_LABEL = "Unassigned"


def _overdue_flag(today: date):
    return case(
        (
            and_(
                MaintenanceRequest.stage.in_(sorted(OPEN_STAGES)),
                MaintenanceRequest.scheduled_date.isnot(None),
                MaintenanceRequest.scheduled_date < today,
            ),
            1,
        ),
        else_=0,
    )


def technician_workload(db: Session, *, today: date) -> list[TechnicianWorkloadItem]:
    rows = (
        db.query(
            Technician.name.label("name"),
            func.count(MaintenanceRequest.id).label("request_count"),
            func.coalesce(func.sum(_overdue_flag(today)), 0).label("overdue"),
        )
        .select_from(MaintenanceRequest)
        .outerjoin(Technician, MaintenanceRequest.technician_id == Technician.id)
        .group_by(Technician.id, Technician.name)
        .all()
    )
    items = [
        TechnicianWorkloadItem(
            name=row.name or UNASSIGNED_LABEL,
            count=int(row.request_count or 0),
            overdue=int(row.overdue or 0),
        )
        for row in rows
    ]
    return sorted(items, key=lambda item: (-item.count, item.name))


def request_volume_trend(db: Session) -> list[VolumeTrendItem]:
    """Monthly corrective/preventive counts over scheduled requests."""
    rows = (
        db.query(MaintenanceRequest.scheduled_date, MaintenanceRequest.type)
        .filter(MaintenanceRequest.scheduled_date.isnot(None))
        .all()
    )
    months: dict[str, dict[str, int]] = defaultdict(lambda: {"corrective": 0, "preventive": 0})
    for scheduled_date, request_type in rows:
        bucket = months[scheduled_date.strftime("%Y-%m")]
        if request_type == RequestType.CORRECTIVE.value:
            bucket["corrective"] += 1
        else:
            bucket["preventive"] += 1
    return [VolumeTrendItem(month=month, **counts) for month, counts in sorted(months.items())]


def equipment_breakdowns(db: Session, *, limit: int = 5) -> list[EquipmentBreakdownItem]:
    """Equipment with the most corrective requests."""
    rows = (
        db.query(Equipment.name.label("name"), func.count(MaintenanceRequest.id).label("request_count"))
        .join(MaintenanceRequest, MaintenanceRequest.equipment_id == Equipment.id)
        .filter(MaintenanceRequest.type == RequestType.CORRECTIVE.value)
        .group_by(Equipment.id, Equipment.name)
        .order_by(func.count(MaintenanceRequest.id).desc(), Equipment.name.asc())
        .limit(limit)
        .all()
    )
    return [EquipmentBreakdownItem(name=row.name, count=int(row.request_count)) for row in rows]


def maintenance_type_impact(db: Session) -> TypeImpactResponse:
    counts = dict(
        db.query(MaintenanceRequest.type, func.count(MaintenanceRequest.id))
        .group_by(MaintenanceRequest.type)
        .all()
    )
    return TypeImpactResponse(
        preventive=int(counts.get(RequestType.PREVENTIVE.value, 0)),
        corrective=int(counts.get(RequestType.CORRECTIVE.value, 0)),
    )


def request_aging(db: Session, *, today: date) -> list[RequestAgingItem]:
    rows = (
        db.query(
            MaintenanceRequest.stage.label("stage"),
            func.count(MaintenanceRequest.id).label("request_count"),
            func.coalesce(func.sum(_overdue_flag(today)), 0).label("overdue"),
        )
        .group_by(MaintenanceRequest.stage)
        .all()
    )
    by_stage = {str(row.stage): row for row in rows}
    return [
        RequestAgingItem(
            stage=stage,
            count=int(by_stage[stage].request_count) if stage in by_stage else 0,
            overdue=int(by_stage[stage].overdue) if stage in by_stage else 0,
        )
        for stage in STAGE_ORDER
    ]


def team_productivity(db: Session) -> list[TeamProductivityItem]:
    """Average hours per request for every team; requests without a duration count as zero."""
    rows = (
        db.query(
            MaintenanceTeam.name.label("name"),
            func.count(MaintenanceRequest.id).label("request_count"),
            func.coalesce(func.sum(MaintenanceRequest.duration), 0).label("total"),
        )
        .outerjoin(MaintenanceRequest, MaintenanceRequest.team_id == MaintenanceTeam.id)
        .group_by(MaintenanceTeam.id, MaintenanceTeam.name)
        .order_by(MaintenanceTeam.name.asc())
        .all()
    )
    return [
        TeamProductivityItem(
            name=row.name,
            avg_duration=round(float(row.total) / row.request_count, 2) if row.request_count else 0.0,
        )
        for row in rows
    ]
