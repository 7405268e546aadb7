"""Reporting endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_workflow_hooks
from ..schemas import (
    EquipmentBreakdownItem,
    RequestAgingItem,
    TeamProductivityItem,
    TechnicianWorkloadItem,
    TypeImpactResponse,
    VolumeTrendItem,
)
from ..services import reporting
from ..use_cases.stage_transitions import WorkflowHooks

router = APIRouter(prefix="/reporting", tags=["reporting"])


@router.get("/technician-workload", response_model=list[TechnicianWorkloadItem])
def technician_workload(
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    """Request and overdue counts per technician."""
    return reporting.technician_workload(db, today=hooks.today())


@router.get("/volume-trend", response_model=list[VolumeTrendItem])
def volume_trend(db: Session = Depends(get_db)):
    return reporting.request_volume_trend(db)


@router.get("/equipment-breakdowns", response_model=list[EquipmentBreakdownItem])
def equipment_breakdowns(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """Equipment ranked by number of corrective requests."""
    return reporting.equipment_breakdowns(db, limit=limit)


@router.get("/type-impact", response_model=TypeImpactResponse)
def type_impact(db: Session = Depends(get_db)):
    return reporting.maintenance_type_impact(db)


@router.get("/request-aging", response_model=list[RequestAgingItem])
def request_aging(
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    return reporting.request_aging(db, today=hooks.today())


@router.get("/team-productivity", response_model=list[TeamProductivityItem])
def team_productivity(db: Session = Depends(get_db)):
    return reporting.team_productivity(db)
