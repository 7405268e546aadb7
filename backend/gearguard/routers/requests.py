"""Maintenance request endpoints."""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..constants import RequestStage, RequestType
from ..database import get_db
from ..dependencies import get_workflow_hooks
from ..schemas import (
    MaintenanceRequestCreate,
    MaintenanceRequestResponse,
    MaintenanceRequestUpdate,
    RequestBoardResponse,
    StageTransitionRequest,
)
from ..services.request_store import RequestStore
from ..services.workflow_views import (
    build_board,
    preventive_calendar,
    request_to_response,
    requests_by_scheduled_date,
    requests_to_response,
)
from ..use_cases.maintenance_requests import create_request_use_case, list_requests_use_case
from ..use_cases.stage_transitions import (
    WorkflowHooks,
    transition_stage_use_case,
    update_request_fields_use_case,
)

router = APIRouter(prefix="/requests", tags=["requests"])


@router.post("", response_model=MaintenanceRequestResponse, status_code=201)
def create_request(
    data: MaintenanceRequestCreate,
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    """Create maintenance request; team defaults from the equipment department."""
    request = create_request_use_case(db=db, data=data, hooks=hooks)
    return request_to_response(request, today=hooks.today())


@router.get("", response_model=list[MaintenanceRequestResponse])
def list_requests(
    stage: Optional[RequestStage] = None,
    type: Optional[RequestType] = None,
    team_id: Optional[UUID] = None,
    equipment_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    """List requests filtered by exact match, in creation order."""
    requests = list_requests_use_case(
        db=db,
        stage=stage,
        request_type=type,
        team_id=team_id,
        equipment_id=equipment_id,
    )
    return requests_to_response(requests, today=hooks.today())


@router.get("/board", response_model=RequestBoardResponse)
def get_board(
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    """Requests grouped into the four workflow columns."""
    return build_board(db, today=hooks.today())


@router.get("/calendar", response_model=list[MaintenanceRequestResponse])
def get_calendar(
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    """Open requests scheduled on `date`, or every scheduled preventive request."""
    if day is not None:
        return requests_to_response(requests_by_scheduled_date(db, day), today=hooks.today())
    return requests_to_response(preventive_calendar(db), today=hooks.today())


@router.get("/{request_id}", response_model=MaintenanceRequestResponse)
def get_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    return request_to_response(RequestStore(db).get(request_id), today=hooks.today())


@router.patch("/{request_id}", response_model=MaintenanceRequestResponse)
def update_request(
    request_id: UUID,
    data: MaintenanceRequestUpdate,
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    request = update_request_fields_use_case(db=db, request_id=request_id, data=data, hooks=hooks)
    return request_to_response(request, today=hooks.today())


@router.post("/{request_id}/stage", response_model=MaintenanceRequestResponse)
def transition_stage(
    request_id: UUID,
    data: StageTransitionRequest,
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    """Move request to another workflow column (drag-and-drop)."""
    request = transition_stage_use_case(db=db, request_id=request_id, new_stage=data.stage, hooks=hooks)
    return request_to_response(request, today=hooks.today())
