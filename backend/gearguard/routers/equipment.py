"""Equipment endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_workflow_hooks
from ..schemas import (
    EquipmentCreate,
    EquipmentDetailResponse,
    EquipmentResponse,
    EquipmentScrapRequest,
    MaintenanceRequestResponse,
    ReconcileResponse,
)
from ..services.equipment_registry import EquipmentRegistry
from ..services.request_store import RequestStore
from ..services.workflow_views import requests_to_response
from ..use_cases.equipment_lifecycle import create_equipment_use_case, scrap_equipment_manually_use_case
from ..use_cases.stage_transitions import WorkflowHooks, reconcile_equipment_scrap_use_case

router = APIRouter(prefix="/equipment", tags=["equipment"])


@router.post("", response_model=EquipmentResponse, status_code=201)
def create_equipment(data: EquipmentCreate, db: Session = Depends(get_db)):
    return create_equipment_use_case(db=db, data=data)


@router.get("", response_model=list[EquipmentResponse])
def list_equipment(db: Session = Depends(get_db)):
    return EquipmentRegistry(db).list()


@router.post("/reconcile-scrap", response_model=ReconcileResponse)
def reconcile_scrap(
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    """Recompute derived scrap state for all equipment with requests."""
    result = reconcile_equipment_scrap_use_case(db=db, hooks=hooks)
    return ReconcileResponse(checked=result.checked, corrected=result.corrected)


@router.get("/{equipment_id}", response_model=EquipmentDetailResponse)
def get_equipment(equipment_id: UUID, db: Session = Depends(get_db)):
    """Get equipment with its number of open requests."""
    equipment = EquipmentRegistry(db).get(equipment_id)
    response = EquipmentDetailResponse.model_validate(equipment)
    response.open_requests = RequestStore(db).count_open_for_equipment(equipment.id)
    return response


@router.get("/{equipment_id}/requests", response_model=list[MaintenanceRequestResponse])
def list_equipment_requests(equipment_id: UUID, db: Session = Depends(get_db)):
    EquipmentRegistry(db).get(equipment_id)
    return requests_to_response(RequestStore(db).list(equipment_id=equipment_id))


@router.post("/{equipment_id}/scrap", response_model=EquipmentResponse)
def scrap_equipment(
    equipment_id: UUID,
    data: EquipmentScrapRequest,
    db: Session = Depends(get_db),
    hooks: WorkflowHooks = Depends(get_workflow_hooks),
):
    """Scrap equipment manually, outside the request workflow."""
    return scrap_equipment_manually_use_case(
        db=db,
        equipment_id=equipment_id,
        reason=data.reason,
        hooks=hooks,
    )
