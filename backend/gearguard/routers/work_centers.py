"""Work center endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from uuid import UUID

from ..database import get_db
from ..models import MaintenanceRequest, WorkCenter
from ..schemas import WorkCenterCreate, WorkCenterResponse, WorkCenterUpdate

router = APIRouter(prefix="/work-centers", tags=["work-centers"])


def _get_work_center(db: Session, work_center_id: UUID) -> WorkCenter:
    work_center = db.query(WorkCenter).filter(WorkCenter.id == work_center_id).first()
    if not work_center:
        raise HTTPException(status_code=404, detail="Work center not found")
    return work_center


@router.get("", response_model=list[WorkCenterResponse])
def list_work_centers(db: Session = Depends(get_db)):
    return db.query(WorkCenter).order_by(WorkCenter.name).all()


@router.post("", response_model=WorkCenterResponse, status_code=201)
def create_work_center(data: WorkCenterCreate, db: Session = Depends(get_db)):
    work_center = WorkCenter(**data.model_dump())
    db.add(work_center)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Work center name already exists")
    db.refresh(work_center)
    return work_center


@router.get("/{work_center_id}", response_model=WorkCenterResponse)
def get_work_center(work_center_id: UUID, db: Session = Depends(get_db)):
    return _get_work_center(db, work_center_id)


@router.patch("/{work_center_id}", response_model=WorkCenterResponse)
def update_work_center(work_center_id: UUID, data: WorkCenterUpdate, db: Session = Depends(get_db)):
    work_center = _get_work_center(db, work_center_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "name" and value is None:
            continue
        setattr(work_center, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Work center name already exists")
    db.refresh(work_center)
    return work_center


@router.delete("/{work_center_id}", status_code=204)
def delete_work_center(work_center_id: UUID, db: Session = Depends(get_db)):
    """Delete work center; its requests keep existing without a target."""
    work_center = _get_work_center(db, work_center_id)
    # SQLite does not enforce ON DELETE SET NULL without the foreign_keys pragma.
    db.query(MaintenanceRequest).filter(
        MaintenanceRequest.work_center_id == work_center.id
    ).update({MaintenanceRequest.work_center_id: None}, synchronize_session=False)
    db.delete(work_center)
    db.commit()
