"""Maintenance team and technician endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import TeamCreate, TeamResponse, TechnicianCreate, TechnicianResponse
from ..services.team_directory import TeamDirectory

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=list[TeamResponse])
def list_teams(db: Session = Depends(get_db)):
    """List teams with their technicians."""
    return TeamDirectory(db).list_teams()


@router.post("", response_model=TeamResponse, status_code=201)
def create_team(data: TeamCreate, db: Session = Depends(get_db)):
    team = TeamDirectory(db).create_team(data.name)
    db.commit()
    db.refresh(team)
    return team


@router.post("/{team_id}/technicians", response_model=TechnicianResponse, status_code=201)
def add_technician(team_id: UUID, data: TechnicianCreate, db: Session = Depends(get_db)):
    technician = TeamDirectory(db).add_technician(team_id, name=data.name, avatar=data.avatar)
    db.commit()
    return technician
