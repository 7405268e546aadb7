"""Team/Technician Directory consulted when requests are created or assigned."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..domain_errors import NotFoundError, ValidationError
from ..models import MaintenanceTeam, Technician


class TeamDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_team_by_department(self, department: str | None) -> MaintenanceTeam | None:
        """Teams are named after the department they serve."""
        if not department or not department.strip():
            return None
        return (
            self.db.query(MaintenanceTeam)
            .filter(func.lower(MaintenanceTeam.name) == department.strip().lower())
            .first()
        )

    def get_team(self, team_id: UUID) -> MaintenanceTeam:
        team = self.db.query(MaintenanceTeam).filter(MaintenanceTeam.id == team_id).first()
        if not team:
            raise NotFoundError("Team not found", code="TEAM_NOT_FOUND")
        return team

    def get_technician(self, technician_id: UUID) -> Technician:
        technician = self.db.query(Technician).filter(Technician.id == technician_id).first()
        if not technician:
            raise NotFoundError("Technician not found", code="TECHNICIAN_NOT_FOUND")
        return technician

    def list_teams(self) -> list[MaintenanceTeam]:
        return (
            self.db.query(MaintenanceTeam)
            .options(selectinload(MaintenanceTeam.technicians))
            .order_by(MaintenanceTeam.name.asc())
            .all()
        )

    def create_team(self, name: str) -> MaintenanceTeam:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Team name is required", code="TEAM_VALIDATION_FAILED")
        if self.db.query(MaintenanceTeam.id).filter(func.lower(MaintenanceTeam.name) == name.lower()).first():
            raise ValidationError("Team name already exists", code="TEAM_NAME_TAKEN", details={"name": name})
        team = MaintenanceTeam(name=name)
        self.db.add(team)
        self.db.flush()
        return team

    def add_technician(self, team_id: UUID, *, name: str, avatar: str | None = None) -> Technician:
        team = self.get_team(team_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Technician name is required", code="TECHNICIAN_VALIDATION_FAILED")
        technician = Technician(team_id=team.id, name=name, avatar=avatar)
        self.db.add(technician)
        self.db.flush()
        return technician
