from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gearguard import models
from gearguard.database import Base
from gearguard.services.equipment_locks import LocalEquipmentLocks
from gearguard.services.request_store import RequestStore
from gearguard.use_cases.stage_transitions import WorkflowHooks

TODAY = date(2026, 3, 16)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def hooks() -> WorkflowHooks:
    return WorkflowHooks(locks=LocalEquipmentLocks(wait_seconds=5), today=lambda: TODAY)


@pytest.fixture()
def make_equipment(db):
    def _make(**overrides):
        fields = {
            "name": "CNC Milling Machine A1",
            "serial_number": f"SN-{uuid4().hex[:8]}",
            "department": "Machine Shop",
            "is_scrapped": False,
        }
        fields.update(overrides)
        equipment = models.Equipment(**fields)
        db.add(equipment)
        db.commit()
        return equipment

    return _make


@pytest.fixture()
def make_team(db):
    def _make(name: str = "Machine Shop", technicians: tuple[str, ...] = ()):
        team = models.MaintenanceTeam(name=name)
        db.add(team)
        db.flush()
        for technician_name in technicians:
            db.add(models.Technician(team_id=team.id, name=technician_name))
        db.commit()
        return team

    return _make


@pytest.fixture()
def make_request(db):
    def _make(**overrides):
        fields = {
            "type": "corrective",
            "subject": "Spindle vibration",
            "stage": "new",
            "priority": "medium",
        }
        fields.update(overrides)
        request = models.MaintenanceRequest(position=RequestStore(db).next_position(), **fields)
        db.add(request)
        db.commit()
        return request

    return _make
