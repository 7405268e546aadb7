from __future__ import annotations

import threading
from datetime import date

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gearguard.database import Base
from gearguard.models import AuditEvent, Equipment, MaintenanceRequest
from gearguard.services.equipment_locks import LocalEquipmentLocks
from gearguard.services.request_store import RequestStore
from gearguard.use_cases.stage_transitions import WorkflowHooks, transition_stage_use_case

WORKERS = 8


def test_concurrent_scrap_transitions_scrap_equipment_once(tmp_path) -> None:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    equipment = Equipment(name="Stamping Press", serial_number="STP-1", is_scrapped=False)
    setup.add(equipment)
    setup.flush()
    request_ids = []
    for index in range(WORKERS):
        request = MaintenanceRequest(
            position=RequestStore(setup).next_position(),
            equipment_id=equipment.id,
            type="corrective",
            subject=f"Failure {index}",
            stage="in_progress",
            priority="high",
        )
        setup.add(request)
        setup.flush()
        request_ids.append(request.id)
    equipment_id = equipment.id
    setup.commit()
    setup.close()

    hooks = WorkflowHooks(locks=LocalEquipmentLocks(wait_seconds=30), today=lambda: date(2026, 3, 16))
    barrier = threading.Barrier(WORKERS)
    errors: list[BaseException] = []

    def _worker(request_id) -> None:
        db = Session()
        try:
            barrier.wait()
            transition_stage_use_case(db=db, request_id=request_id, new_stage="scrap", hooks=hooks)
        except BaseException as exc:  # collected and re-asserted in the main thread
            errors.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=_worker, args=(request_id,)) for request_id in request_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []

    check = Session()
    try:
        stages = [row[0] for row in check.query(MaintenanceRequest.stage).all()]
        assert stages == ["scrap"] * WORKERS

        stored = check.query(Equipment).filter(Equipment.id == equipment_id).one()
        assert stored.is_scrapped is True
        assert stored.scrap_origin == "workflow"

        scrapped_events = check.query(AuditEvent).filter(AuditEvent.action == "equipment_scrapped").all()
        unscrapped_events = check.query(AuditEvent).filter(AuditEvent.action == "equipment_unscrapped").all()
        assert len(scrapped_events) == 1
        assert unscrapped_events == []
    finally:
        check.close()
        engine.dispose()
