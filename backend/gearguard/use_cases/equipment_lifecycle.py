"""Equipment registration and manual scrap use-cases."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import ScrapOrigin
from ..domain_errors import NotFoundError
from ..models import AuditEvent, Equipment
from ..schemas import EquipmentCreate
from ..services.equipment_registry import EquipmentRegistry
from .stage_transitions import WorkflowHooks

logger = logging.getLogger(__name__)


def create_equipment_use_case(*, db: Session, data: EquipmentCreate) -> Equipment:
    try:
        equipment = EquipmentRegistry(db).create(**data.model_dump())
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("equipment.created id=%s serial=%s", equipment.id, equipment.serial_number)
    return equipment


def scrap_equipment_manually_use_case(
    *,
    db: Session,
    equipment_id: UUID,
    reason: str | None,
    hooks: WorkflowHooks | None = None,
) -> Equipment:
    """Scrap equipment outside the request workflow.

    Manual scraps are never undone by stage transitions. Scrapping equipment
    that is already scrapped keeps the original date and claims the scrap as
    manual.
    """
    hooks = hooks or WorkflowHooks()
    registry = EquipmentRegistry(db)
    registry.get(equipment_id)

    with hooks.resolve_locks().hold(equipment_id):
        try:
            equipment = registry.find(equipment_id, for_update=True)
            if equipment is None:
                raise NotFoundError("Equipment not found", code="EQUIPMENT_NOT_FOUND")

            was_scrapped = bool(equipment.is_scrapped)
            previous_origin = equipment.scrap_origin
            scrap_reason = (reason or "").strip() or equipment.scrap_reason
            registry.set_scrap_state(
                equipment.id,
                is_scrapped=True,
                scrap_date=equipment.scrap_date if was_scrapped else hooks.today(),
                scrap_reason=scrap_reason,
                scrap_origin=ScrapOrigin.MANUAL,
            )
            db.add(
                AuditEvent(
                    action="equipment_scrapped",
                    entity_type="equipment",
                    entity_id=equipment.id,
                    entity_name=equipment.name,
                    details={
                        "origin": ScrapOrigin.MANUAL.value,
                        "reason": scrap_reason,
                        "previousOrigin": previous_origin,
                    },
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info("equipment.scrapped_manually id=%s previously_scrapped=%s", equipment_id, was_scrapped)
    return equipment
