"""Equipment Registry: equipment records and their scrap state."""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import ScrapOrigin
from ..domain_errors import NotFoundError, ValidationError
from ..models import Equipment
from .scrap_rules import today_utc

_CREATE_FIELDS: frozenset[str] = frozenset({
    "name",
    "serial_number",
    "category",
    "department",
    "location",
    "owner",
    "purchase_date",
    "warranty_info",
})


class EquipmentRegistry:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find(self, equipment_id: UUID, *, for_update: bool = False) -> Equipment | None:
        """Load equipment; `for_update` re-reads the row and locks it where the database supports it."""
        query = self.db.query(Equipment).filter(Equipment.id == equipment_id)
        if for_update:
            query = query.populate_existing().with_for_update()
        return query.first()

    def get(self, equipment_id: UUID) -> Equipment:
        equipment = self.find(equipment_id)
        if not equipment:
            raise NotFoundError("Equipment not found", code="EQUIPMENT_NOT_FOUND")
        return equipment

    def list(self) -> list[Equipment]:
        return self.db.query(Equipment).order_by(Equipment.name.asc(), Equipment.serial_number.asc()).all()

    def create(self, **fields: Any) -> Equipment:
        unknown = sorted(set(fields) - _CREATE_FIELDS)
        if unknown:
            raise ValidationError(
                "Unknown equipment fields: " + ", ".join(unknown),
                code="EQUIPMENT_VALIDATION_FAILED",
            )
        name = (fields.get("name") or "").strip()
        serial_number = (fields.get("serial_number") or "").strip()
        if not name or not serial_number:
            raise ValidationError(
                "Equipment name and serial number are required",
                code="EQUIPMENT_VALIDATION_FAILED",
            )

        taken = self.db.query(Equipment.id).filter(Equipment.serial_number == serial_number).first()
        if taken:
            raise ValidationError(
                "Serial number already registered",
                code="EQUIPMENT_SERIAL_TAKEN",
                details={"serial_number": serial_number},
            )

        equipment = Equipment(**{**fields, "name": name, "serial_number": serial_number})
        equipment.is_scrapped = False
        self.db.add(equipment)
        self.db.flush()
        return equipment

    def set_scrap_state(
        self,
        equipment_id: UUID,
        *,
        is_scrapped: bool,
        scrap_date: date | None = None,
        scrap_reason: str | None = None,
        scrap_origin: ScrapOrigin | str | None = None,
    ) -> Equipment:
        """Write the scrap flag, date, reason and origin as one unit.

        Un-scrapping clears the other three fields regardless of the arguments.
        """
        equipment = self.get(equipment_id)
        if is_scrapped:
            origin = scrap_origin.value if isinstance(scrap_origin, ScrapOrigin) else scrap_origin
            equipment.is_scrapped = True
            equipment.scrap_date = scrap_date or today_utc()
            equipment.scrap_reason = scrap_reason
            equipment.scrap_origin = origin or ScrapOrigin.MANUAL.value
        else:
            equipment.is_scrapped = False
            equipment.scrap_date = None
            equipment.scrap_reason = None
            equipment.scrap_origin = None
        self.db.flush()
        return equipment
