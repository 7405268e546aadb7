"""SQLAlchemy models for equipment, teams, work centers and maintenance requests."""
from sqlalchemy import (
    JSON, Boolean, Column, String, Integer, Date, DateTime, Float, Text, Uuid,
    ForeignKey, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from .constants import RequestPriority, RequestStage, RequestType, ScrapOrigin
from .database import Base


class Equipment(Base):
    """Equipment model.

    Requests reference equipment by id; the equipment side keeps no relationship
    to its requests.
    """
    __tablename__ = "equipment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    serial_number = Column(String(100), unique=True, nullable=False, index=True)
    category = Column(String(100), nullable=True)
    department = Column(String(100), nullable=True, index=True)
    location = Column(String(255), nullable=True)
    owner = Column(String(255), nullable=True)
    purchase_date = Column(Date, nullable=True)
    warranty_info = Column(String(255), nullable=True)
    is_scrapped = Column(Boolean, nullable=False, default=False, index=True)
    scrap_date = Column(Date, nullable=True)
    scrap_reason = Column(Text, nullable=True)
    scrap_origin = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            scrap_origin.in_([origin.value for origin in ScrapOrigin]) | (scrap_origin == None),  # noqa: E711
            name='chk_equipment_scrap_origin'
        ),
        # Scrap fields never outlive the scrapped flag.
        CheckConstraint(
            "is_scrapped OR (scrap_date IS NULL AND scrap_reason IS NULL AND scrap_origin IS NULL)",
            name='chk_equipment_scrap_fields'
        ),
    )


class MaintenanceTeam(Base):
    """Maintenance team model."""
    __tablename__ = "maintenance_teams"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    technicians = relationship("Technician", back_populates="team", order_by="Technician.name")


class Technician(Base):
    """Technician model."""
    __tablename__ = "technicians"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    team_id = Column(Uuid(as_uuid=True), ForeignKey("maintenance_teams.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    avatar = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    team = relationship("MaintenanceTeam", back_populates="technicians")


class WorkCenter(Base):
    """Work center model."""
    __tablename__ = "work_centers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)
    code = Column(String(50), nullable=True)
    tag = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    cost_per_hour = Column(Float, nullable=True)
    capacity_efficiency = Column(Float, nullable=True)
    oee_target = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class RequestPosition(Base):
    """Issued request position; the autoincrement key is the position."""
    __tablename__ = "request_positions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = {"sqlite_autoincrement": True}


class MaintenanceRequest(Base):
    """Maintenance request model."""
    __tablename__ = "maintenance_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Insertion order for stable listings, issued by RequestPosition.
    position = Column(Integer, nullable=False, unique=True, index=True)
    equipment_id = Column(Uuid(as_uuid=True), ForeignKey("equipment.id"), nullable=True, index=True)
    work_center_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("work_centers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    team_id = Column(Uuid(as_uuid=True), ForeignKey("maintenance_teams.id"), nullable=True, index=True)
    technician_id = Column(Uuid(as_uuid=True), ForeignKey("technicians.id"), nullable=True, index=True)
    type = Column(String(20), nullable=False, index=True)
    subject = Column(String(255), nullable=False)
    stage = Column(String(20), nullable=False, default=RequestStage.NEW.value, index=True)
    priority = Column(String(20), nullable=False, default=RequestPriority.MEDIUM.value)
    scheduled_date = Column(Date, nullable=True, index=True)
    duration = Column(Float, nullable=True)  # hours
    notes = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            type.in_([request_type.value for request_type in RequestType]),
            name='chk_request_type'
        ),
        CheckConstraint(
            stage.in_([request_stage.value for request_stage in RequestStage]),
            name='chk_request_stage'
        ),
        CheckConstraint(
            priority.in_([request_priority.value for request_priority in RequestPriority]),
            name='chk_request_priority'
        ),
        CheckConstraint("duration IS NULL OR duration >= 0", name='chk_request_duration_non_negative'),
        CheckConstraint(
            "equipment_id IS NULL OR work_center_id IS NULL",
            name='chk_request_single_target'
        ),
        Index('idx_requests_equipment_stage', 'equipment_id', 'stage'),
    )

    # Relationships
    equipment = relationship("Equipment")
    work_center = relationship("WorkCenter")
    team = relationship("MaintenanceTeam")
    technician = relationship("Technician")


class AuditEvent(Base):
    """Audit event model."""
    __tablename__ = "audit_events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(20), nullable=False)
    entity_id = Column(Uuid(as_uuid=True), nullable=False)
    entity_name = Column(String(255), nullable=True)
    details = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (
        CheckConstraint(
            action.in_([
                'request_created', 'request_updated', 'request_stage_changed',
                'equipment_scrapped', 'equipment_unscrapped',
            ]),
            name='chk_audit_action'
        ),
        CheckConstraint(
            entity_type.in_(['request', 'equipment']),
            name='chk_audit_entity_type'
        ),
        Index('idx_audit_events_entity', 'entity_type', 'entity_id'),
    )
