"""Pydantic schemas for API."""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import date, datetime
from uuid import UUID

from .constants import RequestPriority, RequestStage, RequestType, ScrapOrigin


# Equipment schemas
class EquipmentCreate(BaseModel):
    name: str = Field(min_length=1)
    serial_number: str = Field(min_length=1)
    category: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    owner: Optional[str] = None
    purchase_date: Optional[date] = None
    warranty_info: Optional[str] = None


class EquipmentResponse(BaseModel):
    id: UUID
    name: str
    serial_number: str
    category: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    owner: Optional[str] = None
    purchase_date: Optional[date] = None
    warranty_info: Optional[str] = None
    is_scrapped: bool
    scrap_date: Optional[date] = None
    scrap_reason: Optional[str] = None
    scrap_origin: Optional[ScrapOrigin] = None

    model_config = ConfigDict(from_attributes=True)


class EquipmentDetailResponse(EquipmentResponse):
    """Equipment with the number of requests still being worked on."""
    open_requests: int = 0


class EquipmentScrapRequest(BaseModel):
    reason: Optional[str] = None


# Team schemas
class TeamCreate(BaseModel):
    name: str = Field(min_length=1)


class TechnicianCreate(BaseModel):
    name: str = Field(min_length=1)
    avatar: Optional[str] = None


class TechnicianResponse(BaseModel):
    id: UUID
    name: str
    avatar: Optional[str] = None
    team_id: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)


class TeamResponse(BaseModel):
    id: UUID
    name: str
    technicians: list[TechnicianResponse] = []

    model_config = ConfigDict(from_attributes=True)


# Work center schemas
class WorkCenterCreate(BaseModel):
    name: str = Field(min_length=1)
    code: Optional[str] = None
    tag: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    cost_per_hour: Optional[float] = Field(None, ge=0)
    capacity_efficiency: Optional[float] = Field(None, ge=0)
    oee_target: Optional[float] = Field(None, ge=0, le=100)


class WorkCenterUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = None
    tag: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    cost_per_hour: Optional[float] = Field(None, ge=0)
    capacity_efficiency: Optional[float] = Field(None, ge=0)
    oee_target: Optional[float] = Field(None, ge=0, le=100)


class WorkCenterResponse(BaseModel):
    id: UUID
    name: str
    code: Optional[str] = None
    tag: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    cost_per_hour: Optional[float] = None
    capacity_efficiency: Optional[float] = None
    oee_target: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


# Maintenance request schemas
class MaintenanceRequestCreate(BaseModel):
    type: RequestType
    subject: str = Field(min_length=1, max_length=255)
    equipment_id: Optional[UUID] = None
    work_center_id: Optional[UUID] = None
    team_id: Optional[UUID] = None
    technician_id: Optional[UUID] = None
    scheduled_date: Optional[date] = None
    duration: Optional[float] = Field(None, ge=0)
    priority: RequestPriority = RequestPriority.MEDIUM
    notes: Optional[str] = None
    instructions: Optional[str] = None


class MaintenanceRequestUpdate(BaseModel):
    """Partial update; only fields sent by the client are applied."""
    stage: Optional[RequestStage] = None
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    team_id: Optional[UUID] = None
    technician_id: Optional[UUID] = None
    scheduled_date: Optional[date] = None
    duration: Optional[float] = Field(None, ge=0)
    priority: Optional[RequestPriority] = None
    notes: Optional[str] = None
    instructions: Optional[str] = None


class StageTransitionRequest(BaseModel):
    stage: RequestStage


class MaintenanceRequestResponse(BaseModel):
    id: UUID
    type: RequestType
    subject: str
    stage: RequestStage
    priority: RequestPriority
    equipment_id: Optional[UUID] = None
    work_center_id: Optional[UUID] = None
    team_id: Optional[UUID] = None
    technician_id: Optional[UUID] = None
    scheduled_date: Optional[date] = None
    duration: Optional[float] = None
    notes: Optional[str] = None
    instructions: Optional[str] = None
    is_overdue: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BoardColumn(BaseModel):
    stage: RequestStage
    label: str
    count: int
    requests: list[MaintenanceRequestResponse]


class RequestBoardResponse(BaseModel):
    columns: list[BoardColumn]


# Reporting schemas
class TechnicianWorkloadItem(BaseModel):
    name: str
    count: int
    overdue: int


class VolumeTrendItem(BaseModel):
    month: str
    corrective: int
    preventive: int


class EquipmentBreakdownItem(BaseModel):
    name: str
    count: int


class TypeImpactResponse(BaseModel):
    preventive: int
    corrective: int


class RequestAgingItem(BaseModel):
    stage: RequestStage
    count: int
    overdue: int


class TeamProductivityItem(BaseModel):
    name: str
    avg_duration: float


class ReconcileResponse(BaseModel):
    checked: int
    corrected: int
