"""Workflow vocabularies shared by models, schemas and use-cases."""
from __future__ import annotations

from enum import Enum


class RequestStage(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    REPAIRED = "repaired"
    SCRAP = "scrap"


class RequestType(str, Enum):
    CORRECTIVE = "corrective"
    PREVENTIVE = "preventive"


class RequestPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ScrapOrigin(str, Enum):
    MANUAL = "manual"
    WORKFLOW = "workflow"


# Kanban column order.
STAGE_ORDER: tuple[str, ...] = tuple(stage.value for stage in RequestStage)

# Stages that still expect work; overdue only applies here.
OPEN_STAGES: frozenset[str] = frozenset({RequestStage.NEW.value, RequestStage.IN_PROGRESS.value})

STAGE_LABELS: dict[str, str] = {
    RequestStage.NEW.value: "New",
    RequestStage.IN_PROGRESS.value: "In Progress",
    RequestStage.REPAIRED.value: "Repaired",
    RequestStage.SCRAP.value: "Scrap",
}
