"""Stage and scrap-by-exhaustion invariant helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable

from ..constants import OPEN_STAGES, STAGE_ORDER, RequestStage, RequestType, ScrapOrigin

SCRAP_ACTION_SCRAP = "scrap"
SCRAP_ACTION_UNSCRAP = "unscrap"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def today_utc() -> date:
    return now_utc().date()


def normalize_stage(stage: RequestStage | str | None) -> str:
    """Map enum members and board labels ("In Progress", "in-progress") to stored stage values."""
    if isinstance(stage, RequestStage):
        return stage.value
    if not stage or not str(stage).strip():
        raise ValueError("Request stage is required")
    value = str(stage).strip().lower().replace("-", "_").replace(" ", "_")
    if value not in STAGE_ORDER:
        raise ValueError(f"Unknown request stage: {stage}")
    return value


def normalize_request_type(request_type: RequestType | str | None) -> str:
    if isinstance(request_type, RequestType):
        return request_type.value
    if not request_type or not str(request_type).strip():
        raise ValueError("Request type is required")
    value = str(request_type).strip().lower()
    if value not in {t.value for t in RequestType}:
        raise ValueError(f"Unknown request type: {request_type}")
    return value


def is_overdue(*, stage: str | None, scheduled_date: date | None, today: date | None = None) -> bool:
    if scheduled_date is None or stage not in OPEN_STAGES:
        return False
    return scheduled_date < (today or today_utc())


def all_requests_scrapped(stages: Iterable[str]) -> bool:
    """True only for a non-empty set of stages that are all Scrap."""
    seen = False
    for stage in stages:
        seen = True
        if stage != RequestStage.SCRAP.value:
            return False
    return seen


def derive_scrap_reason(subject: str | None) -> str:
    subject = (subject or "").strip()
    if not subject:
        return "All maintenance requests reached Scrap"
    return f"Scrapped via maintenance request: {subject}"


def decide_scrap_action(*, all_scrap: bool, is_scrapped: bool, scrap_origin: str | None) -> str | None:
    """Return the equipment mutation implied by the current request stages.

    The workflow only undoes scraps it caused; manual scraps (and legacy rows
    without an origin) are left alone.
    """
    if all_scrap and not is_scrapped:
        return SCRAP_ACTION_SCRAP
    if is_scrapped and not all_scrap and scrap_origin == ScrapOrigin.WORKFLOW.value:
        return SCRAP_ACTION_UNSCRAP
    return None
