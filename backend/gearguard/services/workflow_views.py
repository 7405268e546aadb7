"""Read-only workflow views: kanban columns and calendar days."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from ..constants import OPEN_STAGES, STAGE_LABELS, STAGE_ORDER, RequestType
from ..models import MaintenanceRequest
from ..schemas import BoardColumn, MaintenanceRequestResponse, RequestBoardResponse
from .request_store import RequestStore
from .scrap_rules import is_overdue, today_utc


def request_to_response(request: MaintenanceRequest, *, today: date | None = None) -> MaintenanceRequestResponse:
    """Serialize a request with its read-time `is_overdue` flag."""
    response = MaintenanceRequestResponse.model_validate(request)
    response.is_overdue = is_overdue(
        stage=request.stage,
        scheduled_date=request.scheduled_date,
        today=today or today_utc(),
    )
    return response


def requests_to_response(
    requests: Iterable[MaintenanceRequest],
    *,
    today: date | None = None,
) -> list[MaintenanceRequestResponse]:
    today = today or today_utc()
    return [request_to_response(request, today=today) for request in requests]


def group_requests_by_stage(requests: Iterable[MaintenanceRequest]) -> dict[str, list[MaintenanceRequest]]:
    grouped: dict[str, list[MaintenanceRequest]] = {stage: [] for stage in STAGE_ORDER}
    for request in requests:
        grouped.setdefault(request.stage, []).append(request)
    return grouped


def requests_by_stage(db: Session) -> dict[str, list[MaintenanceRequest]]:
    """Every stage is present, each column in insertion order."""
    return group_requests_by_stage(RequestStore(db).list())


def requests_by_scheduled_date(db: Session, day: date) -> list[MaintenanceRequest]:
    """Open requests scheduled exactly on `day`."""
    return (
        db.query(MaintenanceRequest)
        .filter(
            MaintenanceRequest.scheduled_date == day,
            MaintenanceRequest.stage.in_(sorted(OPEN_STAGES)),
        )
        .order_by(MaintenanceRequest.position.asc())
        .all()
    )


def preventive_calendar(db: Session) -> list[MaintenanceRequest]:
    return (
        db.query(MaintenanceRequest)
        .filter(
            MaintenanceRequest.type == RequestType.PREVENTIVE.value,
            MaintenanceRequest.scheduled_date.isnot(None),
        )
        .order_by(MaintenanceRequest.scheduled_date.asc(), MaintenanceRequest.position.asc())
        .all()
    )


def build_board(db: Session, *, today: date | None = None) -> RequestBoardResponse:
    today = today or today_utc()
    grouped = requests_by_stage(db)
    return RequestBoardResponse(
        columns=[
            BoardColumn(
                stage=stage,
                label=STAGE_LABELS[stage],
                count=len(grouped[stage]),
                requests=requests_to_response(grouped[stage], today=today),
            )
            for stage in STAGE_ORDER
        ]
    )
