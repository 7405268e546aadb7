from __future__ import annotations

from datetime import date
from types import SimpleNamespace
from uuid import uuid4

from gearguard.services.workflow_views import (
    build_board,
    group_requests_by_stage,
    preventive_calendar,
    requests_by_scheduled_date,
    requests_by_stage,
)

TODAY = date(2026, 3, 16)


def test_group_requests_by_stage_always_has_all_columns() -> None:
    request = SimpleNamespace(id=uuid4(), stage="repaired")

    grouped = group_requests_by_stage([request])

    assert list(grouped) == ["new", "in_progress", "repaired", "scrap"]
    assert grouped["repaired"] == [request]
    assert grouped["new"] == []


def test_requests_by_stage_keeps_insertion_order(db, make_request) -> None:
    make_request(subject="first", stage="new")
    make_request(subject="second", stage="scrap")
    make_request(subject="third", stage="new")

    grouped = requests_by_stage(db)

    assert [r.subject for r in grouped["new"]] == ["first", "third"]
    assert [r.subject for r in grouped["scrap"]] == ["second"]
    assert grouped["in_progress"] == []


def test_requests_by_scheduled_date_only_returns_open_requests(db, make_request) -> None:
    make_request(subject="open", stage="new", scheduled_date=TODAY)
    make_request(subject="working", stage="in_progress", scheduled_date=TODAY)
    make_request(subject="done", stage="repaired", scheduled_date=TODAY)
    make_request(subject="tomorrow", stage="new", scheduled_date=date(2026, 3, 17))

    assert [r.subject for r in requests_by_scheduled_date(db, TODAY)] == ["open", "working"]


def test_preventive_calendar_lists_scheduled_preventive_requests(db, make_request) -> None:
    make_request(subject="late", type="preventive", scheduled_date=date(2026, 4, 2))
    make_request(subject="early", type="preventive", scheduled_date=date(2026, 4, 1))
    make_request(subject="unscheduled", type="preventive")
    make_request(subject="breakdown", type="corrective", scheduled_date=date(2026, 4, 1))

    assert [r.subject for r in preventive_calendar(db)] == ["early", "late"]


def test_board_marks_overdue_requests(db, make_request) -> None:
    make_request(subject="overdue", stage="new", scheduled_date=date(2026, 3, 1))
    make_request(subject="closed", stage="repaired", scheduled_date=date(2026, 3, 1))

    board = build_board(db, today=TODAY)

    assert [column.stage.value for column in board.columns] == ["new", "in_progress", "repaired", "scrap"]
    assert [column.label for column in board.columns] == ["New", "In Progress", "Repaired", "Scrap"]
    new_column, _, repaired_column, _ = board.columns
    assert new_column.count == 1
    assert new_column.requests[0].is_overdue is True
    assert repaired_column.requests[0].is_overdue is False
