"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Referenced request, equipment, team or technician does not exist."""

    def __init__(self, message: str, *, code: str = "NOT_FOUND", details: dict[str, Any] | None = None) -> None:
        super().__init__(code=code, http_status=404, message=message, details=details)


class ValidationError(DomainError):
    """Required field missing or malformed; the caller must correct its input."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "VALIDATION_FAILED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code=code, http_status=422, message=message, details=details)


class InconsistentStateError(DomainError):
    """A scrap mutation targets an equipment record that no longer exists."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "EQUIPMENT_STATE_INCONSISTENT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code=code, http_status=409, message=message, details=details)
