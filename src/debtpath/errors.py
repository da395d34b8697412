"""Application error hierarchy.

Every error the HTTP layer reports on purpose derives from :class:`AppError`;
anything else is treated as a programming error and surfaces as a 500.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping


class AppError(Exception):
    """Base class for operational errors with a status code and error code."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
        }


class ValidationError(AppError):
    """Invalid input rejected at the boundary.

    ``details`` maps a field path (``"extra_payment"``, ``"debts[2].balance"``)
    to the list of problems found for it.
    """

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, errors: Mapping[str, List[str]] | None = None) -> None:
        super().__init__(message, details={k: list(v) for k, v in (errors or {}).items()})

    @property
    def errors(self) -> Dict[str, List[str]]:
        return self.details


class NotFoundError(AppError):
    """Requested resource does not exist for the current user."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found", details={"resource": resource})


__all__ = ["AppError", "ValidationError", "NotFoundError"]
