"""Linked liability snapshots supplied by the account aggregator."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Protocol

from ..errors import ValidationError
from ..logging_config import get_logger

logger = get_logger("liabilities")


@dataclass(frozen=True, slots=True)
class LinkedLiability:
    """Read-only liability snapshot for a linked account."""

    account_id: str
    name: str
    debt_type: str
    balance: float
    statement_balance: Optional[float] = None
    apr: Optional[float] = None
    minimum_payment: Optional[float] = None


class LiabilityFeed(Protocol):
    """Source of linked liability snapshots for a user."""

    def fetch(self, *, user_id: int) -> list[LinkedLiability]:  # pragma: no cover - interface
        ...


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _purchase_apr(entry: Mapping[str, Any]) -> Optional[float]:
    """Pick the purchase APR out of a card's ``aprs`` list, if reported."""

    for apr in entry.get("aprs") or ():
        if apr.get("apr_type") == "purchase_apr" and apr.get("apr_percentage") is not None:
            return float(apr["apr_percentage"])
    return None


def _credit_snapshot(entry: Mapping[str, Any], idx: int) -> LinkedLiability:
    apr = _optional_float(entry.get("effective_apr"))
    if apr is None:
        apr = _purchase_apr(entry)
    return LinkedLiability(
        account_id=str(entry.get("account_id") or f"linked_credit_{idx}"),
        name=entry.get("name") or "Credit Card",
        debt_type="credit_card",
        balance=_optional_float(entry.get("balance")) or 0.0,
        statement_balance=_optional_float(entry.get("last_statement_balance")),
        apr=apr,
        minimum_payment=_optional_float(entry.get("minimum_payment_amount")),
    )


def _student_snapshot(entry: Mapping[str, Any], idx: int) -> LinkedLiability:
    principal = _optional_float(entry.get("principal_balance")) or 0.0
    outstanding_interest = _optional_float(entry.get("outstanding_interest_amount")) or 0.0
    return LinkedLiability(
        account_id=str(entry.get("account_id") or f"linked_student_{idx}"),
        name=entry.get("name") or "Student Loan",
        debt_type="student_loan",
        balance=principal + outstanding_interest,
        apr=_optional_float(entry.get("interest_rate_percentage")),
        minimum_payment=_optional_float(entry.get("minimum_payment_amount")),
    )


def parse_liabilities(payload: Mapping[str, Any] | None) -> list[LinkedLiability]:
    """Convert an aggregator liabilities payload into snapshots.

    The payload carries ``credit`` and ``student`` arrays in the aggregator's
    own field names. Credit cards report an ``aprs`` list (or a pre-resolved
    ``effective_apr``) and a ``last_statement_balance``; student loans report
    principal and outstanding interest separately.
    """

    if not payload:
        return []
    if not isinstance(payload, Mapping):
        raise ValidationError(
            "Invalid liabilities payload", errors={"liabilities": ["Expected an object."]}
        )

    snapshots: list[LinkedLiability] = []
    errors: dict[str, list[str]] = {}
    for kind, builder in (("credit", _credit_snapshot), ("student", _student_snapshot)):
        entries = payload.get(kind) or []
        if not isinstance(entries, list):
            errors.setdefault(f"liabilities.{kind}", []).append("Expected a list.")
            continue
        for idx, entry in enumerate(entries):
            try:
                snapshots.append(builder(entry, idx))
            except (AttributeError, TypeError, ValueError):
                errors.setdefault(f"liabilities.{kind}[{idx}]", []).append(
                    "Malformed liability entry."
                )
    if errors:
        raise ValidationError("Invalid liabilities payload", errors=errors)
    return snapshots


class StaticLiabilityFeed:
    """Feed serving a fixed set of snapshots to every user."""

    def __init__(self, liabilities: Iterable[LinkedLiability] = ()) -> None:
        self._liabilities = list(liabilities)

    def fetch(self, *, user_id: int) -> list[LinkedLiability]:
        return list(self._liabilities)


class JSONFileLiabilityFeed:
    """Feed reading the last aggregator sync from a JSON file.

    The file holds either a single liabilities payload or a mapping of user id
    to payload (``{"1": {"credit": [...]}}``). A missing file means no linked
    accounts.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def fetch(self, *, user_id: int) -> list[LinkedLiability]:
        if not self.path.exists():
            logger.warning("Liabilities file missing", extra={"path": str(self.path)})
            return []
        with self.path.open(encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.warning(
                "Liabilities file is not a JSON object",
                extra={"path": str(self.path), "found": type(data).__name__},
            )
            return []
        if "credit" in data or "student" in data:
            return parse_liabilities(data)
        return parse_liabilities(data.get(str(user_id)))


__all__ = [
    "JSONFileLiabilityFeed",
    "LiabilityFeed",
    "LinkedLiability",
    "StaticLiabilityFeed",
    "parse_liabilities",
]
