"""Debt registry: merge custom and linked debts into one validated list.

Linked liabilities come from the account aggregator, custom debts from the
persistence store. Both are normalized into :class:`Debt` records; anything
that fails validation is reported in ``excluded`` rather than raised, so one
bad record never sinks an analysis.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

from ..logging_config import get_logger
from .liabilities import LinkedLiability

logger = get_logger("registry")


class DebtType(str, Enum):
    CREDIT_CARD = "credit_card"
    LINE_OF_CREDIT = "line_of_credit"
    PERSONAL_LOAN = "personal_loan"
    STUDENT_LOAN = "student_loan"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | DebtType | None") -> "DebtType":
        """Return the matching type, treating unknown or empty values as ``OTHER``."""

        if isinstance(value, DebtType):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.OTHER


class DebtOrigin(str, Enum):
    CUSTOM = "custom"
    LINKED = "linked"


class AprSource(str, Enum):
    REPORTED = "reported"
    OVERRIDE = "override"
    DEFAULT = "default"


# Used when the aggregator does not report a rate for a linked account.
DEFAULT_APRS: Mapping[DebtType, float] = {
    DebtType.CREDIT_CARD: 22.00,
    DebtType.LINE_OF_CREDIT: 11.00,
    DebtType.PERSONAL_LOAN: 10.00,
    DebtType.STUDENT_LOAN: 6.00,
    DebtType.OTHER: 15.00,
}

# (share of balance, currency floor) for debts without a stated minimum.
MIN_PAYMENT_POLICIES: Mapping[DebtType, tuple[float, float]] = {
    DebtType.CREDIT_CARD: (0.02, 25.0),
    DebtType.LINE_OF_CREDIT: (0.03, 25.0),
    DebtType.PERSONAL_LOAN: (0.02, 50.0),
    DebtType.STUDENT_LOAN: (0.01, 50.0),
    DebtType.OTHER: (0.02, 25.0),
}


@dataclass(frozen=True, slots=True)
class Debt:
    """A single normalized debt used as simulation input."""

    id: str
    name: str
    balance: float
    apr: float
    min_payment: float
    debt_type: DebtType = DebtType.OTHER
    origin: DebtOrigin = DebtOrigin.CUSTOM
    min_payment_derived: bool = False
    apr_source: AprSource = AprSource.REPORTED

    @property
    def is_active(self) -> bool:
        return self.balance > 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "balance": round(self.balance, 2),
            "apr": self.apr,
            "min_payment": round(self.min_payment, 2),
            "min_payment_derived": self.min_payment_derived,
            "debt_type": self.debt_type.value,
            "origin": self.origin.value,
            "is_custom": self.origin is DebtOrigin.CUSTOM,
            "apr_source": self.apr_source.value,
        }


@dataclass(frozen=True, slots=True)
class DebtInput:
    """Raw debt values before validation and minimum-payment derivation."""

    id: str
    name: str
    balance: float
    apr: float
    min_payment: Optional[float] = None
    debt_type: DebtType = DebtType.OTHER
    origin: DebtOrigin = DebtOrigin.CUSTOM
    apr_source: AprSource = AprSource.REPORTED


@dataclass(frozen=True, slots=True)
class ExcludedDebt:
    """A debt left out of the analysis and why."""

    id: str
    name: str
    reasons: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "reasons": list(self.reasons)}


@dataclass(frozen=True, slots=True)
class NormalizedDebts:
    debts: tuple[Debt, ...] = ()
    excluded: tuple[ExcludedDebt, ...] = field(default_factory=tuple)

    @property
    def active(self) -> tuple[Debt, ...]:
        return tuple(d for d in self.debts if d.is_active)

    def to_dict(self) -> dict:
        return {
            "debts": [d.to_dict() for d in self.debts],
            "excluded": [e.to_dict() for e in self.excluded],
        }


def derive_minimum_payment(balance: float, debt_type: DebtType = DebtType.OTHER) -> float:
    """Return the floor-policy minimum payment for ``balance``.

    The minimum is the larger of a share of the balance and a fixed currency
    floor (see ``MIN_PAYMENT_POLICIES``), never more than the balance itself
    and rounded up to the cent. Any positive balance yields a positive minimum.
    """

    if balance <= 0:
        return 0.0
    rate, floor = MIN_PAYMENT_POLICIES[DebtType.parse(debt_type)]
    payment = min(max(balance * rate, floor), balance)
    return math.ceil(round(payment * 100, 6)) / 100


def _validation_errors(item: DebtInput) -> list[str]:
    reasons: list[str] = []
    if item.balance < 0:
        reasons.append("balance must not be negative")
    if item.apr < 0:
        reasons.append("apr must not be negative")
    if item.min_payment is not None and item.min_payment < 0:
        reasons.append("min_payment must not be negative")
    return reasons


def _finalize(item: DebtInput) -> Debt:
    stated = item.min_payment or 0.0
    derived = stated <= 0
    return Debt(
        id=item.id,
        name=item.name,
        balance=float(item.balance),
        apr=float(item.apr),
        min_payment=derive_minimum_payment(item.balance, item.debt_type) if derived else stated,
        debt_type=item.debt_type,
        origin=item.origin,
        min_payment_derived=derived,
        apr_source=item.apr_source,
    )


def linked_to_input(
    liability: LinkedLiability, overrides: Mapping[str, float] | None = None
) -> DebtInput:
    """Resolve balance and APR for an aggregator snapshot.

    The statement balance wins over the current balance, and a stored override
    wins over the reported rate, which wins over the per-type default.
    """

    debt_type = DebtType.parse(liability.debt_type)
    override = (overrides or {}).get(liability.account_id)
    if override is not None:
        apr, source = float(override), AprSource.OVERRIDE
    elif liability.apr is not None:
        apr, source = float(liability.apr), AprSource.REPORTED
    else:
        apr, source = DEFAULT_APRS[debt_type], AprSource.DEFAULT

    balance = liability.statement_balance
    if balance is None:
        balance = liability.balance

    return DebtInput(
        id=liability.account_id,
        name=liability.name or debt_type.value.replace("_", " ").title(),
        balance=float(balance or 0.0),
        apr=apr,
        min_payment=liability.minimum_payment,
        debt_type=debt_type,
        origin=DebtOrigin.LINKED,
        apr_source=source,
    )


def normalize_debts(
    custom: Iterable[DebtInput] = (),
    linked: Iterable[LinkedLiability] = (),
    overrides: Mapping[str, float] | None = None,
) -> NormalizedDebts:
    """Merge linked and custom debts into one deduplicated, validated list."""

    candidates: list[DebtInput] = [linked_to_input(item, overrides) for item in linked]
    candidates.extend(custom)
    return validate_inputs(candidates)


def validate_inputs(candidates: Sequence[DebtInput]) -> NormalizedDebts:
    """Validate ``candidates`` in order, excluding duplicates and invalid values.

    The first occurrence of an id claims it, even when that occurrence is
    itself invalid.
    """

    debts: list[Debt] = []
    excluded: list[ExcludedDebt] = []
    seen: set[str] = set()

    for item in candidates:
        reasons = _validation_errors(item)
        if item.id in seen:
            reasons.insert(0, "duplicate debt id")
        seen.add(item.id)
        if reasons:
            excluded.append(ExcludedDebt(id=item.id, name=item.name, reasons=tuple(reasons)))
            continue
        debts.append(_finalize(item))

    if excluded:
        logger.info(
            "Excluded debts from registry",
            extra={"excluded": [e.id for e in excluded], "kept": len(debts)},
        )
    return NormalizedDebts(debts=tuple(debts), excluded=tuple(excluded))


__all__ = [
    "AprSource",
    "DEFAULT_APRS",
    "Debt",
    "DebtInput",
    "DebtOrigin",
    "DebtType",
    "ExcludedDebt",
    "MIN_PAYMENT_POLICIES",
    "NormalizedDebts",
    "derive_minimum_payment",
    "linked_to_input",
    "normalize_debts",
    "validate_inputs",
]
