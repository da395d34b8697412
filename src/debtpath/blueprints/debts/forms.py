"""Debt form definitions and validation helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ...errors import ValidationError
from ...services.liabilities import LinkedLiability, parse_liabilities
from ...services.registry import DebtInput, DebtOrigin, DebtType, NormalizedDebts, normalize_debts

DEBT_TYPE_CHOICES: Dict[str, str] = {
    DebtType.CREDIT_CARD.value: "Credit card",
    DebtType.LINE_OF_CREDIT.value: "Line of credit",
    DebtType.PERSONAL_LOAN.value: "Personal loan",
    DebtType.STUDENT_LOAN.value: "Student loan",
    DebtType.OTHER.value: "Other",
}

MAX_APR = Decimal("100")
DEFAULT_CUSTOM_APR = Decimal("15.00")


class _FormErrors:
    """Mixin collecting field errors and parsing numeric inputs."""

    errors: Dict[str, List[str]]

    def _error(self, field_name: str, message: str) -> None:
        self.errors.setdefault(field_name, []).append(message)

    def _parse_number(
        self,
        field_name: str,
        value: Any,
        *,
        minimum: Optional[Decimal] = None,
        required: bool = True,
    ) -> Optional[Decimal]:
        """Parse numeric input, storing errors when parsing or bounds fail."""

        if value is None or value == "":
            if required:
                self._error(field_name, "This field is required.")
            return None

        if isinstance(value, bool):
            self._error(field_name, "Enter a valid number.")
            return None

        if not isinstance(value, Decimal):
            try:
                value = Decimal(str(value))
            except (InvalidOperation, TypeError, ValueError):
                self._error(field_name, "Enter a valid number.")
                return None

        if not value.is_finite() or not math.isfinite(float(value)):
            self._error(field_name, "Enter a valid number.")
            return None

        if minimum is not None and value < minimum:
            message = (
                "Amount must be greater than zero."
                if minimum > 0
                else "Amount must be at least zero."
            )
            self._error(field_name, message)
        return value

    @property
    def error_messages(self) -> Iterable[str]:
        """Flattened iterable of error strings for summaries."""

        for messages in self.errors.values():
            yield from messages


@dataclass(slots=True)
class CustomDebtForm(_FormErrors):
    """Inputs for creating or editing a user-entered debt."""

    name: str = ""
    balance: Decimal | str | float | None = None
    apr: Decimal | str | float | None = None
    min_payment: Decimal | str | float | None = None
    debt_type: str = DebtType.OTHER.value
    errors: Dict[str, List[str]] = field(default_factory=dict, init=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CustomDebtForm":
        return cls(
            name=payload.get("name") or "",
            balance=payload.get("balance"),
            apr=payload.get("apr"),
            min_payment=payload.get("min_payment"),
            debt_type=payload.get("debt_type") or DebtType.OTHER.value,
        )

    def validate(self) -> bool:
        """Validate inputs returning True when all values are acceptable."""

        self.errors.clear()

        if not isinstance(self.name, str) or not self.name.strip():
            self._error("name", "Enter the creditor or debt name.")
        else:
            self.name = self.name.strip()

        self.balance = self._parse_number("balance", self.balance, minimum=Decimal("0.01"))

        if self.apr is None or self.apr == "":
            self.apr = DEFAULT_CUSTOM_APR
        self.apr = self._parse_number("apr", self.apr, minimum=Decimal("0"))
        if isinstance(self.apr, Decimal) and self.apr > MAX_APR:
            self._error("apr", "APR must be between 0 and 100 percent.")

        self.min_payment = self._parse_number(
            "min_payment", self.min_payment, minimum=Decimal("0"), required=False
        )

        if self.debt_type not in DEBT_TYPE_CHOICES:
            self._error("debt_type", "Choose a debt type.")

        return not self.errors

    def values(self) -> Dict[str, Any]:
        """Validated values ready for the ``CustomDebt`` model."""

        return {
            "name": self.name,
            "balance": float(self.balance),  # type: ignore[arg-type]
            "apr": float(self.apr),  # type: ignore[arg-type]
            "min_payment": float(self.min_payment or 0),
            "debt_type": self.debt_type,
        }


@dataclass(slots=True)
class AprOverrideForm(_FormErrors):
    """A user-entered APR for a linked account."""

    apr: Decimal | str | float | None = None
    errors: Dict[str, List[str]] = field(default_factory=dict, init=False)

    def validate(self) -> bool:
        self.errors.clear()
        self.apr = self._parse_number("apr", self.apr, minimum=Decimal("0"))
        if isinstance(self.apr, Decimal) and self.apr > MAX_APR:
            self._error("apr", "APR must be between 0 and 100 percent.")
        return not self.errors


@dataclass(slots=True)
class AnalysisRequestForm(_FormErrors):
    """An analysis request: extra payment, debts snapshot and as-of date.

    Negative balances or rates inside ``debts`` are not form errors; the
    registry excludes those debts and reports them. Only structurally
    malformed input is rejected here.
    """

    extra_payment: Decimal | str | float | None = None
    debts: Any = None
    liabilities: Any = None
    as_of_date: Any = None
    require_debts: bool = True
    errors: Dict[str, List[str]] = field(default_factory=dict, init=False)
    parsed_debts: List[DebtInput] = field(default_factory=list, init=False)
    parsed_liabilities: List[LinkedLiability] = field(default_factory=list, init=False)
    parsed_as_of: Optional[date] = field(default=None, init=False)

    @classmethod
    def from_payload(cls, payload: Any, *, require_debts: bool = True) -> "AnalysisRequestForm":
        if not isinstance(payload, Mapping):
            form = cls(require_debts=require_debts)
            form.errors["request"] = ["Expected a JSON object."]
            return form
        return cls(
            extra_payment=payload.get("extra_payment"),
            debts=payload.get("debts"),
            liabilities=payload.get("liabilities"),
            as_of_date=payload.get("as_of_date"),
            require_debts=require_debts,
        )

    def validate(self) -> bool:
        if "request" in self.errors:
            return False
        self.errors.clear()
        self.parsed_debts = []

        if self.extra_payment is None or self.extra_payment == "":
            self.extra_payment = Decimal("0")
        self.extra_payment = self._parse_number(
            "extra_payment", self.extra_payment, minimum=Decimal("0")
        )

        if self.debts is None:
            if self.require_debts and not self.liabilities:
                self._error("debts", "This field is required.")
        elif not isinstance(self.debts, list):
            self._error("debts", "Expected a list of debts.")
        else:
            for idx, item in enumerate(self.debts):
                parsed = self._parse_debt(idx, item)
                if parsed is not None:
                    self.parsed_debts.append(parsed)

        self.parsed_liabilities = []
        if self.liabilities:
            try:
                self.parsed_liabilities = parse_liabilities(self.liabilities)
            except ValidationError as exc:
                for key, messages in exc.errors.items():
                    self.errors.setdefault(key, []).extend(messages)

        if self.as_of_date not in (None, ""):
            if isinstance(self.as_of_date, date):
                self.parsed_as_of = self.as_of_date
            else:
                try:
                    self.parsed_as_of = date.fromisoformat(str(self.as_of_date))
                except ValueError:
                    self._error("as_of_date", "Enter a date as YYYY-MM-DD.")

        return not self.errors

    def _parse_debt(self, idx: int, item: Any) -> Optional[DebtInput]:
        prefix = f"debts[{idx}]"
        if not isinstance(item, Mapping):
            self._error(prefix, "Expected a debt object.")
            return None

        before = sum(len(v) for v in self.errors.values())
        balance = self._parse_number(f"{prefix}.balance", item.get("balance"))
        apr = self._parse_number(f"{prefix}.apr", item.get("apr"))
        min_payment = self._parse_number(
            f"{prefix}.min_payment", item.get("min_payment"), required=False
        )
        if sum(len(v) for v in self.errors.values()) != before:
            return None

        origin = item.get("origin") or DebtOrigin.CUSTOM.value
        try:
            origin = DebtOrigin(origin)
        except ValueError:
            self._error(f"{prefix}.origin", "Origin must be 'custom' or 'linked'.")
            return None

        return DebtInput(
            id=str(item.get("id") or f"debt_{idx + 1}"),
            name=str(item.get("name") or f"Debt {idx + 1}"),
            balance=float(balance),  # type: ignore[arg-type]
            apr=float(apr),  # type: ignore[arg-type]
            min_payment=float(min_payment) if min_payment is not None else None,
            debt_type=DebtType.parse(item.get("debt_type")),
            origin=origin,
        )

    def normalized(self, *, overrides: Mapping[str, float] | None = None) -> NormalizedDebts:
        """Run the registry over the validated debts and any liabilities payload."""

        return normalize_debts(
            custom=self.parsed_debts,
            linked=self.parsed_liabilities,
            overrides=overrides,
        )


def parse_analysis_request(
    payload: Any, *, require_debts: bool = True
) -> AnalysisRequestForm:
    """Validate ``payload`` or raise :class:`ValidationError` with itemized errors."""

    form = AnalysisRequestForm.from_payload(payload, require_debts=require_debts)
    if not form.validate():
        raise ValidationError("Invalid analysis request", errors=form.errors)
    return form


__all__ = [
    "AnalysisRequestForm",
    "AprOverrideForm",
    "CustomDebtForm",
    "DEBT_TYPE_CHOICES",
    "parse_analysis_request",
]
