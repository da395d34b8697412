"""Debt workspace: the stored view of a user's debts and its analysis."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..domain.repositories import AprOverrideRepository, CustomDebtRepository
from ..logging_config import get_logger
from ..models.custom_debt import CustomDebt
from .comparator import Analysis, SimulationRequest, compare_strategies
from .liabilities import LiabilityFeed, StaticLiabilityFeed
from .registry import DebtInput, DebtOrigin, DebtType, NormalizedDebts, normalize_debts
from .simulator import DEFAULT_HORIZON_MONTHS

logger = get_logger("debts")


def custom_to_input(row: CustomDebt) -> DebtInput:
    """Map a stored custom debt onto registry input."""

    return DebtInput(
        id=row.debt_key,
        name=row.name,
        balance=float(row.balance),
        apr=float(row.apr),
        min_payment=float(row.min_payment) if row.min_payment else None,
        debt_type=DebtType.parse(row.debt_type),
        origin=DebtOrigin.CUSTOM,
    )


def analyze_debts(
    normalized: NormalizedDebts,
    *,
    extra_payment: float = 0.0,
    as_of: Optional[date] = None,
    horizon: int = DEFAULT_HORIZON_MONTHS,
) -> Analysis:
    """Compare strategies over an already-normalized debt list."""

    request = SimulationRequest(
        extra_payment=float(extra_payment),
        debts=normalized.active,
        as_of_date=as_of or date.today(),
    )
    return compare_strategies(request, horizon=horizon, excluded=normalized.excluded)


class DebtWorkspace:
    """Resolves custom debts, linked liabilities and APR overrides for a user."""

    def __init__(
        self,
        custom_debts: CustomDebtRepository,
        overrides: AprOverrideRepository,
        feed: LiabilityFeed | None = None,
        *,
        horizon: int = DEFAULT_HORIZON_MONTHS,
    ) -> None:
        self.custom_debts = custom_debts
        self.overrides = overrides
        self.feed = feed or StaticLiabilityFeed()
        self.horizon = horizon

    def registry(self, *, user_id: int) -> NormalizedDebts:
        """Return the merged, validated debt list for ``user_id``."""

        linked = self.feed.fetch(user_id=user_id)
        custom: Iterable[DebtInput] = (
            custom_to_input(row) for row in self.custom_debts.list_all(user_id=user_id)
        )
        normalized = normalize_debts(
            custom=custom,
            linked=linked,
            overrides=self.overrides.as_mapping(user_id=user_id),
        )
        logger.info(
            "Resolved debt registry",
            extra={
                "user_id": user_id,
                "linked": len(linked),
                "debts": len(normalized.debts),
                "excluded": len(normalized.excluded),
            },
        )
        return normalized

    def analyze(
        self,
        *,
        user_id: int,
        extra_payment: float = 0.0,
        as_of: Optional[date] = None,
    ) -> Analysis:
        """Run the strategy comparison over the user's stored debts."""

        return analyze_debts(
            self.registry(user_id=user_id),
            extra_payment=extra_payment,
            as_of=as_of,
            horizon=self.horizon,
        )


__all__ = ["DebtWorkspace", "analyze_debts", "custom_to_input"]
