"""Strategy comparator: baseline vs. snowball vs. avalanche."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional, Sequence

from ..logging_config import get_logger
from .registry import Debt, ExcludedDebt
from .simulator import (
    DEFAULT_HORIZON_MONTHS,
    StrategyResult,
    simulate_strategy,
    solo_payoff_months,
)
from .strategies import Strategy

logger = get_logger("comparator")


@dataclass(frozen=True, slots=True)
class SimulationRequest:
    """Validated snapshot of everything one analysis depends on."""

    extra_payment: float
    debts: tuple[Debt, ...]
    as_of_date: date

    def __post_init__(self) -> None:
        if self.extra_payment < 0:
            raise ValueError("extra_payment must not be negative")


@dataclass(frozen=True, slots=True)
class Savings:
    interest_saved_snowball: float = 0.0
    interest_saved_avalanche: float = 0.0
    months_saved_snowball: int = 0
    months_saved_avalanche: int = 0

    def to_dict(self) -> dict:
        return {
            "interest_saved_snowball": self.interest_saved_snowball,
            "interest_saved_avalanche": self.interest_saved_avalanche,
            "months_saved_snowball": self.months_saved_snowball,
            "months_saved_avalanche": self.months_saved_avalanche,
        }


@dataclass(frozen=True, slots=True)
class DebtSummary:
    """A debt as shown alongside the analysis, with its solo payoff and rank."""

    debt: Debt
    solo_payoff_months: Optional[int]
    rank: int

    def to_dict(self) -> dict:
        payload = self.debt.to_dict()
        payload["solo_payoff_months"] = self.solo_payoff_months
        payload["rank"] = self.rank
        return payload


@dataclass(frozen=True, slots=True)
class Analysis:
    extra_payment: float
    as_of_date: date
    total_debt: float
    total_min_payment: float
    strategies: Mapping[Strategy, StrategyResult]
    savings: Savings
    debts: tuple[DebtSummary, ...] = ()
    excluded: tuple[ExcludedDebt, ...] = field(default_factory=tuple)

    @property
    def debt_count(self) -> int:
        return len(self.debts)

    def to_dict(self, *, include_schedule: bool = False) -> dict:
        return {
            "extra_payment": round(self.extra_payment, 2),
            "as_of_date": self.as_of_date.isoformat(),
            "total_debt": round(self.total_debt, 2),
            "total_min_payment": round(self.total_min_payment, 2),
            "debt_count": self.debt_count,
            "strategies": {
                strategy.value: result.to_dict(include_schedule=include_schedule)
                for strategy, result in self.strategies.items()
            },
            "savings": self.savings.to_dict(),
            "debts": [summary.to_dict() for summary in self.debts],
            "excluded": [item.to_dict() for item in self.excluded],
        }


def _savings(baseline: StrategyResult, candidate: StrategyResult) -> tuple[float, int]:
    interest = round(max(baseline.total_interest_paid - candidate.total_interest_paid, 0.0), 2)
    months = max(baseline.effective_months - candidate.effective_months, 0)
    return interest, months


def rank_debts(debts: Sequence[Debt], *, horizon: int = DEFAULT_HORIZON_MONTHS) -> tuple[DebtSummary, ...]:
    """Attach solo payoff months and a 1-based display rank to each debt.

    Debts that pay off sooner on their own rank first; debts that never pay
    off at their minimum rank last. Ties go to the smaller balance, then input
    order.
    """

    solo = [solo_payoff_months(debt, horizon=horizon) for debt in debts]
    order = sorted(
        range(len(debts)),
        key=lambda idx: (solo[idx] is None, solo[idx] or 0, debts[idx].balance, idx),
    )
    rank = {idx: position for position, idx in enumerate(order, start=1)}
    return tuple(
        DebtSummary(debt=debt, solo_payoff_months=solo[idx], rank=rank[idx])
        for idx, debt in enumerate(debts)
    )


def compare_strategies(
    request: SimulationRequest,
    *,
    horizon: int = DEFAULT_HORIZON_MONTHS,
    excluded: Sequence[ExcludedDebt] = (),
) -> Analysis:
    """Run status quo, snowball and avalanche and report the savings."""

    debts = [d for d in request.debts if d.is_active]

    baseline = simulate_strategy(
        debts, Strategy.STATUS_QUO, as_of=request.as_of_date, horizon=horizon
    )
    results: dict[Strategy, StrategyResult] = {Strategy.STATUS_QUO: baseline}
    for strategy in (Strategy.SNOWBALL, Strategy.AVALANCHE):
        if request.extra_payment == 0:
            # Nothing to route: the extra-payment strategies are the baseline.
            results[strategy] = baseline.retagged(strategy)
        else:
            results[strategy] = simulate_strategy(
                debts,
                strategy,
                extra_payment=request.extra_payment,
                as_of=request.as_of_date,
                horizon=horizon,
            )

    interest_snowball, months_snowball = _savings(baseline, results[Strategy.SNOWBALL])
    interest_avalanche, months_avalanche = _savings(baseline, results[Strategy.AVALANCHE])

    analysis = Analysis(
        extra_payment=request.extra_payment,
        as_of_date=request.as_of_date,
        total_debt=sum(d.balance for d in debts),
        total_min_payment=sum(d.min_payment for d in debts),
        strategies=results,
        savings=Savings(
            interest_saved_snowball=interest_snowball,
            interest_saved_avalanche=interest_avalanche,
            months_saved_snowball=months_snowball,
            months_saved_avalanche=months_avalanche,
        ),
        debts=rank_debts(debts, horizon=horizon),
        excluded=tuple(excluded),
    )
    logger.info(
        "Compared payoff strategies",
        extra={
            "debt_count": len(debts),
            "extra_payment": request.extra_payment,
            "baseline_months": baseline.payoff_month,
            "converged": baseline.converged,
        },
    )
    return analysis


__all__ = [
    "Analysis",
    "DebtSummary",
    "Savings",
    "SimulationRequest",
    "compare_strategies",
    "rank_debts",
]
