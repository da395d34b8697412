"""Month-by-month amortization simulator.

A run is a fold over :func:`simulate_month`, which is a pure function from one
month's inputs (opening balances, priority, rolled-over minimums) to an
immutable :class:`MonthRecord`. Each month:

1. interest accrues on every active debt (``balance * apr / 100 / 12``);
2. the payment pool is the active minimums, plus the extra payment for
   snowball/avalanche, plus minimums freed by debts retired in earlier months;
3. every active debt gets its minimum (capped at its balance), then the rest
   of the pool cascades down the priority list until it runs out;
4. debts that reach zero retire, and their minimums roll over from next month.

Runs stop when everything is retired or at the horizon; the latter is reported
as non-convergent instead of raising.
"""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from ..logging_config import get_logger
from .registry import Debt
from .strategies import Strategy, order_debts

logger = get_logger("simulator")

DEFAULT_HORIZON_MONTHS = 600

# Float dust left after subtracting a payment from an equal balance.
_SETTLED = 1e-9


def add_months(start: date, months: int) -> date:
    """Return ``start`` moved forward ``months`` calendar months, clamping the day."""

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, monthrange(year, month)[1])
    return date(year, month, day)


@dataclass(frozen=True, slots=True)
class DebtLine:
    """One debt's movement within a month."""

    debt_id: str
    opening_balance: float
    interest: float
    minimum_paid: float
    surplus_paid: float
    closing_balance: float

    @property
    def paid(self) -> float:
        return self.minimum_paid + self.surplus_paid

    def to_dict(self) -> dict:
        return {
            "debt_id": self.debt_id,
            "opening_balance": round(self.opening_balance, 2),
            "interest": round(self.interest, 2),
            "minimum_paid": round(self.minimum_paid, 2),
            "surplus_paid": round(self.surplus_paid, 2),
            "closing_balance": round(self.closing_balance, 2),
        }


@dataclass(frozen=True, slots=True)
class MonthRecord:
    """Inputs, allocations and resulting balances for one simulated month."""

    month: int
    priority: tuple[str, ...]
    extra_payment: float
    rolled_over: float
    pool: float
    lines: tuple[DebtLine, ...]
    unspent: float
    retired: tuple[str, ...]

    @property
    def interest(self) -> float:
        return sum(line.interest for line in self.lines)

    @property
    def allocated(self) -> float:
        return sum(line.paid for line in self.lines)

    @property
    def closing_balances(self) -> dict[str, float]:
        return {line.debt_id: line.closing_balance for line in self.lines}

    @property
    def closing_total(self) -> float:
        return sum(line.closing_balance for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "priority": list(self.priority),
            "extra_payment": round(self.extra_payment, 2),
            "rolled_over": round(self.rolled_over, 2),
            "pool": round(self.pool, 2),
            "unspent": round(self.unspent, 2),
            "retired": list(self.retired),
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True, slots=True)
class StrategyResult:
    """Outcome of running one strategy to payoff or to the horizon."""

    strategy: Strategy
    payoff_month: Optional[int]
    payoff_date: Optional[date]
    converged: bool
    months_simulated: int
    total_interest_paid: float
    total_paid: float
    retirement_months: dict[str, Optional[int]] = field(default_factory=dict)
    schedule: tuple[MonthRecord, ...] = ()

    @property
    def effective_months(self) -> int:
        """Months to payoff, or the months simulated when the run never converged."""

        return self.payoff_month if self.payoff_month is not None else self.months_simulated

    def retagged(self, strategy: Strategy) -> "StrategyResult":
        return replace(self, strategy=strategy)

    def to_dict(self, *, include_schedule: bool = False) -> dict:
        payload = {
            "strategy": self.strategy.value,
            "payoff_month": self.payoff_month,
            "months_to_payoff": self.payoff_month,
            "payoff_date": self.payoff_date.isoformat() if self.payoff_date else None,
            "converged": self.converged,
            "months_simulated": self.months_simulated,
            "total_interest_paid": round(self.total_interest_paid, 2),
            "total_paid": round(self.total_paid, 2),
            "retirement_months": dict(self.retirement_months),
        }
        if include_schedule:
            payload["schedule"] = [record.to_dict() for record in self.schedule]
        return payload


def simulate_month(
    *,
    month: int,
    debts: Sequence[Debt],
    balances: Mapping[str, float],
    priority: Sequence[str],
    extra_payment: float,
    rolled_over: float,
) -> MonthRecord:
    """Simulate one month and return its record without touching the inputs."""

    active = [d for d in debts if balances.get(d.id, 0.0) > 0]

    opening: dict[str, float] = {}
    interest: dict[str, float] = {}
    owed: dict[str, float] = {}
    for debt in active:
        opening[debt.id] = balances[debt.id]
        interest[debt.id] = opening[debt.id] * debt.apr / 100 / 12
        owed[debt.id] = opening[debt.id] + interest[debt.id]

    pool = sum(d.min_payment for d in active) + extra_payment + rolled_over

    # Phase one: minimums, capped at what is owed.
    minimum_paid = {d.id: min(d.min_payment, owed[d.id]) for d in active}
    remaining = {d.id: owed[d.id] - minimum_paid[d.id] for d in active}
    surplus = pool - sum(minimum_paid.values())

    # Phase two: waterfall the surplus down the priority list.
    surplus_paid = {d.id: 0.0 for d in active}
    waterfall = [debt_id for debt_id in priority if debt_id in remaining]
    waterfall.extend(d.id for d in active if d.id not in waterfall)
    for debt_id in waterfall:
        if surplus <= 0:
            break
        if remaining[debt_id] <= 0:
            continue
        payment = min(surplus, remaining[debt_id])
        surplus_paid[debt_id] += payment
        remaining[debt_id] -= payment
        surplus -= payment

    lines = []
    retired = []
    for debt in active:
        closing = remaining[debt.id]
        if closing <= _SETTLED:
            closing = 0.0
            retired.append(debt.id)
        lines.append(
            DebtLine(
                debt_id=debt.id,
                opening_balance=opening[debt.id],
                interest=interest[debt.id],
                minimum_paid=minimum_paid[debt.id],
                surplus_paid=surplus_paid[debt.id],
                closing_balance=closing,
            )
        )

    return MonthRecord(
        month=month,
        priority=tuple(waterfall),
        extra_payment=extra_payment,
        rolled_over=rolled_over,
        pool=pool,
        lines=tuple(lines),
        unspent=max(surplus, 0.0),
        retired=tuple(retired),
    )


def _priority(
    strategy: Strategy,
    debts: Sequence[Debt],
    balances: Mapping[str, float],
    order: Optional[Sequence[str]],
) -> list[str]:
    ranked = [d.id for d in order_debts(strategy, debts, balances)]
    if not order:
        return ranked
    pinned = [debt_id for debt_id in order if balances.get(debt_id, 0.0) > 0]
    return pinned + [debt_id for debt_id in ranked if debt_id not in pinned]


def simulate_strategy(
    debts: Iterable[Debt],
    strategy: Strategy,
    *,
    extra_payment: float = 0.0,
    as_of: Optional[date] = None,
    horizon: int = DEFAULT_HORIZON_MONTHS,
    order: Optional[Sequence[str]] = None,
) -> StrategyResult:
    """Run ``strategy`` over ``debts`` until payoff or ``horizon`` months.

    ``extra_payment`` is ignored for status quo. ``order`` pins the waterfall
    priority to the given debt ids (any active debt not listed follows in the
    strategy's own order).
    """

    if horizon <= 0:
        raise ValueError("horizon must be positive")
    if extra_payment < 0:
        raise ValueError("extra_payment must not be negative")

    as_of = as_of or date.today()
    extra = float(extra_payment) if strategy.routes_extra_payment else 0.0
    active = [d for d in debts if d.balance > 0]

    balances = {d.id: float(d.balance) for d in active}
    minimums = {d.id: d.min_payment for d in active}
    retirement_months: dict[str, Optional[int]] = {d.id: None for d in active}
    schedule: list[MonthRecord] = []
    rolled_over = 0.0
    total_interest = 0.0
    total_paid = 0.0
    month = 0

    while any(balance > 0 for balance in balances.values()) and month < horizon:
        month += 1
        record = simulate_month(
            month=month,
            debts=active,
            balances=balances,
            priority=_priority(strategy, active, balances, order),
            extra_payment=extra,
            rolled_over=rolled_over,
        )
        schedule.append(record)
        total_interest += record.interest
        total_paid += record.allocated
        balances.update(record.closing_balances)
        for debt_id in record.retired:
            retirement_months[debt_id] = month
            rolled_over += minimums[debt_id]

    converged = not any(balance > 0 for balance in balances.values())
    if not converged:
        logger.warning(
            "Simulation reached horizon without retiring all debts",
            extra={
                "strategy": strategy.value,
                "horizon": horizon,
                "remaining_balance": round(sum(balances.values()), 2),
                "open_debts": [k for k, v in balances.items() if v > 0],
            },
        )

    return StrategyResult(
        strategy=strategy,
        payoff_month=month if converged else None,
        payoff_date=add_months(as_of, month) if converged else None,
        converged=converged,
        months_simulated=month,
        total_interest_paid=total_interest,
        total_paid=total_paid,
        retirement_months=retirement_months,
        schedule=tuple(schedule),
    )


def solo_payoff_months(debt: Debt, *, horizon: int = DEFAULT_HORIZON_MONTHS) -> Optional[int]:
    """Months to retire ``debt`` alone at its own minimum, or ``None`` if never."""

    if debt.balance <= 0:
        return 0

    balance = float(debt.balance)
    monthly_rate = debt.apr / 100 / 12
    months = 0
    while balance > 0 and months < horizon:
        months += 1
        interest = balance * monthly_rate
        if debt.min_payment <= interest:
            # The minimum never outpaces interest, so the balance cannot shrink.
            return None
        balance += interest
        balance -= min(balance, debt.min_payment)
        if balance <= _SETTLED:
            balance = 0.0
    return months if balance <= 0 else None


__all__ = [
    "DEFAULT_HORIZON_MONTHS",
    "DebtLine",
    "MonthRecord",
    "StrategyResult",
    "add_months",
    "simulate_month",
    "simulate_strategy",
    "solo_payoff_months",
]
