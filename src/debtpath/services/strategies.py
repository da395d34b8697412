"""Payoff strategy tags and their priority ordering."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping, Optional

from .registry import Debt


class Strategy(str, Enum):
    STATUS_QUO = "status_quo"
    SNOWBALL = "snowball"
    AVALANCHE = "avalanche"

    @property
    def routes_extra_payment(self) -> bool:
        return self is not Strategy.STATUS_QUO


STRATEGY_LABELS: Mapping[Strategy, str] = {
    Strategy.STATUS_QUO: "Status quo · minimum payments only",
    Strategy.SNOWBALL: "Snowball · knock out the smallest balance",
    Strategy.AVALANCHE: "Avalanche · prioritize highest APR first",
}


def order_debts(
    strategy: Strategy,
    debts: Iterable[Debt],
    balances: Optional[Mapping[str, float]] = None,
) -> list[Debt]:
    """Return active debts in payoff priority order for ``strategy``.

    ``balances`` overrides each debt's own balance (the simulator passes the
    working balances of the current month). Debts without a positive balance
    are dropped. Ties fall back to input position so the same input always
    yields the same order.

    Status quo routes no extra money, but freed minimums still cascade, so it
    shares the avalanche order rather than depending on input order.
    """

    def balance_of(debt: Debt) -> float:
        if balances is None:
            return debt.balance
        return balances.get(debt.id, 0.0)

    indexed = [(idx, d) for idx, d in enumerate(debts) if balance_of(d) > 0]

    if strategy is Strategy.SNOWBALL:
        indexed.sort(key=lambda pair: (balance_of(pair[1]), pair[1].apr, pair[0]))
    else:
        indexed.sort(key=lambda pair: (-pair[1].apr, -balance_of(pair[1]), pair[0]))
    return [debt for _, debt in indexed]


__all__ = ["STRATEGY_LABELS", "Strategy", "order_debts"]
