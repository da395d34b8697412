"""Service module exports."""

from . import comparator, debts, liabilities, registry, reports, simulator, strategies

__all__ = [
    "comparator",
    "debts",
    "liabilities",
    "registry",
    "reports",
    "simulator",
    "strategies",
]
