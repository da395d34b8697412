"""Blueprint exports."""

from . import debts

__all__ = ["debts"]
