"""Concrete repository implementations using SQLModel."""

from .apr_override import SQLModelAprOverrideRepository
from .custom_debt import SQLModelCustomDebtRepository

__all__ = [
    "SQLModelAprOverrideRepository",
    "SQLModelCustomDebtRepository",
]
