"""Repository protocol definitions for domain layer."""

from .apr_override import AprOverrideRepository
from .custom_debt import CustomDebtRepository

__all__ = [
    "AprOverrideRepository",
    "CustomDebtRepository",
]
