"""SQLModel table exports."""

from .apr_override import AprOverride
from .custom_debt import CustomDebt

__all__ = [
    "AprOverride",
    "CustomDebt",
]
