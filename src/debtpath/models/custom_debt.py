"""User-entered debts that are not linked to an aggregator account."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CustomDebt(SQLModel, table=True):
    """Manually entered debt tracked alongside linked liabilities."""

    __tablename__: ClassVar[str] = "custom_debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    name: str = Field(nullable=False, max_length=255)
    debt_type: str = Field(default="other", max_length=50)
    balance: float = Field(nullable=False)
    apr: float = Field(default=15.0, nullable=False)
    # Zero means "not stated"; the registry derives a floor minimum.
    min_payment: float = Field(default=0.0, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    @property
    def debt_key(self) -> str:
        """Opaque id used for this debt in analyses."""
        return f"custom_{self.id}"
