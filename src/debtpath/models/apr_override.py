"""User-supplied APRs for linked accounts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AprOverride(SQLModel, table=True):
    """Replaces the aggregator-reported APR for one linked account."""

    __tablename__: ClassVar[str] = "debt_apr_override"
    __table_args__ = (UniqueConstraint("user_id", "account_id", name="uq_apr_override_account"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    account_id: str = Field(nullable=False, max_length=255)
    apr: float = Field(nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)
