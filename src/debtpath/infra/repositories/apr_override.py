"""SQLModel implementation of the APR override repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.apr_override import AprOverride


class SQLModelAprOverrideRepository:
    """SQLModel-based APR override repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get(self, account_id: str, *, user_id: int) -> Optional[AprOverride]:
        """Retrieve the override for one linked account."""
        with self.session_factory() as session:
            return session.exec(
                select(AprOverride).where(
                    AprOverride.account_id == account_id, AprOverride.user_id == user_id
                )
            ).first()

    def as_mapping(self, *, user_id: int) -> dict[str, float]:
        """Return ``{account_id: apr}`` for the user's overrides."""
        with self.session_factory() as session:
            rows = session.exec(select(AprOverride).where(AprOverride.user_id == user_id)).all()
            return {row.account_id: row.apr for row in rows}

    def upsert(self, account_id: str, apr: float, *, user_id: int) -> AprOverride:
        """Create or replace the override for an account."""
        with self.session_factory() as session:
            row = session.exec(
                select(AprOverride).where(
                    AprOverride.account_id == account_id, AprOverride.user_id == user_id
                )
            ).first()
            if row is None:
                row = AprOverride(user_id=user_id, account_id=account_id, apr=apr)
            else:
                row.apr = apr
                row.updated_at = datetime.now(timezone.utc)
            session.add(row)
            session.commit()
            session.refresh(row)
            return row

    def delete(self, account_id: str, *, user_id: int) -> bool:
        """Remove an override."""
        with self.session_factory() as session:
            row = session.exec(
                select(AprOverride).where(
                    AprOverride.account_id == account_id, AprOverride.user_id == user_id
                )
            ).first()
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True
