"""SQLModel implementation of the custom debt repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.custom_debt import CustomDebt


class SQLModelCustomDebtRepository:
    """SQLModel-based custom debt repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, debt_id: int, *, user_id: int) -> Optional[CustomDebt]:
        """Retrieve a custom debt by ID."""
        with self.session_factory() as session:
            return session.exec(
                select(CustomDebt).where(CustomDebt.id == debt_id, CustomDebt.user_id == user_id)
            ).first()

    def list_all(self, *, user_id: int) -> list[CustomDebt]:
        """List all custom debts in creation order."""
        with self.session_factory() as session:
            statement = (
                select(CustomDebt)
                .where(CustomDebt.user_id == user_id)
                .order_by(CustomDebt.id)  # type: ignore
            )
            return list(session.exec(statement).all())

    def create(self, debt: CustomDebt, *, user_id: int) -> CustomDebt:
        """Create a new custom debt."""
        with self.session_factory() as session:
            debt.user_id = user_id
            session.add(debt)
            session.commit()
            session.refresh(debt)
            return debt

    def update(self, debt: CustomDebt, *, user_id: int) -> CustomDebt:
        """Update an existing custom debt."""
        with self.session_factory() as session:
            debt.user_id = user_id
            debt.updated_at = datetime.now(timezone.utc)
            debt = session.merge(debt)
            session.commit()
            session.refresh(debt)
            return debt

    def delete(self, debt_id: int, *, user_id: int) -> bool:
        """Delete a custom debt by ID."""
        with self.session_factory() as session:
            debt = session.exec(
                select(CustomDebt).where(CustomDebt.id == debt_id, CustomDebt.user_id == user_id)
            ).first()
            if debt is None:
                return False
            session.delete(debt)
            session.commit()
            return True
