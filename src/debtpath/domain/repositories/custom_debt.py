"""Custom debt repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.custom_debt import CustomDebt


class CustomDebtRepository(Protocol):
    """Repository for managing user-entered debts."""

    def get_by_id(self, debt_id: int, *, user_id: int) -> Optional[CustomDebt]:
        """Retrieve a custom debt by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[CustomDebt]:
        """List all custom debts for a user."""
        ...

    def create(self, debt: CustomDebt, *, user_id: int) -> CustomDebt:
        """Create a new custom debt."""
        ...

    def update(self, debt: CustomDebt, *, user_id: int) -> CustomDebt:
        """Update an existing custom debt."""
        ...

    def delete(self, debt_id: int, *, user_id: int) -> bool:
        """Delete a custom debt by ID, returning whether it existed."""
        ...
