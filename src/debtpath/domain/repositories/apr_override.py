"""APR override repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.apr_override import AprOverride


class AprOverrideRepository(Protocol):
    """Repository for APR overrides on linked accounts."""

    def get(self, account_id: str, *, user_id: int) -> Optional[AprOverride]:
        """Retrieve the override for one linked account."""
        ...

    def as_mapping(self, *, user_id: int) -> dict[str, float]:
        """Return ``{account_id: apr}`` for every override the user stored."""
        ...

    def upsert(self, account_id: str, apr: float, *, user_id: int) -> AprOverride:
        """Create or replace the override for an account."""
        ...

    def delete(self, account_id: str, *, user_id: int) -> bool:
        """Remove an override, returning whether it existed."""
        ...
