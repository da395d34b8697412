"""Pytest configuration and shared fixtures for DebtPath tests.

Provides database fixtures, a debt factory and a Flask app wired to a
throwaway data directory, so tests never touch the real instance database.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from debtpath import create_app
from debtpath.infra.database import create_session_factory
from debtpath.models import AprOverride, CustomDebt  # noqa: F401
from debtpath.services.liabilities import LinkedLiability, StaticLiabilityFeed
from debtpath.services.registry import Debt, DebtOrigin, DebtType

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path: Path):
    """Create an isolated SQLite database for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one the app builds."""
    return create_session_factory(db_engine)


# =============================================================================
# Domain Factories
# =============================================================================


@pytest.fixture
def debt_factory():
    """Factory for normalized :class:`Debt` records."""

    def _create(
        id: str = "debt",
        balance: float = 1000.0,
        apr: float = 18.0,
        min_payment: float = 50.0,
        name: str | None = None,
        debt_type: DebtType = DebtType.CREDIT_CARD,
        origin: DebtOrigin = DebtOrigin.CUSTOM,
    ) -> Debt:
        return Debt(
            id=id,
            name=name or id.title(),
            balance=balance,
            apr=apr,
            min_payment=min_payment,
            debt_type=debt_type,
            origin=origin,
        )

    return _create


# =============================================================================
# App Fixtures
# =============================================================================

LINKED_CARD = LinkedLiability(
    account_id="acc_visa",
    name="Linked Visa",
    debt_type="credit_card",
    balance=2100.0,
    statement_balance=2000.0,
    apr=None,
    minimum_payment=60.0,
)


@pytest.fixture()
def app(monkeypatch, tmp_path):
    """Flask app on a temporary data dir with one linked card in the feed."""

    monkeypatch.setenv("DEBTPATH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DEBTPATH_DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.delenv("DEBTPATH_LIABILITIES_FILE", raising=False)
    monkeypatch.delenv("DEBTPATH_HORIZON_MONTHS", raising=False)
    flask_app = create_app("testing", liability_feed=StaticLiabilityFeed([LINKED_CARD]))
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app):
    return app.test_client()


# =============================================================================
# Helper Functions
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01) -> None:
    """Assert two floats are equal within tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default: 0.01 for currency)
    """
    assert abs(actual - expected) < tolerance, f"Expected {expected}, got {actual}"
