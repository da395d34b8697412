"""Database and collaborator wiring for the DebtPath Flask app."""

from __future__ import annotations

from typing import Any

from flask import Flask, current_app

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelAprOverrideRepository, SQLModelCustomDebtRepository
from .logging_config import get_logger
from .services.debts import DebtWorkspace
from .services.liabilities import JSONFileLiabilityFeed, LiabilityFeed, StaticLiabilityFeed

EXTENSION_KEY = "debtpath"

logger = get_logger("extensions")


def _state(app: Flask) -> dict[str, Any]:
    return app.extensions.setdefault(EXTENSION_KEY, {})


def init_db(app: Flask) -> None:
    """Initialize the SQLModel engine and session factory from app configuration."""

    config: BaseConfig = app.config["DEBTPATH_CONFIG"]
    engine = create_db_engine(config)
    init_database(engine)

    _state(app)["session_factory"] = create_session_factory(engine)


def init_liability_feed(app: Flask, feed: LiabilityFeed | None = None) -> None:
    """Attach the aggregator feed; defaults to the configured snapshot file."""

    config: BaseConfig = app.config["DEBTPATH_CONFIG"]
    if feed is None:
        if config.LIABILITIES_FILE:
            feed = JSONFileLiabilityFeed(config.LIABILITIES_FILE)
        else:
            feed = StaticLiabilityFeed()
    _state(app)["liability_feed"] = feed
    logger.info("Liability feed attached", extra={"feed": type(feed).__name__})


def get_session_factory(app: Flask | None = None):
    factory = _state(app or current_app).get("session_factory")
    if factory is None:  # pragma: no cover - exercised in integration tests
        raise RuntimeError("Database engine not initialized")
    return factory


def get_workspace(app: Flask | None = None) -> DebtWorkspace:
    """Build a workspace bound to the app's repositories and feed."""

    app = app or current_app
    factory = get_session_factory(app)
    config: BaseConfig = app.config["DEBTPATH_CONFIG"]
    return DebtWorkspace(
        SQLModelCustomDebtRepository(factory),
        SQLModelAprOverrideRepository(factory),
        _state(app).get("liability_feed"),
        horizon=config.HORIZON_MONTHS,
    )
