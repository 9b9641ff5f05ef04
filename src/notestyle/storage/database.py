"""SQLite database initialization and session management."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine

# Import models so SQLModel registers them
from notestyle.storage import models as _models  # noqa: F401

logger = logging.getLogger(__name__)

_engines: dict[str, object] = {}


def get_engine(db_path: Path):
    """Get or create an engine for the given database path, creating tables."""
    key = str(db_path)
    if key not in _engines:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{db_path}", echo=False)
        SQLModel.metadata.create_all(engine)
        logger.debug("Opened database %s", db_path)
        _engines[key] = engine
    return _engines[key]


def get_session(db_path: Path) -> Session:
    """Create a new database session."""
    return Session(get_engine(db_path))


def dispose_engines() -> None:
    """Close every cached engine (tests and short-lived CLI runs)."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
