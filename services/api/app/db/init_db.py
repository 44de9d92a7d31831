from __future__ import annotations

import logging
import os

from services.api.app.db.database import get_engine
from services.api.app.db.models import Base

_LOGGER = logging.getLogger(__name__)


def auto_create_enabled() -> bool:
    return os.getenv("CHORES_DB_AUTO_CREATE", "true").strip().lower() in {"1", "true", "yes", "y"}


def init_db(*, reset: bool = False) -> None:
    """Create the chore tables. With reset, drop every table first (local seeding only)."""

    if not reset and not auto_create_enabled():
        _LOGGER.debug("Skipping table creation, CHORES_DB_AUTO_CREATE is off")
        return

    engine = get_engine()
    if reset:
        _LOGGER.warning("Dropping all tables on %s", engine.url)
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
