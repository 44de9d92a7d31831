from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None
_SESSIONMAKER: sessionmaker | None = None


def database_url() -> str:
    # The chores.db default is for local runs only; deployments set DATABASE_URL.
    return os.getenv("DATABASE_URL", "sqlite+pysqlite:///.local/chores.db")


def _build_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, future=True)

    path = make_url(url).database
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, future=True, connect_args={"check_same_thread": False})

    # SQLite ignores REFERENCES unless asked, and categories.id must stay referenced by chores.
    @event.listens_for(engine, "connect")
    def _foreign_keys_on(dbapi_connection, connection_record) -> None:
        del connection_record
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def get_engine() -> Engine:
    """Engine for the chore store, rebuilt whenever DATABASE_URL changes.

    Tests point DATABASE_URL at a tmp_path file and get a fresh engine on first use.
    """

    global _ENGINE, _ENGINE_URL, _SESSIONMAKER

    url = database_url()
    if _ENGINE is None or _ENGINE_URL != url:
        _ENGINE = _build_engine(url)
        _ENGINE_URL = url
        _SESSIONMAKER = sessionmaker(bind=_ENGINE, autoflush=False)
    return _ENGINE


def db_session() -> Session:
    get_engine()
    assert _SESSIONMAKER is not None
    return _SESSIONMAKER()
