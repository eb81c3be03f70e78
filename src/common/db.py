"""Database helpers using SQLAlchemy and Alembic."""

from __future__ import annotations

from pathlib import Path

from alembic import command  # type: ignore[attr-defined]
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "alembic"


def create_sync_engine(url: str) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite."""

    kwargs: dict[str, object] = {"future": True}
    connect_args: dict[str, object] = {}
    if url.startswith("sqlite") and url.endswith(":memory:"):
        kwargs["poolclass"] = StaticPool
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, **kwargs)


def alembic_config(database_url: str) -> Config:
    """Create Alembic configuration with runtime database DSN."""

    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def run_migrations(database_url: str, revision: str = "head") -> None:
    """Run Alembic migrations up to ``revision``."""

    command.upgrade(alembic_config(database_url), revision)
