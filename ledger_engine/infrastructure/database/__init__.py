"""
Database initialization and session management.
"""

from collections.abc import Generator
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlmodel import SQLModel

from ledger_engine.core.config import get_settings
from ledger_engine.infrastructure.database import models  # noqa: F401  registers tables


def build_engine(url: str, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", 30)
        return create_engine(url, echo=False, connect_args=connect_args, **kwargs)
    return create_engine(url, echo=False, **kwargs)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


DATABASE_URL = get_settings().engine_url

engine = build_engine(DATABASE_URL)

SessionLocal = build_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency - Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Initialize database - create all tables."""
    bind = bind or engine
    url = bind.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(bind=bind)
