"""SQLAlchemy engine and session factory."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import DatabaseSettings, get_settings


def build_engine(settings: DatabaseSettings) -> Engine:
    if settings.is_sqlite:
        # SQLite connections are shared with the FastAPI worker threads.
        return create_engine(
            settings.url,
            echo=settings.echo,
            connect_args={"check_same_thread": False},
            future=True,
        )
    return create_engine(settings.url, echo=settings.echo, pool_size=settings.pool_size, future=True)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


settings = get_settings()
engine = build_engine(settings)
SessionLocal = build_session_factory(engine)


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
