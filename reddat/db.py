import os
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


DB_URL = os.getenv("REDDAT_DB_URL", "sqlite:///./reddat.db")


def make_engine(url: str = DB_URL) -> Engine:
    """Build an engine for ``url``; in-memory SQLite shares one connection."""
    kwargs: dict = {"future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def make_sessionmaker(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, future=True)


engine = make_engine()
SessionLocal = make_sessionmaker(engine)

Base = declarative_base()


def init_db(bind: Optional[Engine] = None) -> None:
    from . import models  # noqa: F401 - ensure models are imported
    Base.metadata.create_all(bind=bind or engine)


def get_session() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
