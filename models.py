# models.py
from __future__ import annotations

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    DateTime,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class Event(Base):
    __tablename__ = "events"

    seq = Column(Integer, primary_key=True, autoincrement=True)   # insertion order
    id = Column(String(64), nullable=False, unique=True, index=True)
    title = Column(String(200), nullable=False, default="")
    # naive UTC instants; callers re-attach tzinfo on the way out
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Event(id={self.id!r}, title={self.title!r}, "
            f"start={self.start_time!r}, end={self.end_time!r})>"
        )


# ----------------------------
# Utilities
# ----------------------------
def make_engine(url: str = "sqlite://") -> Engine:
    """
    Engine for `url`. In-memory SQLite keeps a single shared connection so
    every session (and thread) sees the same database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url)


def make_session_factory(url: str = "sqlite://") -> sessionmaker:
    engine = make_engine(url)
    init_db(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Creates tables if they don't exist."""
    Base.metadata.create_all(bind=engine)
