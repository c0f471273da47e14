# database.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker


@contextmanager
def db_session(factory: sessionmaker) -> Iterator[Session]:
    """
    Provide a SQLAlchemy session from `factory`; rolls back on error and
    always closes.
    """
    db = factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
