"""
Database initialization and session management.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from .config import config
from .models import Base
from . import policies

logger = logging.getLogger(__name__)

# Create engine
engine = create_engine(
    config.DATABASE_URL,
    echo=config.FLASK_DEBUG,  # Log SQL in debug mode
    pool_pre_ping=True,  # Verify connections before using
)


if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # ON DELETE CASCADE is ignored by SQLite unless this is on
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db() -> None:
    """Create all database tables if they don't exist."""
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database ready at %s", config.DATABASE_URL)


def drop_db() -> None:
    """Drop all database tables. Use with caution!"""
    Base.metadata.drop_all(bind=engine)


def get_db_session(user_id: Optional[str] = None) -> Session:
    """
    Get a database session (for Flask request context).

    When ``user_id`` is given the session is bound to that user and the
    owner policies apply to every statement it runs. Without it the session
    acts as the service role.

    The caller is responsible for closing the session.
    """
    db = SessionLocal()
    if user_id is not None:
        policies.bind_user(db, user_id)
    return db


@contextmanager
def get_db(user_id: Optional[str] = None) -> Iterator[Session]:
    """
    Get a database session with automatic cleanup.

    Usage:
        with get_db(user.id) as db:
            messages = db.query(NetworkingMessage).all()
    """
    db = get_db_session(user_id)
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
