"""
Database configuration and session management
"""
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW

logger = logging.getLogger("nimbus.db")


def _engine_kwargs(url: str) -> dict:
    # SQLite needs special connect args and ignores pool sizing; Postgres does not
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": DB_POOL_SIZE, "max_overflow": DB_MAX_OVERFLOW}


engine = create_engine(DATABASE_URL, future=True, **_engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """Create tables for every registered model (idempotent)"""
    # Make sure all models are imported so Base.metadata is populated
    from .models import log, zone  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


# Dependency to get database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    s = SessionLocal()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
