"""
Database engine, session factory and backend error handling
"""
import functools
import logging
import time

from sqlalchemy import create_engine, text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from rentys.core.config import settings
from rentys.core.exceptions import BackendUnavailable, ValidationError
from rentys.db.base import Base

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("[ERROR] DATABASE_URL not found!")


def _engine_options(url: str) -> dict:
    if url.lower().startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "connect_args": {
            "connect_timeout": settings.DATABASE_CONNECT_TIMEOUT,
            "options": f"-c statement_timeout={settings.DATABASE_STATEMENT_TIMEOUT_MS}",
        },
        "pool_pre_ping": True,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_recycle": settings.DATABASE_POOL_RECYCLE,
        "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
    }


engine = create_engine(DATABASE_URL, echo=False, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def with_retry(func):
    """
    Retry a read-only backend call on transient driver errors.

    Gives up after ``BACKEND_MAX_RETRIES`` extra attempts and raises
    BackendUnavailable. Never wrap writes with this. When wrapping a service
    method, the service's ``db`` session is rolled back between attempts.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        session = getattr(args[0], "db", None) if args else None
        attempts = settings.BACKEND_MAX_RETRIES + 1
        for attempt in range(1, attempts + 1):
            try:
                return func(*args, **kwargs)
            except OperationalError as e:
                if session is not None:
                    session.rollback()
                if attempt == attempts:
                    logger.error(f"[DB] {func.__name__} failed after {attempt} attempt(s): {e}")
                    raise BackendUnavailable() from e
                logger.warning(f"[DB] {func.__name__} transient failure (attempt {attempt}): {e}")
                time.sleep(settings.BACKEND_RETRY_BACKOFF_SECONDS * attempt)
            except DBAPIError as e:
                if session is not None:
                    session.rollback()
                logger.error(f"[DB] {func.__name__} failed: {e}")
                raise BackendUnavailable() from e
    return wrapper


def commit_or_raise(db: Session) -> None:
    """Commit a single-attempt write; driver failures become BackendUnavailable"""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[DB] Constraint violation on commit: {e.orig}")
        raise ValidationError("Write violates a data constraint") from e
    except DBAPIError as e:
        db.rollback()
        logger.error(f"[DB] Commit failed: {e}")
        raise BackendUnavailable() from e


def test_connection():
    """Test database connection - NON-BLOCKING."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            logger.info(f"[OK] Database connected: {engine.url.render_as_string(hide_password=True)}")
            return True
    except Exception as e:
        logger.warning(f"[WARN] Database connection failed (continuing): {e}")
        return False


def init_db():
    """Initialize database tables - NON-BLOCKING."""
    try:
        # Import all models so they're registered with Base
        from rentys import models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("[OK] Database tables initialized!")
        return True
    except Exception as e:
        logger.warning(f"[WARN] Database init warning: {e}")
        return False


def close_db_connection():
    """Close database connections."""
    engine.dispose()
    logger.info("[OK] Database connections closed")
