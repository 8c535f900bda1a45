"""
Database connection and session management.
"""

from contextlib import contextmanager
from typing import Generator, Optional
from pathlib import Path

# Load .env before settings are read
from dotenv import load_dotenv
_env_file = Path(__file__).parent.parent.parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file, encoding='utf-8')

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from storefront.utils.config import get_settings
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


def build_engine(url: Optional[str] = None, max_connections: Optional[int] = None):
    """
    Create an engine for the given URL, defaulting to DATABASE_URL.

    PostgreSQL gets a bounded QueuePool. SQLite (local runs and tests)
    shares a single connection across threads.
    """
    if url is None or max_connections is None:
        settings = get_settings()
        url = url or settings.database_url
        max_connections = max_connections or settings.database_max_connections

    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=max_connections,
        max_overflow=max_connections,
        pool_pre_ping=True,
        echo=False,
    )


engine = build_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI to get database session.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database session outside of requests (CLI).

    Usage:
        with get_db_context() as db:
            user = db.query(User).first()
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """Initialize database - create all tables."""
    from storefront.database.models import Base

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def drop_db():
    """Drop all database tables (use with caution!)."""
    from storefront.database.models import Base

    logger.warning("Dropping all database tables...")
    Base.metadata.drop_all(bind=engine)
    logger.warning("All database tables dropped")
