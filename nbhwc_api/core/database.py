import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from nbhwc_api.core.config import settings

logger = logging.getLogger(__name__)

def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # in-memory databases only survive on a single shared connection
        return create_engine(url, future=True, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    connect_args = {"sslmode": settings.DATABASE_SSLMODE} if settings.DATABASE_SSLMODE else {}
    return create_engine(
        url, future=True, pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE, max_overflow=settings.DATABASE_MAX_OVERFLOW,
        connect_args=connect_args,
    )

engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db() -> None:
    """Create tables that don't exist yet."""
    from nbhwc_api.models.orm import Base
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ensured")
