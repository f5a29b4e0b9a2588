import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from .config import settings

logger = logging.getLogger(__name__)

class Base(DeclarativeBase):
    pass

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_catalog_schema(bind=None):
    """
    Create the catalog tables if they are missing.
    The catalog is maintained outside this app, so there is no migration
    history here: create_all only adds tables that do not exist yet.
    """
    # Import models so they are registered on Base.metadata
    from . import models  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.debug("Catalog schema ensured on %s", target.url)
