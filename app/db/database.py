import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from app.core.config import Settings
from app.db.base import RecordStore
from app.db.file_store import JsonFileStore
from app.db.models import Base
from app.db.repository import SqlRecordStore

logger = logging.getLogger(__name__)


def build_engine(database_url: str, **kwargs):
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args, **kwargs)


def build_session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


def verify_database_connection(engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


def build_store(settings: Settings) -> RecordStore:
    """Select the persistence backend named by ``STORAGE_BACKEND``."""
    if settings.STORAGE_BACKEND == "database":
        engine = build_engine(settings.DATABASE_URL)
        Base.metadata.create_all(bind=engine)
        logger.info("Database models initialized/checked.")
        verify_database_connection(engine)
        return SqlRecordStore(build_session_factory(engine), engine=engine)

    logger.info(f"Using JSON file store at {settings.STORAGE_PATH}")
    return JsonFileStore(settings.STORAGE_PATH)
