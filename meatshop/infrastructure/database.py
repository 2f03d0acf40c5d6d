import logging
import time

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker

from meatshop.core.config import settings

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def init_db(bind=None, retries: int | None = None, wait_seconds: int | None = None) -> bool:
    """
    Create the tables, retrying while the database is still starting up.
    Returns False if every attempt failed.
    """
    bind = bind or engine
    retries = retries or settings.DB_CONNECT_RETRIES
    wait_seconds = settings.DB_RETRY_WAIT_SECONDS if wait_seconds is None else wait_seconds

    # Models must be imported so they register on Base.metadata
    from meatshop.domain import models  # noqa: F401

    for attempt in range(retries):
        try:
            logger.info("🔄 Attempting DB connection (%s/%s)...", attempt + 1, retries)
            Base.metadata.create_all(bind=bind)
            logger.info("✅ DB Connected and Tables Created.")
            return True
        except OperationalError:
            logger.warning("⚠️ DB not ready yet. Waiting %ss...", wait_seconds)
            time.sleep(wait_seconds)

    logger.error("❌ Could not connect to DB after %s retries.", retries)
    return False
