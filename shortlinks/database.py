import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from shortlinks.config import Settings

logger = logging.getLogger("shortlinks.database")

Base = declarative_base()


def make_engine(settings: Settings) -> Engine:
    if settings.database_url.startswith("sqlite"):
        # SQLite for local dev and tests
        return create_engine(
            settings.database_url,
            # check_same_thread: needed for SQLite + FastAPI; timeout: writers queue on the file lock
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
    )


def init_db(engine: Engine) -> None:
    # models must be imported so their tables are registered on Base.metadata
    from shortlinks import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("URLs table created/verified on %s", engine.url.render_as_string(hide_password=True))
