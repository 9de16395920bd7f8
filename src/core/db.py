import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from core.config import settings

# make sure all SQLModel models are imported before creating tables
import models  # noqa: F401

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(
    url: str, echo: bool = False, enforce_foreign_keys: bool = True
) -> Engine:
    """Create an engine for the given database url.

    SQLite does not enforce foreign keys unless asked to on every connection,
    and an in-memory SQLite database only lives as long as its one connection,
    so both are taken care of here.
    """
    kwargs = {"echo": echo}
    sa_url = make_url(url)
    is_sqlite = sa_url.get_backend_name() == "sqlite"
    if is_sqlite and sa_url.database in (None, "", ":memory:"):
        kwargs["connect_args"] = {"check_same_thread": False}
        kwargs["poolclass"] = StaticPool

    db_engine = create_engine(url, **kwargs)

    if is_sqlite and enforce_foreign_keys:
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)

    return db_engine


def init_db(db_engine: Engine) -> None:
    SQLModel.metadata.create_all(db_engine)
    logger.info("Database tables created on %s", db_engine.url.render_as_string())


engine = create_db_engine(str(settings.SQLALCHEMY_DATABASE_URI), echo=settings.SQL_ECHO)
