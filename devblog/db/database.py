from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

# Database configuration
SQLITE_DEV_DB = "sqlite:///./dev.db"
SQLITE_TEST_DB = "sqlite:///./test.db"
SQLITE_PROD_DB = "sqlite:///./prod.db"

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless asked per connection"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@lru_cache()
def get_engine(database_url: str) -> Engine:
    """Get the database engine for a URL"""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False}
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(database_url, pool_pre_ping=True)


def get_session_maker(engine: Engine) -> sessionmaker:
    """Get the session factory

    Rows are converted to pydantic models before the session closes, so
    objects never need to be refreshed after commit.
    """
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def create_tables(db_engine: Optional[Engine] = None, database_url: str = SQLITE_DEV_DB):
    """Create all tables

    Args:
        db_engine: optional engine; when omitted one is built from ``database_url``
        database_url: used only when ``db_engine`` is not given
    """
    # register every model on Base.metadata
    from devblog.models import post, post_tag, subscriber, tag, user  # noqa: F401

    engine = db_engine or get_engine(database_url)
    Base.metadata.create_all(bind=engine)
