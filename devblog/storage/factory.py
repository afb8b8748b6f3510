import logging

from devblog.core.config import STORAGE_DATABASE, Settings
from devblog.db.database import create_tables, get_engine, get_session_maker
from devblog.storage.base import BlogStorage
from devblog.storage.database import DatabaseStorage
from devblog.storage.memory import MemoryStorage

logger = logging.getLogger(__name__)


def build_storage(settings: Settings) -> BlogStorage:
    """Create the storage backend selected by ``settings.storage_backend``"""
    if settings.storage_backend == STORAGE_DATABASE:
        engine = get_engine(settings.database_url)
        # make sure tables are created
        create_tables(engine)
        logger.info("Using database storage at %s", engine.url.render_as_string(hide_password=True))
        return DatabaseStorage(get_session_maker(engine))

    logger.info("Using in-memory storage")
    return MemoryStorage()
