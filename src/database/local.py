import logging
from .nosql_adapter import NoSQLAdapter

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "uploads.db"


def get_nosql_adapter(db_path: str = DEFAULT_DB_PATH) -> NoSQLAdapter:
    """Return a document adapter bound to the given SQLite file."""
    return NoSQLAdapter(db_path)


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize database with all required NoSQL collections."""
    adapter = get_nosql_adapter(db_path)
    adapter.init_collections()
    logger.info(f"Database ready at {db_path}")
