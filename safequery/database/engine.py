"""Engine and connection factories driven by Settings."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from safequery.config import Settings
from safequery.config import settings as default_settings
from safequery.database.config import DatabaseConfig
from safequery.database.implementations import SQLAlchemyConnection, SQLiteConnection
from safequery.database.implementations.sqlite.sqlite_connection import MEMORY_DATABASE
from safequery.database.interfaces import DatabaseConnection
from safequery.log import get_logger

logger = get_logger(__name__)


def create_database_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine.

    Args:
        database_url: SQLAlchemy database URL
        echo: Enable SQL echo for debugging

    Returns:
        Configured engine
    """
    url = make_url(database_url)
    logger.info(f"Creating database engine for: {url.render_as_string()}")

    connect_args = {}
    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": 60.0}

    return create_engine(url, echo=echo, connect_args=connect_args, pool_pre_ping=True)


def create_connection(settings: Settings | None = None) -> DatabaseConnection:
    """Build an unconnected DatabaseConnection from settings.

    ``database_url`` selects the SQLAlchemy backend; otherwise a SQLite file
    is used (``database_path`` or the environment default, in-memory when
    testing).
    """
    settings = settings or default_settings
    options = {
        "table_prefix": settings.table_prefix,
        "strict_conditions": settings.strict_conditions,
        "log_bindings": settings.log_bindings,
    }

    if settings.database_url:
        engine = create_database_engine(settings.database_url, echo=settings.echo_sql)
        return SQLAlchemyConnection(engine, **options)

    if settings.database_path:
        return SQLiteConnection(settings.database_path, **options)

    config = DatabaseConfig(settings.environment)
    path = config.database_path
    if path is None:
        return SQLiteConnection(MEMORY_DATABASE, **options)
    config.setup_database_directory()
    return SQLiteConnection(path, **options)
