"""Database location per environment."""

from pathlib import Path

from safequery.log import get_logger
from safequery.types import Environment

logger = get_logger(__name__)


class DatabaseConfig:
    """Resolve where the SQLite database lives for an environment."""

    def __init__(
        self,
        environment: Environment = Environment.DEVELOPMENT,
        base_dir: Path | None = None,
    ) -> None:
        """Initialize database configuration.

        Args:
            environment: Environment type (development, testing, production)
            base_dir: Directory holding ``db/``; defaults to the working directory
        """
        self.environment = environment
        self._base_dir = base_dir or Path.cwd()

    @property
    def database_dir(self) -> Path:
        """Get database directory for current environment."""
        return self._base_dir / "db"

    @property
    def database_path(self) -> Path | None:
        """SQLite file for the environment; None means in-memory (testing)."""
        if self.environment == Environment.TESTING:
            return None
        if self.environment == Environment.DEVELOPMENT:
            return self.database_dir / "safequery.dev.db"
        return self.database_dir / "safequery.db"

    def setup_database_directory(self) -> None:
        """Create database directory if it doesn't exist."""
        if self.environment != Environment.TESTING:
            self.database_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Database directory: {self.database_dir}")


__all__ = ["DatabaseConfig"]
