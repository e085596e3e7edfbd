from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import URL, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils.logger import get_logger

# Base class for all SQLAlchemy models
Base: Any = declarative_base()

SUPPORTED_DB_TYPES = ("sqlite", "postgres")


class DatabaseConfig(BaseModel):
    db_type: str = "postgres"
    database: str
    host: Optional[str] = None
    port: str = "5432"
    username: Optional[str] = None
    password: Optional[str] = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False
    development_mode: bool = False

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def _url(self) -> URL:
        kind = self.db_type.lower()
        if kind not in SUPPORTED_DB_TYPES:
            raise ValidationError(
                f"Unsupported database type: {self.db_type}",
                error_code=ErrorCode.INVALID_FORMAT,
                field="db_type",
                value=self.db_type,
            )
        if kind == "sqlite":
            return URL.create("sqlite", database=self.database or None)
        missing = [
            name for name in ("host", "database", "username", "password") if not getattr(self, name)
        ]
        if missing:
            raise ValidationError(
                "Missing required Postgres configuration parameters",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="database_config",
                missing=missing,
            )
        return URL.create(
            "postgresql",
            username=self.username,
            password=self.password,
            host=self.host,
            port=int(self.port),
            database=self.database,
        )

    def get_connection_string(self) -> str:
        return self._url().render_as_string(hide_password=False)

    @property
    def is_in_memory(self) -> bool:
        return self.db_type.lower() == "sqlite" and self.database in (":memory:", "")

    def __repr__(self) -> str:
        try:
            target = self._url().render_as_string(hide_password=True)
        except ValidationError:
            target = f"<invalid {self.db_type}>"
        return f"DatabaseConfig({target!r}, development_mode={self.development_mode})"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Database connection manager that uses a Pydantic DatabaseConfig.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def _create_engine(self):
        connection_string = self.config.get_connection_string()
        if self.config.db_type.lower() == "sqlite":
            engine_args: dict = {
                "echo": self.config.echo,
                "connect_args": {"check_same_thread": False},
            }
            # One shared connection, otherwise every pooled connection sees its own empty database
            if self.config.is_in_memory:
                engine_args["poolclass"] = StaticPool
            engine = create_engine(connection_string, **engine_args)
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            return engine
        return create_engine(
            connection_string,
            echo=self.config.echo,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
        )

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        if self.config.development_mode:
            Base.metadata.drop_all(self.engine)
        else:
            raise ServiceError(
                "Cannot drop tables: not in development mode",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="drop_tables",
                development_mode=self.config.development_mode,
            )

    def new_session(self) -> Session:
        """Create an independent session; the caller owns and closes it."""
        return self.session_factory()

    def close(self) -> None:
        self.engine.dispose()


def database_config_from_url(url: str, echo: bool = False) -> DatabaseConfig:
    """
    Build a DatabaseConfig from a DATABASE_URL style connection string.

    Only sqlite and postgres URLs are supported.
    """
    parsed = make_url(url)
    backend = parsed.get_backend_name()
    if backend == "sqlite":
        return DatabaseConfig(
            db_type="sqlite",
            database=parsed.database or ":memory:",
            echo=echo,
            development_mode=True,
        )
    if backend in ("postgres", "postgresql"):
        return DatabaseConfig(
            db_type="postgres",
            host=parsed.host,
            port=str(parsed.port or 5432),
            database=parsed.database or "",
            username=parsed.username,
            password=parsed.password,
            echo=echo,
        )
    raise ValidationError(
        f"Unsupported database type: {backend}",
        error_code=ErrorCode.INVALID_FORMAT,
        field="database_url",
        value=backend,
    )


def import_all_models():
    """Import all models to ensure they're registered with SQLAlchemy metadata."""
    from sqlalchemy.orm import configure_mappers

    from .db_category_models import Category  # noqa
    from .db_tenant_models import Tenant, User  # noqa
    from .db_ticket_models import Comment, Ticket, TicketHistory  # noqa

    configure_mappers()


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    Get the global database manager instance.

    Raises:
        ServiceError: If no database manager has been initialized
    """
    if _db_manager is None:
        raise ServiceError(
            "Database manager not initialized. Call initialize_db() first.",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def is_db_initialized() -> bool:
    return _db_manager is not None


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    """
    Set the global database manager instance.

    This is primarily used for testing to inject a test database manager.
    """
    global _db_manager
    _db_manager = manager


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Initialize the global database manager with the given config.

    Args:
        config: Optional DatabaseConfig. If None, it is built from the
            configured database connection string.

    Returns:
        DatabaseManager: The initialized database manager
    """
    global _db_manager

    if config is None:
        database = get_config().database
        config = database_config_from_url(database.connection_string, echo=database.echo)

    get_logger().info(
        "Initializing database", extra={"db_type": config.db_type, "database": config.database}
    )
    _db_manager = DatabaseManager(config)

    import_all_models()
    _db_manager.create_tables()

    return _db_manager


def close_db() -> None:
    """
    Close the database connections and dispose of the engine.
    """
    global _db_manager
    if _db_manager:
        _db_manager.close()
        _db_manager = None
