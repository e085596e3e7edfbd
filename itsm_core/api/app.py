"""
FastAPI application for the ITSM core.

Routes are thin: they authenticate the caller, resolve its tenant scope and
delegate to the services. Domain errors map to ``{"error": ...}`` bodies with
the status code the error carries.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from .. import __version__
from ..config import AppConfig, get_config, set_config
from ..db.db_config import (
    DatabaseManager,
    database_config_from_url,
    initialize_db,
    is_db_initialized,
    set_db_manager,
)
from ..exceptions import BaseError
from ..utils.logger import configure_logging, get_logger
from .responses import GENERIC_ERROR_MESSAGE, error_response
from .routers import auth, categories, tickets, users

SERVICE_NAME = "itsm-core"


def _request_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = location[-1] if location else "request"
    return f"{field}: {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    logger = get_logger()

    @app.exception_handler(BaseError)
    async def handle_domain_error(request: Request, exc: BaseError):
        if exc.status_code >= 500:
            return error_response(exc.status_code, GENERIC_ERROR_MESSAGE)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _request_validation_message(exc)
        logger.warning(
            "Rejected malformed request",
            extra={"path": request.url.path, "error_message": message},
        )
        return error_response(400, message)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(
            f"Unhandled error: {type(exc).__name__}",
            extra={"path": request.url.path},
            exc_info=exc,
        )
        return error_response(500, GENERIC_ERROR_MESSAGE)


def create_app(
    config: Optional[AppConfig] = None, db_manager: Optional[DatabaseManager] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Configuration to install globally; defaults to the environment
        db_manager: Database manager to use; when omitted and none is set
            yet, one is created from ``DATABASE_URL``
    """
    if config is not None:
        set_config(config)
    config = get_config()

    configure_logging(
        "api", log_level=config.logging.level, json_logs=config.logging.enable_json_logs
    )

    if db_manager is not None:
        set_db_manager(db_manager)
    elif not is_db_initialized():
        initialize_db(
            database_config_from_url(
                config.database.connection_string, echo=config.database.echo
            )
        )

    app = FastAPI(title="ITSM Core", version=__version__)
    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(categories.router)
    app.include_router(tickets.router)
    app.include_router(users.router)

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}

    return app
