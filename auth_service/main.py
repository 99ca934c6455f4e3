"""FastAPI application entrypoint. No business logic; only wiring, lifespan and error handlers."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth_service import __version__
from auth_service.api import router as api_router
from auth_service.core.config import Settings, get_settings
from auth_service.core.database import Database
from auth_service.core.errors import AuthServiceError, InternalError, error_body
from auth_service.core.logging_config import configure_logging
from auth_service.core.tokens import TokenSigner
from auth_service.schemas.errors import ErrorItem, FieldError

logger = logging.getLogger(__name__)


async def handle_auth_service_error(request: Request, exc: AuthServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=getattr(exc, "cause", None) or exc,
        )
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.to_items()))


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body could not be decoded at all (e.g. invalid JSON); same shape as field validation."""
    items = [
        FieldError(
            msg=err.get("msg", "Invalid request"),
            path=".".join(str(p) for p in err.get("loc", ())[1:]),
            location=str(err.get("loc", ("body",))[0]),
        )
        for err in exc.errors()
    ]
    logger.error("Request validation failed: %s", items[0].msg if items else "unknown")
    return JSONResponse(status_code=400, content=error_body(items))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    item = ErrorItem(type="HttpError", msg=str(exc.detail), path="", location="")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body([item]),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: anything not in the AuthServiceError hierarchy (incl. SQLAlchemyError) is a 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    internal = InternalError(str(exc), cause=exc)
    return JSONResponse(status_code=internal.status_code, content=error_body(internal.to_items()))


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the application.

    settings defaults to get_settings(). When database is given the caller owns it
    (tests); otherwise one is created at startup and disposed at shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Keys are loaded before the database so a bad key fails fast.
        app.state.token_signer = TokenSigner.from_settings(settings)
        owns_database = database is None
        app.state.database = database or Database.from_settings(settings)
        logger.info("Auth service started", extra={"environment": settings.APP_ENV})
        try:
            yield
        finally:
            if owns_database:
                app.state.database.dispose()
            logger.info("Auth service stopped")

    app = FastAPI(
        title="Auth Service",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthServiceError, handle_auth_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", include_in_schema=False)
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Welcome to auth service"}

    return app


app = create_app()
