from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backoffice.app.api.router import router as api_router
from backoffice.app.core.config import Settings, settings
from backoffice.app.core.http_client import init_http_client
from backoffice.app.core.logging import get_logger, setup_logging
from backoffice.app.db.async_session import close_async_engine, configure_engine
from backoffice.app.db.init_db import init_database, verify_connection
from backoffice.app.exceptions import BackofficeException
from backoffice.app.middleware.auth import AdminAllowList, AdminAuthenticator
from backoffice.app.middleware.rate_limit import FixedWindowRateLimiter, RateLimitSweeper
from backoffice.app.middleware.request_id import RequestIdMiddleware, get_request_id
from backoffice.app.middleware.request_size import RequestSizeLimitMiddleware
from backoffice.app.middleware.security_headers import SecurityHeadersMiddleware
from backoffice.app.services.identity import FirebaseTokenVerifier, TokenVerifier


def create_app(
    app_settings: Optional[Settings] = None,
    token_verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use instead of the environment-loaded ones
        token_verifier: Identity token verifier; defaults to Firebase JWKS

    Returns:
        Configured FastAPI application instance
    """
    app_settings = app_settings or settings

    setup_logging()
    logger = get_logger(__name__)

    rate_limiter = FixedWindowRateLimiter(
        default_window_seconds=app_settings.rate_limit_window_seconds,
        max_entries=app_settings.rate_limit_max_entries,
    )
    if token_verifier is None:
        token_verifier = FirebaseTokenVerifier(
            project_id=app_settings.firebase_project_id,
            jwks_url=app_settings.firebase_jwks_url,
            refresh_interval=app_settings.jwks_refresh_interval,
            min_refresh_interval=app_settings.jwks_min_refresh_interval,
        )
    authenticator = AdminAuthenticator(
        token_verifier,
        AdminAllowList(app_settings.admin_emails),
        min_token_length=app_settings.token_min_length,
        max_token_age_seconds=app_settings.token_max_age_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the HTTP client and database, and run the limiter sweeper."""
        async with init_http_client():
            configure_engine(app_settings.database_url)
            if not await verify_connection():
                logger.error("Database connection failed!")
                raise RuntimeError("Cannot connect to database")
            await init_database()

            sweeper = RateLimitSweeper(
                rate_limiter, interval=app_settings.rate_limit_sweep_interval_seconds
            )
            await sweeper.start()

            if not len(authenticator.allow_list):
                logger.warning("ADMIN_EMAILS is empty; every admin request will be rejected")

            logger.info(
                "Application startup complete",
                extra={"debug_mode": app_settings.debug},
            )
            try:
                yield
            finally:
                await sweeper.stop()
                await close_async_engine()
                logger.info("Application shutdown complete")

    app = FastAPI(
        title="Kuppi Back Office",
        description="Admin API for moderating kuppis and managing the academic hierarchy",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.rate_limiter = rate_limiter
    app.state.authenticator = authenticator

    # Starlette runs the last added middleware first
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=not app_settings.debug)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestSizeLimitMiddleware, max_body_size=app_settings.max_request_size)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
        max_age=600,
    )

    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Liveness plus database reachability. Not gated."""
        database_ok = await verify_connection()
        return {
            "status": "ok" if database_ok else "degraded",
            "components": {"database": {"status": "ok" if database_ok else "error"}},
        }

    @app.exception_handler(BackofficeException)
    async def backoffice_exception_handler(request: Request, exc: BackofficeException) -> JSONResponse:
        """Render every domain error as ``{"error": message}``."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled exceptions.

        The traceback is logged server-side and never returned. Debug mode
        adds the exception type to the response.
        """
        request_id = get_request_id(request)
        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={"request_id": request_id, "path": request.url.path, "method": request.method},
        )

        content = {"error": "Internal server error", "request_id": request_id}
        if app_settings.debug:
            content["exception_type"] = type(exc).__name__
        return JSONResponse(status_code=500, content=content)

    return app


# Create the application instance
app = create_app()
