from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.sessions import SessionMiddleware

from chatproxy.app.api.auth import router as auth_router
from chatproxy.app.api.chat import router as chat_router
from chatproxy.app.api.image import router as image_router
from chatproxy.app.core.cache import get_cache
from chatproxy.app.core.config import settings
from chatproxy.app.core.http_client import init_http_client
from chatproxy.app.core.logging import get_logger, setup_logging
from chatproxy.app.db.async_session import close_async_engine, get_async_session, verify_connection
from chatproxy.app.db.init_db import init_database
from chatproxy.app.exceptions import ChatProxyException
from chatproxy.app.middleware.request_id import RequestIdMiddleware, get_request_id
from chatproxy.app.providers.factory import get_venice_provider


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging()
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[dict, None]:
        """Open the shared HTTP client and database on startup, close on shutdown."""
        async with init_http_client() as http_client:
            if not await verify_connection():
                logger.error("Database connection failed!")
                raise RuntimeError("Cannot connect to database")

            await init_database()

            if not settings.venice_api_key:
                logger.warning("VENICE_API_KEY not set; chat models fall back to the static list")

            logger.info("Application startup complete", extra={"debug_mode": settings.debug})
            yield {"http_client": http_client}

        cache = get_cache()
        if hasattr(cache, "close"):
            await cache.close()

        await close_async_engine()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="chatproxy",
        description="Backend-for-frontend proxying Venice.ai with per-user daily quotas",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Order matters: last added = first executed
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.auth_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.session_https_only,
    )
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        # Starlette echoes any Origin for "*" when credentials are allowed
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )

    app.include_router(auth_router)
    app.include_router(chat_router)
    app.include_router(image_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check with database and provider configuration status."""
        health_status: dict[str, Any] = {"status": "ok", "components": {}}

        try:
            async with get_async_session() as session:
                await session.execute(text("SELECT 1"))
            health_status["components"]["database"] = {"status": "ok"}
        except Exception as e:
            health_status["status"] = "degraded"
            health_status["components"]["database"] = {
                "status": "error",
                "error": str(e)[:100],
            }

        venice = get_venice_provider()
        if not venice.is_configured:
            venice_status = "unconfigured"
        elif await venice.health_check():
            venice_status = "ok"
        else:
            venice_status = "error"
            health_status["status"] = "degraded"
        health_status["components"]["venice"] = {"status": venice_status}
        health_status["components"]["blob"] = {
            "status": "ok" if settings.blob_read_write_token else "unconfigured",
        }
        return health_status

    @app.exception_handler(ChatProxyException)
    async def chatproxy_error_handler(request: Request, exc: ChatProxyException) -> JSONResponse:
        """Render client-facing errors as ``{code, message, cause}``."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log unhandled exceptions and return a 500 without a traceback."""
        request_id = get_request_id(request)
        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={
                "request_id": request_id,
                "exception_type": type(exc).__name__,
            },
        )

        content: dict[str, Any] = {
            "code": "internal:api",
            "message": "Internal server error",
            "request_id": request_id,
        }
        if settings.debug:
            content["cause"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    return app


# Create the application instance
app = create_app()
