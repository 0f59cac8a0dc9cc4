"""
FastAPI Application Factory.
Creates and configures the FastAPI application with all routers, middleware, and DI.

Endpoints:
- auth (register, login), messages/history, presence/online
- /ws chat WebSocket
- uploaded attachments under Config.BLOB_PUBLIC_PATH
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

from dishka import AsyncContainer
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from chatrelay.config.logging_config import correlation_id_var, setup_logging
from chatrelay.config.settings import get_config
from chatrelay.domain.exceptions import (
    AuthError,
    AuthErrorReason,
    DomainValidationError,
    StorageError,
)
from chatrelay.presentation.api import auth_router, messages_router, presence_router
from chatrelay.presentation.ws import ws_router
from chatrelay.setup.ioc.container import create_container

# Environment-specific settings (APP_ENV: development, testing, production)
settings = get_config()

# Setup logging
setup_logging(settings.LOG_LEVEL, settings.LOG_PATH)
logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to extract and set correlation ID from request headers."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or uuid4().hex

        # Set in contextvars (propagates to async tasks and logging)
        correlation_id_var.set(correlation_id)

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


# Create container at module level (before app starts)
# This is required because Dishka adds middleware, which must happen before app starts
container = create_container(backend=settings.CHAT_STORE_BACKEND)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    - Startup: container already created and wired
    - Shutdown: close the DI container (disconnects Prisma, Redis)
    """
    logger.info("FastAPI application started. DI container initialized.")
    yield
    await app.state.dishka_container.close()
    logger.info("FastAPI application shutdown. DI container closed.")


def _error(status_code: int, error: str, reason: Optional[str] = None) -> JSONResponse:
    content = {"error": error}
    if reason is not None:
        content["reason"] = reason
    return JSONResponse(status_code=status_code, content=content)


def create_fastapi_app(app_container: Optional[AsyncContainer] = None) -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Args:
        app_container: DI container to wire (default: the module-level one)
    """
    app = FastAPI(
        title="ChatRelay API",
        description="Real-time chat backend: auth, history, presence and the /ws socket",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Setup Dishka BEFORE app starts (must add middleware before startup)
    setup_dishka(app_container or container, app)

    # Correlation ID middleware (must be added before CORS)
    app.add_middleware(CorrelationIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================== ERROR HANDLERS ====================

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        if exc.reason == AuthErrorReason.ALREADY_EXISTS:
            return _error(status.HTTP_409_CONFLICT, exc.message, exc.reason.value)
        logger.info(f"[HTTP] Auth failed: {exc.reason.value}")
        return _error(status.HTTP_401_UNAUTHORIZED, exc.message, exc.reason.value)

    @app.exception_handler(DomainValidationError)
    async def domain_validation_handler(request: Request, exc: DomainValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, exc.message, exc.code.value)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.warning(f"[HTTP] Storage failure: {exc.kind.value}: {exc.message}")
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Storage is unavailable, try again later.",
            exc.kind.value,
        )

    # Validation error handler - shows detailed Pydantic errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.info(f"[VALIDATION ERROR] {errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation error", "details": jsonable_encoder(errors)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.info(f"[HTTP ERROR {exc.status_code}] {exc.detail}")
        return _error(exc.status_code, exc.detail)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[GLOBAL ERROR] {type(exc).__name__}: {exc}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    # ==================== ROUTES ====================

    @app.get("/", tags=["health"])
    async def root():
        return {"message": "FastAPI server is running."}

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "healthy"}

    app.include_router(auth_router)  # POST /auth/register, POST /auth/login
    app.include_router(messages_router)  # GET /messages/history
    app.include_router(presence_router)  # GET /presence/online
    app.include_router(ws_router)  # WS /ws

    # Attachment URLs handed out by LocalBlobStore resolve here
    os.makedirs(settings.BLOB_STORAGE_DIR, exist_ok=True)
    app.mount(
        settings.BLOB_PUBLIC_PATH,
        StaticFiles(directory=settings.BLOB_STORAGE_DIR),
        name="files",
    )

    return app


app = create_fastapi_app()
