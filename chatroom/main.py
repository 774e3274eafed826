"""
Main FastAPI application
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatroom.api import auth, messages, users, health
from chatroom.core.config import Settings, get_settings
from chatroom.core.exceptions import ChatError, ValidationError
from chatroom.core.logging_config import setup_logging, get_trace_id
from chatroom.middleware import TracingMiddleware, TRACE_HEADER
from chatroom.store import ChatStore, create_store

logger = logging.getLogger(__name__)


def _first_validation_error(exc: RequestValidationError) -> ValidationError:
    errors = exc.errors()
    if not errors:
        return ValidationError()
    error = errors[0]
    loc = [str(part) for part in error.get("loc", ())]
    field = loc[-1] if len(loc) > 1 else None
    return ValidationError(error.get("msg"), field=field)


def register_exception_handlers(app: FastAPI):
    """Map the error taxonomy onto HTTP responses"""

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = _first_validation_error(exc)
        logger.info(f"Rejected {request.method} {request.url.path}: {error.message}")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        error = ChatError()
        # raised past the tracing middleware, so the header is set here
        trace_id = request.headers.get(TRACE_HEADER) or get_trace_id()
        headers = {TRACE_HEADER: trace_id} if trace_id else None
        return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)


def create_app(settings: Optional[Settings] = None, store: Optional[ChatStore] = None) -> FastAPI:
    """
    Build the application

    Args:
        settings: Defaults to the environment-driven settings
        store: Defaults to the backend selected by STORE_BACKEND
    """
    settings = settings or get_settings()
    setup_logging(settings)
    store = store or create_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({store.backend} store)")
        yield
        logger.info("Shutting down")
        store.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Single-room chat with polling clients",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(TracingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router, prefix=settings.API_PREFIX)
    app.include_router(messages.router, prefix=settings.API_PREFIX)
    app.include_router(users.router, prefix=settings.API_PREFIX)
    app.include_router(health.router)

    @app.get("/", tags=["root"])
    def root():
        """Service info"""
        return {
            "message": f"{settings.APP_NAME} is running",
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health",
            "polling": {
                "messages_seconds": settings.CLIENT_MESSAGE_POLL_INTERVAL,
                "presence_seconds": settings.CLIENT_PRESENCE_POLL_INTERVAL,
            },
        }

    return app


app = create_app()
