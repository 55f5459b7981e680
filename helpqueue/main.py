"""
FastAPI Application Entry Point

This is the main application module that configures and runs the
classroom help queue API.

The API is designed to:
- Keep one process-wide queue of groups waiting for help
- Serve groups strictly in the order they asked
- Answer every queue operation without waiting on Google APIs
- Log help events to a spreadsheet in the background

Run with: uvicorn helpqueue.main:app --host 0.0.0.0 --port 8080
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from .core.config import settings
from .core.utils import get_timestamp
from .api.routes import router
from .queue.errors import HelpQueueError, DuplicateGroupError, GroupNotFoundError, QueueEmptyError
from .storage.google_auth import google_auth
from .workers.worker import event_log, event_log_worker

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================================
# Application Lifespan Handler
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Log configuration, start the event log worker
    - Shutdown: Flush pending events and stop the worker
    """
    # ---- Startup ----
    logger.info("=" * 60)
    logger.info("HELP QUEUE API STARTING")
    logger.info("=" * 60)
    logger.info(f"Server Port: {settings.server_port}")
    logger.info(f"API Version: {settings.api_version}")
    logger.info(f"Roster: {'configured' if settings.sheets.spreadsheet_id else 'not configured'}")
    logger.info(f"Roster enforcement: {settings.sheets.roster_enforce}")
    logger.info(f"Calendar: {'configured' if settings.calendar.calendar_id else 'not configured'}")
    logger.info(f"Google credentials: {'configured' if google_auth.enabled else 'not configured'}")

    if event_log.enabled:
        event_log_worker.start()
        logger.info(f"Help events are logged to sheet '{settings.sheets.help_sheet}'")
    else:
        logger.warning("No HELPSHEET_ID set, help events will not be logged")

    logger.info("=" * 60)
    logger.info(f"API ready to accept requests on port {settings.server_port}")
    logger.info("=" * 60)

    yield  # Application runs here

    # ---- Shutdown ----
    logger.info("API shutting down...")
    await event_log_worker.stop()


# ============================================================
# FastAPI Application Instance
# ============================================================

app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# ============================================================
# Middleware Configuration
# ============================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# Exception Handlers
# ============================================================

_QUEUE_ERROR_STATUS = {
    DuplicateGroupError: status.HTTP_409_CONFLICT,
    QueueEmptyError: status.HTTP_404_NOT_FOUND,
    GroupNotFoundError: status.HTTP_404_NOT_FOUND,
}


@app.exception_handler(HelpQueueError)
async def help_queue_exception_handler(request: Request, exc: HelpQueueError):
    """
    Map help queue errors to HTTP responses.

    409 for a duplicate request, 404 when there is nobody to help or the
    group is not queued. Any HelpQueueError without an entry in
    _QUEUE_ERROR_STATUS is answered with 400.
    """
    status_code = _QUEUE_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(f"Help queue {exc.operation} rejected: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "detail": str(exc),
            "timestamp": get_timestamp()
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
):
    """
    Handle validation errors with a clean response.

    Returns 422 with details about what failed validation.
    """
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation failed",
            "detail": jsonable_encoder(exc.errors()),
            "timestamp": get_timestamp()
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for anything the routes did not expect.

    The error is logged with its traceback; the client gets a generic 500.
    """
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred. Please try again.",
            "timestamp": get_timestamp()
        }
    )


# ============================================================
# Route Registration
# ============================================================

app.include_router(router, prefix=settings.api_prefix, tags=["Help Queue"])


# ============================================================
# Root Endpoint
# ============================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint with API information.

    Provides basic info and links to documentation.
    """
    prefix = settings.api_prefix
    return {
        "service": settings.api_title,
        "version": settings.api_version,
        "description": settings.api_description,
        "endpoints": {
            "enqueue_help": f"POST {prefix}/enqueue_help",
            "next": f"GET {prefix}/next",
            "dismiss_help": f"POST {prefix}/dismiss_help",
            "clear_help_queue": f"PATCH {prefix}/clear_help_queue",
            "help_queue": f"GET {prefix}/help_queue",
            "is_student": f"GET {prefix}/is_student",
            "group": f"GET {prefix}/group",
            "next_class": f"GET {prefix}/next_class",
            "health": f"GET {prefix}/health",
            "docs": "GET /docs"
        },
        "timestamp": get_timestamp()
    }


# ============================================================
# Run Configuration (for direct execution)
# ============================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "helpqueue.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=False,
        # The queue lives in process memory: one worker only
        workers=1,
        log_level="info"
    )
