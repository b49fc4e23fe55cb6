"""
MOTIONCOACH Backend API
Landmark-based exercise coaching

FastAPI application entry point. Pose estimation runs on the client; this
service receives landmark frames and returns reps, form, tempo, and motion
feedback.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from core.config import settings
from shared.utils import LOG_DATE_FORMAT, LOG_FORMAT, ErrorResponse, parse_log_level, setup_logger

# ============================================
# Configure Root Logger First
# ============================================
logging.basicConfig(
    level=parse_log_level(settings.LOG_LEVEL),
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)]
)

# Service routers
from motion_service.router import router as motion_router
from motion_service.models import EXERCISES, get_session_handler

# Setup logging
logger = setup_logger("motioncoach.main", level=parse_log_level(settings.LOG_LEVEL))
request_logger = setup_logger("motioncoach.requests", level=logging.DEBUG if settings.DEBUG else logging.INFO)


# ============================================
# Request Logging Middleware
# ============================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests and responses with timing."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        query_string = f"?{request.url.query}" if request.url.query else ""
        request_logger.debug(f"➡️  {request.method} {request.url.path}{query_string}")

        try:
            response = await call_next(request)

            process_time = (time.time() - start_time) * 1000

            if response.status_code < 400:
                status_emoji = "✅"
            elif response.status_code < 500:
                status_emoji = "⚠️"
            else:
                status_emoji = "❌"

            request_logger.info(
                f"{status_emoji} {request.method} {request.url.path} → {response.status_code} ({process_time:.1f}ms)"
            )

            return response
        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            request_logger.error(
                f"💥 {request.method} {request.url.path} → ERROR: {type(e).__name__}: {str(e)} ({process_time:.1f}ms)"
            )
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    # ===== STARTUP =====
    logger.info(f"🚀 {settings.APP_NAME} API starting up...")

    handler = get_session_handler()
    logger.info(
        f"🏋️ {len(EXERCISES)} exercises loaded (locale={handler.messages.locale}, "
        f"difficulty={settings.DEFAULT_DIFFICULTY})"
    )

    logger.info(f"✅ {settings.APP_NAME} API ready!")

    yield  # Application runs here

    # ===== SHUTDOWN =====
    logger.info(f"👋 {settings.APP_NAME} API shutting down...")
    for session_id in list(handler.active_sessions):
        handler.cleanup_session(session_id)
    logger.info("✅ Shutdown complete")


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Landmark-based exercise analysis: reps, form, tempo, and motion quality",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler so clients always get a JSON error body."""
    logger.error(f"💥 Unhandled error on {request.url.path}: {type(exc).__name__}: {exc}")
    error = ErrorResponse(error="Internal server error", error_code="INTERNAL_ERROR")
    return JSONResponse(status_code=500, content=error.model_dump())


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "motioncoach-api",
        "active_sessions": len(get_session_handler().active_sessions),
    }


# Include service routers
app.include_router(motion_router, prefix="/api/motion", tags=["Motion Service"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
