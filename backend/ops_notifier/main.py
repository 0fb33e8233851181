"""
FastAPI Main Application Entry Point for the Ops Notifier.

This is the notification backend of the operations portal that handles:
- Supabase database webhooks for projects and samples
- Direct notification requests from the portal
- NAVER WORKS bot authentication and message delivery
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ops_notifier.core.config import settings
from ops_notifier.core.exceptions import NotifierException
from ops_notifier.api.rate_limits import setup_rate_limiter
from ops_notifier.api.routes import (
    webhook_router,
    notification_router,
)
from ops_notifier.services.notifications import build_notification_service


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Open the shared outbound HTTP client
    - Build the notification pipeline (token cache lives with it)

    Shutdown:
    - Close the HTTP client
    """
    # Startup
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Channel configured: {bool(settings.notification_channel_id)}")
    logger.info(f"User recipients: {len(settings.notification_user_list)}")
    logger.info(f"Database enrichment: {settings.database_enabled}")

    app.state.http_client = httpx.AsyncClient()
    app.state.notification_service = build_notification_service(settings, app.state.http_client)

    yield

    # Shutdown
    await app.state.http_client.aclose()
    logger.info("👋 Shutting down...")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    # Ops Notifier

    Notification backend for the operations portal.

    ## Flow
    `database change → classify → token → compose → dispatch → NAVER WORKS`

    ## Notifications
    - **project_created**: a project row was inserted
    - **project_completed**: a project moved into `completed`
    - **project_status_changed**: any other project status transition
    - **sample_created**: a sample row was inserted
    - **urgent_project**: sent directly by the portal

    ## API Response Structure
    ```json
    {
      "success": true,
      "message": "알림 전송 완료"
    }
    ```
    """,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# Configure CORS for frontend communication
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_rate_limiter(app)


# Global exception handler for NotifierExceptions
@app.exception_handler(NotifierException)
async def notifier_exception_handler(request: Request, exc: NotifierException):
    """Log the full error; return only its code."""
    logger.error(f"❌ {request.method} {request.url.path} failed: {exc.to_dict()}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.error_code},
    )


# Include API routers
app.include_router(webhook_router)
app.include_router(notification_router)


# Health check endpoint
@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Root endpoint
@app.get("/", tags=["System"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "webhook": "/webhook/naver-works",
        "test": "/webhook/test",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ops_notifier.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
    )
