"""
ChurchFlow - Main Application Entry Point
Multi-tenant church management system
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from churchflow.core.config import get_settings
from churchflow.core.database import dispose_engine
from churchflow.core.errors import ChurchFlowError, churchflow_error_handler
from churchflow.api import (
    auth, church, members, events, checkin, groups, donations,
    pages, prayer_requests, push, notifications, activity, seo,
    volunteers, communications
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Initializing {settings.APP_NAME} backend", environment=settings.ENVIRONMENT)
    # Tables are created by Alembic migrations, not auto-generated
    logger.info("Database managed by Alembic migrations")

    yield

    # Shutdown
    await dispose_engine()
    logger.info(f"Shutting down {settings.APP_NAME} backend")


# Create FastAPI application
app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Multi-tenant church management: members, events, check-in, giving and websites",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_exception_handler(ChurchFlowError, churchflow_error_handler)

# Configure middleware stack
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Include routers
prefix = settings.API_V1_PREFIX
app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])
app.include_router(church.router, prefix=f"{prefix}/church", tags=["church"])
app.include_router(members.router, prefix=f"{prefix}/members", tags=["members"])
app.include_router(events.router, prefix=f"{prefix}/events", tags=["events"])
app.include_router(checkin.router, prefix=f"{prefix}/checkin", tags=["checkin"])
app.include_router(groups.router, prefix=f"{prefix}/groups", tags=["groups"])
app.include_router(donations.router, prefix=f"{prefix}/donations", tags=["donations"])
app.include_router(volunteers.router, prefix=f"{prefix}/volunteers", tags=["volunteers"])
app.include_router(communications.router, prefix=f"{prefix}/communications", tags=["communications"])
app.include_router(pages.router, prefix=f"{prefix}/pages", tags=["pages"])
app.include_router(prayer_requests.router, prefix=f"{prefix}/prayer-requests", tags=["prayer-requests"])
app.include_router(push.router, prefix=f"{prefix}/push", tags=["push"])
app.include_router(notifications.router, prefix=f"{prefix}/notifications", tags=["notifications"])
app.include_router(activity.router, prefix=f"{prefix}/activity", tags=["activity"])
app.include_router(seo.router, prefix=f"{prefix}/seo", tags=["seo"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "churchflow-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "churchflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
