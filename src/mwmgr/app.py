"""
MW_MGR Application

FastAPI application for the MatteiWeekly newsroom manager.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Config
from .services.engine_service import get_engine_service, init_engine_service
from .routes import (
    health_router,
    auth_router,
    users_router,
    articles_router,
    chat_router,
    todos_router,
    notifications_router,
    preferences_router,
    backup_router,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("mwmgr.app")

# Suppress noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)

# Create FastAPI application
app = FastAPI(
    title=f"{Config.APP_NAME} API",
    description=f"{Config.BRAND_NAME} editorial workflow: articles, review, chat, tasks and notifications",
    version=Config.VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info(f"Starting {Config.APP_NAME}...")

    try:
        await init_engine_service()
        logger.info(f"{Config.APP_NAME} started successfully")
    except Exception as e:
        logger.error(f"Failed to start {Config.APP_NAME}: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info(f"Shutting down {Config.APP_NAME}...")

    try:
        engine = get_engine_service()
        await engine.close()
        logger.info(f"{Config.APP_NAME} shutdown complete")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


# Include routers
app.include_router(health_router, prefix="/api/v1")
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(articles_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(todos_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(preferences_router, prefix="/api/v1")
app.include_router(backup_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": Config.APP_NAME,
        "version": Config.VERSION,
        "status": "running"
    }
