"""
GridBazaar - Main Application Entry Point
"""
import os
from contextlib import asynccontextmanager
from typing import Optional

import psutil
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gridbazaar import __version__
from gridbazaar.config import settings
from gridbazaar.utils.logger import logger
from gridbazaar.utils.exceptions import GridBazaarException, gridbazaar_exception_handler
from gridbazaar.api.v1.router import api_router
from gridbazaar.api.functions import functions_router
from gridbazaar.core.features import FeatureRegistry, build_default_registry
from gridbazaar.core.social.announcements import ListingAnnouncer
from gridbazaar.db.database import Database
from gridbazaar.realtime.broker import RealtimeBroker


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events handler."""
    # Startup
    logger.info("🚀 Starting GridBazaar...")
    
    database: Database = app.state.database
    await database.init_db()
    logger.info("✅ Database initialized")
    
    announcer: Optional[ListingAnnouncer] = None
    if settings.ENABLE_LISTING_ANNOUNCEMENTS:
        announcer = ListingAnnouncer(app.state.realtime_broker, database)
        announcer.start()
    
    logger.info("✅ GridBazaar started successfully!")
    
    yield
    
    # Shutdown
    logger.info("🛑 Shutting down GridBazaar...")
    if announcer is not None:
        await announcer.stop()
    await database.dispose()
    logger.info("👋 Goodbye!")


def create_application(
    database: Optional[Database] = None,
    broker: Optional[RealtimeBroker] = None,
    features: Optional[FeatureRegistry] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Energy infrastructure marketplace: portfolios, opportunities and listings",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    
    app.state.database = database or Database()
    app.state.realtime_broker = broker or RealtimeBroker()
    app.state.features = features or build_default_registry()
    
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.add_exception_handler(GridBazaarException, gridbazaar_exception_handler)
    
    # Include API routers
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    app.include_router(functions_router, prefix=settings.FUNCTIONS_PREFIX)
    
    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": __version__
        }
    
    @app.get("/ready", tags=["Health"])
    async def readiness_check():
        """Readiness check - verifies the database is reachable."""
        checks = {"database": "unknown"}
        
        try:
            await app.state.database.ping()
            checks["database"] = "connected"
        except Exception as e:
            checks["database"] = f"error: {str(e)[:50]}"
        
        all_healthy = all(v == "connected" for v in checks.values())
        
        return {
            "status": "ready" if all_healthy else "degraded",
            "checks": checks,
            "realtime": app.state.realtime_broker.get_stats(),
        }
    
    @app.get("/metrics", tags=["Health"])
    async def metrics():
        """Basic metrics endpoint."""
        process = psutil.Process()
        return {
            "process": {
                "pid": os.getpid(),
                "memory_mb": process.memory_info().rss / 1024 / 1024,
                "cpu_percent": process.cpu_percent(),
            },
            "system": {
                "cpu_percent": psutil.cpu_percent(),
                "memory_percent": psutil.virtual_memory().percent,
            }
        }
    
    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "gridbazaar.main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
