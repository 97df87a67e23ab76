"""
profilehub/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes (users) and exception handlers
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from typing import Optional
import time

from profilehub.core.config import Settings, settings as default_settings, validate_settings
from profilehub.core.errors import add_exception_handlers
from profilehub.core.logging import setup_logging, get_logger
from profilehub.db.mongo import (
    connect_to_mongo,
    close_mongo_connection,
    check_database_health,
    get_users_collection,
)
from profilehub.db.indexes import create_indexes
from profilehub.services.blob_store import LocalBlobStore, build_blob_store
from profilehub.services.registration_service import RegistrationService
from profilehub.api import users

VERSION = "1.0.0"

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Builds the FastAPI application for the given settings.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.
        Handles startup and shutdown events.
        """
        logger.info("🚀 Starting ProfileHub...")
        
        try:
            validate_settings(settings)
            logger.info("✅ Configuration validated")
            
            # Unreachable database is fatal: startup aborts, process exits
            app.state.mongo_client = await connect_to_mongo(
                settings.MONGODB_URL, settings.MONGODB_DB_NAME
            )
            users_collection = get_users_collection(
                app.state.mongo_client,
                settings.MONGODB_DB_NAME,
                settings.MONGODB_USERS_COLLECTION,
            )
            
            await create_indexes(users_collection)
            logger.info("✅ Database indexes created")
            
            blob_store = build_blob_store(settings)
            if isinstance(blob_store, LocalBlobStore):
                blob_store.ensure_directory()
            
            app.state.registration_service = RegistrationService(
                users_collection,
                capabilities=settings.capabilities(),
                blob_store=blob_store,
            )
            
            logger.info("🎉 ProfileHub started successfully!")
            logger.info(f"Environment: {settings.ENVIRONMENT}")
            logger.info(
                f"Image mode: {settings.IMAGE_MODE}, delete enabled: {settings.ENABLE_DELETE}"
            )
            
        except Exception as e:
            logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
            raise
        
        yield  # Application runs here
        
        logger.info("🛑 Shutting down ProfileHub...")
        await close_mongo_connection(app.state.mongo_client)
        logger.info("👋 ProfileHub shut down successfully")

    app = FastAPI(
        title="ProfileHub",
        description="Registers user profiles and serves them by unique slug",
        version=VERSION,
        lifespan=lifespan,
        debug=settings.DEBUG,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        
        if process_time > 5.0:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={"process_time": process_time}
            )
        
        return response

    add_exception_handlers(app, settings)

    app.include_router(users.router, prefix=settings.API_PREFIX, tags=["Users"])
    if settings.ENABLE_DELETE:
        app.include_router(users.delete_router, prefix=settings.API_PREFIX, tags=["Users"])

    if settings.uploads_enabled and settings.BLOB_BACKEND == "local":
        app.mount(
            settings.UPLOADS_URL_PREFIX,
            StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
            name="uploads",
        )

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint - basic info."""
        return {
            "name": "ProfileHub API",
            "version": VERSION,
            "status": "running",
            "environment": settings.ENVIRONMENT,
            "features": {
                "image_mode": settings.IMAGE_MODE,
                "delete": settings.ENABLE_DELETE,
            },
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Health check endpoint.
        Checks database connectivity.
        """
        health_status = {
            "status": "healthy",
            "timestamp": time.time(),
            "environment": settings.ENVIRONMENT,
            "version": VERSION,
            "checks": {}
        }
        
        client = getattr(request.app.state, "mongo_client", None)
        db_healthy = await check_database_health(client)
        health_status["checks"]["database"] = "healthy" if db_healthy else "unhealthy"
        if not db_healthy:
            health_status["status"] = "degraded"
        
        status_code = 200 if health_status["status"] == "healthy" else 503
        return JSONResponse(content=health_status, status_code=status_code)

    @app.get("/ready", tags=["Health"])
    async def readiness_check(request: Request):
        """
        Readiness probe - indicates if app is ready to receive traffic.
        """
        client = getattr(request.app.state, "mongo_client", None)
        if await check_database_health(client):
            return {"status": "ready"}
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "database_unavailable"}
        )

    @app.get("/live", tags=["Health"])
    async def liveness_check():
        """
        Liveness probe - indicates if app is alive.
        """
        return {"status": "alive"}

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "profilehub.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.is_development,
        log_level=default_settings.LOG_LEVEL.lower()
    )
