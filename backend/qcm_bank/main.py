from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from contextlib import asynccontextmanager
import structlog

from qcm_bank.core.config import settings, validate_settings
from qcm_bank.core.logging_config import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting API", project=settings.PROJECT_NAME, version="1.0.0", debug=settings.DEBUG)

    # Validate settings
    try:
        validate_settings()
        logger.info("Configuration validated successfully")
    except ValueError as e:
        logger.error("Configuration validation failed", error=str(e))
        logger.warning("Admin endpoints will reject every request until configured")

    yield

    logger.info("Shutting down API", project=settings.PROJECT_NAME)


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Admin API for cleaning, deduplicating and profiling quiz question banks before import",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,  # Only expose docs in debug mode
    redoc_url="/api/redoc" if settings.DEBUG else None
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add trusted host middleware for security
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS
)

# Include routers
from qcm_bank.api.routes import auth, imports

app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(imports.router, prefix="/api/import", tags=["import"])


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": settings.PROJECT_NAME,
        "version": "1.0.0",
        "status": "running",
        "docs": "/api/docs" if settings.DEBUG else "disabled",
        "endpoints": {
            "health": "/health",
            "auth": "/api/auth",
            "import": "/api/import"
        }
    }


@app.get("/health", tags=["health"])
async def health_check_endpoint():
    """Health check endpoint with configuration status"""
    return {
        "status": "healthy",
        "environment": {
            "admin_password_configured": bool(settings.ADMIN_PASSWORD),
            "max_file_size": settings.MAX_FILE_SIZE,
            "allowed_extensions": settings.ALLOWED_EXTENSIONS,
            "debug": settings.DEBUG
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "qcm_bank.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
