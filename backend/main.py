"""
Uploadable Backend API
Main FastAPI application entry point
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from core.config import settings
from core.middleware import RequestContextMiddleware, LoggingMiddleware
from api.router import api_router
from services.rule_sets import validate_all_rule_sets
from services.validator import validator
from utils.error_handlers import AppError, app_error_handler

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events"""
    logger.info("Starting Uploadable API...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    # A broken rule set is a setup error; refuse to start
    validate_all_rule_sets(validator)
    logger.info(f"Validation rules registered: {', '.join(validator.rules())}")

    yield

    logger.info("Shutting down Uploadable API...")


# Create FastAPI application
app = FastAPI(
    title="Uploadable API",
    description="Validation rules for uploaded files: presence, size, type and image dimensions",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Added last so it runs first and the logger sees the request ID
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(AppError, app_error_handler)

# Include API routes
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint (kept outside /api so it's easy to probe)"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT
    }
