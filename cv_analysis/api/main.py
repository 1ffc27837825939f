"""
FastAPI Main Application
CV analysis API: structured data extraction from candidate CVs
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from cv_analysis.api.middleware.error_handler import (
    cv_analysis_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from cv_analysis.api.middleware.logging import LoggingMiddleware
from cv_analysis.api.routes import analysis, health
from cv_analysis.utils.config import settings
from cv_analysis.utils.exceptions import CVAnalysisException
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager
    Handles startup and shutdown events
    """
    logger.info("=" * 70)
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND} (bucket={settings.STORAGE_BUCKET})")

    if settings.ai_configured:
        logger.info(f"Gemini model: {settings.GEMINI_MODEL}")
    else:
        logger.warning("GOOGLE_API_KEY not configured, CVs will be analyzed in mock/rule-based mode")

    logger.info(f"API ready at http://{settings.HOST}:{settings.PORT}")
    logger.info(f"Docs available at http://{settings.HOST}:{settings.PORT}/docs")
    logger.info("=" * 70)

    yield

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
# CV Analysis API

Extracts structured data from candidate CVs stored in object storage to
pre-fill job application forms.

## Features
- **Gemini analysis**: document transcription and structured extraction
- **Rule-based fallback**: deterministic parser used when the model is unavailable
- **Custom fields**: one suggested answer per recruiter-defined form field

## API Endpoints
- `POST /api/v1/cv-analysis`: Analyze a stored CV
- `GET /api/v1/health`: Health check
- `GET /api/v1/info`: API information
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=settings.DEBUG
    )

    # CORS Middleware - Allow all origins in development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else settings.CORS_ORIGINS,
        allow_credentials=False if settings.is_development else settings.CORS_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    # Exception Handlers
    app.add_exception_handler(CVAnalysisException, cv_analysis_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Include Routers
    app.include_router(health.router, prefix=settings.API_V1_PREFIX)
    app.include_router(analysis.router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    async def root():
        """API entry point"""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": f"{settings.API_V1_PREFIX}/health"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cv_analysis.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        workers=settings.WORKERS if not settings.RELOAD else 1,
        log_level=settings.LOG_LEVEL.lower()
    )
