"""
Health check and system info routes
"""
from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from cv_analysis.api.dependencies import get_llm_provider_dependency, get_storage_backend_dependency
from cv_analysis.api.schemas.response import HealthResponse
from cv_analysis.services.llm_provider import LLMProvider
from cv_analysis.utils.config import settings
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    llm: LLMProvider = Depends(get_llm_provider_dependency)
):
    """
    Health check endpoint
    Without a Gemini credential the API still answers (rule-based parsing of
    mock content), so it reports "degraded" rather than failing
    """
    return HealthResponse(
        status="healthy" if llm.is_configured else "degraded",
        version=settings.APP_VERSION,
        ai_configured=llm.is_configured,
        storage_backend=settings.STORAGE_BACKEND,
        timestamp=datetime.utcnow()
    )


@router.get("/ready")
async def readiness_check():
    """
    Readiness check for Kubernetes/orchestration
    Returns 200 if the storage backend can be created, 503 if not
    """
    try:
        get_storage_backend_dependency()
    except Exception as e:
        logger.warning(f"Storage backend not ready: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready", "reason": str(e)}
        )
    return {"status": "ready"}


@router.get("/info")
async def get_api_info():
    """Get API information"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "gemini_model": settings.GEMINI_MODEL,
        "docs_url": "/docs",
        "openapi_url": "/openapi.json"
    }
