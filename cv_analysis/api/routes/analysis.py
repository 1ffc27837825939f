"""
CV analysis routes
"""
from fastapi import APIRouter, Depends

from cv_analysis.api.dependencies import get_cv_analysis_service_dependency
from cv_analysis.api.schemas.request import CVAnalysisRequest
from cv_analysis.api.schemas.response import CVAnalysisResponse, StrategyAttemptInfo
from cv_analysis.services.cv_analysis_service import CVAnalysisService
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["CV Analysis"])


@router.post("/cv-analysis", response_model=CVAnalysisResponse)
async def analyze_cv(
    request: CVAnalysisRequest,
    service: CVAnalysisService = Depends(get_cv_analysis_service_dependency)
):
    """
    Analyze a stored CV

    Extracts personal info, work experience, education and skills, and
    suggests an answer for every custom field in the request. The analysis
    always succeeds structurally; when every strategy failed, `strategy` is
    null and `analysis.summary` explains why.

    The storage backend is built on first use. With STORAGE_BACKEND=supabase
    (the default) and no SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY, the request
    fails with 503 and error_type ConfigurationError, like `/ready`. Set
    STORAGE_BACKEND=local for development without Supabase.
    """
    logger.info(
        f"CV analysis requested for {request.file_url}",
        extra={"custom_fields": len(request.custom_fields)}
    )

    report = await service.analyze(
        request.file_url,
        request.job_title,
        request.custom_fields
    )

    return CVAnalysisResponse(
        analysis=report.result,
        strategy=report.strategy,
        attempts=[
            StrategyAttemptInfo(name=a.name, succeeded=a.succeeded, error=a.error)
            for a in report.attempts
        ]
    )
