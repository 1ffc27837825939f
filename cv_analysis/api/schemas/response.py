"""
API response schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from cv_analysis.api.schemas.cv_analysis import CamelModel, CVAnalysisResult


class StrategyAttemptInfo(CamelModel):
    """One analysis strategy attempt"""
    name: str
    succeeded: bool
    error: Optional[str] = None


class CVAnalysisResponse(CamelModel):
    """CV analysis response"""

    success: bool = True
    analysis: CVAnalysisResult
    strategy: Optional[str] = Field(
        default=None,
        description="Strategy that produced the analysis; null when every strategy failed"
    )
    attempts: List[StrategyAttemptInfo] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(description="healthy or degraded")
    version: str
    ai_configured: bool = Field(description="Whether a Gemini credential is configured")
    storage_backend: str
    timestamp: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "ai_configured": True,
                "storage_backend": "supabase",
                "timestamp": "2024-01-01T12:00:00"
            }
        }
