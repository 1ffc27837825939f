"""
FastAPI dependencies
"""
from cv_analysis.infrastructure.storage import StorageBackend, get_storage_backend
from cv_analysis.services.cv_analysis_service import CVAnalysisService, get_cv_analysis_service
from cv_analysis.services.llm_provider import LLMProvider, get_llm_provider


def get_storage_backend_dependency() -> StorageBackend:
    """Get storage backend instance"""
    return get_storage_backend()


def get_llm_provider_dependency() -> LLMProvider:
    """Get LLM provider instance"""
    return get_llm_provider()


def get_cv_analysis_service_dependency() -> CVAnalysisService:
    """Get CV analysis service instance"""
    return get_cv_analysis_service()
