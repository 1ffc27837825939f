"""
Configuration management with environment variable support
"""
from typing import Literal, Optional, List
from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with validation"""

    # Application
    APP_NAME: str = "CV Analysis API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production

    # API
    API_V1_PREFIX: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4
    RELOAD: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    CORS_CREDENTIALS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_FILE: Optional[str] = None

    # Google Gemini API (Google AI Studio API key)
    # A service-account JSON blob is also accepted here and routed through Vertex AI
    GOOGLE_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TEMPERATURE: float = Field(0.1, ge=0.0, le=2.0)
    VERTEX_LOCATION: str = "us-central1"
    AI_REQUEST_TIMEOUT: float = Field(120.0, gt=0)  # seconds, per model call

    # Storage
    STORAGE_BACKEND: Literal["supabase", "local"] = "supabase"
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "documents"
    UPLOAD_DIR: str = "uploads"
    STORAGE_TIMEOUT: float = Field(60.0, gt=0)  # seconds, per storage request

    # Analysis
    DEFAULT_JOB_TITLE: str = "Job Position"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def ai_configured(self) -> bool:
        """Whether any Gemini credential is present"""
        return bool(self.GOOGLE_API_KEY and self.GOOGLE_API_KEY.strip())


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Convenience accessors
settings = get_settings()
