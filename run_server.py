#!/usr/bin/env python3
"""
Simple server launcher
"""
import uvicorn
from cv_analysis.utils.config import settings

if __name__ == "__main__":
    print("="*70)
    print(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    print("="*70)
    print(f"\n* Storage backend: {settings.STORAGE_BACKEND} (bucket: {settings.STORAGE_BUCKET})")
    if settings.ai_configured:
        print(f"* Gemini model: {settings.GEMINI_MODEL}")
    else:
        print("* GOOGLE_API_KEY not set: mock CV content and rule-based parsing only")
    print(f"* Port: {settings.PORT}")
    print(f"* Configuration: .env")
    print("\nStarting server...\n")

    uvicorn.run(
        "cv_analysis.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
