# tests/conftest.py
import sys
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

# Ensure project root (containing cv_analysis/) is in sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cv_analysis.infrastructure.storage import StorageBackend, StorageObject
from cv_analysis.utils.exceptions import DocumentNotFoundError, StorageError

REFERENCE_DATE = date(2024, 1, 1)

SAMPLE_CV = """Jane Smith jane.smith@example.com
+1 (415) 555-0199
Summary: Backend engineer who enjoys distributed systems
Senior Software Engineer at Globex Corporation Jan 2021 - Present
Software Engineer at Initech 2017 - 2020
Bachelor of Science in Computer Science, Stanford University, 2013 - 2017
Skills: Python, Django, PostgreSQL, Docker, Leadership, Mentoring
"""

EXPERIENCE_LEVEL_FIELD = {
    "field_name": "experience_level",
    "field_type": "select_one",
    "field_label": "Experience level",
    "field_options": ["Entry Level", "Junior", "Mid Level", "Senior", "Expert"],
}


class FakeStorage(StorageBackend):
    """In-memory storage backend"""

    def __init__(self, files: Optional[Dict[str, bytes]] = None, list_error: Optional[Exception] = None):
        self.files = dict(files or {})
        self.list_error = list_error
        self.downloads: List[str] = []

    async def download(self, file_path: str) -> bytes:
        self.downloads.append(file_path)
        if file_path not in self.files:
            raise DocumentNotFoundError(file_path)
        return self.files[file_path]

    async def list(self, directory: str = "") -> List[StorageObject]:
        if self.list_error is not None:
            raise self.list_error
        prefix = f"{directory}/" if directory else ""
        return [
            StorageObject(name=path[len(prefix):])
            for path in self.files
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        ]


class FakeLLMProvider:
    """Stand-in for LLMProvider with scripted replies"""

    def __init__(
        self,
        configured: bool = True,
        reply: Optional[str] = None,
        document_text: Optional[str] = None,
        error: Optional[Exception] = None,
        document_error: Optional[Exception] = None
    ):
        self.is_configured = configured
        self.generate_text = AsyncMock(return_value=reply, side_effect=error)
        self.extract_document_text = AsyncMock(return_value=document_text, side_effect=document_error)


@pytest.fixture
def reference_date() -> date:
    return REFERENCE_DATE


@pytest.fixture
def sample_cv() -> str:
    return SAMPLE_CV


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage({
        "cvs/jane.pdf": b"%PDF-1.4 fake",
        "cvs/jane.txt": SAMPLE_CV.encode("utf-8"),
    })


@pytest.fixture
def unconfigured_llm() -> FakeLLMProvider:
    return FakeLLMProvider(configured=False)


@pytest.fixture
def storage_error() -> StorageError:
    return StorageError("Storage unreachable")


@pytest.fixture
def make_llm():
    """Factory for FakeLLMProvider instances"""
    return FakeLLMProvider


@pytest.fixture
def make_storage():
    """Factory for FakeStorage instances"""
    return FakeStorage
