"""
Document text acquisition.

Downloads a CV from storage and asks Gemini to transcribe it. Every failure
degrades to some text (mock CV, raw .txt content or a diagnostic message) so
callers always get a string. ``acquire`` also reports whether the text is a
real document or only a diagnostic, so diagnostics never reach the CV parsers.
"""
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from cv_analysis.core.fallback_parser import MOCK_CV_TEXT
from cv_analysis.infrastructure.storage import StorageBackend
from cv_analysis.services.llm_provider import LLMProvider
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)

EXTRACTION_INSTRUCTION = (
    "Please extract and return all the text content from this CV/resume document. "
    "Return only the raw text without any formatting or additional commentary."
)

MIME_TYPES = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
}
DEFAULT_MIME_TYPE = "application/pdf"

DOWNLOAD_ISSUE_TEMPLATE = """
CV Analysis - File Download Issue
Unable to download the CV file from storage.
This could be due to:
- File permissions
- Storage configuration issues
- Network connectivity problems

Error details: {error}

Please try uploading the CV again or contact support if the issue persists.
"""

FALLBACK_MODE_TEMPLATE = """
CV Analysis - Fallback Mode
This is a fallback response when AI analysis is not available.
Please check your Google AI API key configuration.
Error: {error}
"""


@dataclass
class ExtractedText:
    """Acquired text plus the reason it is only a diagnostic, if it is one"""
    text: str
    issue: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.issue is not None


def clean_storage_path(file_url: str) -> str:
    return file_url.lstrip("/")


def mime_type_for(file_path: str) -> str:
    """MIME type from the file extension, PDF when unknown"""
    extension = PurePosixPath(file_path).suffix.lower().lstrip(".")
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def _error_message(error: Optional[Exception]) -> str:
    return str(error) if error is not None and str(error) else "Unknown error"


class DocumentTextExtractor:
    """Turns a stored CV file into raw text"""

    def __init__(self, storage: StorageBackend, llm: LLMProvider):
        self.storage = storage
        self.llm = llm

    async def _check_exists(self, file_path: str) -> None:
        """Log whether the file shows up in its directory listing"""
        path = PurePosixPath(file_path)
        directory = "" if str(path.parent) == "." else str(path.parent)
        try:
            entries = await self.storage.list(directory)
        except Exception as e:
            logger.warning(f"Could not list storage directory '{directory}': {e}")
            return
        if not any(entry.name == path.name for entry in entries):
            logger.warning(f"File {file_path} not found in directory listing")

    async def _read_plain_text(self, file_path: str) -> Optional[str]:
        try:
            content = await self.storage.download(file_path)
        except Exception as e:
            logger.error(f"Text file extraction also failed: {e}")
            return None
        text = content.decode("utf-8", errors="replace")
        logger.info(f"Fallback text extraction successful, length: {len(text)}")
        return text

    async def acquire(self, file_url: str) -> ExtractedText:
        """
        Get the raw text of a stored CV

        Args:
            file_url: Storage-relative path; leading slashes are ignored

        Returns:
            ExtractedText; ``issue`` is set when the text is only a diagnostic
        """
        file_path = clean_storage_path(file_url)
        logger.info(f"Extracting text from {file_path}")

        await self._check_exists(file_path)

        try:
            content = await self.storage.download(file_path)
        except Exception as e:
            logger.error(f"Failed to download CV {file_path}: {e}")
            error = _error_message(e)
            return ExtractedText(
                text=DOWNLOAD_ISSUE_TEMPLATE.format(error=error),
                issue=f"Unable to download the CV file from storage ({error})"
            )

        if not self.llm.is_configured:
            logger.warning("GOOGLE_API_KEY not configured, using mock CV content")
            return ExtractedText(text=MOCK_CV_TEXT)

        mime_type = mime_type_for(file_path)
        try:
            text = await self.llm.extract_document_text(content, mime_type, EXTRACTION_INSTRUCTION)
            text = text.strip()
            if not text:
                raise ValueError("No text could be extracted from the document")
            logger.info(f"Successfully extracted text, length: {len(text)}")
            return ExtractedText(text=text)
        except Exception as e:
            logger.error(f"Error extracting text from CV: {e}")
            if file_path.lower().endswith(".txt"):
                plain = await self._read_plain_text(file_path)
                if plain is not None:
                    return ExtractedText(text=plain)
            error = _error_message(e)
            return ExtractedText(
                text=FALLBACK_MODE_TEMPLATE.format(error=error),
                issue=f"Unable to extract text from the CV document ({error})"
            )

    async def extract_text(self, file_url: str) -> str:
        """Raw text of a stored CV, or a mock/diagnostic text when extraction is impossible"""
        extracted = await self.acquire(file_url)
        return extracted.text
