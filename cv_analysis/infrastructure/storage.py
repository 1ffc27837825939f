"""
Storage layer for candidate documents
Supports Supabase Storage (REST API) and the local filesystem
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from cv_analysis.utils.config import settings
from cv_analysis.utils.exceptions import ConfigurationError, DocumentNotFoundError, StorageError
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)

LIST_PAGE_SIZE = 100


class StorageObject(BaseModel):
    """Entry returned when listing a storage directory"""
    name: str
    id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class StorageBackend(ABC):
    """Abstract storage backend"""

    @abstractmethod
    async def download(self, file_path: str) -> bytes:
        """Download file content"""
        pass

    @abstractmethod
    async def list(self, directory: str = "") -> List[StorageObject]:
        """List the entries of a directory"""
        pass


class LocalStorage(StorageBackend):
    """Local filesystem storage"""

    def __init__(self, base_dir: Optional[str] = None):
        """
        Initialize local storage

        Args:
            base_dir: Base directory for storage (uses config if None)
        """
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalStorage initialized: {self.base_dir}")

    def _get_full_path(self, file_path: str) -> Path:
        """Get full path from relative path"""
        full_path = self.base_dir / file_path
        # Ensure path is within base_dir (security)
        try:
            full_path.resolve().relative_to(self.base_dir.resolve())
        except ValueError:
            raise StorageError(f"Invalid file path: {file_path}")
        return full_path

    async def download(self, file_path: str) -> bytes:
        full_path = self._get_full_path(file_path)
        if not full_path.is_file():
            raise DocumentNotFoundError(file_path)
        try:
            content = full_path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to load file: {str(e)}")

        logger.info(f"Loaded file: {full_path}")
        return content

    async def list(self, directory: str = "") -> List[StorageObject]:
        full_path = self._get_full_path(directory)
        if not full_path.is_dir():
            return []
        return [StorageObject(name=entry.name) for entry in sorted(full_path.iterdir())]


class SupabaseStorage(StorageBackend):
    """Supabase Storage backend over its REST API"""

    def __init__(
        self,
        url: Optional[str] = None,
        service_key: Optional[str] = None,
        bucket: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Supabase storage

        Args:
            url: Project URL (uses config if None)
            service_key: Service role key (uses config if None)
            bucket: Bucket name (uses config if None)
            timeout: Request timeout in seconds (uses config if None)
            transport: Optional httpx transport, mainly for tests
        """
        self.url = (url or settings.SUPABASE_URL or "").rstrip("/")
        self.service_key = service_key or settings.SUPABASE_SERVICE_ROLE_KEY
        self.bucket = bucket or settings.STORAGE_BUCKET
        self.timeout = timeout or settings.STORAGE_TIMEOUT
        self._transport = transport

        if not self.url or not self.service_key:
            raise ConfigurationError("Supabase configuration missing (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")

        logger.info(f"SupabaseStorage initialized: bucket={self.bucket}")

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def download(self, file_path: str) -> bytes:
        endpoint = f"{self.url}/storage/v1/object/{self.bucket}/{quote(file_path)}"
        try:
            async with self._client() as client:
                response = await client.get(endpoint, headers=self.headers)
        except httpx.TimeoutException:
            raise StorageError(f"Download timeout for {file_path}")
        except httpx.HTTPError as e:
            raise StorageError(f"Download failed: {str(e)}")

        if response.status_code in (400, 404):
            # Supabase reports missing objects as 400 "not_found" on some versions
            raise DocumentNotFoundError(file_path)
        if response.status_code != 200:
            error_detail = response.text[:500] if response.text else "Unknown error"
            raise StorageError(
                f"Supabase download failed ({response.status_code}): {error_detail}",
                details={"status": response.status_code}
            )

        logger.info(f"Downloaded from Supabase: {self.bucket}/{file_path} ({len(response.content)} bytes)")
        return response.content

    async def list(self, directory: str = "") -> List[StorageObject]:
        endpoint = f"{self.url}/storage/v1/object/list/{self.bucket}"
        payload = {"prefix": directory, "limit": LIST_PAGE_SIZE, "offset": 0}
        try:
            async with self._client() as client:
                response = await client.post(endpoint, headers=self.headers, json=payload)
        except httpx.HTTPError as e:
            raise StorageError(f"List failed: {str(e)}")

        if response.status_code != 200:
            raise StorageError(
                f"Supabase list failed ({response.status_code})",
                details={"status": response.status_code}
            )
        return [StorageObject.model_validate(item) for item in response.json()]


def create_storage_backend() -> StorageBackend:
    """Select a backend from STORAGE_BACKEND"""
    if settings.STORAGE_BACKEND == "local":
        return LocalStorage()
    if settings.STORAGE_BACKEND == "supabase":
        return SupabaseStorage()
    raise ConfigurationError(f"Unsupported storage backend: {settings.STORAGE_BACKEND}. Supported: supabase, local")


# Global storage backend instance
_storage_backend: Optional[StorageBackend] = None


def get_storage_backend() -> StorageBackend:
    """Get storage backend instance (singleton)"""
    global _storage_backend
    if _storage_backend is None:
        _storage_backend = create_storage_backend()
    return _storage_backend
