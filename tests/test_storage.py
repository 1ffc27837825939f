import httpx
import pytest

from cv_analysis.infrastructure.storage import LocalStorage, SupabaseStorage
from cv_analysis.utils.config import settings
from cv_analysis.utils.exceptions import ConfigurationError, DocumentNotFoundError, StorageError

SUPABASE_URL = "https://project.supabase.co"


def supabase(handler, bucket="documents"):
    return SupabaseStorage(
        url=SUPABASE_URL,
        service_key="service-key",
        bucket=bucket,
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestLocalStorage:
    @pytest.mark.asyncio
    async def test_download(self, tmp_path):
        (tmp_path / "cvs").mkdir()
        (tmp_path / "cvs" / "jane.pdf").write_bytes(b"pdf bytes")
        storage = LocalStorage(str(tmp_path))

        assert await storage.download("cvs/jane.pdf") == b"pdf bytes"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        with pytest.raises(DocumentNotFoundError) as exc_info:
            await storage.download("cvs/missing.pdf")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_path_traversal_is_rejected(self, tmp_path):
        storage = LocalStorage(str(tmp_path / "root"))
        with pytest.raises(StorageError):
            await storage.download("../secret.txt")

    @pytest.mark.asyncio
    async def test_list(self, tmp_path):
        (tmp_path / "cvs").mkdir()
        (tmp_path / "cvs" / "b.pdf").write_bytes(b"")
        (tmp_path / "cvs" / "a.pdf").write_bytes(b"")
        storage = LocalStorage(str(tmp_path))

        assert [entry.name for entry in await storage.list("cvs")] == ["a.pdf", "b.pdf"]
        assert await storage.list("nowhere") == []


class TestSupabaseStorage:
    @pytest.mark.asyncio
    async def test_download(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["apikey"] = request.headers.get("apikey")
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200, content=b"pdf bytes")

        content = await supabase(handler).download("cvs/jane.pdf")

        assert content == b"pdf bytes"
        assert seen == {
            "method": "GET",
            "path": "/storage/v1/object/documents/cvs/jane.pdf",
            "apikey": "service-key",
            "authorization": "Bearer service-key",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 404])
    async def test_missing_object(self, status_code):
        storage = supabase(lambda request: httpx.Response(status_code, json={"error": "not_found"}))
        with pytest.raises(DocumentNotFoundError):
            await storage.download("cvs/missing.pdf")

    @pytest.mark.asyncio
    async def test_server_error(self):
        storage = supabase(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(StorageError) as exc_info:
            await storage.download("cvs/jane.pdf")
        assert exc_info.value.details == {"status": 500}

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StorageError):
            await supabase(handler).download("cvs/jane.pdf")

    @pytest.mark.asyncio
    async def test_list(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.url.path == "/storage/v1/object/list/resumes"
            return httpx.Response(200, json=[
                {"name": "jane.pdf", "id": "abc", "metadata": {"size": 10}},
                {"name": "nested", "id": None, "metadata": None},
            ])

        entries = await supabase(handler, bucket="resumes").list("cvs")

        assert [entry.name for entry in entries] == ["jane.pdf", "nested"]
        assert entries[0].metadata == {"size": 10}

    def test_requires_configuration(self, monkeypatch):
        monkeypatch.setattr(settings, "SUPABASE_URL", None)
        monkeypatch.setattr(settings, "SUPABASE_SERVICE_ROLE_KEY", None)
        with pytest.raises(ConfigurationError):
            SupabaseStorage()
