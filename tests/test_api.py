import pytest
from fastapi.testclient import TestClient

from cv_analysis.api import dependencies
from cv_analysis.api.main import app
from cv_analysis.api.routes import health
from cv_analysis.services.cv_analysis_service import CVAnalysisService
from cv_analysis.utils.config import settings
from cv_analysis.utils.exceptions import ConfigurationError

PREFIX = settings.API_V1_PREFIX

PAYLOAD = {
    "fileUrl": "cvs/jane.pdf",
    "jobTitle": "Backend Engineer",
    "customFields": [
        {
            "field_name": "experience_level",
            "field_type": "select_one",
            "field_label": "Experience level",
            "field_options": ["Entry Level", "Junior", "Mid Level", "Senior", "Expert"],
        },
        {"field_name": "languages", "field_type": "text", "field_label": "Languages spoken"},
    ],
}


@pytest.fixture
def client(fake_storage, unconfigured_llm):
    service = CVAnalysisService(storage=fake_storage, llm=unconfigured_llm)
    app.dependency_overrides[dependencies.get_cv_analysis_service_dependency] = lambda: service
    app.dependency_overrides[dependencies.get_llm_provider_dependency] = lambda: unconfigured_llm
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAnalysisRoute:
    def test_analyze(self, client):
        response = client.post(f"{PREFIX}/cv-analysis", json=PAYLOAD)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["strategy"] == "heuristic"
        assert [a["name"] for a in body["attempts"]] == ["ai", "heuristic"]

        analysis = body["analysis"]
        assert analysis["personalInfo"]["firstName"] == "John"
        assert analysis["workExperience"][0]["startDate"] == "2020-01"
        assert analysis["customFieldsSuggestions"] == {
            "experience_level": "Senior",
            "languages": "English",
        }

    def test_request_id_is_echoed(self, client):
        response = client.post(f"{PREFIX}/cv-analysis", json=PAYLOAD, headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_missing_file_url(self, client):
        response = client.post(f"{PREFIX}/cv-analysis", json={"jobTitle": "Engineer"})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error_type"] == "ValidationError"
        assert body["request_id"]

    def test_malformed_custom_field(self, client):
        payload = dict(PAYLOAD, customFields=[{"field_type": "text"}])
        response = client.post(f"{PREFIX}/cv-analysis", json=payload)
        assert response.status_code == 422


    def test_unconfigured_storage_is_service_unavailable(self, client):
        def broken():
            raise ConfigurationError("Supabase configuration missing (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")

        app.dependency_overrides[dependencies.get_cv_analysis_service_dependency] = broken
        response = client.post(f"{PREFIX}/cv-analysis", json=PAYLOAD)

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["error_type"] == "ConfigurationError"
        assert "SUPABASE_URL" in body["error"]


class TestHealthRoutes:
    def test_health_without_credentials_is_degraded(self, client):
        response = client.get(f"{PREFIX}/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["ai_configured"] is False

    def test_ready(self, client, fake_storage, monkeypatch):
        monkeypatch.setattr(health, "get_storage_backend_dependency", lambda: fake_storage)
        response = client.get(f"{PREFIX}/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_not_ready(self, client, monkeypatch):
        def broken():
            raise ConfigurationError("Supabase configuration missing")

        monkeypatch.setattr(health, "get_storage_backend_dependency", broken)
        response = client.get(f"{PREFIX}/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not ready"

    def test_info_and_root(self, client):
        assert client.get(f"{PREFIX}/info").json()["name"] == settings.APP_NAME
        assert client.get("/").json()["status"] == "running"
