from datetime import date

import pytest

from cv_analysis.api.schemas.cv_analysis import CVAnalysisResult
from cv_analysis.services.cv_analysis_service import (
    CVAnalysisService,
    analyze_cv,
    diagnostic_result,
    diagnostic_suggestions,
)
from cv_analysis.services.strategies import AnalysisStrategy
from cv_analysis.utils.exceptions import AIResponseError, AITransportError

NOW = date(2024, 1, 1)

RAW_FIELDS = [
    {
        "field_name": "experience_level",
        "field_type": "select_one",
        "field_label": "Experience level",
        "field_options": ["Entry Level", "Junior", "Mid Level", "Senior", "Expert"],
    },
    {"field_name": "languages", "field_type": "text", "field_label": "Languages spoken"},
    {"field_name": "start_date", "field_type": "select_one", "field_label": "Start date", "field_options": []},
]

AI_REPLY = """{
  "personalInfo": {"firstName": "Jane", "lastName": "Smith", "email": "", "phone": ""},
  "workExperience": [],
  "education": [],
  "skills": {"technical": ["Python"], "soft": []},
  "summary": "Engineer",
  "customFieldsSuggestions": {"experience_level": "Junior", "languages": "English", "start_date": "ASAP"}
}"""


class FailingStrategy(AnalysisStrategy):
    name = "failing"

    def __init__(self, error):
        self.error = error

    async def analyze(self, cv_text, job_title, custom_fields, now=None):
        raise self.error


def field_names():
    return {f["field_name"] for f in RAW_FIELDS}


class TestDiagnostics:
    def test_suggestions(self):
        assert diagnostic_suggestions(RAW_FIELDS) == {
            "experience_level": "Entry Level",
            "languages": "",
            "start_date": "",
        }

    def test_suggestions_skip_nameless_fields(self):
        assert diagnostic_suggestions([{"field_type": "text"}, "junk"]) == {}
        assert diagnostic_suggestions(None) == {}

    def test_result(self):
        result = diagnostic_result(AITransportError("boom"), RAW_FIELDS)
        assert result.summary.startswith("CV analysis encountered an issue: boom.")
        assert result.personal_info.first_name == ""
        assert result.work_experience == []
        assert set(result.custom_fields_suggestions) == field_names()

    def test_result_from_message(self):
        result = diagnostic_result("Unable to download the CV file from storage (denied)", RAW_FIELDS)
        assert result.summary.startswith(
            "CV analysis encountered an issue: Unable to download the CV file from storage (denied)."
        )


class TestCVAnalysisService:
    @pytest.mark.asyncio
    async def test_ai_strategy_wins(self, fake_storage, make_llm):
        llm = make_llm(reply=AI_REPLY, document_text="Jane Smith, engineer")
        service = CVAnalysisService(storage=fake_storage, llm=llm)

        report = await service.analyze("cvs/jane.pdf", "Engineer", RAW_FIELDS, now=NOW)

        assert report.strategy == "ai"
        assert not report.degraded
        assert [a.name for a in report.attempts] == ["ai"]
        assert report.result.personal_info.first_name == "Jane"
        assert report.result.custom_fields_suggestions == {
            "experience_level": "Junior",
            "languages": "English",
            "start_date": "ASAP",
        }

    @pytest.mark.asyncio
    async def test_falls_back_when_model_call_fails(self, fake_storage, make_llm, sample_cv):
        llm = make_llm(document_text=sample_cv, error=AITransportError("Google AI API error: 503 - unavailable"))
        service = CVAnalysisService(storage=fake_storage, llm=llm)

        report = await service.analyze("cvs/jane.pdf", None, RAW_FIELDS, now=NOW)

        assert report.strategy == "heuristic"
        assert [(a.name, a.succeeded) for a in report.attempts] == [("ai", False), ("heuristic", True)]
        assert "503" in report.attempts[0].error
        assert report.result.personal_info.email == "jane.smith@example.com"
        assert set(report.result.custom_fields_suggestions) == field_names()

    @pytest.mark.asyncio
    async def test_falls_back_on_unusable_reply(self, fake_storage, make_llm, sample_cv):
        llm = make_llm(document_text=sample_cv, reply="Sorry, I cannot help with that.")
        service = CVAnalysisService(storage=fake_storage, llm=llm)

        report = await service.analyze("cvs/jane.pdf", "Engineer", RAW_FIELDS, now=NOW)

        assert report.strategy == "heuristic"
        assert report.result.work_experience[0].company == "Globex Corporation"

    @pytest.mark.asyncio
    async def test_without_credentials_uses_mock_profile(self, fake_storage, unconfigured_llm):
        service = CVAnalysisService(storage=fake_storage, llm=unconfigured_llm)

        result = await service.analyze_cv("cvs/jane.pdf", "Engineer", RAW_FIELDS, now=NOW)

        assert result.personal_info.first_name == "John"
        assert result.personal_info.last_name == "Doe"
        assert result.custom_fields_suggestions["experience_level"] == "Senior"
        unconfigured_llm.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_file_still_returns_complete_result(self, fake_storage, unconfigured_llm):
        service = CVAnalysisService(storage=fake_storage, llm=unconfigured_llm)

        report = await service.analyze("cvs/missing.pdf", "Engineer", RAW_FIELDS, now=NOW)

        assert report.degraded
        assert report.attempts == []
        result = report.result
        assert result.work_experience == []
        assert result.education == []
        assert result.personal_info.email == ""
        assert result.summary.startswith("CV analysis encountered an issue: Unable to download the CV file")
        assert "File not found: cvs/missing.pdf" in result.summary
        assert set(result.custom_fields_suggestions) == field_names()

    @pytest.mark.asyncio
    async def test_failed_transcription_is_not_parsed_as_a_cv(self, fake_storage, make_llm):
        llm = make_llm(reply=AI_REPLY, document_error=AITransportError("Google AI API request failed: timeout"))
        service = CVAnalysisService(storage=fake_storage, llm=llm)

        report = await service.analyze("cvs/jane.pdf", "Engineer", RAW_FIELDS, now=NOW)

        assert report.strategy is None
        assert report.result.work_experience == []
        assert "Unable to extract text from the CV document" in report.result.summary
        assert "timeout" in report.result.summary
        assert report.result.custom_fields_suggestions["experience_level"] == "Entry Level"
        llm.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_strategies_failing_gives_diagnostic(self, fake_storage, unconfigured_llm):
        service = CVAnalysisService(
            storage=fake_storage,
            llm=unconfigured_llm,
            strategies=[FailingStrategy(AIResponseError("bad reply")), FailingStrategy(RuntimeError())]
        )

        report = await service.analyze("cvs/jane.pdf", "Engineer", RAW_FIELDS, now=NOW)

        assert report.degraded
        assert report.strategy is None
        assert report.result.summary.startswith("CV analysis encountered an issue: All analysis strategies failed")
        assert report.result.custom_fields_suggestions == {
            "experience_level": "Entry Level",
            "languages": "",
            "start_date": "",
        }

    @pytest.mark.asyncio
    async def test_invalid_custom_fields_never_raise(self, fake_storage, unconfigured_llm):
        service = CVAnalysisService(storage=fake_storage, llm=unconfigured_llm)

        report = await service.analyze("cvs/jane.pdf", "Engineer", [{"field_type": "text"}], now=NOW)

        assert report.degraded
        assert report.result.summary.startswith("CV analysis encountered an issue: Invalid custom field definition")
        assert report.result.custom_fields_suggestions == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fields", [
        [],
        RAW_FIELDS[:1],
        RAW_FIELDS,
    ])
    async def test_suggestion_keys_match_request(self, fake_storage, make_llm, sample_cv, fields):
        llm = make_llm(document_text=sample_cv, error=AITransportError("down"))
        service = CVAnalysisService(storage=fake_storage, llm=llm)

        result = await service.analyze_cv("cvs/jane.pdf", "Engineer", fields, now=NOW)

        assert isinstance(result, CVAnalysisResult)
        assert set(result.custom_fields_suggestions) == {f["field_name"] for f in fields}


@pytest.mark.asyncio
async def test_module_level_analyze_cv(fake_storage, unconfigured_llm):
    result = await analyze_cv("cvs/jane.pdf", "Engineer", RAW_FIELDS, fake_storage, llm=unconfigured_llm)
    assert result.personal_info.email == "john.doe@email.com"
