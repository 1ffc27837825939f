from datetime import date

import pytest

from cv_analysis.api.schemas.cv_analysis import FreeTextField, SingleChoiceField
from cv_analysis.services.ai_analysis_service import (
    AIAnalysisStrategy,
    build_analysis_prompt,
    extract_json_block,
    parse_ai_response,
)
from cv_analysis.utils.exceptions import AIResponseError, AITransportError, ConfigurationError

NOW = date(2024, 1, 1)

FIELDS = [
    SingleChoiceField(
        field_name="experience_level",
        field_label="Experience level",
        field_options=["Entry Level", "Junior", "Mid Level", "Senior", "Expert"],
    ),
    FreeTextField(field_name="technical_skills", field_label="Technical skills"),
    FreeTextField(field_name="languages", field_label="Languages spoken"),
]

AI_REPLY = """Here is the analysis:
```json
{
  "personalInfo": {"firstName": "Jane", "lastName": "Smith", "email": "jane@example.com", "phone": null},
  "workExperience": [
    {"role": "Staff Engineer", "company": "Globex {EU}", "startDate": "2021-3", "endDate": "Present",
     "currentlyWorking": "false", "description": "Leads the platform team"},
    {"role": "Engineer", "company": "Initech", "startDate": "2017", "endDate": "2020", "currentlyWorking": false},
    {"role": "", "company": ""}
  ],
  "education": [
    {"institution": "Stanford University", "qualification": "BSc Computer Science",
     "startDate": "2013", "endDate": "2017"}
  ],
  "skills": {"technical": ["Python", 42, ""], "soft": "Leadership, Mentoring"},
  "summary": "Platform engineer",
  "customFieldsSuggestions": {
    "experience_level": "senior level",
    "technical_skills": ["Python", "Go"],
    "unknown_field": "dropped"
  }
}
```
Let me know if you need anything else."""


class TestExtractJsonBlock:
    def test_strips_surrounding_prose(self):
        assert extract_json_block('Sure! {"a": 1} Done.') == '{"a": 1}'

    def test_braces_inside_strings(self):
        text = 'x {"a": "}{", "b": {"c": "\\"}"}} y {"z": 2}'
        assert extract_json_block(text) == '{"a": "}{", "b": {"c": "\\"}"}}'

    def test_no_json(self):
        with pytest.raises(AIResponseError):
            extract_json_block("I could not read the document.")

    def test_unterminated(self):
        with pytest.raises(AIResponseError):
            extract_json_block('{"a": {"b": 1}')


class TestParseAIResponse:
    def test_normalizes_reply(self):
        result = parse_ai_response(AI_REPLY, FIELDS, cv_text="Fluent in German", now=NOW)

        assert result.personal_info.first_name == "Jane"
        assert result.personal_info.phone == ""

        assert len(result.work_experience) == 2
        current, previous = result.work_experience
        assert current.company == "Globex {EU}"
        assert current.start_date == "2021-03"
        assert current.end_date is None
        assert current.currently_working is True
        assert (previous.start_date, previous.end_date) == ("2017-01", "2020-12")
        assert previous.description == ""

        education = result.education[0]
        assert (education.start_date, education.end_date) == ("2013-09", "2017-05")

        assert result.skills.technical == ["Python", "42"]
        assert result.skills.soft == ["Leadership", "Mentoring"]
        assert result.summary == "Platform engineer"

    def test_completes_custom_fields(self):
        result = parse_ai_response(AI_REPLY, FIELDS, cv_text="Fluent in German", now=NOW)

        assert result.custom_fields_suggestions == {
            "experience_level": "Senior",
            "technical_skills": "Python, Go",
            "languages": "German",
        }

    def test_missing_sections_default_to_empty(self):
        result = parse_ai_response('{"summary": "Short"}', [], now=NOW)
        assert result.personal_info.email == ""
        assert result.work_experience == []
        assert result.skills.technical == []
        assert result.custom_fields_suggestions == {}

    @pytest.mark.parametrize("reply", [
        "no json at all",
        "{'single': 'quotes'}",
        '{"a": 1,}',
    ])
    def test_unusable_reply(self, reply):
        with pytest.raises(AIResponseError):
            parse_ai_response(reply, FIELDS)


def test_prompt_lists_inputs():
    prompt = build_analysis_prompt("CV BODY TEXT", "Backend Engineer", FIELDS)

    assert "CV TEXT:\nCV BODY TEXT" in prompt
    assert "JOB TITLE: Backend Engineer" in prompt
    assert (
        "- experience_level (select_one): Experience level - Options: "
        "Entry Level, Junior, Mid Level, Senior, Expert"
    ) in prompt
    assert "- languages (text): Languages spoken" in prompt
    assert '"customFieldsSuggestions"' in prompt


def test_prompt_without_custom_fields():
    assert "CUSTOM FIELDS TO CONSIDER:\n(none)" in build_analysis_prompt("text", "Job", [])


class TestAIAnalysisStrategy:
    @pytest.mark.asyncio
    async def test_requires_credentials(self, make_llm):
        strategy = AIAnalysisStrategy(make_llm(configured=False))
        with pytest.raises(ConfigurationError):
            await strategy.analyze("text", "Job", FIELDS, now=NOW)

    @pytest.mark.asyncio
    async def test_analyzes_with_one_call(self, make_llm):
        llm = make_llm(reply=AI_REPLY)
        result = await AIAnalysisStrategy(llm).analyze("CV text", "Engineer", FIELDS, now=NOW)

        assert result.personal_info.last_name == "Smith"
        llm.generate_text.assert_awaited_once()
        prompt = llm.generate_text.await_args.args[0]
        assert "JOB TITLE: Engineer" in prompt

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, make_llm):
        llm = make_llm(error=AITransportError("Google AI API error: 503 - unavailable"))
        with pytest.raises(AITransportError):
            await AIAnalysisStrategy(llm).analyze("CV text", "Engineer", FIELDS, now=NOW)
