"""
Gemini-based structured CV extraction.

Builds one prompt, asks the model for a JSON object, then normalizes the
reply into a CVAnalysisResult. Any failure (transport, missing JSON, invalid
JSON) aborts the whole strategy; nothing is merged with the rule-based parser.
"""
import json
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from cv_analysis.api.schemas.cv_analysis import (
    CVAnalysisResult,
    Education,
    PersonalInfo,
    SingleChoiceField,
    Skills,
    WorkExperience,
)
from cv_analysis.core.dates import normalize_date
from cv_analysis.core.suggestions import AnyCustomField, CustomFieldSuggester, match_option
from cv_analysis.core.vocabulary import PRESENT_WORDS
from cv_analysis.services.llm_provider import LLMProvider
from cv_analysis.services.strategies import AnalysisStrategy
from cv_analysis.utils.exceptions import AIResponseError, ConfigurationError
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)

OUTPUT_SCHEMA = """{
  "personalInfo": {
    "firstName": "extracted first name",
    "lastName": "extracted last name",
    "email": "extracted email address",
    "phone": "extracted phone number"
  },
  "workExperience": [
    {
      "role": "job title",
      "company": "company name",
      "startDate": "YYYY-MM format",
      "endDate": "YYYY-MM format or null if current",
      "currentlyWorking": true/false,
      "description": "brief description of role and achievements"
    }
  ],
  "education": [
    {
      "institution": "school/university name",
      "qualification": "degree/certificate name",
      "startDate": "YYYY-MM format",
      "endDate": "YYYY-MM format"
    }
  ],
  "skills": {
    "technical": ["skill1", "skill2"],
    "soft": ["skill1", "skill2"]
  },
  "summary": "brief professional summary",
  "customFieldsSuggestions": {
    "field_name": "suggested value based on CV content and field type"
  }
}"""

DATE_RULES = """DATE EXTRACTION GUIDELINES:

1. Recognize these formats:
   - "Jan 2020 - Dec 2023" or "January 2020 - December 2023" -> startDate "2020-01", endDate "2023-12"
   - "01/2020 - 12/2023" or "2020-01 - 2023-12" -> startDate "2020-01", endDate "2023-12"
   - "2020 to 2023" or "2020-2023" -> startDate "2020-01", endDate "2023-12"
   - "2020 - Present", "2020 - Current", "2020 - Now" -> startDate "2020-01", endDate null, currentlyWorking true
   - "Since 2020" -> startDate "2020-01", endDate null, currentlyWorking true
   - "2020" (single year) -> startDate "2020-01", endDate "2020-12"

2. Month mapping: Jan/January 01, Feb/February 02, Mar/March 03, Apr/April 04, May 05,
   Jun/June 06, Jul/July 07, Aug/August 08, Sep/September 09, Oct/October 10,
   Nov/November 11, Dec/December 12.

3. Rules:
   - Always use YYYY-MM format for dates
   - If only a year is given, assume January start and December end
   - If "Present", "Current", "Now" or "Since" is mentioned, set currentlyWorking to true and endDate to null
   - For education, if no end date is found, assume the graduation year
   - For work experience with no end date and no "current" indicator, leave endDate null"""

CUSTOM_FIELD_RULES = """CUSTOM FIELD ANALYSIS GUIDELINES:

1. Single choice fields (select_one) - always answer with exactly one of the provided options:
   - Gender/sex: look for pronouns (he/him, she/her, they/them) or explicit mentions
   - Experience level: total years of work experience; 0-1 "Entry Level", 1-3 "Junior",
     3-5 "Mid Level", 5-8 "Senior", 8+ "Expert/Lead"
   - Education level: highest degree achieved; PhD/Doctorate > Master's > Bachelor's >
     Associate's > Certificate/Diploma > High School
   - Industry: match job titles and companies to an industry:
     Technology/IT (software, programming, IT, tech, digital),
     Healthcare (medical, healthcare, hospital, clinical, nursing),
     Finance (banking, finance, accounting, investment, insurance),
     Manufacturing (production, manufacturing, industrial, factory),
     Retail (retail, sales, customer service, store),
     Education (teaching, education, academic),
     Marketing (marketing, advertising, PR, communications),
     Engineering (engineering, construction, architecture),
     Legal (law, legal, attorney, lawyer, paralegal),
     Government (government, public sector, policy, administration)
   - Availability/notice period: currently employed suggests a notice period (2 weeks, 1 month);
     otherwise immediate availability
   - Remote work preference: check whether current or past roles were remote

2. Other fields:
   - "years of experience": total work experience in years
   - "management experience": years in management or leadership roles
   - "technical skills" / "soft skills": comma-separated lists
   - "certifications": certifications, licenses, accreditations
   - "languages": language proficiencies"""

CLOSING_RULES = """IMPORTANT:
- Extract real information from the CV text; do not invent data
- If information is not found, use empty strings or empty arrays
- Provide a value for every custom field listed above
- Respond with valid JSON only"""


def format_custom_fields(custom_fields: Sequence[AnyCustomField]) -> str:
    lines = []
    for field in custom_fields:
        line = f"- {field.field_name} ({field.field_type}): {field.field_label}"
        if field.field_options:
            line += f" - Options: {', '.join(field.field_options)}"
        lines.append(line)
    return "\n".join(lines) if lines else "(none)"


def build_analysis_prompt(cv_text: str, job_title: str, custom_fields: Sequence[AnyCustomField]) -> str:
    """
    Build the structured extraction prompt

    Args:
        cv_text: Raw CV text
        job_title: Title of the job being applied for
        custom_fields: Custom form fields to answer

    Returns:
        Prompt text
    """
    return "\n\n".join([
        "You are an AI assistant that analyzes CV/resume documents and extracts structured "
        "information. Analyze the following CV text and provide a JSON response with the "
        "extracted information.",
        f"CV TEXT:\n{cv_text}",
        f"JOB TITLE: {job_title}",
        f"CUSTOM FIELDS TO CONSIDER:\n{format_custom_fields(custom_fields)}",
        f"Return the following information in valid JSON format:\n\n{OUTPUT_SCHEMA}",
        DATE_RULES,
        CUSTOM_FIELD_RULES,
        CLOSING_RULES,
    ])


def extract_json_block(text: str) -> str:
    """
    Return the first balanced top-level ``{...}`` block of a model reply.

    Braces inside JSON strings are ignored, so prose or markdown fences around
    the object do not matter.

    Raises:
        AIResponseError: If the reply has no complete JSON object
    """
    start = text.find("{")
    if start == -1:
        raise AIResponseError("No JSON found in AI response")

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    raise AIResponseError("Unterminated JSON object in AI response")


# =============================================================================
# Normalization helpers
# =============================================================================

def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    if isinstance(value, (int, float)):
        return bool(value)
    return False


def _as_text_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    return [text for text in (_as_text(item) for item in _as_list(value)) if text]


def _suggestion_text(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(text for text in (_as_text(item) for item in value) if text)
    return _as_text(value)


def _is_present(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in PRESENT_WORDS


def _work_experience(items: Any) -> List[WorkExperience]:
    entries = []
    for item in _as_list(items):
        if not isinstance(item, dict):
            continue
        role = _as_text(item.get("role"))
        company = _as_text(item.get("company"))
        if not role and not company:
            continue
        currently_working = _as_bool(item.get("currentlyWorking")) or _is_present(item.get("endDate"))
        entries.append(WorkExperience(
            role=role,
            company=company,
            start_date=normalize_date(item.get("startDate")),
            end_date=None if currently_working else normalize_date(item.get("endDate"), default_month="12"),
            currently_working=currently_working,
            description=_as_text(item.get("description")),
        ))
    return entries


def _education(items: Any) -> List[Education]:
    entries = []
    for item in _as_list(items):
        if not isinstance(item, dict):
            continue
        institution = _as_text(item.get("institution"))
        qualification = _as_text(item.get("qualification"))
        if not institution and not qualification:
            continue
        entries.append(Education(
            institution=institution,
            qualification=qualification,
            start_date=normalize_date(item.get("startDate"), default_month="09"),
            end_date=normalize_date(item.get("endDate"), default_month="05"),
        ))
    return entries


def complete_suggestions(
    analysis: CVAnalysisResult,
    raw_suggestions: Dict[str, Any],
    custom_fields: Sequence[AnyCustomField],
    cv_text: str,
    now: Optional[date] = None
) -> Dict[str, str]:
    """
    One suggestion per custom field, starting from what the model answered.

    Unknown keys are dropped, single-choice answers are mapped onto the field's
    options, and unanswered fields get a heuristic answer computed from the
    model's own entities.
    """
    suggester: Optional[CustomFieldSuggester] = None
    suggestions: Dict[str, str] = {}

    for field in custom_fields:
        value = _suggestion_text(raw_suggestions.get(field.field_name))
        if value and isinstance(field, SingleChoiceField) and value not in field.field_options:
            value = match_option([value], field.field_options)
        if not value:
            if suggester is None:
                suggester = CustomFieldSuggester(analysis, cv_text, now=now)
            value = suggester.suggest(field)
            logger.debug(f"Model left '{field.field_name}' unanswered, using heuristic suggestion")
        suggestions[field.field_name] = value

    return suggestions


def parse_ai_response(
    ai_response: str,
    custom_fields: Sequence[AnyCustomField],
    cv_text: str = "",
    now: Optional[date] = None
) -> CVAnalysisResult:
    """
    Parse and normalize a model reply into a CVAnalysisResult

    Args:
        ai_response: Raw model reply, possibly wrapped in prose
        custom_fields: Custom fields the reply should answer
        cv_text: CV text, used only for heuristic answers to unanswered fields
        now: Reference date for tenure of ongoing positions

    Returns:
        Normalized CVAnalysisResult

    Raises:
        AIResponseError: If the reply carries no usable JSON object
    """
    block = extract_json_block(ai_response)
    try:
        parsed = json.loads(block)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON response: {e}")
        raise AIResponseError(f"Model returned invalid JSON: {e}")

    if not isinstance(parsed, dict):
        raise AIResponseError("Model returned JSON that is not an object")

    personal = _as_dict(parsed.get("personalInfo"))
    skills = _as_dict(parsed.get("skills"))

    try:
        analysis = CVAnalysisResult(
            personal_info=PersonalInfo(
                first_name=_as_text(personal.get("firstName")),
                last_name=_as_text(personal.get("lastName")),
                email=_as_text(personal.get("email")),
                phone=_as_text(personal.get("phone")),
            ),
            work_experience=_work_experience(parsed.get("workExperience")),
            education=_education(parsed.get("education")),
            skills=Skills(
                technical=_as_text_list(skills.get("technical")),
                soft=_as_text_list(skills.get("soft")),
            ),
            summary=_as_text(parsed.get("summary")),
        )
    except ValidationError as e:
        logger.error(f"JSON validation failed: {e}")
        raise AIResponseError(f"Model returned JSON that doesn't match schema: {e}")

    analysis.custom_fields_suggestions = complete_suggestions(
        analysis,
        _as_dict(parsed.get("customFieldsSuggestions")),
        custom_fields,
        cv_text,
        now=now,
    )
    return analysis


class AIAnalysisStrategy(AnalysisStrategy):
    """Structured extraction with one Gemini call"""

    name = "ai"

    def __init__(self, llm: LLMProvider):
        self.llm = llm

    async def analyze(
        self,
        cv_text: str,
        job_title: str,
        custom_fields: Sequence[AnyCustomField],
        now: Optional[date] = None
    ) -> CVAnalysisResult:
        if not self.llm.is_configured:
            raise ConfigurationError("GOOGLE_API_KEY not configured, skipping AI analysis")

        prompt = build_analysis_prompt(cv_text, job_title, custom_fields)
        reply = await self.llm.generate_text(prompt)
        analysis = parse_ai_response(reply, custom_fields, cv_text=cv_text, now=now)

        logger.info(
            "AI analysis completed",
            extra={
                "work_experience": len(analysis.work_experience),
                "education": len(analysis.education),
            }
        )
        return analysis
