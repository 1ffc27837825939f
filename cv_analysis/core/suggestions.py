"""
Custom form field suggestions.

Answers a recruiter's custom application questions from what was extracted
out of a CV: tenure, highest degree, detected industry, skills and a few
keyword probes over the raw text.
"""
import math
import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Union

from cv_analysis.api.schemas.cv_analysis import (
    CVAnalysisResult,
    Education,
    FreeTextField,
    SingleChoiceField,
    WorkExperience,
)
from cv_analysis.core.line_parser import contains_word
from cv_analysis.core.vocabulary import (
    DEFAULT_EDUCATION_LEVEL,
    DEFAULT_INDUSTRY,
    DEFAULT_LANGUAGE,
    EDUCATION_LEVELS,
    EXPERIENCE_LEVELS,
    FEMALE_PRONOUNS,
    INDUSTRY_KEYWORDS,
    LANGUAGE_STOPWORDS,
    MALE_PRONOUNS,
    MANAGEMENT_DESCRIPTION_KEYWORDS,
    MANAGEMENT_ROLE_KEYWORDS,
    REMOTE_KEYWORDS,
    TOP_EXPERIENCE_LEVEL,
)
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_FREE_TEXT_SUGGESTION = "Based on CV content"
NO_CERTIFICATIONS = "None specified"

_CERT_WORD = r"[a-z0-9+#.]+"
CERTIFICATION_PATTERNS = [
    re.compile(rf"\bcertified(?: {_CERT_WORD}){{1,4}}"),
    re.compile(rf"\bcertification in(?: {_CERT_WORD}){{1,4}}"),
    re.compile(rf"(?:{_CERT_WORD} ){{1,3}}(?:certification|license|licence|accreditation)\b"),
]

_LANGUAGE_LIST = r"([a-z]+(?:(?:\s*,\s*|\s+and\s+)[a-z]+)*)"
LANGUAGE_PATTERNS = [
    re.compile(rf"\bfluent in {_LANGUAGE_LIST}"),
    re.compile(rf"\bspeaks? {_LANGUAGE_LIST}"),
    re.compile(rf"\blanguages?\s*:\s*{_LANGUAGE_LIST}"),
    re.compile(r"\b([a-z]+) language\b"),
]

AnyCustomField = Union[SingleChoiceField, FreeTextField]


# =============================================================================
# Metrics
# =============================================================================

def _month_start(value: str) -> date:
    year, month = value.split("-")
    return date(int(year), int(month), 1)


def _round_half_up(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def _elapsed_years(entries: Iterable[WorkExperience], now: date) -> float:
    total = 0.0
    for entry in entries:
        if not entry.start_date:
            continue
        start = _month_start(entry.start_date)
        if entry.currently_working or not entry.end_date:
            end = now
        else:
            end = _month_start(entry.end_date)
        total += max(0.0, (end - start).days / 365.25)
    return _round_half_up(total)


def total_experience_years(entries: Sequence[WorkExperience], now: Optional[date] = None) -> float:
    """Summed tenure in years (one decimal) over entries that have a start date."""
    return _elapsed_years(entries, now or date.today())


def is_management_role(entry: WorkExperience) -> bool:
    role = entry.role.lower()
    description = (entry.description or "").lower()
    return (
        any(keyword in role for keyword in MANAGEMENT_ROLE_KEYWORDS)
        or any(keyword in description for keyword in MANAGEMENT_DESCRIPTION_KEYWORDS)
    )


def management_experience_years(entries: Sequence[WorkExperience], now: Optional[date] = None) -> float:
    """Tenure restricted to management and leadership positions."""
    return _elapsed_years([e for e in entries if is_management_role(e)], now or date.today())


def highest_education_level(education: Sequence[Education]) -> str:
    """Highest ranked qualification found, "High School" when none is recognized."""
    qualifications = [e.qualification.lower() for e in education]
    for label, keywords in EDUCATION_LEVELS:
        if any(keyword in q for q in qualifications for keyword in keywords):
            return label
    return DEFAULT_EDUCATION_LEVEL


def detect_industry(cv_text: str) -> str:
    for label, keywords in INDUSTRY_KEYWORDS:
        if contains_word(cv_text, keywords):
            return label
    return DEFAULT_INDUSTRY


def experience_level_term(total_years: float) -> str:
    for upper_bound, term in EXPERIENCE_LEVELS:
        if total_years <= upper_bound:
            return term
    return TOP_EXPERIENCE_LEVEL


def format_years(years: float) -> str:
    return f"{years:g} years"


def extract_certifications(cv_text: str) -> str:
    found: List[str] = []
    for line in cv_text.lower().splitlines():
        for pattern in CERTIFICATION_PATTERNS:
            for match in pattern.finditer(line):
                value = match.group(0).strip()
                if value and value not in found:
                    found.append(value)
    return ", ".join(found) if found else NO_CERTIFICATIONS


def extract_languages(cv_text: str) -> str:
    found: List[str] = []
    for line in cv_text.lower().splitlines():
        for pattern in LANGUAGE_PATTERNS:
            for match in pattern.finditer(line):
                for name in re.split(r"\s*,\s*|\s+and\s+", match.group(1)):
                    name = name.strip()
                    if not name or name in LANGUAGE_STOPWORDS:
                        continue
                    name = name.capitalize()
                    if name not in found:
                        found.append(name)
    return ", ".join(found) if found else DEFAULT_LANGUAGE


# =============================================================================
# Option matching
# =============================================================================

def _normalize(text: str) -> str:
    return re.sub(r"[\s\-_/]+", " ", text.lower()).strip()


def find_matching_option(term: str, options: Sequence[str]) -> Optional[str]:
    """
    Find the option that corresponds to a search term.

    An exact (case and punctuation insensitive) match wins over containment,
    so "male" picks "Male" rather than "Female".
    """
    wanted = _normalize(term)
    if not wanted:
        return None
    normalized = [(option, _normalize(option)) for option in options]
    for option, candidate in normalized:
        if candidate == wanted:
            return option
    for option, candidate in normalized:
        if candidate and (wanted in candidate or candidate in wanted):
            return option
    return None


def match_option(terms: Iterable[str], options: Sequence[str]) -> str:
    """Try each term in order; fall back to the first option."""
    for term in terms:
        option = find_matching_option(term, options)
        if option is not None:
            return option
    return options[0]


# =============================================================================
# Suggester
# =============================================================================

class CustomFieldSuggester:
    """
    Heuristic answers for custom application fields.

    Works on an already extracted ``CVAnalysisResult`` plus the raw text it
    came from, so the same rules serve both the rule-based parser and fields
    the model left unanswered.
    """

    def __init__(self, analysis: CVAnalysisResult, cv_text: str, now: Optional[date] = None):
        self.analysis = analysis
        self.cv_text = cv_text
        self.now = now or date.today()
        self.total_years = total_experience_years(analysis.work_experience, self.now)

    def suggest_all(self, fields: Sequence[AnyCustomField]) -> Dict[str, str]:
        suggestions = {field.field_name: self.suggest(field) for field in fields}
        logger.debug(f"Generated {len(suggestions)} custom field suggestions")
        return suggestions

    def suggest(self, field: AnyCustomField) -> str:
        if isinstance(field, SingleChoiceField):
            return self.suggest_single_choice(field)
        return self.suggest_free_text(field)

    @staticmethod
    def _topic(field: AnyCustomField) -> str:
        return f"{field.field_name} {field.field_label}".lower()

    def suggest_single_choice(self, field: SingleChoiceField) -> str:
        topic = self._topic(field)
        options = field.field_options
        lower_text = self.cv_text.lower()

        if "gender" in topic or "sex" in topic:
            if contains_word(self.cv_text, MALE_PRONOUNS):
                return match_option(["male"], options)
            if contains_word(self.cv_text, FEMALE_PRONOUNS):
                return match_option(["female"], options)

        if "education" in topic or "degree" in topic:
            level = highest_education_level(self.analysis.education)
            return match_option([level], options)

        if "experience" in topic or "level" in topic or "seniority" in topic:
            return match_option([experience_level_term(self.total_years)], options)

        if "industry" in topic:
            return match_option([detect_industry(self.cv_text)], options)

        if "availability" in topic or "notice" in topic:
            if any(entry.currently_working for entry in self.analysis.work_experience):
                return match_option(["2 weeks", "1 month"], options)
            return match_option(["immediate", "available"], options)

        if "remote" in topic or "work from home" in topic:
            if any(keyword in lower_text for keyword in REMOTE_KEYWORDS):
                return match_option(["yes", "remote"], options)

        return options[0]

    def suggest_free_text(self, field: FreeTextField) -> str:
        topic = self._topic(field)
        skills = self.analysis.skills

        if "management" in topic or "leadership" in topic:
            return format_years(management_experience_years(self.analysis.work_experience, self.now))

        if "experience" in topic or "years" in topic:
            return format_years(self.total_years)

        if ("soft" in topic or "interpersonal" in topic) and skills.soft:
            return ", ".join(skills.soft)

        if ("skills" in topic or "technical" in topic) and skills.technical:
            return ", ".join(skills.technical)

        if "industry" in topic:
            return detect_industry(self.cv_text)

        if "certification" in topic or "license" in topic:
            return extract_certifications(self.cv_text)

        if "language" in topic:
            return extract_languages(self.cv_text)

        return DEFAULT_FREE_TEXT_SUGGESTION
