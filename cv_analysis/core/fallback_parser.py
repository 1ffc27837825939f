"""
Rule-based CV parser.

Deterministic, offline counterpart of the model-based analysis: walks the CV
line by line with regular expressions and keyword tables. Same input always
gives the same output.
"""
import re
from datetime import date
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from cv_analysis.api.schemas.cv_analysis import (
    CVAnalysisResult,
    Education,
    PersonalInfo,
    Skills,
    WorkExperience,
)
from cv_analysis.core.line_parser import (
    find_email,
    find_name,
    find_phone,
    parse_education_line,
    parse_work_experience_line,
)
from cv_analysis.core.suggestions import AnyCustomField, CustomFieldSuggester
from cv_analysis.core.vocabulary import SOFT_SKILLS, TECHNICAL_SKILLS
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)

MOCK_CV_MARKER = "Mock CV Content:"

MOCK_CV_TEXT = """
Mock CV Content:
John Doe
Software Engineer
john.doe@email.com
+1-555-0123

Work Experience:
- Senior Developer at Tech Corp (2020-2023)
- Junior Developer at Startup Inc (2018-2020)

Education:
- Bachelor's in Computer Science, University of Technology (2018)

Skills:
- JavaScript, React, Node.js, Python, SQL
- Leadership, Communication, Problem Solving
"""

MOCK_SUMMARY = "Experienced software developer with strong technical skills and leadership abilities."


def is_mock_text(cv_text: str) -> bool:
    return MOCK_CV_MARKER in cv_text


def mock_analysis() -> CVAnalysisResult:
    """Fixed result for the development mock CV"""
    return CVAnalysisResult(
        personal_info=PersonalInfo(
            first_name="John",
            last_name="Doe",
            email="john.doe@email.com",
            phone="+1-555-0123",
        ),
        work_experience=[
            WorkExperience(
                role="Senior Developer",
                company="Tech Corp",
                start_date="2020-01",
                end_date="2023-12",
                description="Senior development role with focus on modern technologies",
            ),
            WorkExperience(
                role="Junior Developer",
                company="Startup Inc",
                start_date="2018-01",
                end_date="2020-12",
                description="Junior development position working on innovative projects",
            ),
        ],
        education=[
            Education(
                institution="University of Technology",
                qualification="Bachelor's in Computer Science",
                start_date="2014-09",
                end_date="2018-05",
            )
        ],
        skills=Skills(
            technical=["JavaScript", "React", "Node.js", "Python", "SQL"],
            soft=["Leadership", "Communication", "Problem Solving"],
        ),
        summary=MOCK_SUMMARY,
    )


@lru_cache(maxsize=None)
def _skill_pattern(skill: str) -> re.Pattern:
    # Short names like "Go" or "SQL" only count in their usual casing
    flags = 0 if len(skill) <= 3 else re.IGNORECASE
    return re.compile(rf"(?<![\w+#.]){re.escape(skill)}(?![\w+#])", flags)


def scan_skills(cv_text: str, vocabulary: Sequence[str]) -> List[str]:
    """Skills from a vocabulary that occur in the text, ordered by first appearance."""
    hits: List[Tuple[int, str]] = []
    for skill in vocabulary:
        match = _skill_pattern(skill).search(cv_text)
        if match:
            hits.append((match.start(), skill))
    return [skill for _, skill in sorted(hits)]


def parse_lines(cv_text: str) -> CVAnalysisResult:
    """Extract entities from real (non-mock) CV text, without custom field suggestions."""
    lines = [line.strip() for line in cv_text.splitlines() if line.strip()]
    logger.debug(f"Processing {len(lines)} lines for rule-based analysis")

    personal_info = PersonalInfo()
    work_experience: List[WorkExperience] = []
    education: List[Education] = []

    for line in lines:
        if not personal_info.email:
            email = find_email(line)
            if email:
                personal_info.email = email

        if not personal_info.phone:
            phone = find_phone(line)
            if phone:
                personal_info.phone = phone

        if not personal_info.first_name:
            name = find_name(line)
            if name:
                personal_info.first_name, personal_info.last_name = name

        experience = parse_work_experience_line(line)
        if experience:
            logger.debug(f"Found work experience: {experience.role} / {experience.company}")
            work_experience.append(experience)

        degree = parse_education_line(line)
        if degree:
            logger.debug(f"Found education: {degree.qualification} / {degree.institution}")
            education.append(degree)

    return CVAnalysisResult(
        personal_info=personal_info,
        work_experience=work_experience,
        education=education,
        skills=Skills(
            technical=scan_skills(cv_text, TECHNICAL_SKILLS),
            soft=scan_skills(cv_text, SOFT_SKILLS),
        ),
    )


def analyze_text(
    cv_text: str,
    custom_fields: Optional[Sequence[AnyCustomField]] = None,
    now: Optional[date] = None,
) -> CVAnalysisResult:
    """
    Analyze CV text without any network call.

    Args:
        cv_text: Raw CV text
        custom_fields: Validated custom field definitions to answer
        now: Reference date for "until today" tenure (defaults to today)

    Returns:
        CVAnalysisResult with one suggestion per custom field
    """
    if is_mock_text(cv_text):
        logger.info("Detected mock CV content, returning fixed analysis")
        analysis = mock_analysis()
    else:
        analysis = parse_lines(cv_text)

    suggester = CustomFieldSuggester(analysis, cv_text, now=now)
    analysis.custom_fields_suggestions = suggester.suggest_all(custom_fields or [])

    logger.info(
        "Rule-based analysis completed",
        extra={
            "work_experience": len(analysis.work_experience),
            "education": len(analysis.education),
            "custom_fields": len(analysis.custom_fields_suggestions),
        }
    )
    return analysis
