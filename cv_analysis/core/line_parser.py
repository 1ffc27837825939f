"""
Single-line extractors for the rule-based CV parser.

Each function looks at one trimmed CV line in isolation and returns what it
recognizes, or None. None of them raise on arbitrary text.
"""
import re
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple

from cv_analysis.api.schemas.cv_analysis import Education, WorkExperience
from cv_analysis.core.dates import clean_fragment, find_education_dates, find_work_dates, remove_span
from cv_analysis.core.vocabulary import (
    ACADEMIC_DEGREE_MARKERS,
    COMPANY_SEPARATOR_INDICATORS,
    CORPORATE_SUFFIXES,
    DEGREE_KEYWORDS,
    EDUCATION_KEYWORDS,
    EDUCATION_SEPARATORS,
    INSTITUTION_INDICATORS,
    JOB_TITLE_KEYWORDS,
    NON_EXPERIENCE_MARKERS,
    ROLE_COMPANY_SEPARATORS,
    UNKNOWN_COMPANY,
    UNKNOWN_INSTITUTION,
    UNKNOWN_ROLE,
)

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(?<![\w.@/])\+?\(?\d[\d\s().\-]{5,18}\d(?![\w@])")
_YEAR_TOKEN = re.compile(r"^(?:19|20)\d{2}$")
ASSOCIATE_DEGREE_PATTERN = re.compile(r"\bassociate(?:'s|’s)?\s+(?:degree|of|in)\b", re.IGNORECASE)


@lru_cache(maxsize=None)
def _word_pattern(words: Tuple[str, ...]) -> re.Pattern:
    alternatives = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(rf"(?<!\w)(?:{alternatives})(?:'s|’s|s)?(?!\w)", re.IGNORECASE)


def contains_word(text: str, words: Iterable[str]) -> bool:
    """Whole-word, case-insensitive keyword test (plural and possessive forms allowed)."""
    return bool(_word_pattern(tuple(words)).search(text))


def _strip_word(word: str) -> str:
    return re.sub(r"[^\w]", "", word).lower()


# =============================================================================
# Contact details
# =============================================================================

def find_email(line: str) -> Optional[str]:
    match = EMAIL_PATTERN.search(line)
    return match.group(0) if match else None


def _looks_like_date(candidate: str) -> bool:
    groups = re.findall(r"\d+", candidate)
    return all(_YEAR_TOKEN.match(g) or len(g) <= 2 for g in groups)


def find_phone(line: str) -> Optional[str]:
    """
    Find the first phone-like number in a line.

    A candidate needs 7-15 digits and must not consist only of years and
    month numbers, so date ranges like ``2020 - 2023`` are not taken for phones.
    """
    for match in PHONE_PATTERN.finditer(line):
        candidate = match.group(0).strip()
        digits = re.sub(r"\D", "", candidate)
        if not 7 <= len(digits) <= 15:
            continue
        if _looks_like_date(candidate):
            continue
        return candidate
    return None


def find_name(line: str) -> Optional[Tuple[str, str]]:
    """Take the first two non-email words of a line that carries an ``@``."""
    if "@" not in line:
        return None
    tokens = [t for t in line.split() if "@" not in t and re.search(r"[^\W\d_]", t)]
    if len(tokens) < 2:
        return None
    return tokens[0], tokens[1]


# =============================================================================
# Work experience
# =============================================================================

def _trailing_run(words: List[str], indicators: Tuple[str, ...], allow_leading_indicator: bool) -> int:
    """Length of the shortest trailing run (max 3 words) that contains an indicator word."""
    for size in range(1, min(3, len(words) - 1) + 1):
        run = words[-size:]
        stripped = [_strip_word(w) for w in run]
        if not any(w in indicators for w in stripped):
            continue
        if stripped[0] in indicators and not allow_leading_indicator:
            continue
        if size == 1 and stripped[0] in indicators:
            continue
        return size
    return 0


def split_role_company(text: str, split_on_comma: bool = False) -> Tuple[str, str]:
    """
    Split "<role> <separator> <company>" text.

    The first separator present wins. Without one, a trailing run of words
    carrying a corporate suffix ("Acme Solutions") is taken as the company.
    With ``split_on_comma``, "<role>, <company>" is accepted as a last resort.
    Missing parts come back as the Unknown Role / Unknown Company placeholders.
    """
    role, company = text, ""
    for separator in ROLE_COMPANY_SEPARATORS:
        if separator in text:
            parts = text.split(separator)
            role, company = parts[0], parts[1]
            break

    if not company:
        words = text.split()
        size = _trailing_run(words, CORPORATE_SUFFIXES, allow_leading_indicator=False)
        if size:
            role = " ".join(words[:-size])
            company = " ".join(words[-size:])

    if not company and split_on_comma and ", " in text:
        role, company = text.split(", ", 1)

    role = clean_fragment(role)
    company = clean_fragment(company)

    role_words = {_strip_word(w) for w in role.split()}
    if len(role) < 3 or role_words & {"inc", "corp"}:
        role, company = company, role

    return role or UNKNOWN_ROLE, company or UNKNOWN_COMPANY


def _is_candidate_job_line(line: str) -> bool:
    if contains_word(line, JOB_TITLE_KEYWORDS):
        return True
    if any(indicator in line for indicator in COMPANY_SEPARATOR_INDICATORS):
        return True
    return any(_strip_word(w) in CORPORATE_SUFFIXES for w in line.split())


def parse_work_experience_line(line: str) -> Optional[WorkExperience]:
    """
    Recognize a work-experience entry on one line.

    Dated lines need both a role and a company; on them "Role, Company" is a
    valid layout. Undated lines are accepted when they name a job title or a
    company; the company then defaults to "Unknown Company".
    """
    lower = line.lower()
    if any(marker in lower for marker in NON_EXPERIENCE_MARKERS):
        return None
    if any(marker in lower for marker in ACADEMIC_DEGREE_MARKERS):
        return None

    match = find_work_dates(line)
    if match:
        role, company = split_role_company(remove_span(line, match.span), split_on_comma=True)
        if role == UNKNOWN_ROLE or company == UNKNOWN_COMPANY:
            return None
        return WorkExperience(
            role=role,
            company=company,
            start_date=match.dates.start_date,
            end_date=match.dates.end_date,
            currently_working=match.dates.currently_working,
        )

    if not _is_candidate_job_line(line):
        return None
    role, company = split_role_company(clean_fragment(line))
    if role == UNKNOWN_ROLE:
        return None
    return WorkExperience(role=role, company=company)


# =============================================================================
# Education
# =============================================================================

def _segments(text: str) -> List[str]:
    pieces = [text]
    for separator in EDUCATION_SEPARATORS:
        pieces = [part for piece in pieces for part in piece.split(separator)]
    return [p for p in (clean_fragment(piece) for piece in pieces) if p]


def _is_associate_job_title(line: str) -> bool:
    """True when "associate" is the only education keyword and is not phrased as a degree"""
    others = tuple(k for k in EDUCATION_KEYWORDS if k != "associate")
    return not contains_word(line, others) and not ASSOCIATE_DEGREE_PATTERN.search(line)


def split_institution_qualification(text: str) -> Tuple[str, str]:
    """Return (institution, qualification) for an education line without its dates."""
    segments = _segments(text)
    institution = next((s for s in segments if contains_word(s, INSTITUTION_INDICATORS)), "")

    if institution:
        rest = [s for s in segments if s != institution]
        qualification = next((s for s in rest if contains_word(s, DEGREE_KEYWORDS)), "")
        if not qualification:
            qualification = ", ".join(rest)
        return institution, qualification or text

    words = text.split()
    size = _trailing_run(words, INSTITUTION_INDICATORS, allow_leading_indicator=True)
    if size:
        return " ".join(words[-size:]), clean_fragment(" ".join(words[:-size])) or text
    return UNKNOWN_INSTITUTION, text


def parse_education_line(line: str) -> Optional[Education]:
    """
    Recognize an education entry on one line.

    Only lines naming a degree or a kind of institution are considered. Dated
    lines are kept unless "associate" is just a job title ("Sales Associate");
    undated ones only when an institution was found.
    """
    if not contains_word(line, EDUCATION_KEYWORDS):
        return None

    match = find_education_dates(line)
    text = remove_span(line, match.span) if match else clean_fragment(line)
    if not text:
        return None
    institution, qualification = split_institution_qualification(text)

    if match is None:
        if institution == UNKNOWN_INSTITUTION:
            return None
        return Education(institution=institution, qualification=qualification)
    if institution == UNKNOWN_INSTITUTION and _is_associate_job_title(line):
        return None

    return Education(
        institution=institution,
        qualification=qualification,
        start_date=match.dates.start_date,
        end_date=match.dates.end_date,
    )
