"""
Date range detection for free-text CV lines.

Work experience and education use the same patterns but different defaults:
a bare year on a job means January-December of that year, while on a degree
it means the academic year ending that summer (September of the previous
year to May).
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from cv_analysis.core.vocabulary import MONTHS, PRESENT_WORDS

_MONTH = r"(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?"
_YEAR = r"((?:19|20)\d{2})"
_DASH = r"\s*(?:[-–—]|\bto\b)\s*"
_PRESENT = r"(present|current|now)\b"

MONTH_RANGE = re.compile(rf"\b{_MONTH}\s+{_YEAR}{_DASH}(?:{_MONTH}\s+{_YEAR}|{_PRESENT})", re.IGNORECASE)
SLASH_RANGE = re.compile(rf"\b(\d{{1,2}})/{_YEAR}{_DASH}(?:(\d{{1,2}})/{_YEAR}|{_PRESENT})", re.IGNORECASE)
ISO_RANGE = re.compile(rf"\b{_YEAR}-(\d{{1,2}})\b{_DASH}(?:{_YEAR}-(\d{{1,2}})\b|{_PRESENT})", re.IGNORECASE)
YEAR_RANGE = re.compile(rf"\b{_YEAR}{_DASH}{_YEAR}\b", re.IGNORECASE)
YEAR_TO_PRESENT = re.compile(rf"\b{_YEAR}{_DASH}{_PRESENT}", re.IGNORECASE)
SINCE_YEAR = re.compile(rf"\bsince\s+(?:{_MONTH}\s+)?{_YEAR}\b", re.IGNORECASE)
MONTH_YEAR = re.compile(rf"\b{_MONTH}\s+{_YEAR}\b", re.IGNORECASE)
BARE_YEAR = re.compile(rf"\b{_YEAR}\b")


@dataclass(frozen=True)
class DateRange:
    """Parsed dates in YYYY-MM form; end_date is None for open-ended ranges."""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    currently_working: bool = False


@dataclass(frozen=True)
class DateMatch:
    """A date range found in a line, with the character span it occupied."""
    dates: DateRange
    span: Tuple[int, int]
    text: str


def month_number(token: Optional[str]) -> Optional[str]:
    """Map an English month name or abbreviation to its zero-padded number."""
    if not token:
        return None
    return MONTHS.get(token.lower().rstrip("."))


def _numeric_month(token: Optional[str]) -> Optional[str]:
    if not token or not token.isdigit():
        return None
    month = int(token)
    if 1 <= month <= 12:
        return f"{month:02d}"
    return None


def _ym(year: str, month: Optional[str]) -> Optional[str]:
    return f"{year}-{month}" if month else None


def _is_present(token: Optional[str]) -> bool:
    return bool(token) and token.lower() in PRESENT_WORDS


# -----------------------------------------------------------------------------
# Work experience converters
# -----------------------------------------------------------------------------

def _work_month_range(m: re.Match) -> Optional[DateRange]:
    start = _ym(m.group(2), month_number(m.group(1)))
    if _is_present(m.group(5)):
        return DateRange(start, None, True)
    return DateRange(start, _ym(m.group(4), month_number(m.group(3))), False)


def _work_slash_range(m: re.Match) -> Optional[DateRange]:
    start_month = _numeric_month(m.group(1))
    if not start_month:
        return None
    start = _ym(m.group(2), start_month)
    if _is_present(m.group(5)):
        return DateRange(start, None, True)
    end_month = _numeric_month(m.group(3))
    if not end_month:
        return None
    return DateRange(start, _ym(m.group(4), end_month), False)


def _work_iso_range(m: re.Match) -> Optional[DateRange]:
    start_month = _numeric_month(m.group(2))
    if not start_month:
        return None
    start = _ym(m.group(1), start_month)
    if _is_present(m.group(5)):
        return DateRange(start, None, True)
    end_month = _numeric_month(m.group(4))
    if not end_month:
        return None
    return DateRange(start, _ym(m.group(3), end_month), False)


def _work_year_range(m: re.Match) -> DateRange:
    return DateRange(f"{m.group(1)}-01", f"{m.group(2)}-12", False)


def _work_year_to_present(m: re.Match) -> DateRange:
    return DateRange(f"{m.group(1)}-01", None, True)


def _work_since(m: re.Match) -> DateRange:
    month = month_number(m.group(1)) or "01"
    return DateRange(f"{m.group(2)}-{month}", None, True)


def _work_month_year(m: re.Match) -> DateRange:
    # One month on its own is a closed one-month span, never an open range
    month = _ym(m.group(2), month_number(m.group(1)))
    return DateRange(month, month, False)


def _work_bare_year(m: re.Match) -> DateRange:
    return DateRange(f"{m.group(1)}-01", f"{m.group(1)}-12", False)


WORK_DATE_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match], Optional[DateRange]]]] = [
    (MONTH_RANGE, _work_month_range),
    (SLASH_RANGE, _work_slash_range),
    (ISO_RANGE, _work_iso_range),
    (YEAR_RANGE, _work_year_range),
    (YEAR_TO_PRESENT, _work_year_to_present),
    (SINCE_YEAR, _work_since),
    (MONTH_YEAR, _work_month_year),
    (BARE_YEAR, _work_bare_year),
]


# -----------------------------------------------------------------------------
# Education converters
# -----------------------------------------------------------------------------

def _edu_year_range(m: re.Match) -> DateRange:
    return DateRange(f"{m.group(1)}-09", f"{m.group(2)}-05")


def _edu_year_to_present(m: re.Match) -> DateRange:
    return DateRange(f"{m.group(1)}-09", None)


def _edu_month_year(m: re.Match) -> DateRange:
    # A single month-year on a degree is the completion date
    return DateRange(None, _ym(m.group(2), month_number(m.group(1))))


def _edu_bare_year(m: re.Match) -> DateRange:
    year = int(m.group(1))
    return DateRange(f"{year - 1}-09", f"{year}-05")


def _without_flag(converter: Callable[[re.Match], Optional[DateRange]]) -> Callable[[re.Match], Optional[DateRange]]:
    def convert(m: re.Match) -> Optional[DateRange]:
        dates = converter(m)
        if dates is None:
            return None
        return DateRange(dates.start_date, dates.end_date, False)
    return convert


EDUCATION_DATE_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match], Optional[DateRange]]]] = [
    (MONTH_RANGE, _without_flag(_work_month_range)),
    (SLASH_RANGE, _without_flag(_work_slash_range)),
    (ISO_RANGE, _without_flag(_work_iso_range)),
    (YEAR_RANGE, _edu_year_range),
    (YEAR_TO_PRESENT, _edu_year_to_present),
    (MONTH_YEAR, _edu_month_year),
    (BARE_YEAR, _edu_bare_year),
]


def _find(line: str, patterns) -> Optional[DateMatch]:
    for pattern, convert in patterns:
        for match in pattern.finditer(line):
            dates = convert(match)
            if dates is not None:
                return DateMatch(dates=dates, span=match.span(), text=match.group(0))
    return None


def find_work_dates(line: str) -> Optional[DateMatch]:
    """
    Find the first work-experience date range in a line.

    Patterns are tried in priority order (month ranges, numeric month ranges,
    year ranges, year to present, "since", month-year, bare year); the first
    pattern that yields a valid range wins.
    """
    return _find(line, WORK_DATE_PATTERNS)


def find_education_dates(line: str) -> Optional[DateMatch]:
    """Find the first education date range in a line (academic-year defaults)."""
    return _find(line, EDUCATION_DATE_PATTERNS)


_PARENS_LEFT_EMPTY = re.compile(r"[\(\[]\s*[,\-–—]?\s*[\)\]]")
_LEADING_BULLETS = re.compile(r"^[\s\-–—•*·>]+")
_EDGE_PUNCT = re.compile(r"^[,;:|\s]+|[,;:|\s\-–—]+$")


def clean_fragment(text: str) -> str:
    """Trim bullets, empty brackets, stray separators and repeated whitespace."""
    text = _PARENS_LEFT_EMPTY.sub(" ", text)
    text = _LEADING_BULLETS.sub("", text)
    text = re.sub(r"\s{2,}", " ", text)
    return _EDGE_PUNCT.sub("", text).strip()


def remove_span(line: str, span: Tuple[int, int]) -> str:
    """Remove a matched date span from a line and tidy what is left."""
    start, end = span
    return clean_fragment(f"{line[:start]} {line[end:]}")


_ISO_DATE = re.compile(r"^((?:19|20)\d{2})(?:[-/.](\d{1,2}))?(?:[-/.]\d{1,2})?(?:T.*)?$")
_SLASH_DATE = re.compile(r"^(\d{1,2})[/.-]((?:19|20)\d{2})$")


def normalize_date(value, default_month: str = "01") -> Optional[str]:
    """
    Coerce a loosely formatted date into YYYY-MM.

    Accepts YYYY-MM, YYYY-M, YYYY-MM-DD, YYYY, MM/YYYY and "Mon YYYY". A bare
    year takes ``default_month``. Anything else (including "Present" and null)
    becomes None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    iso = _ISO_DATE.match(text)
    if iso:
        if iso.group(2) is None:
            return f"{iso.group(1)}-{default_month}"
        month = _numeric_month(iso.group(2))
        return _ym(iso.group(1), month)

    slash = _SLASH_DATE.match(text)
    if slash:
        return _ym(slash.group(2), _numeric_month(slash.group(1)))

    named = MONTH_YEAR.fullmatch(text)
    if named:
        return _ym(named.group(2), month_number(named.group(1)))

    return None
