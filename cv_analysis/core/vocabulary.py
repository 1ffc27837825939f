"""
Static keyword tables used by the rule-based CV parser.

Every heuristic in ``cv_analysis.core`` reads its vocabulary from here so the
whole matching surface can be reviewed and tested in one place. Entries are
lowercase unless noted otherwise.
"""
from typing import Dict, List, Tuple

# English month names and abbreviations -> zero-padded month number
MONTHS: Dict[str, str] = {
    "jan": "01", "january": "01",
    "feb": "02", "february": "02",
    "mar": "03", "march": "03",
    "apr": "04", "april": "04",
    "may": "05",
    "jun": "06", "june": "06",
    "jul": "07", "july": "07",
    "aug": "08", "august": "08",
    "sep": "09", "sept": "09", "september": "09",
    "oct": "10", "october": "10",
    "nov": "11", "november": "11",
    "dec": "12", "december": "12",
}

# Words that mark an open-ended ("until today") range
PRESENT_WORDS: Tuple[str, ...] = ("present", "current", "now")

# A line containing any of these is never treated as a work-experience entry
NON_EXPERIENCE_MARKERS: Tuple[str, ...] = (
    "email", "phone", "@", "education", "skills", "summary", "objective", "profile",
)

# Role/company separators, tried in this order; the first one present wins
ROLE_COMPANY_SEPARATORS: Tuple[str, ...] = (
    " at ", " - ", " | ", " • ", " @ ", " in ", " of ", " with ",
)

# Job title keywords that make an undated line a work-experience candidate
JOB_TITLE_KEYWORDS: Tuple[str, ...] = (
    "developer", "engineer", "manager", "director", "coordinator", "specialist",
    "analyst", "consultant", "assistant", "officer", "supervisor", "lead", "architect",
    "designer", "programmer", "admin", "executive", "president", "ceo", "cto", "cfo",
)

# Substring indicators of a company on an undated line
COMPANY_SEPARATOR_INDICATORS: Tuple[str, ...] = (" at ", " - ", " | ", " • ", " @ ")

# Corporate suffix words (matched against whole words, punctuation stripped)
CORPORATE_SUFFIXES: Tuple[str, ...] = (
    "inc", "corp", "corporation", "ltd", "limited", "llc", "company", "group",
    "enterprises", "solutions", "technologies", "systems",
)

# Education line gate
EDUCATION_KEYWORDS: Tuple[str, ...] = (
    "bachelor", "master", "phd", "doctorate", "associate", "diploma", "certificate",
    "degree", "university", "college", "school", "institute", "academy", "graduated",
)

DEGREE_KEYWORDS: Tuple[str, ...] = (
    "bachelor", "master", "phd", "doctorate", "associate", "diploma", "certificate",
    "degree", "bsc", "msc", "mba", "ba", "ma", "bs", "ms",
)

INSTITUTION_INDICATORS: Tuple[str, ...] = (
    "university", "college", "school", "institute", "academy", "polytechnic",
)

EDUCATION_SEPARATORS: Tuple[str, ...] = (", ", " from ", " at ", " - ", " | ", " • ")

# Highest-first; (label, keywords). The label is what option matching searches for.
EDUCATION_LEVELS: List[Tuple[str, Tuple[str, ...]]] = [
    ("PhD", ("phd", "ph.d", "doctorate", "doctoral")),
    ("Master's", ("master", "msc", "mba")),
    ("Bachelor's", ("bachelor", "bsc", "b.sc")),
    ("Associate's", ("associate",)),
    ("Certificate", ("certificate", "diploma")),
]
DEFAULT_EDUCATION_LEVEL = "High School"

# (industry label, keywords) checked in order; whole-word matches on the CV text
INDUSTRY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("Technology/IT", ("software", "programming", "developer", "information technology", "tech", "digital")),
    ("Healthcare", ("medical", "healthcare", "hospital", "clinical", "nursing")),
    ("Finance", ("banking", "finance", "accounting", "investment", "insurance")),
    ("Manufacturing", ("manufacturing", "production", "industrial", "factory")),
    ("Retail", ("retail", "sales", "customer service", "store")),
    ("Education", ("teaching", "education", "academic")),
    ("Marketing", ("marketing", "advertising", "pr", "communications")),
    ("Engineering", ("engineering", "construction", "architecture")),
    ("Legal", ("law", "legal", "attorney", "lawyer", "paralegal")),
    ("Government", ("government", "public sector", "policy", "administration")),
]
DEFAULT_INDUSTRY = "Other"

# Experience buckets: (upper bound in years, inclusive; option search term)
EXPERIENCE_LEVELS: List[Tuple[float, str]] = [
    (1, "entry level"),
    (3, "junior"),
    (5, "mid level"),
    (8, "senior"),
]
TOP_EXPERIENCE_LEVEL = "expert"

MANAGEMENT_ROLE_KEYWORDS: Tuple[str, ...] = (
    "manager", "director", "lead", "supervisor", "head", "chief",
)
MANAGEMENT_DESCRIPTION_KEYWORDS: Tuple[str, ...] = ("manage", "lead", "supervise")

MALE_PRONOUNS: Tuple[str, ...] = ("he", "his", "him")
FEMALE_PRONOUNS: Tuple[str, ...] = ("she", "her", "hers")

REMOTE_KEYWORDS: Tuple[str, ...] = ("remote", "work from home", "wfh")

# Skill vocabularies, in display casing
TECHNICAL_SKILLS: Tuple[str, ...] = (
    "JavaScript", "TypeScript", "Python", "Java", "C#", "C++", "Go", "Ruby", "PHP",
    "Swift", "Kotlin", "Rust", "Scala", "SQL", "HTML", "CSS", "React", "Angular",
    "Vue", "Node.js", "Django", "Flask", "FastAPI", "Spring", "PostgreSQL", "MySQL",
    "MongoDB", "Redis", "Docker", "Kubernetes", "AWS", "Azure", "GCP", "Terraform",
    "Git", "Linux", "Excel", "Tableau", "Power BI", "Machine Learning", "TensorFlow",
    "PyTorch", "Pandas",
)
SOFT_SKILLS: Tuple[str, ...] = (
    "Leadership", "Communication", "Problem Solving", "Teamwork", "Collaboration",
    "Time Management", "Critical Thinking", "Adaptability", "Creativity",
    "Negotiation", "Mentoring", "Attention to Detail", "Presentation",
)

# Lines naming an academic degree are education entries, never jobs
ACADEMIC_DEGREE_MARKERS: Tuple[str, ...] = (
    "bachelor", "master's", "masters", "master of", "phd", "ph.d", "doctorate",
    "diploma", "degree", "bsc", "msc", "mba", "b.sc", "m.sc",
)

# Placeholders emitted when a split finds nothing; entries carrying them are discarded
UNKNOWN_ROLE = "Unknown Role"
UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_INSTITUTION = "Unknown Institution"

# "<word> language" captures that name something other than a spoken language
LANGUAGE_STOPWORDS: Tuple[str, ...] = (
    "programming", "query", "markup", "scripting", "native", "foreign", "first",
    "second", "body", "sign", "the", "a", "any", "one", "modeling", "natural",
)
DEFAULT_LANGUAGE = "English"
