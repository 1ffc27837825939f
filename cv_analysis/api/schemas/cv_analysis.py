"""
CV analysis schemas.

Structured profile extracted from a candidate CV, and the custom application
form fields a recruiter attaches to a job posting. Field names are snake_case
in Python and camelCase on the wire (``personalInfo``, ``startDate`` ...).
"""
import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from cv_analysis.utils.exceptions import InvalidCustomFieldError

YEAR_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_year_month(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not YEAR_MONTH_PATTERN.match(value):
        raise ValueError(f"Date must be in YYYY-MM format, got {value!r}")
    return value


class PersonalInfo(CamelModel):
    """Contact details. Missing values are empty strings, never null."""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""


class WorkExperience(CamelModel):
    """One position, in document order."""
    role: str
    company: str
    start_date: Optional[str] = Field(None, description="YYYY-MM")
    end_date: Optional[str] = Field(None, description="YYYY-MM, absent when currently working")
    currently_working: bool = False
    description: str = ""

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, value: Optional[str]) -> Optional[str]:
        return _check_year_month(value)

    @model_validator(mode="after")
    def open_ended_when_current(self) -> "WorkExperience":
        if self.currently_working and self.end_date is not None:
            self.end_date = None
        return self


class Education(CamelModel):
    """One qualification, in document order."""
    institution: str
    qualification: str
    start_date: Optional[str] = Field(None, description="YYYY-MM")
    end_date: Optional[str] = Field(None, description="YYYY-MM")

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, value: Optional[str]) -> Optional[str]:
        return _check_year_month(value)


class Skills(CamelModel):
    technical: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)


class CVAnalysisResult(CamelModel):
    """Structured data extracted from a CV, used to pre-fill an application form."""
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    work_experience: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    skills: Skills = Field(default_factory=Skills)
    summary: str = ""
    custom_fields_suggestions: Dict[str, str] = Field(
        default_factory=dict,
        description="One suggested value per custom field name supplied by the caller"
    )


# =============================================================================
# Custom form fields
# =============================================================================

class _CustomFieldBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    field_name: str = Field(..., min_length=1)
    field_label: str = ""

    @field_validator("field_label", mode="before")
    @classmethod
    def label_default(cls, value: Any) -> str:
        return "" if value is None else value


class SingleChoiceField(_CustomFieldBase):
    """A ``select_one`` field with a non-empty option list."""
    field_type: Literal["select_one"] = "select_one"
    field_options: List[str] = Field(..., min_length=1)


class FreeTextField(_CustomFieldBase):
    """Any other field: text, textarea, number, multi-select, or select_one without options."""
    field_type: str = "text"
    field_options: Optional[List[str]] = None


def _custom_field_kind(value: Any) -> str:
    if isinstance(value, dict):
        field_type = value.get("field_type")
        options = value.get("field_options")
    else:
        field_type = getattr(value, "field_type", None)
        options = getattr(value, "field_options", None)
    return "single_choice" if field_type == "select_one" and options else "free_text"


CustomField = Annotated[
    Union[
        Annotated[SingleChoiceField, Tag("single_choice")],
        Annotated[FreeTextField, Tag("free_text")],
    ],
    Discriminator(_custom_field_kind),
]

_custom_fields_adapter = TypeAdapter(List[CustomField])


def parse_custom_fields(raw_fields: Optional[List[Any]]) -> List[Union[SingleChoiceField, FreeTextField]]:
    """
    Validate loosely-typed custom field definitions.

    Args:
        raw_fields: Dicts shaped like ``{field_name, field_type, field_label, field_options?}``
            or already-validated field models

    Returns:
        List of SingleChoiceField / FreeTextField

    Raises:
        InvalidCustomFieldError: If any definition is malformed
    """
    if not raw_fields:
        return []
    try:
        return _custom_fields_adapter.validate_python(list(raw_fields))
    except ValidationError as e:
        raise InvalidCustomFieldError(
            "Invalid custom field definition",
            details={"errors": e.errors(include_url=False, include_context=False)}
        )
