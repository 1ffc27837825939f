"""
API request schemas
"""
from typing import List, Optional

from pydantic import ConfigDict, Field

from cv_analysis.api.schemas.cv_analysis import CamelModel, CustomField


class CVAnalysisRequest(CamelModel):
    """CV analysis request (camelCase on the wire)"""

    file_url: str = Field(..., min_length=1, description="Storage path of the CV inside the documents bucket")
    job_title: Optional[str] = Field(default=None, description="Title of the job the candidate applies for")
    custom_fields: List[CustomField] = Field(
        default_factory=list,
        description="Custom application form fields to suggest answers for"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "fileUrl": "applications/42/cv.pdf",
                "jobTitle": "Senior Backend Engineer",
                "customFields": [
                    {
                        "field_name": "experience_level",
                        "field_type": "select_one",
                        "field_label": "Experience level",
                        "field_options": ["Entry Level", "Junior", "Mid Level", "Senior", "Expert"]
                    },
                    {
                        "field_name": "languages",
                        "field_type": "text",
                        "field_label": "Languages spoken"
                    }
                ]
            }
        }
    )
