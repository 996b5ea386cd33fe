from __future__ import annotations
from typing import List, Optional
from pydantic import Field
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import CamelModel, json_prompt


class CvSummary(CamelModel):
    """Facts taken directly from the CV."""

    full_name: str
    location: Optional[str] = None
    summary: str
    skills: List[str]
    # "5" and 5 are both accepted
    years_of_experience: Optional[float] = Field(default=None, strict=False)


class CvSummaryState(ExtractionState):
    cv_text: Optional[str] = None
    parsed_output: Optional[CvSummary] = None


CV_SUMMARY = ExtractionUnitSpec(
    name="cv_summary",
    state_cls=CvSummaryState,
    output_type=CvSummary,
    prompt=json_prompt(
        "You extract structured data from resumes into a strict JSON schema.",
        "Summarize the candidate's CV below. List every skill, technology or methodology "
        "explicitly mentioned and estimate the total years of relevant experience.\n\n"
        "CV text:\n---\n{cv_text}\n---\n\n"
        "JSON output format:\n"
        '{{"fullName": "...", "location": "City, Country", "summary": "...", '
        '"skills": ["...", "..."], "yearsOfExperience": 5}}',
    ),
    inputs=("cv_text",),
    failure_label="Failed on CV Summary Parsing",
)
