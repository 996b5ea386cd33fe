from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import StrictModel, json_prompt


class CvData(StrictModel):
    first_name: str
    last_name: str
    skills: List[str]
    experience: str


class RequirementsData(StrictModel):
    hard_skills_required: List[str]
    soft_skills_required: List[str]


class FeedbackData(StrictModel):
    comments: str


class AggregatedData(BaseModel):
    candidate_info: CvData
    job_requirements: RequirementsData
    recruiter_feedback: FeedbackData


class CvParserState(ExtractionState):
    cv_text: Optional[str] = None
    parsed_output: Optional[CvData] = None


class RequirementsParserState(ExtractionState):
    requirements_text: Optional[str] = None
    parsed_output: Optional[RequirementsData] = None


class FeedbackParserState(ExtractionState):
    feedback_text: Optional[str] = None
    parsed_output: Optional[FeedbackData] = None


CV_PARSER = ExtractionUnitSpec(
    name="cv_parser",
    state_cls=CvParserState,
    output_type=CvData,
    prompt=json_prompt(
        "You extract structured data from resumes into a strict JSON schema.",
        "Analyze ONLY the CV text below. Extract the candidate's first name, last name, "
        "all technical skills and a summary of their experience.\n\n"
        "CV text:\n{cv_text}\n\n"
        "JSON output format:\n"
        '{{"first_name": "...", "last_name": "...", "skills": ["...", "..."], "experience": "..."}}',
    ),
    inputs=("cv_text",),
    failure_label="Failed on CV Parsing",
)

REQUIREMENTS_PARSER = ExtractionUnitSpec(
    name="requirements_parser",
    state_cls=RequirementsParserState,
    output_type=RequirementsData,
    prompt=json_prompt(
        "You extract structured data from job descriptions into a strict JSON schema.",
        "Analyze ONLY the job requirements text below. Extract the key hard and soft skills "
        "required for the position.\n\n"
        "Job requirements text:\n{requirements_text}\n\n"
        "JSON output format:\n"
        '{{"hard_skills_required": ["...", "..."], "soft_skills_required": ["...", "..."]}}',
    ),
    inputs=("requirements_text",),
    failure_label="Failed on Requirements Parsing",
)

FEEDBACK_PARSER = ExtractionUnitSpec(
    name="feedback_parser",
    state_cls=FeedbackParserState,
    output_type=FeedbackData,
    prompt=json_prompt(
        "You extract structured data from recruiter notes into a strict JSON schema.",
        "Analyze ONLY the recruiter's feedback below. Extract comments, observations and "
        "the overall assessment.\n\n"
        "Recruiter feedback text:\n{feedback_text}\n\n"
        "JSON output format:\n"
        '{{"comments": "..."}}',
    ),
    inputs=("feedback_text",),
    failure_label="Failed on Feedback Parsing",
)
