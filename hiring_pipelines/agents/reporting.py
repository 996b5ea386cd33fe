from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import StrictModel, json_prompt, safe_stringify
from .grading import CriterionMatch, FinalResult


class SummaryOutput(StrictModel):
    summary: str


class RecommendationsOutput(StrictModel):
    recommendations: str


class InterviewTopicsOutput(StrictModel):
    interview_topics: List[str]


class Conclusion(BaseModel):
    summary: str
    recommendations: str
    interview_topics: List[str]
    values_assessment: str


class Report(BaseModel):
    """Pre-interview screening report."""

    first_name: str
    last_name: str
    matching_table: List[CriterionMatch]
    candidate_profile: str
    conclusion: Conclusion


class ReportingUnitState(ExtractionState):
    final_result: Optional[FinalResult] = None


class SummaryState(ReportingUnitState):
    parsed_output: Optional[SummaryOutput] = None


class RecommendationsState(ReportingUnitState):
    parsed_output: Optional[RecommendationsOutput] = None


class InterviewTopicsState(ReportingUnitState):
    parsed_output: Optional[InterviewTopicsOutput] = None


def _full_assessment(state: ReportingUnitState) -> Dict[str, Any]:
    return {"full_assessment_data": safe_stringify(state.final_result)}


def _criteria(state: ReportingUnitState) -> Dict[str, Any]:
    return {"criteria_matching": safe_stringify(state.final_result.assessment.criteria_matching)}


ASSISTANT = "You are an AI assistant helping a hiring team prepare for a technical interview."

SUMMARY = ExtractionUnitSpec(
    name="summary",
    state_cls=SummaryState,
    output_type=SummaryOutput,
    prompt=json_prompt(
        ASSISTANT,
        "Write a detailed summary of the assessment below. Consider the criteria matching, "
        "the candidate's experience and the recruiter feedback, and conclude whether the "
        "candidate is ready for a technical interview.\n\n"
        "Full assessment data:\n{full_assessment_data}\n\n"
        "JSON output format:\n"
        '{{"summary": "..."}}',
    ),
    inputs=("final_result",),
    failure_label="Failed on Summary Generation",
    render=_full_assessment,
)

RECOMMENDATIONS = ExtractionUnitSpec(
    name="recommendations",
    state_cls=RecommendationsState,
    output_type=RecommendationsOutput,
    prompt=json_prompt(
        ASSISTANT,
        "Formulate recommendations for what the candidate should improve, focusing on "
        'criteria marked "partial" or "none".\n\n'
        "Criteria matching results:\n{criteria_matching}\n\n"
        "JSON output format:\n"
        '{{"recommendations": "..."}}',
    ),
    inputs=("final_result",),
    failure_label="Failed on Recommendations Generation",
    render=_criteria,
)

INTERVIEW_TOPICS = ExtractionUnitSpec(
    name="interview_topics",
    state_cls=InterviewTopicsState,
    output_type=InterviewTopicsOutput,
    prompt=json_prompt(
        ASSISTANT,
        "Generate 3-5 key topics for the technical interview. Balance potential weak spots "
        "with areas where the candidate can demonstrate strengths.\n\n"
        "Full assessment data:\n{full_assessment_data}\n\n"
        "JSON output format:\n"
        '{{"interview_topics": ["...", "...", "..."]}}',
    ),
    inputs=("final_result",),
    failure_label="Failed on Interview Topics Generation",
    render=_full_assessment,
)
