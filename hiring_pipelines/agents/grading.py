from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import StrictModel, json_prompt, safe_stringify
from .parsing import AggregatedData


class GradeAndType(StrictModel):
    grade: Literal["Trainee", "Junior", "Middle", "Senior"]
    type: Literal["QA", "AQA"]


class CriterionMatch(StrictModel):
    criterion: str
    match: Literal["full", "partial", "none"]
    comment: str


CriteriaMatching = List[CriterionMatch]


class ValuesAssessment(StrictModel):
    values_assessment: str


class Assessment(BaseModel):
    grade: str
    type: str
    criteria_matching: List[CriterionMatch]
    values_assessment: str


class FinalResult(AggregatedData):
    assessment: Assessment


class GradingUnitState(ExtractionState):
    aggregated_result: Optional[AggregatedData] = None


class GradeAndTypeState(GradingUnitState):
    parsed_output: Optional[GradeAndType] = None


class CriteriaMatchingState(GradingUnitState):
    parsed_output: Optional[List[CriterionMatch]] = None


class ValuesAssessmentState(GradingUnitState):
    parsed_output: Optional[ValuesAssessment] = None


def _profile_variables(state: GradingUnitState) -> Dict[str, Any]:
    data = state.aggregated_result
    return {
        "candidate_info": safe_stringify(data.candidate_info),
        "job_requirements": safe_stringify(data.job_requirements),
        "recruiter_feedback": safe_stringify(data.recruiter_feedback),
    }


def _values_variables(state: GradingUnitState) -> Dict[str, Any]:
    data = state.aggregated_result
    return {
        "soft_skills_required": safe_stringify(data.job_requirements.soft_skills_required),
        "recruiter_feedback": safe_stringify(data.recruiter_feedback),
    }


TEAM_LEAD = "You are an experienced QA team lead screening candidates before a technical interview."

GRADE_AND_TYPE = ExtractionUnitSpec(
    name="grade_and_type",
    state_cls=GradeAndTypeState,
    output_type=GradeAndType,
    prompt=json_prompt(
        TEAM_LEAD,
        "Your ONLY task is to determine the candidate's most likely grade and type, "
        "based strictly on the data below.\n\n"
        "Candidate info:\n{candidate_info}\n\n"
        "Job requirements:\n{job_requirements}\n\n"
        "JSON output format:\n"
        '{{"grade": "Trainee" | "Junior" | "Middle" | "Senior", "type": "QA" | "AQA"}}',
    ),
    inputs=("aggregated_result",),
    failure_label="Failed on Grade/Type",
    render=_profile_variables,
)

CRITERIA_MATCHING = ExtractionUnitSpec(
    name="criteria_matching",
    state_cls=CriteriaMatchingState,
    output_type=CriteriaMatching,
    prompt=json_prompt(
        TEAM_LEAD,
        "For each criterion in 'hard_skills_required', determine the match level by "
        "cross-referencing the candidate's skills, experience and the recruiter feedback. "
        "Give a brief, evidence-based comment for each criterion. "
        'The "match" field MUST be exactly one of "full", "partial" or "none".\n\n'
        "Candidate info:\n{candidate_info}\n\n"
        "Job requirements:\n{job_requirements}\n\n"
        "Recruiter feedback:\n{recruiter_feedback}\n\n"
        "JSON output format (an array):\n"
        '[{{"criterion": "...", "match": "full" | "partial" | "none", "comment": "..."}}]',
    ),
    inputs=("aggregated_result",),
    failure_label="Failed on Criteria Matching",
    render=_profile_variables,
)

VALUES_ASSESSMENT = ExtractionUnitSpec(
    name="values_assessment",
    state_cls=ValuesAssessmentState,
    output_type=ValuesAssessment,
    prompt=json_prompt(
        TEAM_LEAD,
        "Assess the candidate's alignment with the values implied by the soft skill "
        "requirements and the recruiter feedback. Write a brief, concise conclusion.\n\n"
        "Soft skills required:\n{soft_skills_required}\n\n"
        "Recruiter feedback:\n{recruiter_feedback}\n\n"
        "JSON output format:\n"
        '{{"values_assessment": "..."}}',
    ),
    inputs=("aggregated_result",),
    failure_label="Failed on Values Assessment",
    render=_values_variables,
)
