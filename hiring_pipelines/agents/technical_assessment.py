from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional
from pydantic import Field
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import CamelModel, format_topic_list, json_prompt


class TechnicalAssessment(CamelModel):
    overall_score: float = Field(ge=1, le=10)
    knowledge_depth: Literal["superficial", "moderate", "deep"]
    practical_experience: Literal["lacking", "mentioned", "demonstrated"]
    problem_solving: Literal["weak", "average", "strong"]
    summary: str


class TechnicalAssessmentState(ExtractionState):
    transcript: Optional[str] = None
    topic_list: Optional[List[str]] = None
    parsed_output: Optional[TechnicalAssessment] = None


def _variables(state: TechnicalAssessmentState) -> Dict[str, Any]:
    return {"transcript": state.transcript, "topic_list": format_topic_list(state.topic_list)}


TECHNICAL_ASSESSMENT = ExtractionUnitSpec(
    name="technical_assessment",
    state_cls=TechnicalAssessmentState,
    output_type=TechnicalAssessment,
    prompt=json_prompt(
        "You are a senior technical interviewer.",
        "Evaluate the candidate's technical skills based only on the transcript, paying "
        "attention to the answers on the key topics. Distinguish hands-on experience "
        '("I did...") from theory ("One could...").\n\n'
        "KEY TOPICS:\n---\n{topic_list}\n---\n\n"
        "INTERVIEW TRANSCRIPT:\n---\n{transcript}\n---\n\n"
        "JSON output format:\n"
        '{{"overallScore": 1-10, "knowledgeDepth": "superficial" | "moderate" | "deep", '
        '"practicalExperience": "lacking" | "mentioned" | "demonstrated", '
        '"problemSolving": "weak" | "average" | "strong", "summary": "..."}}',
    ),
    inputs=("transcript", "topic_list"),
    failure_label="Failed on Technical Assessment Parsing",
    render=_variables,
)
