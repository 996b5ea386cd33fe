from __future__ import annotations
from typing import Literal, Optional
from pydantic import Field
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import CamelModel, json_prompt


class CommunicationSkills(CamelModel):
    overall_score: float = Field(ge=1, le=10)
    clarity: Literal["poor", "average", "good", "excellent"]
    structure: Literal["unstructured", "average", "well-structured"]
    engagement: Literal["low", "medium", "high"]
    summary: str


class CommunicationSkillsState(ExtractionState):
    transcript: Optional[str] = None
    parsed_output: Optional[CommunicationSkills] = None


COMMUNICATION_SKILLS = ExtractionUnitSpec(
    name="communication_skills",
    state_cls=CommunicationSkillsState,
    output_type=CommunicationSkills,
    prompt=json_prompt(
        "You are an expert interviewer evaluating a candidate's communication skills.",
        "Evaluate how clearly the candidate answered, how well the answers were structured "
        "(e.g. STAR) and how engaged the candidate was, based only on the transcript.\n\n"
        "INTERVIEW TRANSCRIPT:\n---\n{transcript}\n---\n\n"
        "JSON output format:\n"
        '{{"overallScore": 1-10, "clarity": "poor" | "average" | "good" | "excellent", '
        '"structure": "unstructured" | "average" | "well-structured", '
        '"engagement": "low" | "medium" | "high", "summary": "..."}}',
    ),
    inputs=("transcript",),
    failure_label="Failed on Communication Skills Parsing",
)
