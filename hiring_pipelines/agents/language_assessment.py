from __future__ import annotations
from typing import Literal, Optional, Union
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import CamelModel, json_prompt


class LanguageAssessed(CamelModel):
    assessment_skipped: Literal[False]
    overall_level: Literal["A1", "A2", "B1", "B2", "C1", "C2", "Native"]
    fluency: Literal["choppy", "moderate", "fluent"]
    vocabulary: Literal["basic", "intermediate", "advanced"]
    pronunciation: Literal["heavy_accent", "understandable", "clear"]
    summary: str


class LanguageSkipped(CamelModel):
    assessment_skipped: Literal[True]
    reason: str


# Either a full CEFR assessment or a note explaining why there is none
LanguageAssessment = Union[LanguageAssessed, LanguageSkipped]


class LanguageAssessmentState(ExtractionState):
    transcript: Optional[str] = None
    parsed_output: Optional[LanguageAssessment] = None


LANGUAGE_ASSESSMENT = ExtractionUnitSpec(
    name="language_assessment",
    state_cls=LanguageAssessmentState,
    output_type=LanguageAssessment,
    prompt=json_prompt(
        "You are an expert in language proficiency assessment (CEFR).",
        "Evaluate the candidate's English based only on the transcript. If no significant "
        "English was spoken, return the skipped format instead.\n\n"
        "INTERVIEW TRANSCRIPT:\n---\n{transcript}\n---\n\n"
        "Format 1, English was spoken:\n"
        '{{"assessmentSkipped": false, "overallLevel": "A1" | "A2" | "B1" | "B2" | "C1" | "C2" | "Native", '
        '"fluency": "choppy" | "moderate" | "fluent", "vocabulary": "basic" | "intermediate" | "advanced", '
        '"pronunciation": "heavy_accent" | "understandable" | "clear", "summary": "..."}}\n\n'
        "Format 2, no English was spoken:\n"
        '{{"assessmentSkipped": true, "reason": "..."}}',
    ),
    inputs=("transcript",),
    failure_label="Failed on Language Assessment Parsing",
)
