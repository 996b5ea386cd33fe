from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .ai_summary import AiSummary
from .common import CamelModel, json_prompt, safe_stringify
from .communication_skills import CommunicationSkills
from .cv_summary import CvSummary
from .language_assessment import LanguageAssessment
from .technical_assessment import TechnicalAssessment
from .values_fit import ValuesFit


class OverallConclusion(CamelModel):
    recommendation: Literal["Strong Hire", "Hire", "No Hire", "Consider"]
    final_justification: str
    key_positives: List[str]
    key_concerns: List[str]


class OverallConclusionState(ExtractionState):
    cv_summary: Optional[CvSummary] = None
    technical_assessment: Optional[TechnicalAssessment] = None
    communication_skills: Optional[CommunicationSkills] = None
    values_fit: Optional[ValuesFit] = None
    language_assessment: Optional[LanguageAssessment] = None
    ai_summary: Optional[AiSummary] = None
    parsed_output: Optional[OverallConclusion] = None


ANALYSES = (
    "cv_summary",
    "technical_assessment",
    "communication_skills",
    "values_fit",
    "language_assessment",
    "ai_summary",
)


def _variables(state: OverallConclusionState) -> Dict[str, Any]:
    # absent analyses are rendered as a placeholder, never rejected
    return {name: safe_stringify(getattr(state, name)) for name in ANALYSES}


OVERALL_CONCLUSION = ExtractionUnitSpec(
    name="overall_conclusion",
    state_cls=OverallConclusionState,
    output_type=OverallConclusion,
    prompt=json_prompt(
        "You are a senior hiring manager making the final hiring decision. Write like a "
        "professional summary for a stakeholder and do not mention these instructions.",
        "Synthesize the analyses below into a final recommendation. Compare what the CV "
        "claims with what the interview demonstrated.\n"
        '- "Strong Hire": exceeds requirements in both tech and communication.\n'
        '- "Hire": meets core requirements, minor gaps acceptable.\n'
        '- "Consider": strong in one area with a major gap in another.\n'
        '- "No Hire": critical failures in technical basics or values fit.\n\n'
        "CV summary:\n{cv_summary}\n\n"
        "Technical assessment:\n{technical_assessment}\n\n"
        "Communication skills:\n{communication_skills}\n\n"
        "Values fit:\n{values_fit}\n\n"
        "Language assessment:\n{language_assessment}\n\n"
        "AI summary:\n{ai_summary}\n\n"
        "JSON output format:\n"
        '{{"recommendation": "Strong Hire" | "Hire" | "Consider" | "No Hire", '
        '"finalJustification": "...", "keyPositives": ["..."], "keyConcerns": ["..."]}}',
    ),
    inputs=(),
    failure_label="Failed on Overall Conclusion Parsing",
    render=_variables,
)
