from __future__ import annotations
from typing import Any, Dict, List, Optional
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import CamelModel, format_topic_list, json_prompt


class AiSummary(CamelModel):
    overall_summary: str
    key_strengths: List[str]
    key_weaknesses: List[str]


class AiSummaryState(ExtractionState):
    transcript: Optional[str] = None
    topic_list: Optional[List[str]] = None
    parsed_output: Optional[AiSummary] = None


def _variables(state: AiSummaryState) -> Dict[str, Any]:
    return {"transcript": state.transcript, "topic_list": format_topic_list(state.topic_list)}


AI_SUMMARY = ExtractionUnitSpec(
    name="ai_summary",
    state_cls=AiSummaryState,
    output_type=AiSummary,
    prompt=json_prompt(
        "You are an expert interviewer writing a narrative summary of an interview.",
        "Describe the flow of the conversation, the main topics and the candidate's overall "
        "demeanor. List the 3-5 most significant strengths and the 1-3 most significant "
        "weaknesses.\n\n"
        "KEY TOPICS:\n---\n{topic_list}\n---\n\n"
        "INTERVIEW TRANSCRIPT:\n---\n{transcript}\n---\n\n"
        "JSON output format:\n"
        '{{"overallSummary": "...", "keyStrengths": ["..."], "keyWeaknesses": ["..."]}}',
    ),
    inputs=("transcript", "topic_list"),
    failure_label="Failed on AI Summary Parsing",
    render=_variables,
)
