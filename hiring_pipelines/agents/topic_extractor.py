from __future__ import annotations
from typing import List, Optional
from pydantic import Field
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import StrictModel, json_prompt


class ExtractedTopics(StrictModel):
    topics: List[str] = Field(min_length=1)


class TopicExtractorState(ExtractionState):
    transcript: Optional[str] = None
    parsed_output: Optional[ExtractedTopics] = None


TOPIC_EXTRACTOR = ExtractionUnitSpec(
    name="topic_extractor",
    state_cls=TopicExtractorState,
    output_type=ExtractedTopics,
    prompt=json_prompt(
        "You analyze technical interview transcripts.",
        "Read the whole transcript below. For each logical block of the conversation, "
        "name the main question or technical topic the candidate was answering. Omit small "
        "talk and keep technical terms as they were used.\n\n"
        "Transcript:\n---\n{transcript}\n---\n\n"
        "JSON output format:\n"
        '{{"topics": ["...", "..."]}}',
    ),
    inputs=("transcript",),
    failure_label="Failed on Topic Extraction",
)


def topic_list(state: TopicExtractorState) -> List[str]:
    """Flattens the unit's ``{topics: [...]}`` output for the downstream analyses."""
    return list(state.parsed_output.topics)
