"""
Post-interview final report orchestrator.

Layer 1 (from START, in parallel):
    cv_summary, communication_skills, values_fit, language_assessment, topic_extractor
Layer 2 (after topic_extractor):
    technical_assessment, ai_summary
Layer 3 (join over the six analyses):
    overall_conclusion
Layer 4:
    report_builder -> END

A failing unit raises ``SubgraphFailure`` out of its adapter and ends the run.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from ..agents.ai_summary import AI_SUMMARY, AiSummary
from ..agents.common import CamelModel
from ..agents.communication_skills import COMMUNICATION_SKILLS, CommunicationSkills
from ..agents.cv_summary import CV_SUMMARY, CvSummary
from ..agents.language_assessment import LANGUAGE_ASSESSMENT, LanguageAssessment
from ..agents.overall_conclusion import OVERALL_CONCLUSION, OverallConclusion
from ..agents.technical_assessment import TECHNICAL_ASSESSMENT, TechnicalAssessment
from ..agents.topic_extractor import TOPIC_EXTRACTOR, ExtractedTopics, topic_list
from ..agents.values_fit import VALUES_FIT, ValuesFit
from ..state import GraphState
from .adapter import SubgraphAdapter
from .builder import END, START, GraphBuilder, RunnableGraph
from .extraction import build_extraction_unit

logger = logging.getLogger(__name__)


class FinalReport(CamelModel):
    """Composite post-interview report. Every section is optional."""

    model_config = ConfigDict(frozen=True, strict=False)

    topics: Optional[ExtractedTopics] = None
    cv_summary: Optional[CvSummary] = None
    communication_skills: Optional[CommunicationSkills] = None
    values_fit: Optional[ValuesFit] = None
    technical_assessment: Optional[TechnicalAssessment] = None
    language_assessment: Optional[LanguageAssessment] = None
    ai_summary: Optional[AiSummary] = None
    overall_conclusion: Optional[OverallConclusion] = None


class FinalReportState(GraphState):
    cv_text: Optional[str] = None
    transcript: Optional[str] = None
    company_values: Optional[str] = None
    topic_list: Optional[List[str]] = None
    cv_summary: Optional[CvSummary] = None
    communication_skills: Optional[CommunicationSkills] = None
    values_fit: Optional[ValuesFit] = None
    language_assessment: Optional[LanguageAssessment] = None
    technical_assessment: Optional[TechnicalAssessment] = None
    ai_summary: Optional[AiSummary] = None
    overall_conclusion: Optional[OverallConclusion] = None
    final_report: Optional[FinalReport] = None


# Report sections filled straight from an analysis channel of the same name
SECTIONS = (
    "cv_summary",
    "communication_skills",
    "values_fit",
    "technical_assessment",
    "language_assessment",
    "ai_summary",
    "overall_conclusion",
)


def _has_content(value: Any) -> bool:
    if isinstance(value, BaseModel):
        return bool(value.model_dump(exclude_none=True))
    return bool(value)


def build_final_report(state: FinalReportState) -> Dict[str, Any]:
    logger.info("Report builder started | TraceID: %s", state.trace_id)
    sections: Dict[str, Any] = {}
    for name in SECTIONS:
        value = getattr(state, name)
        if _has_content(value):
            sections[name] = value
    # an empty topic list is a missing section, not an empty one
    if state.topic_list:
        sections["topics"] = ExtractedTopics(topics=state.topic_list)

    report = FinalReport(**sections)
    skipped = [name for name in (*SECTIONS, "topics") if name not in sections]
    if skipped:
        logger.warning("Final report built without: %s | TraceID: %s", ", ".join(skipped), state.trace_id)
    logger.info("Report builder finished | TraceID: %s", state.trace_id)
    return {"final_report": report}


def _unit_node(spec, llm: Any, output: str) -> SubgraphAdapter:
    return SubgraphAdapter(build_extraction_unit(spec, llm), {output: "parsed_output"}, name=spec.name)


def build_final_report_graph(llm: Any) -> RunnableGraph:
    builder = GraphBuilder(FinalReportState, "final_report")

    layer_one = {
        "cv_summary_subgraph": _unit_node(CV_SUMMARY, llm, "cv_summary"),
        "communication_skills_subgraph": _unit_node(COMMUNICATION_SKILLS, llm, "communication_skills"),
        "values_fit_subgraph": _unit_node(VALUES_FIT, llm, "values_fit"),
        "language_assessment_subgraph": _unit_node(LANGUAGE_ASSESSMENT, llm, "language_assessment"),
        "topic_extractor_subgraph": SubgraphAdapter(
            build_extraction_unit(TOPIC_EXTRACTOR, llm),
            {"topic_list": topic_list},
            name=TOPIC_EXTRACTOR.name,
        ),
    }
    layer_two = {
        "technical_assessment_subgraph": _unit_node(TECHNICAL_ASSESSMENT, llm, "technical_assessment"),
        "ai_summary_subgraph": _unit_node(AI_SUMMARY, llm, "ai_summary"),
    }
    for name, node in {**layer_one, **layer_two}.items():
        builder.add_node(name, node)
    builder.add_node("overall_conclusion_subgraph", _unit_node(OVERALL_CONCLUSION, llm, "overall_conclusion"))
    builder.add_node("report_builder", build_final_report)

    for name in layer_one:
        builder.add_edge(START, name)
    for name in layer_two:
        builder.add_edge("topic_extractor_subgraph", name)

    analyses = [n for n in (*layer_one, *layer_two) if n != "topic_extractor_subgraph"]
    builder.add_join(analyses, "overall_conclusion_subgraph")
    builder.add_edge("overall_conclusion_subgraph", "report_builder")
    builder.add_edge("report_builder", END)
    return builder.compile()
