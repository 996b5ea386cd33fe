"""
Pre-interview screening pipeline.

    START -> parsing -> grading -> reporting -> END

Each stage is a composite graph that fans out to three extraction units and
joins them in a single aggregating node. A stage that fails writes
``graph_error``; ``check_failure`` then sends the run to the terminal
``failure`` node instead of the next stage.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional
from ..agents.grading import (
    CRITERIA_MATCHING,
    GRADE_AND_TYPE,
    VALUES_ASSESSMENT,
    Assessment,
    CriterionMatch,
    FinalResult,
    GradeAndType,
    ValuesAssessment,
)
from ..agents.parsing import (
    CV_PARSER,
    FEEDBACK_PARSER,
    REQUIREMENTS_PARSER,
    AggregatedData,
    CvData,
    FeedbackData,
    RequirementsData,
)
from ..agents.reporting import (
    INTERVIEW_TOPICS,
    RECOMMENDATIONS,
    SUMMARY,
    Conclusion,
    InterviewTopicsOutput,
    RecommendationsOutput,
    Report,
    SummaryOutput,
)
from ..errors import IncompleteAggregationError
from ..state import GraphState
from .adapter import SubgraphAdapter, capture_failures
from .builder import END, START, GraphBuilder, RunnableGraph
from .extraction import build_extraction_unit

logger = logging.getLogger(__name__)


def _require(node: str, state: GraphState, channels: List[str]) -> None:
    missing = [c for c in channels if getattr(state, c) is None]
    if missing:
        raise IncompleteAggregationError(node, missing)


def _unit_node(spec, llm: Any, output: str) -> SubgraphAdapter:
    return SubgraphAdapter(build_extraction_unit(spec, llm), {output: "parsed_output"}, name=spec.name)


# --------------------------------------------------------------------------
# Parsing
# --------------------------------------------------------------------------
class ParsingState(GraphState):
    cv_text: Optional[str] = None
    requirements_text: Optional[str] = None
    feedback_text: Optional[str] = None
    candidate_info: Optional[CvData] = None
    job_requirements: Optional[RequirementsData] = None
    recruiter_feedback: Optional[FeedbackData] = None
    aggregated_result: Optional[AggregatedData] = None


def aggregate_parsing(state: ParsingState) -> Dict[str, Any]:
    _require("parsing_aggregator", state, ["candidate_info", "job_requirements", "recruiter_feedback"])
    logger.info("Parsing results aggregated | TraceID: %s", state.trace_id)
    return {
        "aggregated_result": AggregatedData(
            candidate_info=state.candidate_info,
            job_requirements=state.job_requirements,
            recruiter_feedback=state.recruiter_feedback,
        )
    }


def build_parsing_graph(llm: Any) -> RunnableGraph:
    builder = GraphBuilder(ParsingState, "parsing")
    builder.add_node("cv_parser_subgraph", _unit_node(CV_PARSER, llm, "candidate_info"))
    builder.add_node("requirements_parser_subgraph", _unit_node(REQUIREMENTS_PARSER, llm, "job_requirements"))
    builder.add_node("feedback_parser_subgraph", _unit_node(FEEDBACK_PARSER, llm, "recruiter_feedback"))
    builder.add_node("aggregator", aggregate_parsing)
    for node in ("cv_parser_subgraph", "requirements_parser_subgraph", "feedback_parser_subgraph"):
        builder.add_edge(START, node)
    builder.add_join(
        ["cv_parser_subgraph", "requirements_parser_subgraph", "feedback_parser_subgraph"],
        "aggregator",
    )
    builder.add_edge("aggregator", END)
    return builder.compile()


# --------------------------------------------------------------------------
# Grading
# --------------------------------------------------------------------------
class GradingState(GraphState):
    aggregated_result: Optional[AggregatedData] = None
    grade_and_type: Optional[GradeAndType] = None
    criteria_matching: Optional[List[CriterionMatch]] = None
    values_assessment: Optional[ValuesAssessment] = None
    final_result: Optional[FinalResult] = None


def aggregate_grading(state: GradingState) -> Dict[str, Any]:
    _require(
        "grading_aggregator",
        state,
        ["aggregated_result", "grade_and_type", "criteria_matching", "values_assessment"],
    )
    data = state.aggregated_result
    assessment = Assessment(
        grade=state.grade_and_type.grade,
        type=state.grade_and_type.type,
        criteria_matching=state.criteria_matching,
        values_assessment=state.values_assessment.values_assessment,
    )
    logger.info("Grading results aggregated | TraceID: %s", state.trace_id)
    return {
        "final_result": FinalResult(
            candidate_info=data.candidate_info,
            job_requirements=data.job_requirements,
            recruiter_feedback=data.recruiter_feedback,
            assessment=assessment,
        )
    }


def build_grading_graph(llm: Any) -> RunnableGraph:
    builder = GraphBuilder(GradingState, "grading")
    builder.add_node("grade_and_type_subgraph", _unit_node(GRADE_AND_TYPE, llm, "grade_and_type"))
    builder.add_node("criteria_matching_subgraph", _unit_node(CRITERIA_MATCHING, llm, "criteria_matching"))
    builder.add_node("values_assessment_subgraph", _unit_node(VALUES_ASSESSMENT, llm, "values_assessment"))
    builder.add_node("aggregator", aggregate_grading)
    branches = ["grade_and_type_subgraph", "criteria_matching_subgraph", "values_assessment_subgraph"]
    for node in branches:
        builder.add_edge(START, node)
    builder.add_join(branches, "aggregator")
    builder.add_edge("aggregator", END)
    return builder.compile()


# --------------------------------------------------------------------------
# Reporting
# --------------------------------------------------------------------------
class ReportingState(GraphState):
    final_result: Optional[FinalResult] = None
    summary: Optional[SummaryOutput] = None
    recommendations: Optional[RecommendationsOutput] = None
    interview_topics: Optional[InterviewTopicsOutput] = None
    report: Optional[Report] = None


def build_report(state: ReportingState) -> Dict[str, Any]:
    _require("report_builder", state, ["final_result", "summary", "recommendations", "interview_topics"])
    result = state.final_result
    report = Report(
        first_name=result.candidate_info.first_name,
        last_name=result.candidate_info.last_name,
        matching_table=result.assessment.criteria_matching,
        candidate_profile=f"{result.assessment.type}, {result.assessment.grade}",
        conclusion=Conclusion(
            summary=state.summary.summary,
            recommendations=state.recommendations.recommendations,
            interview_topics=state.interview_topics.interview_topics,
            values_assessment=result.assessment.values_assessment,
        ),
    )
    logger.info("Preparation report built | TraceID: %s", state.trace_id)
    return {"report": report}


def build_reporting_graph(llm: Any) -> RunnableGraph:
    builder = GraphBuilder(ReportingState, "reporting")
    builder.add_node("summary_subgraph", _unit_node(SUMMARY, llm, "summary"))
    builder.add_node("recommendations_subgraph", _unit_node(RECOMMENDATIONS, llm, "recommendations"))
    builder.add_node("interview_topics_subgraph", _unit_node(INTERVIEW_TOPICS, llm, "interview_topics"))
    builder.add_node("report_builder", build_report)
    branches = ["summary_subgraph", "recommendations_subgraph", "interview_topics_subgraph"]
    for node in branches:
        builder.add_edge(START, node)
    builder.add_join(branches, "report_builder")
    builder.add_edge("report_builder", END)
    return builder.compile()


# --------------------------------------------------------------------------
# Pipeline
# --------------------------------------------------------------------------
class PreparationState(GraphState):
    cv_text: Optional[str] = None
    requirements_text: Optional[str] = None
    feedback_text: Optional[str] = None
    aggregated_result: Optional[AggregatedData] = None
    final_result: Optional[FinalResult] = None
    report: Optional[Report] = None


def check_failure(state: PreparationState) -> str:
    return "failure" if state.graph_error else "continue"


def failure_node(state: PreparationState) -> Dict[str, Any]:
    logger.error(
        "PIPELINE FAILED | TraceID: %s | Error: %s",
        state.trace_id or "N/A",
        state.graph_error or "Unknown pipeline failure",
    )
    return {}


def build_preparation_pipeline(llm: Any) -> RunnableGraph:
    stages = {
        "parsing": SubgraphAdapter(build_parsing_graph(llm), {"aggregated_result": "aggregated_result"}, name="parsing"),
        "grading": SubgraphAdapter(build_grading_graph(llm), {"final_result": "final_result"}, name="grading"),
        "reporting": SubgraphAdapter(build_reporting_graph(llm), {"report": "report"}, name="reporting"),
    }
    builder = GraphBuilder(PreparationState, "preparation")
    for name, adapter in stages.items():
        builder.add_node(name, capture_failures(adapter, name))
    builder.add_node("failure", failure_node)

    builder.add_edge(START, "parsing")
    builder.add_conditional_edges("parsing", check_failure, {"continue": "grading", "failure": "failure"})
    builder.add_conditional_edges("grading", check_failure, {"continue": "reporting", "failure": "failure"})
    builder.add_conditional_edges("reporting", check_failure, {"continue": END, "failure": "failure"})
    builder.add_edge("failure", END)
    return builder.compile()
