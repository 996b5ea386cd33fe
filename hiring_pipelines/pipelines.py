"""
Job-level entry points.

Each call builds a fresh graph run with its own state. The caller gets the
finished report, or a ``PipelineFailedError`` carrying the single error
string that names the analysis which failed.
"""
from __future__ import annotations
import logging
import uuid
from typing import Any, Dict, Optional
from .errors import InputMissingError, PipelineFailedError, SubgraphFailure
from .graph.final_report import FinalReport, build_final_report_graph
from .graph.preparation import build_preparation_pipeline
from .agents.reporting import Report

logger = logging.getLogger(__name__)


def _check_inputs(pipeline: str, inputs: Dict[str, Optional[str]]) -> None:
    missing = [k for k, v in inputs.items() if not v or not v.strip()]
    if missing:
        raise InputMissingError(pipeline, missing)


async def run_preparation(
    llm: Any,
    *,
    cv_text: str,
    requirements_text: str,
    feedback_text: str,
    trace_id: Optional[str] = None,
) -> Report:
    inputs = {"cv_text": cv_text, "requirements_text": requirements_text, "feedback_text": feedback_text}
    _check_inputs("preparation", inputs)
    trace_id = trace_id or str(uuid.uuid4())
    logger.info("Preparation pipeline started | TraceID: %s", trace_id)

    final = await build_preparation_pipeline(llm).ainvoke({**inputs, "trace_id": trace_id})
    if final.graph_error:
        raise PipelineFailedError("preparation", final.graph_error)
    if final.report is None:
        raise PipelineFailedError("preparation", "Pipeline finished without a report")

    logger.info("Preparation pipeline finished | TraceID: %s", trace_id)
    return final.report


async def run_final_report(
    llm: Any,
    *,
    cv_text: str,
    transcript: str,
    company_values: str,
    trace_id: Optional[str] = None,
) -> FinalReport:
    inputs = {"cv_text": cv_text, "transcript": transcript, "company_values": company_values}
    _check_inputs("final_report", inputs)
    trace_id = trace_id or str(uuid.uuid4())
    logger.info("Final report pipeline started | TraceID: %s", trace_id)

    try:
        final = await build_final_report_graph(llm).ainvoke({**inputs, "trace_id": trace_id})
    except SubgraphFailure as e:
        logger.error("Final report pipeline failed: %s | TraceID: %s", e, trace_id)
        raise PipelineFailedError("final_report", e.graph_error) from e

    if final.graph_error:
        raise PipelineFailedError("final_report", final.graph_error)
    if final.final_report is None:
        raise PipelineFailedError("final_report", "Pipeline finished without a report")

    logger.info("Final report pipeline finished | TraceID: %s", trace_id)
    return final.final_report
