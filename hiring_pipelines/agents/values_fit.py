from __future__ import annotations
from typing import List, Literal, Optional
from ..graph.extraction import ExtractionUnitSpec
from ..state import ExtractionState
from .common import CamelModel, json_prompt


class AssessedValue(CamelModel):
    value: str
    match: Literal["high", "medium", "low", "not_discussed"]
    evidence: str


class ValuesFit(CamelModel):
    overall_summary: str
    assessed_values: List[AssessedValue]


class ValuesFitState(ExtractionState):
    transcript: Optional[str] = None
    company_values: Optional[str] = None
    parsed_output: Optional[ValuesFit] = None


VALUES_FIT = ExtractionUnitSpec(
    name="values_fit",
    state_cls=ValuesFitState,
    output_type=ValuesFit,
    prompt=json_prompt(
        "You are an HR expert assessing a candidate's alignment with company values.",
        "For each company value below, decide how strongly the candidate aligned with it "
        "during the interview and quote the evidence from the transcript. Use "
        '"not_discussed" when the value never came up.\n\n'
        "COMPANY VALUES:\n---\n{company_values}\n---\n\n"
        "INTERVIEW TRANSCRIPT:\n---\n{transcript}\n---\n\n"
        "JSON output format:\n"
        '{{"overallSummary": "...", "assessedValues": [{{"value": "...", '
        '"match": "high" | "medium" | "low" | "not_discussed", "evidence": "..."}}]}}',
    ),
    inputs=("transcript", "company_values"),
    failure_label="Failed on Values Fit Parsing",
)
