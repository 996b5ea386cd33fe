import pytest

from hiring_pipelines.agents.grading import CRITERIA_MATCHING, CriteriaMatchingState, CriterionMatch
from hiring_pipelines.agents.parsing import AggregatedData, CvData, FeedbackData, RequirementsData
from hiring_pipelines.config import MAX_RETRIES
from hiring_pipelines.errors import InputMissingError
from hiring_pipelines.graph.extraction import ExtractionUnit, route_after_validation
from hiring_pipelines.state import UnitStatus, merge_state
from hiring_pipelines.validation import NO_RAW_OUTPUT
from langchain_core.messages import AIMessage

BAD_MATCH = '[{"criterion":"SQL","match":"excelent","comment":"ok"}]'
GOOD_MATCH = '[{"criterion":"SQL","match":"full","comment":"ok"}]'


@pytest.fixture
def aggregated():
    return AggregatedData(
        candidate_info=CvData(first_name="Anna", last_name="Ivanova", skills=["SQL"], experience="5y"),
        job_requirements=RequirementsData(hard_skills_required=["SQL"], soft_skills_required=["Teamwork"]),
        recruiter_feedback=FeedbackData(comments="ok"),
    )


def _unit(llm, visits=None):
    unit = ExtractionUnit(CRITERIA_MATCHING, llm)
    if visits is not None:
        original = unit.validate

        def counting(state):
            visits.append(state.retries)
            return original(state)

        unit.validate = counting
    return unit


def test_invalid_enum_increments_retries_and_routes_to_fix(make_llm):
    unit = _unit(make_llm())
    state = CriteriaMatchingState(raw_output=BAD_MATCH, retries=0, trace_id="t-1")

    partial = unit.validate(state)
    merged = merge_state(state, partial)

    assert merged.retries == 1
    assert "match" in merged.validation_error
    assert '"excelent"' in merged.validation_error
    assert merged.parsed_output is None
    assert route_after_validation(merged) == "fix"


def test_router_decisions():
    assert route_after_validation(CriteriaMatchingState(validation_error=None, retries=2)) == "success"
    assert route_after_validation(CriteriaMatchingState(validation_error="e", retries=1)) == "fix"
    assert route_after_validation(CriteriaMatchingState(validation_error="e", retries=MAX_RETRIES)) == "failure"


def test_validate_forwards_an_invocation_error():
    unit = _unit(None)
    state = CriteriaMatchingState(raw_output=None, validation_error="LLM invocation failed: TimeoutError: slow", retries=0)
    assert unit.validate(state) == {"validation_error": "LLM invocation failed: TimeoutError: slow", "retries": 1}


async def test_fix_recovers_from_a_schema_violation(make_llm, aggregated):
    llm = make_llm(**{"criteria_matching.generate": [BAD_MATCH], "criteria_matching.fix": [GOOD_MATCH]})
    final = await _unit(llm).build().ainvoke({"aggregated_result": aggregated, "trace_id": "t-1"})

    assert final.status is UnitStatus.DONE
    assert final.graph_error is None
    assert final.validation_error is None
    assert final.retries == 1
    assert final.parsed_output == [CriterionMatch(criterion="SQL", match="full", comment="ok")]
    assert final.trace_id == "t-1"
    # the fix prompt carries both the broken output and the error
    fix_prompt = llm.prompt_text("criteria_matching.fix")
    assert "excelent" in fix_prompt
    assert "Validation Error for field '0.match'" in fix_prompt


async def test_two_consecutive_failures_end_in_failure(make_llm, aggregated):
    visits = []
    llm = make_llm(**{"criteria_matching.generate": [BAD_MATCH], "criteria_matching.fix": ["not json at all"]})
    final = await _unit(llm, visits).build().ainvoke({"aggregated_result": aggregated})

    assert final.status is UnitStatus.FAILED
    assert final.graph_error.startswith("Failed on Criteria Matching: JSON Parsing Failed")
    assert final.parsed_output is None
    assert len(visits) <= MAX_RETRIES + 1
    assert llm.count("criteria_matching.fix") == len(visits) - 1


async def test_retry_loop_always_terminates(make_llm, aggregated):
    visits = []
    llm = make_llm(**{"criteria_matching.generate": ["{}"], "criteria_matching.fix": ["{}"]})
    final = await _unit(llm, visits).build().ainvoke({"aggregated_result": aggregated})
    assert final.status is UnitStatus.FAILED
    assert final.retries == MAX_RETRIES
    assert len(visits) <= MAX_RETRIES + 1


async def test_generate_invocation_failure_goes_through_fix(make_llm, aggregated):
    llm = make_llm(**{
        "criteria_matching.generate": [RuntimeError("quota exceeded")],
        "criteria_matching.fix": [GOOD_MATCH],
    })
    final = await _unit(llm).build().ainvoke({"aggregated_result": aggregated})

    assert final.status is UnitStatus.DONE
    assert final.retries == 1
    assert "LLM invocation failed: RuntimeError: quota exceeded" in llm.prompt_text("criteria_matching.fix")


async def test_fix_invocation_failure_is_forwarded_to_failure(make_llm, aggregated):
    llm = make_llm(**{
        "criteria_matching.generate": [BAD_MATCH],
        "criteria_matching.fix": [ConnectionError("reset by peer")],
    })
    final = await _unit(llm).build().ainvoke({"aggregated_result": aggregated})
    assert final.graph_error == "Failed on Criteria Matching: LLM invocation failed: ConnectionError: reset by peer"


async def test_non_string_content_counts_as_missing_output(make_llm, aggregated):
    llm = make_llm(**{
        "criteria_matching.generate": [AIMessage(content=[{"type": "text", "text": GOOD_MATCH}])],
        "criteria_matching.fix": [GOOD_MATCH],
    })
    final = await _unit(llm).build().ainvoke({"aggregated_result": aggregated})
    assert final.status is UnitStatus.DONE
    assert NO_RAW_OUTPUT in llm.prompt_text("criteria_matching.fix")


async def test_missing_input_is_not_retried(make_llm):
    llm = make_llm()
    with pytest.raises(InputMissingError) as exc_info:
        await _unit(llm).build().ainvoke({})
    assert exc_info.value.missing == ["aggregated_result"]
    assert llm.calls == []


async def test_generate_assigns_trace_id_when_absent(make_llm, aggregated):
    final = await _unit(make_llm()).build().ainvoke({"aggregated_result": aggregated})
    assert final.trace_id
    assert final.retries == 0
