from typing import Optional

import pytest

from hiring_pipelines.state import ExtractionState, GraphState, UnitStatus, channel_values, merge_state


class SampleState(GraphState):
    cv_text: Optional[str] = None
    score: Optional[int] = None


def test_merge_replaces_named_channels_and_keeps_the_rest():
    current = SampleState(cv_text="cv", score=1, trace_id="t-1")
    merged = merge_state(current, {"score": 2})
    assert merged.score == 2
    assert merged.cv_text == "cv"
    assert merged.trace_id == "t-1"
    # the original record is untouched
    assert current.score == 1


def test_merge_with_empty_partial_is_idempotent():
    current = SampleState(cv_text="cv", score=3)
    merged = merge_state(current, {})
    assert merged == current
    assert merged is not current


def test_merge_can_clear_a_channel():
    merged = merge_state(SampleState(score=5), {"score": None})
    assert merged.score is None


def test_merge_rejects_unknown_channels():
    with pytest.raises(KeyError, match="unknown_key"):
        merge_state(SampleState(), {"unknown_key": 1})


def test_unset_channels_read_as_none():
    state = ExtractionState()
    assert state.raw_output is None
    assert state.parsed_output is None
    assert state.retries == 0
    assert state.status is UnitStatus.NOT_STARTED


def test_channel_values_skips_unset_channels():
    assert channel_values(SampleState(cv_text="cv")) == {"cv_text": "cv"}
