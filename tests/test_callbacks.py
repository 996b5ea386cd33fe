import logging
import uuid

from langchain_core.messages import AIMessage
from langchain_core.outputs import ChatGeneration, LLMResult

from hiring_pipelines.callbacks import LoggingCallbackHandler, token_usage


def test_start_and_end_are_logged_with_node_and_tokens(caplog):
    handler = LoggingCallbackHandler(logging.getLogger("test.llm"))
    run_id = uuid.uuid4()
    message = AIMessage(content="{}", usage_metadata={"input_tokens": 12, "output_tokens": 5, "total_tokens": 17})

    with caplog.at_level(logging.INFO, logger="test.llm"):
        handler.on_chat_model_start({}, [[]], run_id=run_id, metadata={"node": "cv_summary.generate"})
        handler.on_llm_end(LLMResult(generations=[[ChatGeneration(message=message)]]), run_id=run_id)

    assert "LLM Call Started for node: cv_summary.generate" in caplog.text
    assert "Tokens: (I: 12, O: 5, T: 17)" in caplog.text


def test_error_is_logged(caplog):
    handler = LoggingCallbackHandler(logging.getLogger("test.llm"))
    run_id = uuid.uuid4()
    with caplog.at_level(logging.INFO, logger="test.llm"):
        handler.on_llm_start({}, ["prompt"], run_id=run_id)
        handler.on_llm_error(TimeoutError("slow provider"), run_id=run_id)

    assert "UnknownNode" in caplog.text
    assert "LLM Call Failed" in caplog.text
    assert "slow provider" in caplog.text


def test_token_usage_prefers_llm_output():
    result = LLMResult(generations=[], llm_output={"token_usage": {"prompt_tokens": 3, "completion_tokens": 4}})
    assert token_usage(result) == {"prompt": 3, "completion": 4, "total": 7}
