"""
Shared fixtures: a scripted chat model and canned, schema-valid answers for every unit.
"""
import asyncio
import json
from typing import Any, Dict, List, Optional

import pytest
from langchain_core.messages import AIMessage

from hiring_pipelines.config import get_settings


VALID_OUTPUTS: Dict[str, Any] = {
    # preparation
    "cv_parser.generate": {
        "first_name": "Anna",
        "last_name": "Ivanova",
        "skills": ["Python", "SQL", "Selenium"],
        "experience": "5 years in QA automation",
    },
    "requirements_parser.generate": {
        "hard_skills_required": ["SQL", "Selenium"],
        "soft_skills_required": ["Teamwork"],
    },
    "feedback_parser.generate": {"comments": "Motivated, clear communicator"},
    "grade_and_type.generate": {"grade": "Middle", "type": "AQA"},
    "criteria_matching.generate": [
        {"criterion": "SQL", "match": "full", "comment": "Uses it daily"},
        {"criterion": "Selenium", "match": "partial", "comment": "Basic scripts only"},
    ],
    "values_assessment.generate": {"values_assessment": "Good team fit"},
    "summary.generate": {"summary": "Ready for the technical interview"},
    "recommendations.generate": {"recommendations": "Deepen Selenium knowledge"},
    "interview_topics.generate": {"interview_topics": ["SQL joins", "Page objects", "CI pipelines"]},
    # post-interview
    "cv_summary.generate": {
        "fullName": "Anna Ivanova",
        "location": "Berlin, Germany",
        "summary": "QA engineer with automation background",
        "skills": ["Python", "SQL"],
        "yearsOfExperience": "5",
    },
    "communication_skills.generate": {
        "overallScore": 8,
        "clarity": "good",
        "structure": "well-structured",
        "engagement": "high",
        "summary": "Clear and structured answers",
    },
    "values_fit.generate": {
        "overallSummary": "Aligned with most values",
        "assessedValues": [{"value": "Ownership", "match": "high", "evidence": "Led the test migration"}],
    },
    "language_assessment.generate": {
        "assessmentSkipped": False,
        "overallLevel": "B2",
        "fluency": "fluent",
        "vocabulary": "advanced",
        "pronunciation": "clear",
        "summary": "Comfortable in technical English",
    },
    "topic_extractor.generate": {"topics": ["REST API methods", "SQL indexes"]},
    "technical_assessment.generate": {
        "overallScore": 7,
        "knowledgeDepth": "moderate",
        "practicalExperience": "demonstrated",
        "problemSolving": "strong",
        "summary": "Solid practical knowledge",
    },
    "ai_summary.generate": {
        "overallSummary": "Calm, well prepared candidate",
        "keyStrengths": ["SQL"],
        "keyWeaknesses": ["Docker"],
    },
    "overall_conclusion.generate": {
        "recommendation": "Hire",
        "finalJustification": "Meets the bar for a middle engineer",
        "keyPositives": ["Strong SQL"],
        "keyConcerns": ["Little Docker experience"],
    },
}


class ScriptedLLM:
    """
    Stand-in chat model. Answers are looked up by the ``node`` metadata each
    call carries, so concurrent units stay deterministic. Each script is a list
    consumed in order; its last entry repeats. Exceptions in a script are raised.
    """

    def __init__(self, scripts: Dict[str, List[Any]]):
        self.scripts = {node: list(items) for node, items in scripts.items()}
        self.calls: List[tuple] = []

    async def ainvoke(self, messages: List[Any], config: Optional[dict] = None) -> AIMessage:
        node = ((config or {}).get("metadata") or {}).get("node")
        self.calls.append((node, messages))
        await asyncio.sleep(0)
        script = self.scripts.get(node)
        if not script:
            raise LookupError(f"no scripted answer for node {node}")
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, AIMessage):
            return item
        return AIMessage(content=item if isinstance(item, str) else json.dumps(item))

    def nodes_called(self) -> List[str]:
        return [node for node, _ in self.calls]

    def count(self, node: str) -> int:
        return self.nodes_called().count(node)

    def prompt_text(self, node: str, index: int = 0) -> str:
        """All message contents of the ``index``-th call made by ``node``, joined."""
        matching = [messages for n, messages in self.calls if n == node]
        return "\n".join(m.content for m in matching[index])


@pytest.fixture
def make_llm():
    """
    Returns a factory building a ScriptedLLM that answers every unit with a
    valid payload, except for the nodes overridden by the caller.
    """

    def factory(**overrides: List[Any]) -> ScriptedLLM:
        scripts = {node: [payload] for node, payload in VALID_OUTPUTS.items()}
        for node, items in overrides.items():
            scripts[node.replace("__", ".")] = items
        return ScriptedLLM(scripts)

    return factory


@pytest.fixture
def preparation_inputs():
    return {
        "cv_text": "Anna Ivanova. QA automation engineer, 5 years. Python, SQL, Selenium.",
        "requirements_text": "Middle AQA. Must know SQL and Selenium. Team player.",
        "feedback_text": "Motivated candidate, communicates clearly.",
    }


@pytest.fixture
def final_report_inputs():
    return {
        "cv_text": "Anna Ivanova. QA automation engineer, 5 years. Python, SQL, Selenium.",
        "transcript": "Interviewer: What is the difference between PUT and PATCH? Candidate: ...",
        "company_values": "Ownership\nTransparency",
    }


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; tests that touch the environment need a clean read."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
