from typing import List

import pytest
from pydantic import TypeAdapter

from hiring_pipelines.agents.common import NO_DATA, safe_stringify
from hiring_pipelines.agents.communication_skills import CommunicationSkills
from hiring_pipelines.agents.cv_summary import CvSummary
from hiring_pipelines.agents.grading import CriteriaMatching, CriterionMatch
from hiring_pipelines.agents.language_assessment import LanguageAssessment
from hiring_pipelines.agents.parsing import CvData
from hiring_pipelines.agents.technical_assessment import TechnicalAssessment
from hiring_pipelines.validation import NO_RAW_OUTPUT, clean_json_string, validate_and_parse


def test_clean_json_string_strips_code_fences():
    raw = '```json\n{"comments": "ok"}\n```'
    assert clean_json_string(raw) == '{"comments": "ok"}'
    assert clean_json_string('  {"a": 1}  ') == '{"a": 1}'


def test_valid_payload_inside_fences_is_parsed():
    data, error = validate_and_parse('```json\n{"criterion": "SQL", "match": "full", "comment": "ok"}\n```',
                                     TypeAdapter(CriterionMatch))
    assert error is None
    assert data == CriterionMatch(criterion="SQL", match="full", comment="ok")


def test_invalid_enum_names_field_and_received_value():
    data, error = validate_and_parse('{"criterion":"SQL","match":"excelent","comment":"ok"}',
                                     TypeAdapter(CriterionMatch))
    assert data is None
    assert error.startswith("Schema Validation Failed:")
    assert "Validation Error for field 'match'" in error
    assert 'Received: "excelent"' in error


def test_list_schema_reports_item_path():
    _, error = validate_and_parse('[{"criterion":"SQL","match":"excelent","comment":"ok"}]',
                                  TypeAdapter(CriteriaMatching))
    assert "field '0.match'" in error


def test_missing_field_is_reported_as_missing():
    _, error = validate_and_parse('{"first_name": "Anna", "last_name": "I", "skills": []}', TypeAdapter(CvData))
    assert "field 'experience'" in error
    assert "Received: <missing>" in error


def test_malformed_json_is_distinguished_from_schema_errors():
    _, error = validate_and_parse('{"first_name": "Anna",', TypeAdapter(CvData))
    assert error.startswith("JSON Parsing Failed:")
    assert error.endswith("The JSON is malformed.")


def test_every_issue_gets_its_own_line():
    _, error = validate_and_parse('{"first_name": 1}', TypeAdapter(CvData))
    lines = [line for line in error.splitlines() if line.startswith("- ")]
    assert len(lines) == 4


def test_empty_raw_output():
    assert validate_and_parse(None, TypeAdapter(List[str])) == (None, NO_RAW_OUTPUT)
    assert validate_and_parse("", TypeAdapter(List[str])) == (None, NO_RAW_OUTPUT)


TECH = '{{"overallScore": {score}, "knowledgeDepth": "moderate", "practicalExperience": "demonstrated", ' \
       '"problemSolving": "strong", "summary": "ok"}}'


@pytest.mark.parametrize("score", ['"7"', "true"])
def test_scores_must_be_json_numbers(score):
    data, error = validate_and_parse(TECH.format(score=score), TypeAdapter(TechnicalAssessment))
    assert data is None
    assert "field 'overallScore'" in error


def test_integer_score_is_accepted():
    data, error = validate_and_parse(TECH.format(score=7), TypeAdapter(TechnicalAssessment))
    assert error is None
    assert data.overall_score == 7.0


def test_boolean_score_is_rejected_for_communication_skills():
    raw = ('{"overallScore": true, "clarity": "good", "structure": "average", '
           '"engagement": "high", "summary": "ok"}')
    data, error = validate_and_parse(raw, TypeAdapter(CommunicationSkills))
    assert data is None
    assert error.startswith("Schema Validation Failed:")


def test_skipped_flag_must_be_a_boolean():
    data, error = validate_and_parse('{"assessmentSkipped": 1, "reason": "r"}', TypeAdapter(LanguageAssessment))
    assert data is None
    assert error.startswith("Schema Validation Failed:")

    data, error = validate_and_parse('{"assessmentSkipped": true, "reason": "r"}', TypeAdapter(LanguageAssessment))
    assert error is None
    assert data.assessment_skipped is True


def test_years_of_experience_still_accepts_numeric_strings():
    raw = '{"fullName": "Anna", "summary": "QA", "skills": [], "yearsOfExperience": "5"}'
    data, error = validate_and_parse(raw, TypeAdapter(CvSummary))
    assert error is None
    assert data.years_of_experience == 5.0


def test_nested_objects_validate_under_strict_models():
    data, error = validate_and_parse('[{"criterion":"SQL","match":"full","comment":"ok"}]',
                                     TypeAdapter(CriteriaMatching))
    assert error is None
    assert data == [CriterionMatch(criterion="SQL", match="full", comment="ok")]


def test_safe_stringify_dumps_models_by_alias():
    assert safe_stringify(None) == NO_DATA
    assert safe_stringify([]) == NO_DATA
    text = safe_stringify(CvSummary(full_name="Anna", summary="QA", skills=["SQL"]))
    assert '"fullName": "Anna"' in text
    assert '"skills": [\n    "SQL"\n  ]' in text
    items = safe_stringify([CriterionMatch(criterion="SQL", match="full", comment="ok")])
    assert '"criterion": "SQL"' in items
