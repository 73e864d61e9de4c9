import pytest

from gonkey.testcase import (
    ApiTest,
    CaseData,
    ComparisonParams,
    DbCheck,
    Form,
    TestDefinition,
    parse_variables_to_set,
)
from gonkey.variables import Variables


def test_set_query_adds_question_mark():
    test = ApiTest()
    test.set_query("query_val")
    assert test.query == "?query_val"


def test_set_query_keeps_existing_question_mark():
    test = ApiTest()
    test.set_query("?a=1")
    assert test.query == "?a=1"


def test_set_query_empty_stays_empty():
    test = ApiTest(query="x")
    test.set_query("")
    assert test.query == ""


def test_clone_is_independent():
    test = ApiTest(path="/a", responses={200: "body"})
    copy = test.clone()
    copy.path = "/b"
    assert test.path == "/a"
    assert copy.responses == test.responses


def test_to_json_returns_request_bytes():
    assert ApiTest(request='{"a": 1}').to_json() == b'{"a": 1}'


def test_get_response():
    test = ApiTest(responses={200: "ok"})
    assert test.get_response(200) == "ok"
    assert test.get_response(404) is None


def test_get_response_headers():
    test = ApiTest(response_headers={200: {"X-A": "b"}})
    assert test.get_response_headers(200) == {"X-A": "b"}
    assert test.get_response_headers(500) is None


def test_content_type_from_headers():
    assert ApiTest(headers={"Content-Type": "multipart/form-data"}).content_type == (
        "multipart/form-data"
    )
    assert ApiTest().content_type == ""


def test_comparison_flags():
    test = ApiTest(comparison=ComparisonParams(ignore_values=True, ignore_db_ordering=True))
    assert test.needs_checking_values is False
    assert test.ignore_db_ordering is True
    assert test.ignore_arrays_ordering is False


def test_parse_variables_to_set_plain_text():
    assert parse_variables_to_set({200: "token"}) == {200: {"token": ""}}


def test_parse_variables_to_set_json_paths():
    raw = {200: {"status": "status", "nested": "nested_info.nested_field_1"}}
    assert parse_variables_to_set(raw) == raw


def test_parse_variables_to_set_none():
    assert parse_variables_to_set(None) is None


def test_parse_variables_to_set_mixed_raises():
    with pytest.raises(ValueError):
        parse_variables_to_set({200: "name", 404: ["x"]})


def test_definition_from_dict():
    definition = TestDefinition.from_dict(
        {
            "name": "get item",
            "method": "POST",
            "path": "/some/path",
            "headers": {"header1": "value", "count": 42},
            "response": {200: "ok", "404": "missing"},
            "beforeScript": {"path": "run.sh", "timeout": 5},
            "form": {"files": {"file1": "a.txt"}},
            "dbChecks": [{"dbQuery": "SELECT 1", "dbResponse": ["{}"]}],
            "cases": [{"requestArgs": {"foo": "bar"}}],
        }
    )
    assert definition.name == "get item"
    assert definition.headers == {"header1": "value", "count": "42"}
    assert definition.responses == {200: "ok", 404: "missing"}
    assert definition.before_script.path == "run.sh"
    assert definition.before_script.timeout == 5
    assert definition.form == Form(files={"file1": "a.txt"})
    assert definition.db_checks[0].query == "SELECT 1"
    assert definition.cases[0].request_args == {"foo": "bar"}


def test_definition_from_dict_bad_status_code():
    with pytest.raises(ValueError):
        TestDefinition.from_dict({"response": {"abc": "x"}})


def test_definition_from_dict_headers_must_be_mapping():
    with pytest.raises(ValueError):
        TestDefinition.from_dict({"headers": ["a"]})


def test_case_data_from_dict():
    case = CaseData.from_dict(
        {
            "requestArgs": {"foo": "Hello world", "bar": 42},
            "responseArgs": {200: {"foo": "Hello world"}},
            "variables": {"newVar": "some_value"},
        }
    )
    assert case.request_args == {"foo": "Hello world", "bar": 42}
    assert case.response_args == {200: {"foo": "Hello world"}}
    assert case.variables == {"newVar": "some_value"}


def test_variables_applied_to_clone_only():
    test = ApiTest(
        method="{{ $method }}",
        path="/some/path/{{ $pathPart }}",
        query="{{ $query }}",
        request='{"reqParam": "{{ $reqParam }}"}',
        responses={200: "{{ $resp }}"},
        headers={"header1": "{{ $header }}"},
        db_checks=[DbCheck(query="{{ $query }}")],
        mocks={"server": {"body": '{"reqParam": "{{ $reqParam }}"}'}},
    )
    variables = Variables()
    variables.load(
        {
            "method": "POST",
            "pathPart": "part_of_path",
            "query": "query_val",
            "reqParam": "reqParam_value",
            "resp": "resp_val",
            "header": "header_val",
        }
    )
    applied = variables.apply(test)
    assert applied.method == "POST"
    assert applied.path == "/some/path/part_of_path"
    assert applied.query == "?query_val"
    assert applied.to_json() == b'{"reqParam": "reqParam_value"}'
    assert applied.get_response(200) == "resp_val"
    assert applied.headers == {"header1": "header_val"}
    assert applied.mocks["server"]["body"] == '{"reqParam": "reqParam_value"}'
    assert test.method == "{{ $method }}"
    assert test.query == "{{ $query }}"