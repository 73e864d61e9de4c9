import io

from gonkey.console_handler import DatabaseResult, Result, Summary
from gonkey.console_output import ConsoleColoredOutput, render_result
from gonkey.testcase import ApiTest


def _result(**kwargs):
    test = kwargs.pop(
        "test",
        ApiTest(name="get users", method="GET", path="/users", query="?a=1", file_name="cases.yaml"),
    )
    kwargs.setdefault("response_status", "200 OK")
    return Result(test=test, **kwargs)


def test_render_passed_result():
    text = render_result(_result(response_body='{"ok":true}'), colored=False)
    assert "\n       Name: get users\n" in text
    assert "\n       Description: No description\n" in text
    assert "\n       File: cases.yaml\n" in text
    assert "     Method: GET\n       Path: /users\n      Query: ?a=1\n       Body:\n<no body>\n\nResponse:" in text
    assert '     Status: 200 OK\n       Body:\n{"ok":true}\n' in text
    assert text.endswith("     Result: OK\n\n")


def test_render_description_is_appended():
    text = render_result(_result(test=ApiTest(name="n", description=" lists users")), colored=False)
    assert "\n       Description: lists users\n" in text


def test_render_headers_and_cookies_sorted():
    test = ApiTest(name="n", headers={"X-B": "2", "X-A": "1"}, cookies={"sid": "token"})
    text = render_result(_result(test=test), colored=False)
    assert "      Query: \n    Headers:\n      X-A: 1\n      X-B: 2\n    Cookies:\n      sid: token\n       Body:\n" in text


def test_render_errors():
    result = _result(errors=[ValueError("boom"), ValueError("bad")])
    text = render_result(result, colored=False)
    assert "     Result: ERRORS!\n\nErrors:\n\n1) boom\n\n2) bad\n" in text
    assert "Result: OK" not in text


def test_render_database_results():
    result = _result(
        database_result=[
            DatabaseResult(query="SELECT 1", response=['{"a":1}', '{"a":2}']),
            DatabaseResult(query="", response=["ignored"]),
        ]
    )
    text = render_result(result, colored=False)
    assert '       Db Request #1:\nSELECT 1\n       Db Response #1:\n\n{"a":1}\n{"a":2}\n' in text
    assert "Db Request #2" not in text
    assert "ignored" not in text


def test_dots_for_passed_tests_wrap_lines():
    stream = io.StringIO()
    output = ConsoleColoredOutput(colored=False, stream=stream)
    for _ in range(81):
        output.process(None, _result())
    assert stream.getvalue() == "." * 80 + "\n" + "."


def test_failed_test_is_reported_in_full():
    stream = io.StringIO()
    output = ConsoleColoredOutput(colored=False, stream=stream)
    result = _result(errors=[ValueError("boom")])
    output.process(result.test, result)
    assert stream.getvalue() == render_result(result, colored=False)


def test_verbose_reports_passed_tests():
    stream = io.StringIO()
    output = ConsoleColoredOutput(verbose=True, colored=False, stream=stream)
    result = _result()
    output.process(result.test, result)
    assert stream.getvalue() == render_result(result, colored=False)


def test_show_summary():
    stream = io.StringIO()
    output = ConsoleColoredOutput(colored=False, stream=stream)
    output.show_summary(Summary(success=False, skipped=1, broken=1, failed=1, total=4))
    assert stream.getvalue() == "\nsuccess 1, failed 1, skipped 1, broken 1, total 4\n"