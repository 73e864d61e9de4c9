import pytest

from gonkey.console_handler import (
    ConsoleHandler,
    DatabaseResult,
    Result,
    Summary,
    TestBroken,
    TestSkipped,
)
from gonkey.testcase import ApiTest


def _executor(result=None, error=None):
    def execute(_test):
        if error is not None:
            raise error
        return result

    return execute


@pytest.mark.parametrize(
    "executions, expected",
    [
        (
            [_executor(Result(errors=[]))],
            Summary(success=True, failed=0, total=1),
        ),
        (
            [_executor(Result()), _executor(error=TestBroken())],
            Summary(success=True, failed=0, broken=1, total=2),
        ),
        (
            [_executor(Result()), _executor(error=TestSkipped())],
            Summary(success=True, skipped=1, total=2),
        ),
        (
            [_executor(Result()), _executor(Result(errors=[Exception("some err")]))],
            Summary(success=False, failed=1, total=2),
        ),
    ],
    ids=[
        "1 successful test",
        "1 successful test, 1 broken test",
        "1 successful test, 1 skipped test",
        "1 successful test, 1 failed test",
    ],
)
def test_handle_test_summary(executions, expected):
    handler = ConsoleHandler()
    for execute in executions:
        handler.handle_test(None, execute)
    assert handler.summary() == expected


def test_unexpected_error_propagates():
    handler = ConsoleHandler()
    with pytest.raises(RuntimeError, match="unexpected error"):
        handler.handle_test(None, _executor(error=RuntimeError("unexpected error")))


def test_executor_receives_test():
    seen = []
    handler = ConsoleHandler()
    handler.handle_test("the test", lambda test: seen.append(test) or Result())
    assert seen == ["the test"]


def test_empty_summary_is_success():
    assert ConsoleHandler().summary() == Summary(success=True)


def test_result_passed_depends_on_errors():
    assert Result().passed is True
    assert Result(errors=[ValueError("x")]).passed is False


def test_allure_status_passed():
    assert Result(test=ApiTest(name="t")).allure_status() == ("passed", None)


def test_allure_status_failed_joins_errors():
    status, error = Result(
        test=ApiTest(name="t"), errors=[ValueError("one"), ValueError("two")]
    ).allure_status()
    assert status == "failed"
    assert str(error) == "one\ntwo\n"


def test_allure_status_uses_test_status():
    result = Result(test=ApiTest(status="broken"), errors=[ValueError("x")])
    assert result.allure_status() == ("broken", None)


def test_database_result_defaults():
    assert DatabaseResult().response == []