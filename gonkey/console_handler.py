"""Test results, run summaries and the handler that counts them."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol


class TestSkipped(Exception):
    """The test is marked as skipped."""

    __test__ = False

    def __init__(self, message: str = "test was skipped") -> None:
        super().__init__(message)


class TestBroken(Exception):
    """The test is marked as broken."""

    __test__ = False

    def __init__(self, message: str = "test was broken") -> None:
        super().__init__(message)


@dataclass
class DatabaseResult:
    """A database query run after a request and the rows it returned."""

    query: str = ""
    response: list[str] = field(default_factory=list)


@dataclass
class Result:
    """The outcome of running one test."""

    path: str = ""
    query: str = ""
    request_body: str = ""
    response_body: str = ""
    response_content_type: str = ""
    response_status_code: int = 0
    response_status: str = ""
    response_headers: dict[str, list[str]] = field(default_factory=dict)
    test: Any = None
    errors: list[Exception] = field(default_factory=list)
    database_result: list[DatabaseResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    def allure_status(self) -> tuple[str, Exception | None]:
        """Return the report status and, for failures, an error holding all messages."""
        status = getattr(self.test, "status", "")
        if status:
            return status, None
        if self.passed:
            return "passed", None
        return "failed", Exception("".join(f"{error}\n" for error in self.errors))


@dataclass
class Summary:
    """Counts of the tests of one run."""

    success: bool = True
    skipped: int = 0
    broken: int = 0
    failed: int = 0
    total: int = 0


class Output(Protocol):
    """Receives the result of each executed test."""

    def process(self, test: Any, result: Result) -> None: ...


class ConsoleHandler:
    """Runs tests through an executor and keeps count of their outcomes."""

    def __init__(self) -> None:
        self._counts = Summary()

    def handle_test(self, test: Any, execute_test: Callable[[Any], Result]) -> None:
        """Execute ``test`` and count it; errors other than skip/broken propagate."""
        result: Result | None = None
        try:
            result = execute_test(test)
        except TestSkipped:
            self._counts.skipped += 1
        except TestBroken:
            self._counts.broken += 1
        self._counts.total += 1
        if result is not None and not result.passed:
            self._counts.failed += 1

    def summary(self) -> Summary:
        """Return the counts gathered so far."""
        return dataclasses.replace(self._counts, success=self._counts.failed == 0)