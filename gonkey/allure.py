"""Writing test results as Allure report files."""

from __future__ import annotations

import contextlib
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from gonkey.beans import Attachment, ReportCase, Step, Suite
from gonkey.console_handler import Result


class Allure:
    """Collects suites and cases and writes them into ``target_dir``."""

    def __init__(self, suites: list[Suite] | None = None, target_dir: str = "allure-results") -> None:
        self.suites: list[Suite] = list(suites or [])
        self.target_dir = target_dir
        self._cases: dict[Suite, ReportCase] = {}
        self._steps: dict[Suite, Step] = {}

    @property
    def current_suite(self) -> Suite:
        if not self.suites:
            raise IndexError("no suite started")
        return self.suites[0]

    def start_suite(self, name: str, start: datetime | None = None) -> None:
        self.suites.append(Suite(name, start))

    def end_suite(self, end: datetime | None = None) -> None:
        """Finish the current suite, writing it out if it holds any test."""
        suite = self.current_suite
        suite.set_end(end)
        if suite.has_tests():
            path = Path(self.target_dir, f"{uuid.uuid4()}-testsuite.xml")
            path.write_bytes(suite.to_xml())
        self.suites.pop(0)
        self._cases.pop(suite, None)
        self._steps.pop(suite, None)

    def start_case(self, test_name: str, start: datetime | None = None) -> ReportCase:
        """Start a case in the current suite and make it current."""
        suite = self.current_suite
        case = ReportCase(test_name, start)
        self._cases[suite] = case
        self._steps[suite] = Step(test_name, start)
        suite.add_test(case)
        return case

    def end_case(self, status: str, error: BaseException | None = None, end: datetime | None = None) -> None:
        """Finish the current case, if there is one."""
        case = self._cases.get(self.current_suite)
        if case is not None:
            case.end(status, error, end)

    def add_attachment(self, name: str, content: str | bytes, kind: str = "txt") -> None:
        """Write ``content`` to a file and attach it to the current case."""
        case = self._cases.get(self.current_suite)
        if case is None:
            raise RuntimeError("no test case started")
        mime, extension = "text/plain", "txt"
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        file_name = f"{uuid.uuid4()}-attachment.{extension}"
        Path(self.target_dir, file_name).write_bytes(data)
        case.add_attachment(Attachment(name, mime, file_name, len(data)))

    def pending_case(self, test_name: str, start: datetime | None = None) -> None:
        """Record a case that was not run."""
        self.start_case(test_name, start)
        self.end_case("pending", Exception("test ignored"), start)


class AllureReportOutput:
    """Output that records each result in an Allure report directory."""

    def __init__(self, suite_name: str, report_location: str) -> None:
        self.report_location = report_location
        results_dir = os.path.abspath(report_location)
        with contextlib.suppress(OSError):
            os.mkdir(results_dir)
        self.allure = Allure(target_dir=results_dir)
        self.allure.start_suite(suite_name)

    def process(self, test: Any, result: Result) -> None:
        """Add a case with request, response and database attachments."""
        case = self.allure.start_case(test.name)
        case.set_description_or_default(test.description, "No description")
        case.add_label("story", result.path)

        self.allure.add_attachment(
            "Request", f"Query: {result.query} \\n Body: {result.request_body}", "txt"
        )
        self.allure.add_attachment("Response", f"Body: {result.response_body}", "txt")

        for number, db_result in enumerate(result.database_result, start=1):
            if db_result.query:
                self.allure.add_attachment(
                    f"Db Query #{number}", f"SQL string: {db_result.query}", "txt"
                )
                self.allure.add_attachment(
                    f"Db Response #{number}",
                    f"Response: [{' '.join(db_result.response)}]",
                    "txt",
                )

        status, error = result.allure_status()
        self.allure.end_case(status, error)

    def finalize(self) -> None:
        """Finish the suite and write the report file."""
        self.allure.end_suite()