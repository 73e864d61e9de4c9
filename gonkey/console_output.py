"""Human-readable console reporting of test results."""

from __future__ import annotations

import sys
from typing import Any, TextIO

from termcolor import colored as _colored

from gonkey.console_handler import Result, Summary

DOTS_PER_LINE = 80


def render_result(result: Result, colored: bool = True) -> str:
    """Render a detailed report of a test result."""

    def paint(text: str, color: str, on_color: str | None = None) -> str:
        if not colored:
            return text
        return _colored(text, color, on_color)

    test = result.test
    parts: list[str] = []

    parts.append("\n       Name: " + paint(test.name, "green"))
    parts.append("\n       Description:")
    parts.append(paint(test.description, "green") if test.description else paint(" No description", "green"))
    parts.append("\n       File: " + paint(test.file_name, "green"))
    parts.append("\n\nRequest:\n     Method: " + paint(test.method, "cyan"))
    parts.append("\n       Path: " + paint(test.path, "cyan"))
    parts.append("\n      Query: " + paint(test.query, "cyan"))

    if test.headers:
        parts.append("\n    Headers:")
        parts.extend(f"\n      {key}: {value}" for key, value in sorted(test.headers.items()))
    if test.cookies:
        parts.append("\n    Cookies:")
        parts.extend(f"\n      {key}: {value}" for key, value in sorted(test.cookies.items()))

    parts.append("\n       Body:\n")
    parts.append(paint(result.request_body or "<no body>", "cyan"))
    parts.append("\n\nResponse:\n     Status: " + paint(result.response_status, "cyan"))
    parts.append("\n       Body:\n")
    parts.append(paint(result.response_body or "<no body>", "yellow"))
    parts.append("\n\n")

    for number, db_result in enumerate(result.database_result, start=1):
        parts.append("\n")
        if db_result.query:
            parts.append(f"\n       Db Request #{number}:\n")
            parts.append(paint(db_result.query, "cyan"))
            parts.append(f"\n       Db Response #{number}:\n")
            parts.extend("\n" + paint(value, "yellow") for value in db_result.response)
            parts.append("\n")
        parts.append("\n")

    parts.append("\n\n")
    if result.errors:
        parts.append("\n     Result: " + paint("ERRORS!", "white", "on_red"))
        parts.append("\n\nErrors:\n")
        parts.extend(f"\n{number}) {error}\n" for number, error in enumerate(result.errors, start=1))
        parts.append("\n")
    else:
        parts.append("\n     Result: " + paint("OK", "white", "on_green") + "\n")
    parts.append("\n")

    return "".join(parts)


class ConsoleColoredOutput:
    """Prints a dot per passed test and a full report for failures.

    With ``verbose`` every result is reported in full. Colours are used when
    ``colored`` is true; by default when the stream is a terminal.
    """

    def __init__(
        self,
        verbose: bool = False,
        colored: bool | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self._stream = stream
        self._colored = colored
        self._dots = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def colored(self) -> bool:
        if self._colored is not None:
            return self._colored
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def process(self, test: Any, result: Result) -> None:
        """Report one result."""
        if not result.passed or self.verbose:
            self._write(render_result(result, self.colored))
            return
        self._write(".")
        self._dots += 1
        if self._dots % DOTS_PER_LINE == 0:
            self._write("\n")

    def show_summary(self, summary: Summary) -> None:
        """Print the totals of a run."""
        succeeded = summary.total - summary.broken - summary.failed - summary.skipped
        self._write(
            f"\nsuccess {succeeded}, failed {summary.failed}, skipped {summary.skipped}, "
            f"broken {summary.broken}, total {summary.total}\n"
        )