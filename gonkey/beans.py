"""Data of an Allure XML report: suites, cases, steps, labels and attachments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

NS_MODEL = "urn:model.allure.qatools.yandex.ru"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ESCAPES = {
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    "\r": "&#xD;",
}
_ESCAPE_RX = re.compile("[\"'&<>\t\n\r]")


def _micros(moment: datetime | None) -> int:
    """Microseconds since the epoch; ``None`` means now, naive means local time."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.astimezone()
    return (moment - _EPOCH) // timedelta(microseconds=1)


def _escape(text: str) -> str:
    return _ESCAPE_RX.sub(lambda match: _ESCAPES[match.group()], text)


def _element(tag: str, content: str = "", attrs: Iterable[tuple[str, object]] = ()) -> str:
    attr_text = "".join(f' {name}="{_escape(str(value))}"' for name, value in attrs)
    return f"<{tag}{attr_text}>{content}</{tag}>"


@dataclass
class Attachment:
    """A file attached to a test case."""

    title: str
    type: str
    source: str
    size: int

    def _xml(self, tag: str) -> str:
        return _element(
            tag,
            attrs=[("title", self.title), ("type", self.type), ("size", self.size), ("source", self.source)],
        )


@dataclass
class Label:
    """A name/value label of a test case."""

    name: str
    value: str

    def _xml(self) -> str:
        return _element("label", attrs=[("name", self.name), ("value", self.value)])


class Step:
    """A step of a test case, possibly holding nested steps."""

    def __init__(self, name: str, start: datetime | None = None, parent: Step | None = None) -> None:
        self.name = name
        self.parent = parent
        self.status = ""
        self.start = _micros(start)
        self.stop = 0
        self.steps: list[Step] = []
        self.attachments: list[Attachment] = []

    def end(self, status: str, end: datetime | None = None) -> None:
        """Mark the step finished with ``status``."""
        self.stop = _micros(end)
        self.status = status

    def add_step(self, step: Step | None) -> None:
        """Append a nested step; ``None`` is ignored."""
        if step is not None:
            self.steps.append(step)

    def _xml(self, tag: str) -> str:
        content = _element("name", _escape(self.name))
        content += "".join(step._xml("steps") for step in self.steps)
        content += "".join(attachment._xml("attachments") for attachment in self.attachments)
        return _element(tag, content, [("status", self.status), ("start", self.start), ("stop", self.stop)])


class ReportCase:
    """A test case of a report suite."""

    def __init__(self, name: str, start: datetime | None = None) -> None:
        self.name = name
        self.status = ""
        self.start = _micros(start)
        self.stop = 0
        self.steps: list[Step] = []
        self.labels: list[Label] = []
        self.attachments: list[Attachment] = []
        self.description = ""
        self.failure_message = ""
        self.failure_trace = ""

    def set_description_or_default(self, description: str, default: str) -> None:
        """Use ``description``, or ``default`` when it is empty."""
        self.description = description or default

    def add_label(self, name: str, value: str) -> None:
        self.labels.append(Label(name, value))

    def add_step(self, step: Step) -> None:
        self.steps.append(step)

    def add_attachment(self, attachment: Attachment) -> None:
        self.attachments.append(attachment)

    def end(self, status: str, error: BaseException | None = None, end: datetime | None = None) -> None:
        """Finish the case; an error fills the failure message and trace."""
        self.stop = _micros(end)
        self.status = status
        if error is not None:
            message, *trace = str(error).split("\trace")
            self.failure_message = message
            self.failure_trace = "\n".join(trace)

    def _xml(self) -> str:
        content = "".join(
            [
                _element("name", _escape(self.name)),
                _element("steps", "".join(step._xml("step") for step in self.steps)),
                _element("labels", "".join(label._xml() for label in self.labels)),
                _element(
                    "attachments",
                    "".join(attachment._xml("attachment") for attachment in self.attachments),
                ),
                _element("description", _escape(self.description)),
                _element(
                    "failure",
                    _element("message", _escape(self.failure_message))
                    + _element("stack-trace", _escape(self.failure_trace)),
                ),
            ]
        )
        return _element("test-case", content, [("status", self.status), ("start", self.start), ("stop", self.stop)])


class Suite:
    """A suite of test cases written as one XML file."""

    def __init__(self, name: str, start: datetime | None = None) -> None:
        self.ns = NS_MODEL
        self.name = name
        self.title = name
        self.start = _micros(start)
        self.end = 0
        self.test_cases: list[ReportCase] = []

    def set_end(self, end: datetime | None = None) -> None:
        """Record when the suite finished."""
        self.end = _micros(end)

    def has_tests(self) -> bool:
        return bool(self.test_cases)

    def add_test(self, test: ReportCase) -> None:
        self.test_cases.append(test)

    def to_xml(self) -> bytes:
        """Serialise the suite as an Allure XML document."""
        content = "".join(
            [
                _element("name", _escape(self.name)),
                _element("title", _escape(self.title)),
                _element("test-cases", "".join(case._xml() for case in self.test_cases)),
            ]
        )
        text = _element(
            "ns2:test-suite",
            content,
            [("xmlns:ns2", self.ns), ("start", self.start), ("stop", self.end)],
        )
        return text.encode("utf-8")