"""Test definitions as read from YAML files and the runnable API tests built from them."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        raise ValueError(f"expected a scalar value, got {value!r}")
    return str(value)


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"expected an integer, got {value!r}") from exc


def _dict(value: Any) -> Mapping[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a mapping, got {value!r}")
    return value


def _list(value: Any) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"expected a list, got {value!r}")
    return value


def _text_map(value: Any) -> dict[str, str] | None:
    return None if value is None else {_text(k): _text(v) for k, v in _dict(value).items()}


def _any_map(value: Any) -> dict[str, Any] | None:
    return None if value is None else {_text(k): v for k, v in _dict(value).items()}


def _text_list(value: Any) -> list[str] | None:
    return None if value is None else [_text(item) for item in _list(value)]


def _status_map(value: Any, convert: Callable[[Any], Any]) -> dict[int, Any] | None:
    return None if value is None else {_int(k): convert(v) for k, v in _dict(value).items()}


def parse_variables_to_set(raw: Any) -> dict[int, dict[str, str]] | None:
    """Normalise ``variables_to_set``: ``{code: name}`` becomes ``{code: {name: ""}}``."""
    if raw is not None and all(not isinstance(v, (Mapping, list)) for v in _dict(raw).values()):
        return {_int(code): {_text(name): ""} for code, name in raw.items()}
    return _status_map(raw, lambda v: _text_map(v) or {})


@dataclass
class ScriptParams:
    """Path template and timeout of a script run around a request."""

    path: str = ""
    timeout: int = 0


@dataclass
class DatabaseCheckDefinition:
    """A database query template with its expected response templates."""

    query: str = ""
    response: list[str] | None = None


@dataclass
class ComparisonParams:
    """Options controlling how responses are compared."""

    ignore_values: bool = False
    ignore_arrays_ordering: bool = False
    disallow_extra_fields: bool = False
    ignore_db_ordering: bool = False


@dataclass
class Form:
    """Files sent as a multipart form, keyed by field name."""

    files: dict[str, str] = field(default_factory=dict)


@dataclass
class CaseData:
    """Arguments of one case of a templated test definition."""

    request_args: dict[str, Any] | None = None
    response_args: dict[int, dict[str, Any]] = field(default_factory=dict)
    before_script_args: dict[str, Any] | None = None
    after_request_script_args: dict[str, Any] | None = None
    db_query_args: dict[str, Any] | None = None
    db_response_args: dict[str, Any] | None = None
    db_response: list[str] | None = None
    description: str = ""
    variables: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> CaseData:
        raw = _dict(data)
        return cls(
            request_args=_any_map(raw.get("requestArgs")),
            response_args=_status_map(raw.get("responseArgs"), lambda v: _any_map(v) or {}) or {},
            before_script_args=_any_map(raw.get("beforeScriptArgs")),
            after_request_script_args=_any_map(raw.get("afterRequestScriptArgs")),
            db_query_args=_any_map(raw.get("dbQueryArgs")),
            db_response_args=_any_map(raw.get("dbResponseArgs")),
            db_response=_text_list(raw.get("dbResponse")),
            description=_text(raw.get("description")),
            variables=_any_map(raw.get("variables")),
        )


def _script(value: Any) -> ScriptParams:
    raw = _dict(value)
    return ScriptParams(_text(raw.get("path")), _int(raw.get("timeout")))


@dataclass
class TestDefinition:
    """One entry of a YAML test file, possibly expanded into several cases."""

    __test__ = False

    name: str = ""
    description: str = ""
    status: str = ""
    variables: dict[str, str] | None = None
    variables_to_set: dict[int, dict[str, str]] | None = None
    form: Form | None = None
    method: str = ""
    path: str = ""
    query: str = ""
    request: str = ""
    responses: dict[int, str] | None = None
    response_headers: dict[int, dict[str, str]] | None = None
    before_script: ScriptParams = field(default_factory=ScriptParams)
    after_request_script: ScriptParams = field(default_factory=ScriptParams)
    headers: dict[str, str] | None = None
    cookies: dict[str, str] | None = None
    cases: list[CaseData] = field(default_factory=list)
    comparison: ComparisonParams = field(default_factory=ComparisonParams)
    fixtures: list[str] | None = None
    mocks: dict[str, Any] | None = None
    pause: int = 0
    db_query: str = ""
    db_response: list[str] | None = None
    db_checks: list[DatabaseCheckDefinition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> TestDefinition:
        """Build a definition from a mapping loaded from YAML."""
        if not isinstance(data, Mapping):
            raise ValueError("test definition must be a mapping")
        form = data.get("form")
        comparison = _dict(data.get("comparisonParams"))
        return cls(
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            status=_text(data.get("status")),
            variables=_text_map(data.get("variables")),
            variables_to_set=parse_variables_to_set(data.get("variables_to_set")),
            form=None if form is None else Form(_text_map(_dict(form).get("files")) or {}),
            method=_text(data.get("method")),
            path=_text(data.get("path")),
            query=_text(data.get("query")),
            request=_text(data.get("request")),
            responses=_status_map(data.get("response"), _text),
            response_headers=_status_map(data.get("responseHeaders"), lambda v: _text_map(v) or {}),
            before_script=_script(data.get("beforeScript")),
            after_request_script=_script(data.get("afterRequestScript")),
            headers=_text_map(data.get("headers")),
            cookies=_text_map(data.get("cookies")),
            cases=[CaseData.from_dict(item) for item in _list(data.get("cases"))],
            comparison=ComparisonParams(
                bool(comparison.get("ignoreValues")),
                bool(comparison.get("ignoreArraysOrdering")),
                bool(comparison.get("disallowExtraFields")),
                bool(comparison.get("ignoreDbOrdering")),
            ),
            fixtures=_text_list(data.get("fixtures")),
            mocks=_any_map(data.get("mocks")),
            pause=_int(data.get("pause")),
            db_query=_text(data.get("dbQuery")),
            db_response=_text_list(data.get("dbResponse")),
            db_checks=[
                DatabaseCheckDefinition(
                    _text(_dict(item).get("dbQuery")), _text_list(_dict(item).get("dbResponse"))
                )
                for item in _list(data.get("dbChecks"))
            ],
        )


@dataclass
class DbCheck:
    """A database query with the expected rows as JSON strings."""

    query: str = ""
    response: list[str] | None = None


@dataclass
class ApiTest:
    """A single runnable API test."""

    name: str = ""
    description: str = ""
    status: str = ""
    file_name: str = ""
    method: str = ""
    path: str = ""
    query: str = ""
    request: str = ""
    responses: dict[int, str] = field(default_factory=dict)
    response_headers: dict[int, dict[str, str]] = field(default_factory=dict)
    headers: dict[str, str] | None = None
    cookies: dict[str, str] | None = None
    form: Form | None = None
    variables: dict[str, str] | None = None
    combined_variables: dict[str, str] | None = None
    variables_to_set: dict[int, dict[str, str]] | None = None
    comparison: ComparisonParams = field(default_factory=ComparisonParams)
    fixtures: list[str] | None = None
    mocks: dict[str, Any] | None = None
    pause: int = 0
    before_script: str = ""
    before_script_timeout: int = 0
    after_request_script: str = ""
    after_request_script_timeout: int = 0
    db_query: str = ""
    db_response: list[str] | None = None
    db_checks: list[DbCheck] = field(default_factory=list)

    def to_json(self) -> bytes:
        """Return the request body as bytes."""
        return self.request.encode()

    def get_response(self, code: int) -> str | None:
        """Return the expected body for a status code, or None."""
        return (self.responses or {}).get(code)

    def get_response_headers(self, code: int) -> dict[str, str] | None:
        """Return the expected headers for a status code, or None."""
        return (self.response_headers or {}).get(code)

    def set_query(self, value: str) -> None:
        """Set the query string, adding a leading ``?`` when it is missing."""
        self.query = "?" + value if value and not value.startswith("?") else value

    def clone(self) -> ApiTest:
        """Return a shallow copy of this test."""
        return dataclasses.replace(self)

    @property
    def content_type(self) -> str:
        return (self.headers or {}).get("Content-Type", "")


class TestLoader(Protocol):
    """Anything that produces the tests to run."""

    __test__ = False

    def load(self) -> list[ApiTest]: ...