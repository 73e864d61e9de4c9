"""Reading YAML test files and expanding templated test cases."""

from __future__ import annotations

import dataclasses
import json
import re
from collections.abc import Mapping
from typing import Any

import yaml

from gonkey.testcase import ApiTest, DbCheck, TestDefinition

_PROTECT_SUBSTITUTE = "!protect!"
_PROTECT_RX = re.compile(r"\{\{[\t\n\f\r ]*\$")
_FIELD_CHAIN_RX = re.compile(r"(?:\.[A-Za-z_][A-Za-z0-9_]*)+")
_INT_RX = re.compile(r"[+-]?[0-9]+")
_WS = " \t\r\n"


def _format(value: Any, top: bool = True) -> str:
    if value is None:
        return "<no value>" if top else "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    if isinstance(value, Mapping):
        items = sorted((_format(k, False), _format(v, False)) for k, v in value.items())
        return "map[" + " ".join(f"{k}:{v}" for k, v in items) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format(item, False) for item in value) + "]"
    return str(value)


def _evaluate(expression: str, args: Any) -> str:
    args = {} if args is None else args
    if not expression:
        raise ValueError("missing value for command")
    if expression.startswith("/*") and expression.endswith("*/"):
        return ""
    if expression == ".":
        return _format(args)
    if _FIELD_CHAIN_RX.fullmatch(expression):
        value = args
        for name in expression[1:].split("."):
            if value is None:
                raise ValueError(f"nil pointer evaluating field .{name}")
            if not isinstance(value, Mapping):
                raise ValueError(f"can't evaluate field {name} in type {type(value).__name__}")
            value = value.get(name)
        return _format(value)
    if len(expression) >= 2 and expression[0] == expression[-1] == '"':
        try:
            return json.loads(expression)
        except ValueError as exc:
            raise ValueError(f"bad string literal {expression}") from exc
    if len(expression) >= 2 and expression[0] == expression[-1] == "`":
        return expression[1:-1]
    if _INT_RX.fullmatch(expression):
        return str(int(expression))
    raise ValueError(f"unsupported template action: {{{{{expression}}}}}")


def _action_end(template: str, start: int) -> int:
    body = start + len(template[start:]) - len(template[start:].lstrip(_WS))
    if template.startswith("/*", body):
        comment_end = template.find("*/", body + 2)
        close = template.find("}}", comment_end + 2) if comment_end >= 0 else -1
        if close < 0:
            raise ValueError("unclosed comment")
        return close

    quote = None
    position = start
    while position < len(template):
        char = template[position]
        if quote:
            if char == "\\" and quote != "`":
                position += 1
            elif char == quote:
                quote = None
        elif char in "\"'`":
            quote = char
        elif template.startswith("}}", position):
            return position
        position += 1
    raise ValueError("unclosed action")


def _render(template: str, args: Any) -> str:
    parts: list[str] = []
    position = 0
    trim_next = False
    while True:
        start = template.find("{{", position)
        text = template[position:] if start < 0 else template[position:start]
        if trim_next:
            text = text.lstrip(_WS)
        if start < 0:
            return "".join(parts) + text

        inner = start + 2
        if template.startswith("-", inner) and template[inner + 1: inner + 2] in tuple(_WS):
            text = text.rstrip(_WS)
            inner += 1
        parts.append(text)

        end = _action_end(template, inner)
        action = template[inner:end]
        trim_next = len(action) >= 2 and action[-1] == "-" and action[-2] in _WS
        if trim_next:
            action = action[:-1]
        parts.append(_evaluate(action.strip(_WS), args))
        position = end + 2


def substitute_args(template: str, args: Mapping[str, Any] | None) -> str:
    """Render ``template`` with ``{{ .name }}`` placeholders filled from ``args``.

    Placeholders of run-time variables (``{{ $name }}``) are left untouched.
    Missing arguments render as ``<no value>``; malformed templates raise
    ValueError.
    """
    rendered = _render(_PROTECT_RX.sub(_PROTECT_SUBSTITUTE, template), args)
    return rendered.replace(_PROTECT_SUBSTITUTE, "{{ $")


def substitute_args_to_map(
    templates: Mapping[str, str] | None, args: Mapping[str, Any] | None
) -> dict[str, str]:
    """Apply :func:`substitute_args` to every value of ``templates``."""
    return {key: substitute_args(value, args) for key, value in (templates or {}).items()}


def make_tests_from_definition(file_path: str, definition: TestDefinition) -> list[ApiTest]:
    """Expand a definition into one test per case, or a single test without cases."""
    base = ApiTest(
        name=definition.name,
        description=definition.description,
        status=definition.status,
        file_name=file_path,
        method=definition.method,
        path=definition.path,
        query=definition.query,
        request=definition.request,
        responses=definition.responses or {},
        response_headers=definition.response_headers or {},
        headers=definition.headers,
        cookies=definition.cookies,
        form=definition.form,
        variables=definition.variables,
        combined_variables=definition.variables,
        variables_to_set=definition.variables_to_set,
        comparison=definition.comparison,
        fixtures=definition.fixtures,
        mocks=definition.mocks,
        pause=definition.pause,
        before_script=definition.before_script.path,
        before_script_timeout=definition.before_script.timeout,
        after_request_script=definition.after_request_script.path,
        after_request_script_timeout=definition.after_request_script.timeout,
        db_query=definition.db_query,
        db_response=definition.db_response,
        db_checks=[DbCheck(check.query, check.response) for check in definition.db_checks],
    )
    if not definition.cases:
        return [base]

    combined_variables: dict[str, str] = dict(definition.variables or {})
    tests = []
    for index, case in enumerate(definition.cases, start=1):
        for key, value in (case.variables or {}).items():
            if not isinstance(value, str):
                raise ValueError(f"value of case variable '{key}' must be a string")
            combined_variables[key] = value

        if case.db_response is not None:
            db_response = case.db_response
        elif definition.db_response:
            db_response = [substitute_args(t, case.db_response_args) for t in definition.db_response]
        else:
            db_response = definition.db_response

        response_args = case.response_args
        tests.append(
            dataclasses.replace(
                base,
                name=f"{definition.name} #{index}",
                description=case.description or definition.description,
                path=substitute_args(definition.path, case.request_args),
                request=substitute_args(definition.request, case.request_args),
                query=substitute_args(definition.query, case.request_args),
                headers=substitute_args_to_map(definition.headers, case.request_args),
                cookies=substitute_args_to_map(definition.cookies, case.request_args),
                responses={
                    status: substitute_args(t, response_args[status]) if status in response_args else t
                    for status, t in (definition.responses or {}).items()
                },
                response_headers={
                    status: substitute_args_to_map(h, response_args[status])
                    if status in response_args
                    else h
                    for status, h in (definition.response_headers or {}).items()
                },
                before_script=substitute_args(definition.before_script.path, case.before_script_args),
                after_request_script=substitute_args(
                    definition.after_request_script.path, case.after_request_script_args
                ),
                db_query=substitute_args(definition.db_query, case.db_query_args),
                db_response=db_response,
                db_checks=[
                    DbCheck(
                        substitute_args(check.query, case.db_query_args),
                        [substitute_args(t, case.db_response_args) for t in check.response or ()]
                        or None,
                    )
                    for check in definition.db_checks
                ],
                combined_variables=dict(combined_variables),
            )
        )
    return tests


def parse_test_definition_file(path: str) -> list[ApiTest]:
    """Read a YAML file of test definitions and return the tests it defines."""
    try:
        with open(path, encoding="utf-8") as handle:
            data = handle.read()
    except OSError as exc:
        raise OSError(f"failed to read file {path}:\n{exc}") from exc

    try:
        raw = yaml.safe_load(data) or []
        if not isinstance(raw, list):
            raise ValueError("top level must be a list of tests")
        definitions = [TestDefinition.from_dict(item) for item in raw]
    except (yaml.YAMLError, ValueError) as exc:
        raise ValueError(f"failed to unmarshall {path}:\n{exc}") from exc

    return [test for d in definitions for test in make_tests_from_definition(path, d)]