"""Template variables of the form ``{{ $name }}`` and their substitution."""

from __future__ import annotations

import copy
import os
import re
from collections.abc import Mapping
from typing import Any

_SPACES = r"[\t\n\f\r ]*"
_USAGE_RX = re.compile(r"\{\{" + _SPACES + r"\$([0-9A-Za-z_]+)" + _SPACES + r"\}\}")


class Variable:
    """A named value that replaces ``{{ $name }}`` placeholders."""

    def __init__(self, name: str, value: str) -> None:
        self.name = name
        self.value = value
        self.default_value = value
        self._pattern = re.compile(
            r"\{\{" + _SPACES + r"\$" + re.escape(name) + _SPACES + r"\}\}"
        )

    def perform(self, text: str) -> str:
        """Replace every placeholder of this variable in ``text`` with its value."""
        return self._pattern.sub(lambda _match: self.value, text)

    def __repr__(self) -> str:
        return f"Variable(name={self.name!r}, value={self.value!r})"


def variable_from_environment(name: str) -> Variable | None:
    """Build a variable from an environment variable; None if unset or empty."""
    value = os.environ.get(name, "")
    if not value:
        return None
    return Variable(name, value)


class Variables:
    """A set of variables applied to test definitions."""

    def __init__(self) -> None:
        self._variables: dict[str, Variable] = {}

    def load(self, variables: Mapping[str, str] | None) -> None:
        """Add new variables and replace the values of existing ones."""
        for name, value in (variables or {}).items():
            self._variables[name] = Variable(name, value)

    def set(self, name: str, value: str) -> None:
        """Add or replace a single variable."""
        self._variables[name] = Variable(name, value)

    def add(self, variable: Variable) -> Variables:
        """Add a variable and return this set."""
        self._variables[variable.name] = variable
        return self

    def merge(self, other: Variables) -> None:
        """Add the variables of ``other``, overriding existing ones."""
        self._variables.update(other._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def _get(self, name: str) -> Variable | None:
        variable = self._variables.get(name)
        if variable is None:
            variable = variable_from_environment(name)
        return variable

    def perform(self, text: str) -> str:
        """Replace all known variables used in ``text`` with their values.

        Unknown names fall back to the environment; if still unknown the
        placeholder is left as it is.
        """
        for name in _USAGE_RX.findall(text):
            variable = self._get(name)
            if variable is not None:
                text = variable.perform(text)
        return text

    def apply(self, test: Any) -> Any:
        """Return a clone of ``test`` with variables substituted.

        The test is expected to provide ``clone()``, ``set_query(value)`` and the
        attributes ``query``, ``method``, ``path``, ``request``, ``db_query``,
        ``db_response``, ``db_checks`` (items with ``query`` and ``response``),
        ``responses``, ``headers``, ``form`` (with ``files``) and ``mocks``.
        The original test is left unchanged.
        """
        new = test.clone()

        new.set_query(self.perform(new.query))
        new.method = self.perform(new.method)
        new.path = self.perform(new.path)
        new.request = self.perform(new.request)
        new.db_query = self.perform(new.db_query)
        new.db_response = self._perform_list(new.db_response)

        checks = []
        for check in new.db_checks or ():
            applied = copy.copy(check)
            applied.query = self.perform(applied.query)
            applied.response = self._perform_list(applied.response)
            checks.append(applied)
        new.db_checks = checks

        new.responses = {
            code: self.perform(body) for code, body in (new.responses or {}).items()
        }
        new.headers = {
            key: self.perform(value) for key, value in (new.headers or {}).items()
        }

        if new.form is not None:
            form = copy.copy(new.form)
            form.files = {key: self.perform(path) for key, path in form.files.items()}
            new.form = form

        if new.mocks is not None:
            new.mocks = {
                name: self._perform_nested(definition)
                for name, definition in new.mocks.items()
            }

        return new

    def _perform_list(self, values: list[str] | None) -> list[str] | None:
        if values is None:
            return None
        return [self.perform(value) for value in values]

    def _perform_nested(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: self._perform_item(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._perform_item(item) for item in value]
        return value

    def _perform_item(self, item: Any) -> Any:
        if isinstance(item, str):
            return self.perform(item)
        return self._perform_nested(item)