"""Discovery of YAML test files on disk."""

from __future__ import annotations

import os

from gonkey.testcase import ApiTest
from gonkey.yaml_parser import parse_test_definition_file


def is_yaml_file(name: str) -> bool:
    """Tell whether a file name has a YAML extension."""
    return name.endswith((".yaml", ".yml"))


class YamlFileLoader:
    """Loads tests from a YAML file or, recursively, from a directory of them.

    When ``file_filter`` is set, only files whose path contains it are read.
    """

    def __init__(self, tests_location: str, file_filter: str = "") -> None:
        self.tests_location = tests_location
        self.file_filter = file_filter

    def load(self) -> list[ApiTest]:
        """Return all tests found at the configured location."""
        return self._lookup(self.tests_location, os.path.isdir(self._stat(self.tests_location)))

    @staticmethod
    def _stat(path: str) -> str:
        os.stat(path)
        return path

    def _fits_filter(self, path: str) -> bool:
        return not self.file_filter or self.file_filter in path

    def _lookup(self, path: str, is_dir: bool) -> list[ApiTest]:
        if not is_dir:
            if not self._fits_filter(path):
                return []
            return parse_test_definition_file(path)

        tests: list[ApiTest] = []
        for name in sorted(os.listdir(path)):
            child = path + "/" + name
            child_is_dir = os.path.isdir(child)
            if not child_is_dir and not is_yaml_file(name):
                continue
            tests.extend(self._lookup(child, child_is_dir))
        return tests