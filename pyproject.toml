[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gonkey"
version = "1.0.0"
description = "Building blocks for HTTP API tests described in YAML files: loading, variables, requests and console or Allure reporting."
requires-python = ">=3.10"
keywords = ["testing", "api", "http", "yaml", "functional-testing", "allure"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
]
dependencies = [
    "pyyaml>=6.0",
    "requests>=2.28",
    "termcolor>=2.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["gonkey"]

[tool.hatch.build.targets.sdist]
include = ["gonkey", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
