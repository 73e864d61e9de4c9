"""Load, template and report HTTP API tests described in YAML files."""

__version__ = "1.0.0"