"""Pytest configuration and fixtures for CLI tests."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from docquery.cli.main import cli


class CLIRunner:
    """Wrapper around CliRunner bound to the docquery group."""

    def __init__(self):
        self.runner = CliRunner()

    def invoke(self, args, **kwargs):
        return self.runner.invoke(cli, args, **kwargs)


@pytest.fixture
def cli_runner() -> CLIRunner:
    """CLI runner for invoking commands."""
    return CLIRunner()


@pytest.fixture
def records_file(tmp_path, people) -> Path:
    """JSON file holding the sample people records."""
    path = tmp_path / "people.json"
    path.write_text(json.dumps(people), encoding="utf-8")
    return path
