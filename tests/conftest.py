"""Pytest configuration and fixtures."""

import os

import pytest

from docquery.core.options import MatchOptions


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config lookup for each test.

    This prevents a developer's own docquery config or DOCQUERY_*
    variables from leaking into test results.
    """
    original_env = os.environ.copy()
    for variable in list(os.environ):
        if variable.startswith("DOCQUERY_"):
            monkeypatch.delenv(variable)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def options() -> MatchOptions:
    """Default match options."""
    return MatchOptions()


@pytest.fixture
def people() -> list[dict]:
    """Small record collection used across engine and matcher tests."""
    return [
        {
            "name": "Alice",
            "age": 30,
            "email": "alice@example.com",
            "tags": ["admin", "dev"],
            "address": {"city": "Lisboa", "zip": "1000-001"},
            "joined": "2021-03-15",
        },
        {
            "name": "bob",
            "age": 25,
            "tags": ["dev"],
            "address": {"city": "São Paulo", "zip": "01000-000"},
            "joined": "2023-07-01T09:30:00Z",
        },
        {
            "name": "Zoë",
            "age": "41",
            "tags": [],
            "address": None,
            "joined": 1700000000000,
            "projects": [{"name": "atlas", "stars": 12}, {"name": "borealis"}],
        },
    ]
