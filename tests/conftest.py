"""Pytest configuration and fixtures."""
import os
import textwrap

import pytest

from ghaudit.parsers.yaml_loader import load
from ghaudit.workflow.builder import build


def workflow_source(text: str) -> str:
    """Dedent an inline workflow so tests can indent it naturally."""
    return textwrap.dedent(text).lstrip("\n")


@pytest.fixture
def parse():
    """Load and build a workflow from inline YAML."""

    def _parse(text: str):
        return build(load(workflow_source(text)))

    return _parse


@pytest.fixture
def write_workflow(tmp_path):
    """Write a workflow under <tmp>/.github/workflows/ and return its path."""

    def _write(name: str, text: str):
        directory = tmp_path / ".github" / "workflows"
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(workflow_source(text), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch):
    """Keep GHAUDIT_* config variables from the environment out of tests."""
    for name in list(os.environ):
        if name.startswith("GHAUDIT_ANALYSIS_") or name.startswith("GHAUDIT_OUTPUT_"):
            monkeypatch.delenv(name, raising=False)
