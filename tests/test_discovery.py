"""Tests for workflow file discovery."""

import pytest

from ghaudit.discovery import discover


class TestDiscover:
    def test_repository_root(self, tmp_path, write_workflow):
        b = write_workflow("b.yaml", "on: push\njobs: {}\n")
        a = write_workflow("a.yml", "on: push\njobs: {}\n")
        write_workflow("README.md", "not a workflow")

        assert discover([tmp_path]) == [a, b]

    def test_workflows_directory(self, tmp_path, write_workflow):
        a = write_workflow("a.yml", "on: push\njobs: {}\n")
        assert discover([tmp_path / ".github" / "workflows"]) == [a]

    def test_explicit_file_is_kept(self, tmp_path):
        path = tmp_path / "workflow.txt"
        path.write_text("on: push\n", encoding="utf-8")
        assert discover([path]) == [path]

    def test_duplicates_removed(self, tmp_path, write_workflow):
        a = write_workflow("a.yml", "on: push\njobs: {}\n")
        assert discover([a, tmp_path]) == [a]

    def test_directory_without_workflows(self, tmp_path):
        assert discover([tmp_path]) == []

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            discover([tmp_path / "missing"])
