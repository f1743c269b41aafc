"""Tests for the ghaudit command line."""

import json

import pytest
from click.testing import CliRunner

from ghaudit.cli import cli
from ghaudit.policies import default_registry

VULNERABLE = """
on: pull_request_target
jobs:
  greet:
    runs-on: ubuntu-latest
    permissions: write-all
    steps:
      - run: echo "${{ github.event.pull_request.title }}"
"""

CLEAN = """
on: push
permissions:
  contents: read
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - run: make
"""


class TestCheckCommand:
    @pytest.fixture
    def runner(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        return CliRunner()

    def test_findings_exit_one(self, runner, write_workflow):
        path = write_workflow("ci.yml", VULNERABLE)

        result = runner.invoke(cli, ["check", str(path)])

        assert result.exit_code == 1
        lines = result.stdout.splitlines()
        assert lines == [
            f"{path}:5:18: Job greet should not use the 'write-all' permission. (no_all_permissions)",
            f"{path}:7:20: Step 1 of job greet should not directly include GitHub expression "
            "'${{ github.event.pull_request.title }}' in the 'run' field. (no_github_expr_in_run)",
        ]

    def test_clean_exit_zero(self, runner, write_workflow):
        path = write_workflow("ci.yml", CLEAN)

        result = runner.invoke(cli, ["check", str(path)])

        assert result.exit_code == 0
        assert result.stdout == ""

    def test_directory_discovery(self, runner, tmp_path, write_workflow):
        write_workflow("a.yml", CLEAN)
        write_workflow("b.yaml", VULNERABLE)
        (tmp_path / ".github" / "workflows" / "notes.txt").write_text("x", encoding="utf-8")

        result = runner.invoke(cli, ["check", "--format", "json", str(tmp_path)])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert [r["path"].rsplit("/", 1)[-1] for r in payload["results"]] == ["a.yml", "b.yaml"]
        assert payload["summary"]["findings"] == 2
        assert payload["results"][1]["findings"][1]["severity"] == "critical"

    def test_load_failure_exit_two(self, runner, write_workflow):
        broken = write_workflow("broken.yml", "on: push\njobs: foo\n")
        good = write_workflow("good.yml", VULNERABLE)

        result = runner.invoke(cli, ["check", str(broken), str(good)])

        assert result.exit_code == 2
        lines = result.stdout.splitlines()
        assert lines[0] == f"{broken}:2:7: expected a mapping for 'jobs', found scalar 'foo'"
        assert len(lines) == 3

    def test_select_and_disable(self, runner, write_workflow):
        path = write_workflow("ci.yml", VULNERABLE)

        selected = runner.invoke(cli, ["check", "--select", "no_all_permissions", str(path)])
        disabled = runner.invoke(
            cli, ["check", "--disable", "no_all_permissions,no_github_expr_in_run", str(path)]
        )

        assert selected.stdout.count("(no_all_permissions)") == 1
        assert "no_github_expr_in_run" not in selected.stdout
        assert disabled.exit_code == 0

    def test_min_severity(self, runner, write_workflow):
        path = write_workflow("ci.yml", VULNERABLE)

        result = runner.invoke(cli, ["check", "--min-severity", "critical", str(path)])

        assert result.stdout.splitlines() == [
            line for line in result.stdout.splitlines() if "(no_github_expr_in_run)" in line
        ]
        assert len(result.stdout.splitlines()) == 1

    def test_unknown_policy_is_usage_error(self, runner, write_workflow):
        path = write_workflow("ci.yml", CLEAN)
        result = runner.invoke(cli, ["check", "--select", "nope", str(path)])
        assert result.exit_code == 3

    def test_missing_path_is_usage_error(self, runner):
        result = runner.invoke(cli, ["check", "does-not-exist.yml"])
        assert result.exit_code == 3

    def test_config_file_disables_policy(self, runner, tmp_path, write_workflow):
        path = write_workflow("ci.yml", VULNERABLE)
        config = tmp_path / "ghaudit.json"
        config.write_text(
            json.dumps({"analysis": {"disabled_policies": ["no_all_permissions", "no_github_expr_in_run"]}}),
            encoding="utf-8",
        )

        result = runner.invoke(cli, ["check", "--config", str(config), str(path)])

        assert result.exit_code == 0


class TestCatalogCommands:
    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_list(self, runner):
        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert [line.split()[0] for line in lines] == [
            "no_all_permissions",
            "no_github_expr_in_run",
            "no_unpinned_actions",
            "permissions_set",
        ]
        assert "Steps must not use GitHub expressions directly in the 'run' field." in lines[1]

    def test_list_json(self, runner):
        result = runner.invoke(cli, ["list", "--format", "json"])
        ids = [entry["id"] for entry in json.loads(result.stdout)]
        assert ids == sorted(ids)

    def test_show_raw_is_verbatim(self, runner):
        result = runner.invoke(cli, ["show", "--raw", "permissions_set"])

        assert result.exit_code == 0
        expected = default_registry().find("permissions_set").metadata.long_description
        assert result.stdout == expected + "\n"

    def test_show_renders_markdown(self, runner):
        result = runner.invoke(cli, ["show", "no_github_expr_in_run"])
        assert result.exit_code == 0
        assert "no_github_expr_in_run" in result.stdout

    def test_show_unknown_policy(self, runner):
        result = runner.invoke(cli, ["show", "nope"])
        assert result.exit_code == 3

    def test_help_and_version(self, runner):
        assert runner.invoke(cli, ["--help"]).exit_code == 0
        version = runner.invoke(cli, ["--version"])
        assert version.exit_code == 0
        assert "ghaudit" in version.stdout
