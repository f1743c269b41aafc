"""Tests for the evaluation driver."""

from ghaudit.parsers.spans import Span
from ghaudit.policies import default_registry
from ghaudit.policies.base import Finding, Policy, PolicyMetadata, Severity
from ghaudit.policies.orchestrator import run_policies

MIXED_WORKFLOW = """
on: push
permissions: write-all
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: some-org/action@v1
      - run: echo ${{ github.event.issue.title }}
"""


def make_policy(policy_id, check):
    return Policy(PolicyMetadata(id=policy_id, short_description="", long_description=""), check)


def fixed_policy(policy_id, *positions):
    """Policy reporting a finding at each (line, column)."""
    metadata = PolicyMetadata(id=policy_id, short_description="", long_description="")

    def check(workflow):
        return [
            metadata.finding(f"{policy_id} at {line}:{column}", Span(column, line, column, 1))
            for line, column in positions
        ]

    return Policy(metadata, check)


class TestOrdering:
    def test_findings_sorted_by_position(self, parse):
        workflow = parse(MIXED_WORKFLOW)
        result = run_policies(workflow, default_registry().all())

        assert [(f.policy_id, f.line, f.column) for f in result.findings] == [
            ("no_all_permissions", 2, 14),
            ("permissions_set", 4, 3),
            ("no_unpinned_actions", 7, 15),
            ("no_github_expr_in_run", 8, 19),
        ]

    def test_ties_broken_by_policy_id(self, parse):
        workflow = parse("on: push\njobs: {}\n")
        policies = [fixed_policy("zulu", (3, 1)), fixed_policy("alpha", (3, 1), (1, 5))]

        result = run_policies(workflow, policies)

        assert [(f.policy_id, f.line) for f in result.findings] == [
            ("alpha", 1),
            ("alpha", 3),
            ("zulu", 3),
        ]

    def test_deterministic(self, parse):
        workflow = parse(MIXED_WORKFLOW)
        policies = default_registry().all()

        assert run_policies(workflow, policies) == run_policies(workflow, policies)

    def test_concurrent_matches_sequential(self, parse):
        workflow = parse(MIXED_WORKFLOW)
        policies = default_registry().all()

        sequential = run_policies(workflow, policies, max_workers=1)
        concurrent = run_policies(workflow, policies, max_workers=4)

        assert concurrent.findings == sequential.findings

    def test_no_policies(self, parse):
        result = run_policies(parse("on: push\njobs: {}\n"), [])
        assert result.findings == ()
        assert result.ok


class TestIsolation:
    def test_failing_policy_does_not_affect_others(self, parse):
        def check(workflow):
            raise RuntimeError("broken policy")

        workflow = parse(MIXED_WORKFLOW)
        policies = [*default_registry().all(), make_policy("broken", check)]

        result = run_policies(workflow, policies)

        assert len(result.findings) == 4
        assert [f.policy_id for f in result.failures] == ["broken"]
        assert result.failures[0].error_type == "RuntimeError"
        assert result.failures[0].message == "broken policy"

    def test_non_finding_results_are_a_failure(self, parse):
        def check(workflow):
            return ["not a finding"]

        result = run_policies(parse("on: push\njobs: {}\n"), [make_policy("sloppy", check)])

        assert result.findings == ()
        assert result.failures[0].error_type == "TypeError"

    def test_to_dict(self, parse):
        result = run_policies(parse(MIXED_WORKFLOW), default_registry().all())
        data = result.to_dict()

        assert data["findings"][0] == {
            "policy": "no_all_permissions",
            "severity": Severity.HIGH.value,
            "message": "Workflow should not use the 'write-all' permission.",
            "line": 2,
            "column": 14,
            "offset": 22,
            "length": 9,
        }
        assert "error" not in data

    def test_findings_are_finding_instances(self, parse):
        result = run_policies(parse(MIXED_WORKFLOW), default_registry().all())
        assert all(isinstance(f, Finding) for f in result.findings)
