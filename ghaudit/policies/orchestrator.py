"""Evaluation driver: runs policies against one workflow.

Every selected policy sees the same immutable Workflow. Findings are
concatenated and sorted by (line, column, policy id) so identical input always
produces identical output, whether policies ran sequentially or on a thread
pool.
"""

import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from ghaudit.exceptions import GhauditError
from ghaudit.policies.base import Finding, Policy
from ghaudit.utils.logging import logger
from ghaudit.workflow.model import Workflow


@dataclass(frozen=True)
class PolicyFailure:
    """A policy that raised instead of returning findings."""

    policy_id: str
    error_type: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"policy": self.policy_id, "error": self.error_type, "message": self.message}


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of analysing one document.

    ``error`` is set when the document could not be loaded or modeled; in that
    case no policy ran and ``findings`` is empty.
    """

    findings: tuple[Finding, ...] = ()
    error: GhauditError | None = None
    failures: tuple[PolicyFailure, ...] = ()
    policies: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"findings": [finding.to_dict() for finding in self.findings]}
        if self.error is not None:
            result["error"] = {"type": type(self.error).__name__, "message": str(self.error)}
        if self.failures:
            result["policy_failures"] = [failure.to_dict() for failure in self.failures]
        return result


def sort_findings(findings: Iterable[Finding]) -> tuple[Finding, ...]:
    """Order findings by line, column and policy identifier."""
    return tuple(sorted(findings, key=Finding.sort_key))


class PolicyOrchestrator:
    """Runs a fixed set of policies against workflows."""

    def __init__(self, policies: Sequence[Policy], max_workers: int = 1):
        """Initialize the orchestrator.

        Args:
            policies: Policies to evaluate, usually from PolicyRegistry.select()
            max_workers: Threads used to evaluate policies; 1 means sequential
        """
        self.policies = tuple(policies)
        self.max_workers = max(1, max_workers)

    def run(self, workflow: Workflow) -> EvaluationResult:
        start = time.perf_counter()

        if self.max_workers > 1 and len(self.policies) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(lambda p: _evaluate(p, workflow), self.policies))
        else:
            outcomes = [_evaluate(policy, workflow) for policy in self.policies]

        findings: list[Finding] = []
        failures: list[PolicyFailure] = []
        for policy_findings, failure in outcomes:
            findings.extend(policy_findings)
            if failure is not None:
                failures.append(failure)

        result = EvaluationResult(
            findings=sort_findings(findings),
            failures=tuple(failures),
            policies=tuple(policy.id for policy in self.policies),
        )
        logger.debug(
            "Evaluated {count} policies: {findings} finding(s) in {ms:.1f}ms",
            count=len(self.policies),
            findings=len(result.findings),
            ms=(time.perf_counter() - start) * 1000,
        )
        return result


def run_policies(
    workflow: Workflow, policies: Sequence[Policy], max_workers: int = 1
) -> EvaluationResult:
    """Run ``policies`` against ``workflow`` and return sorted findings."""
    return PolicyOrchestrator(policies, max_workers=max_workers).run(workflow)


def _evaluate(policy: Policy, workflow: Workflow) -> tuple[list[Finding], PolicyFailure | None]:
    """Evaluate one policy, isolating any exception it raises."""
    policy_start = time.perf_counter()
    try:
        findings = policy.evaluate(workflow)
        for finding in findings:
            if not isinstance(finding, Finding):
                raise TypeError(f"expected Finding, got {type(finding).__name__}")
    except Exception as e:
        logger.opt(exception=e).error(
            "Policy {policy} failed: {err}", policy=policy.id, err=str(e)
        )
        return [], PolicyFailure(policy.id, type(e).__name__, str(e))

    logger.debug(
        "Policy {policy}: {count} finding(s) in {ms:.1f}ms",
        policy=policy.id,
        count=len(findings),
        ms=(time.perf_counter() - policy_start) * 1000,
    )
    return findings, None
