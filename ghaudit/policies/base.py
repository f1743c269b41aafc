"""Base contracts shared by every policy."""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ghaudit.parsers.spans import Span
from ghaudit.workflow.model import Workflow


class Severity(Enum):
    """Standardized severity levels."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """0 for the most severe level."""
        return _SEVERITY_RANK[self]

    def at_least(self, other: "Severity") -> bool:
        return self.rank <= other.rank


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
    Severity.INFO: 4,
}


@dataclass(frozen=True)
class Finding:
    """One policy violation, tied to the text it refers to."""

    policy_id: str
    severity: Severity
    message: str
    span: Span
    job: str | None = None
    step: int | None = None

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def column(self) -> int:
        return self.span.column

    def sort_key(self) -> tuple:
        """(line, column, policy id), then offset and message for a total order."""
        return (
            self.span.line,
            self.span.column,
            self.policy_id,
            self.span.offset,
            self.span.length,
            self.message,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "policy": self.policy_id,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.span.line,
            "column": self.span.column,
            "offset": self.span.offset,
            "length": self.span.length,
        }
        if self.job is not None:
            result["job"] = self.job
        if self.step is not None:
            result["step"] = self.step
        return result


@dataclass(frozen=True)
class PolicyMetadata:
    """Static description of a policy, exported verbatim by ``list``/``show``."""

    id: str
    short_description: str
    long_description: str
    severity: Severity = Severity.MEDIUM
    enabled: bool = True
    category: str = "security"
    cwe_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "short_description": self.short_description,
            "long_description": self.long_description,
            "severity": self.severity.value,
            "enabled": self.enabled,
            "category": self.category,
            "cwe": self.cwe_id,
        }

    def finding(
        self,
        message: str,
        span: Span,
        *,
        severity: Severity | None = None,
        job: str | None = None,
        step: int | None = None,
    ) -> Finding:
        """Build a finding attributed to this policy."""
        return Finding(
            policy_id=self.id,
            severity=severity or self.severity,
            message=message,
            span=span,
            job=job,
            step=step,
        )


CheckFunction = Callable[[Workflow], list[Finding]]


def validate_policy_signature(func: Callable) -> bool:
    """Check if a function follows the standard policy signature."""
    sig = inspect.signature(func)
    params = list(sig.parameters.keys())

    return len(params) == 1 and params[0] == "workflow"


@dataclass(frozen=True)
class Policy:
    """A named check over a Workflow.

    The check function must be pure: it may not mutate the workflow, perform
    I/O, or keep state between calls.
    """

    metadata: PolicyMetadata
    check: CheckFunction

    @property
    def id(self) -> str:
        return self.metadata.id

    def evaluate(self, workflow: Workflow) -> list[Finding]:
        """Run the check. Always returns a list, possibly empty."""
        return list(self.check(workflow) or [])
