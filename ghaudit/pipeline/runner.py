"""Single-file pipeline: load, build, evaluate.

Each file runs through its own Loader -> Builder -> Driver pass. A load or
model error stops that file only; it is reported in the file's result and
never raised to the caller, so one broken workflow cannot hide findings in
the others.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from ghaudit.config_runtime import DEFAULTS
from ghaudit.exceptions import GhauditError, InputTooLargeError, LoadError, ModelError
from ghaudit.parsers.yaml_loader import decode, load
from ghaudit.policies.base import Finding, Policy, Severity
from ghaudit.policies.orchestrator import EvaluationResult, run_policies
from ghaudit.policies.registry import PolicyRegistry, default_registry
from ghaudit.suppressions import apply_suppressions, parse_suppressions
from ghaudit.utils.logging import logger
from ghaudit.workflow.builder import build


@dataclass(frozen=True)
class FileResult:
    """Evaluation result for one file on disk."""

    path: str
    result: EvaluationResult
    suppressed: int = 0

    @property
    def findings(self) -> tuple[Finding, ...]:
        return self.result.findings

    @property
    def error(self) -> GhauditError | None:
        return self.result.error

    def to_dict(self) -> dict[str, Any]:
        data = {"path": self.path, **self.result.to_dict()}
        if self.suppressed:
            data["suppressed"] = self.suppressed
        return data


class WorkflowAnalyzer:
    """Runs the selected policies over workflow documents."""

    def __init__(
        self,
        policies: Sequence[Policy] | None = None,
        *,
        registry: PolicyRegistry | None = None,
        min_severity: Severity = Severity.INFO,
        workers: int = 1,
        max_file_size: int = DEFAULTS["analysis"]["max_file_size"],
    ):
        self.registry = registry or default_registry()
        self.policies = tuple(policies) if policies is not None else self.registry.select()
        self.min_severity = min_severity
        self.workers = max(1, workers)
        self.max_file_size = max_file_size

    @classmethod
    def from_config(
        cls,
        cfg: dict[str, Any],
        *,
        registry: PolicyRegistry | None = None,
        only: Iterable[str] | None = None,
        disabled: Iterable[str] = (),
    ) -> "WorkflowAnalyzer":
        """Build an analyzer from a runtime config dict.

        Raises:
            KeyError: If a selected or disabled policy is unknown
            ValueError: If ``min_severity`` is not a severity name
        """
        registry = registry or default_registry()
        analysis = cfg["analysis"]
        policies = registry.select(
            only=only, disabled=[*analysis["disabled_policies"], *disabled]
        )
        return cls(
            policies,
            registry=registry,
            min_severity=Severity(analysis["min_severity"].lower()),
            workers=analysis["workers"],
            max_file_size=analysis["max_file_size"],
        )

    def check_source(self, data: bytes | str) -> EvaluationResult:
        """Run the pipeline on one document.

        Load and model errors are returned in ``EvaluationResult.error``.
        """
        result, _ = self._check(data)
        return result

    def check_file(self, path: str | Path) -> FileResult:
        path = Path(path)
        logger.debug("Checking {path}", path=str(path))

        try:
            size = path.stat().st_size
            if size > self.max_file_size:
                raise InputTooLargeError(size, self.max_file_size)
            data = path.read_bytes()
        except InputTooLargeError as e:
            logger.warning("Skipping {path}: {err}", path=str(path), err=str(e))
            return FileResult(str(path), EvaluationResult(error=e))
        except OSError as e:
            error = LoadError(f"cannot read file: {e.strerror or e}")
            logger.warning("Skipping {path}: {err}", path=str(path), err=str(error))
            return FileResult(str(path), EvaluationResult(error=error))

        result, suppressed = self._check(data)
        if result.error is not None:
            logger.info("{path}: {err}", path=str(path), err=str(result.error))
        return FileResult(str(path), result, suppressed)

    def check_files(self, paths: Iterable[str | Path]) -> list[FileResult]:
        return [self.check_file(path) for path in paths]

    def _check(self, data: bytes | str) -> tuple[EvaluationResult, int]:
        try:
            text = decode(data)
            workflow = build(load(text))
        except (LoadError, ModelError) as e:
            return EvaluationResult(error=e), 0

        result = run_policies(workflow, self.policies, max_workers=self.workers)

        findings = [
            finding for finding in result.findings if finding.severity.at_least(self.min_severity)
        ]
        suppressions = parse_suppressions(text, known_ids=self.registry.ids())
        kept, suppressed = apply_suppressions(findings, suppressions)
        if suppressed:
            logger.debug("Suppressed {count} finding(s)", count=len(suppressed))

        return replace(result, findings=tuple(kept)), len(suppressed)


def check_source(
    data: bytes | str, policies: Sequence[Policy] | None = None
) -> EvaluationResult:
    """Analyse one document with ``policies`` (default: every enabled policy)."""
    return WorkflowAnalyzer(policies).check_source(data)
