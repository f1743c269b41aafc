"""ghaudit - static security analysis for GitHub Actions workflows."""

__version__ = "0.4.0"

from ghaudit.exceptions import (  # noqa: E402
    GhauditError,
    LoadError,
    MalformedInputError,
    ModelError,
    PolicyRegistryError,
    UnexpectedShapeError,
)
from ghaudit.parsers.yaml_loader import load  # noqa: E402
from ghaudit.pipeline.runner import WorkflowAnalyzer, check_source  # noqa: E402
from ghaudit.policies import Finding, Severity, default_registry  # noqa: E402
from ghaudit.workflow.builder import build  # noqa: E402

__all__ = [
    "Finding",
    "GhauditError",
    "LoadError",
    "MalformedInputError",
    "ModelError",
    "PolicyRegistryError",
    "Severity",
    "UnexpectedShapeError",
    "WorkflowAnalyzer",
    "__version__",
    "build",
    "check_source",
    "default_registry",
    "load",
]
