"""Typed GitHub Actions workflow model and its builder."""

from .builder import WorkflowBuilder, build, parse_permissions
from .model import (
    UNSPECIFIED,
    ExplicitMap,
    Job,
    PermissionEntry,
    PermissionLevel,
    Permissions,
    Shorthand,
    ShorthandKind,
    Spanned,
    Step,
    Triggers,
    Unspecified,
    Workflow,
)

__all__ = [
    "UNSPECIFIED",
    "ExplicitMap",
    "Job",
    "PermissionEntry",
    "PermissionLevel",
    "Permissions",
    "Shorthand",
    "ShorthandKind",
    "Spanned",
    "Step",
    "Triggers",
    "Unspecified",
    "Workflow",
    "WorkflowBuilder",
    "build",
    "parse_permissions",
]
