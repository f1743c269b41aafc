"""Built-in workflow security policies."""

from . import (
    no_all_permissions,
    no_github_expr_in_run,
    no_unpinned_actions,
    permissions_set,
)
from .base import Finding, Policy, PolicyMetadata, Severity
from .registry import PolicyRegistry, default_registry

BUILTIN_POLICIES: tuple[Policy, ...] = (
    Policy(no_all_permissions.METADATA, no_all_permissions.check),
    Policy(no_github_expr_in_run.METADATA, no_github_expr_in_run.check),
    Policy(no_unpinned_actions.METADATA, no_unpinned_actions.check),
    Policy(permissions_set.METADATA, permissions_set.check),
)

__all__ = [
    "BUILTIN_POLICIES",
    "Finding",
    "Policy",
    "PolicyMetadata",
    "PolicyRegistry",
    "Severity",
    "default_registry",
]
