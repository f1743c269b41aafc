"""Read-only catalog of policies.

The registry is built once from an explicit list of policies; there is no
import-time discovery. Duplicate identifiers are a programming error and
fail construction.
"""

import re
from collections.abc import Iterable, Iterator
from functools import cache

from ghaudit.exceptions import PolicyRegistryError
from ghaudit.policies.base import Policy, PolicyMetadata, validate_policy_signature
from ghaudit.utils.logging import logger

POLICY_ID_PATTERN = re.compile(r"[a-z][a-z0-9_]*")


class PolicyRegistry:
    """Immutable, identifier-ordered collection of policies."""

    def __init__(self, policies: Iterable[Policy]):
        by_id: dict[str, Policy] = {}
        for policy in policies:
            _validate(policy)
            if policy.id in by_id:
                raise PolicyRegistryError(f"Duplicate policy identifier: {policy.id!r}")
            by_id[policy.id] = policy

        self._policies: tuple[Policy, ...] = tuple(by_id[key] for key in sorted(by_id))
        self._by_id = dict(by_id)
        logger.debug("Registered {count} policies", count=len(self._policies))

    def all(self) -> tuple[Policy, ...]:
        """All policies, ordered by identifier."""
        return self._policies

    def descriptors(self) -> tuple[PolicyMetadata, ...]:
        return tuple(policy.metadata for policy in self._policies)

    def find(self, policy_id: str) -> Policy | None:
        return self._by_id.get(policy_id)

    def ids(self) -> list[str]:
        return [policy.id for policy in self._policies]

    def select(
        self,
        only: Iterable[str] | None = None,
        disabled: Iterable[str] = (),
    ) -> tuple[Policy, ...]:
        """Policies to evaluate, in registry order.

        Args:
            only: If given, restrict to these identifiers (enabled or not)
            disabled: Identifiers to skip

        Raises:
            KeyError: If ``only`` or ``disabled`` names an unknown policy
        """
        only = list(only) if only is not None else None
        disabled = list(disabled)
        unknown = [pid for pid in [*(only or ()), *disabled] if pid not in self._by_id]
        if unknown:
            raise KeyError(", ".join(sorted(set(unknown))))

        wanted = set(only) if only is not None else None
        skipped = set(disabled)
        selected = []
        for policy in self._policies:
            if wanted is not None:
                if policy.id not in wanted:
                    continue
            elif not policy.metadata.enabled:
                continue
            if policy.id in skipped:
                continue
            selected.append(policy)
        return tuple(selected)

    def __iter__(self) -> Iterator[Policy]:
        return iter(self._policies)

    def __len__(self) -> int:
        return len(self._policies)

    def __contains__(self, policy_id: str) -> bool:
        return policy_id in self._by_id


def _validate(policy: Policy) -> None:
    if not POLICY_ID_PATTERN.fullmatch(policy.id):
        raise PolicyRegistryError(f"Invalid policy identifier: {policy.id!r}")
    if not validate_policy_signature(policy.check):
        raise PolicyRegistryError(
            f"Policy {policy.id!r} check must take exactly one 'workflow' argument"
        )


@cache
def default_registry() -> PolicyRegistry:
    """The process-wide registry of built-in policies."""
    from ghaudit.policies import BUILTIN_POLICIES

    return PolicyRegistry(BUILTIN_POLICIES)
