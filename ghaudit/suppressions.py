"""Inline suppression comments.

A finding is dropped when the line it starts on carries a comment of the form::

    permissions: write-all  # ghaudit: ignore[no_all_permissions]

``# ghaudit: ignore`` without a list suppresses every policy on that line.
"""

import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass

from ghaudit.policies.base import Finding
from ghaudit.utils.logging import logger

SUPPRESSION_PATTERN = re.compile(r"#\s*ghaudit:\s*ignore(?:\[(?P<ids>[^\]]*)\])?", re.IGNORECASE)


@dataclass(frozen=True)
class Suppression:
    """Suppression on one source line; ``policy_ids`` of None means all policies."""

    line: int
    policy_ids: frozenset[str] | None = None

    def covers(self, finding: Finding) -> bool:
        if finding.line != self.line:
            return False
        return self.policy_ids is None or finding.policy_id in self.policy_ids


def parse_suppressions(
    text: str, known_ids: Collection[str] | None = None
) -> dict[int, Suppression]:
    """Collect suppression comments by 1-based line number.

    Args:
        text: Decoded workflow source
        known_ids: Registered policy identifiers; unknown names are logged
    """
    suppressions: dict[int, Suppression] = {}

    for number, line in enumerate(text.split("\n"), start=1):
        if "ghaudit" not in line.lower():
            continue
        match = SUPPRESSION_PATTERN.search(line)
        if not match:
            continue

        ids_text = match.group("ids")
        if ids_text is None:
            suppressions[number] = Suppression(number)
            continue

        ids = frozenset(part.strip() for part in ids_text.split(",") if part.strip())
        if known_ids is not None:
            for unknown in sorted(ids - set(known_ids)):
                logger.warning(
                    "Line {line}: suppression names unknown policy {policy!r}",
                    line=number,
                    policy=unknown,
                )
        suppressions[number] = Suppression(number, ids)

    return suppressions


def apply_suppressions(
    findings: Iterable[Finding], suppressions: dict[int, Suppression]
) -> tuple[list[Finding], list[Finding]]:
    """Split findings into (kept, suppressed), preserving order."""
    kept: list[Finding] = []
    suppressed: list[Finding] = []
    for finding in findings:
        suppression = suppressions.get(finding.line)
        if suppression is not None and suppression.covers(finding):
            suppressed.append(finding)
        else:
            kept.append(finding)
    return kept, suppressed
