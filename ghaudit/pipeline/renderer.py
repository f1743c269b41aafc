"""Formatting of check results for text and JSON output."""

import json
from collections.abc import Sequence
from typing import Any

from ghaudit import __version__
from ghaudit.pipeline.runner import FileResult
from ghaudit.policies.base import Finding


def format_finding(path: str, finding: Finding) -> str:
    """``path:line:col: message (policy_id)``"""
    return f"{path}:{finding.line}:{finding.column}: {finding.message} ({finding.policy_id})"


def format_error(path: str, error: Exception) -> str:
    # Span-carrying errors already render as "line:col: message"
    if getattr(error, "span", None) is not None:
        return f"{path}:{error}"
    return f"{path}: {error}"


def render_text(results: Sequence[FileResult]) -> list[str]:
    """One line per finding or failed file, in input order."""
    lines = []
    for file_result in results:
        if file_result.error is not None:
            lines.append(format_error(file_result.path, file_result.error))
            continue
        for finding in file_result.findings:
            lines.append(format_finding(file_result.path, finding))
    return lines


def summarize(results: Sequence[FileResult]) -> dict[str, Any]:
    by_severity: dict[str, int] = {}
    for file_result in results:
        for finding in file_result.findings:
            by_severity[finding.severity.value] = by_severity.get(finding.severity.value, 0) + 1
    return {
        "files": len(results),
        "failed_files": sum(1 for r in results if r.error is not None),
        "findings": sum(len(r.findings) for r in results),
        "suppressed": sum(r.suppressed for r in results),
        "by_severity": by_severity,
    }


def render_json(results: Sequence[FileResult]) -> str:
    payload = {
        "version": __version__,
        "results": [file_result.to_dict() for file_result in results],
        "summary": summarize(results),
    }
    return json.dumps(payload, indent=2)
