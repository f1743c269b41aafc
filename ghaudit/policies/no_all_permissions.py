"""Detection of ``read-all`` / ``write-all`` token permissions."""

from ghaudit.policies.base import Finding, PolicyMetadata, Severity
from ghaudit.workflow.model import Shorthand, ShorthandKind, Workflow

METADATA = PolicyMetadata(
    id="no_all_permissions",
    short_description="Workflows and jobs must not use 'read-all' or 'write-all' token permissions.",
    long_description="""\
# no_all_permissions

Check that neither the workflow nor any of its jobs grant `read-all` or
`write-all` permissions to the `GITHUB_TOKEN`.

Permissions that are unnecessarily broad violate the principle of least
privilege: every step of the job, including third-party actions, can use the
token with all of those scopes.

## Not OK: Job with `read-all` token permission

```yaml
name: Job with read-all token permission
jobs:
  foo:
    runs-on: ubuntu-latest
    permissions: read-all
    steps:
      - run: echo "Too many permissions"
```

## Not OK: Workflow with `write-all` token permission

```yaml
name: Workflow with write-all token permission
permissions: write-all
jobs:
  foo:
    runs-on: ubuntu-latest
    steps:
      - run: echo "Too many permissions"
```

## OK: Job with fine-grained token permissions

```yaml
name: Job with fine-grained token permissions
jobs:
  foo:
    runs-on: ubuntu-latest
    permissions:
      contents: read
    steps:
      - run: echo "This is okay"
```

## References

- <https://docs.github.com/en/actions/writing-workflows/workflow-syntax-for-github-actions#defining-access-for-the-github_token-scopes>
- <https://en.wikipedia.org/wiki/Principle_of_least_privilege>
""",
    severity=Severity.HIGH,
    category="access-control",
    cwe_id="CWE-269",
)


def check(workflow: Workflow) -> list[Finding]:
    """Flag every shorthand permissions value at the scalar's span."""
    findings: list[Finding] = []

    for job, permissions in workflow.permission_declarations():
        if not isinstance(permissions, Shorthand):
            continue

        owner = "Workflow" if job is None else f"Job {job.name}"
        severity = (
            METADATA.severity if permissions.kind is ShorthandKind.WRITE_ALL else Severity.MEDIUM
        )
        findings.append(
            METADATA.finding(
                f"{owner} should not use the '{permissions.kind.value}' permission.",
                permissions.span,
                severity=severity,
                job=job.name if job else None,
            )
        )

    return findings
