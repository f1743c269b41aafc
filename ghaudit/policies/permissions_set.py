"""Detection of jobs that do not declare their token permissions."""

from ghaudit.parsers.spans import Span
from ghaudit.policies.base import Finding, PolicyMetadata, Severity
from ghaudit.workflow.model import ExplicitMap, Job, Unspecified, Workflow

METADATA = PolicyMetadata(
    id="permissions_set",
    short_description="Every job must declare the token permissions it needs.",
    long_description="""\
# permissions_set

Every job should set `permissions` for the `GITHUB_TOKEN` explicitly, so that
it only gets the scopes it needs instead of the repository default (which is
often read/write for everything).

Permissions may be omitted on a job only if:

- the workflow sets its default permissions to none, by listing scopes that
  are all `none` (for example `permissions: {contents: none}`), or
- the workflow sets explicit permissions and contains exactly one job, so
  the workflow-level declaration is effectively the job's.

An empty `permissions: {}` at workflow level covers a single-job workflow;
in a workflow with several jobs each job still has to declare its own.

## Not OK: Job without permissions

```yaml
on: [push]
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - run: make
```

## OK: Job with permissions

```yaml
on: [push]
jobs:
  build:
    runs-on: ubuntu-latest
    permissions:
      contents: read
    steps:
      - run: make
```

## OK: Single job covered by workflow permissions

```yaml
on: [push]
permissions:
  contents: read
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - run: make
```

## References

- <https://docs.github.com/en/actions/writing-workflows/workflow-syntax-for-github-actions#permissions>
- <https://docs.github.com/en/actions/security-for-github-actions/security-guides/automatic-token-authentication#modifying-the-permissions-for-the-github_token>
""",
    severity=Severity.MEDIUM,
    category="access-control",
    cwe_id="CWE-250",
)


def check(workflow: Workflow) -> list[Finding]:
    """Flag jobs lacking their own permissions unless the workflow covers them."""
    if _defaults_to_none(workflow) or _single_job_with_explicit_permissions(workflow):
        return []

    findings: list[Finding] = []
    for job in workflow.jobs:
        if not isinstance(job.permissions, Unspecified):
            continue
        findings.append(
            METADATA.finding(
                f"Job {job.name} should set the permissions of the GITHUB_TOKEN explicitly.",
                _job_location(job),
                job=job.name,
            )
        )
    return findings


def _defaults_to_none(workflow: Workflow) -> bool:
    """Workflow-level permissions list scopes that are all ``none``."""
    permissions = workflow.permissions
    return (
        isinstance(permissions, ExplicitMap)
        and not permissions.is_empty
        and permissions.grants_nothing()
    )


def _single_job_with_explicit_permissions(workflow: Workflow) -> bool:
    return isinstance(workflow.permissions, ExplicitMap) and len(workflow.jobs) == 1


def _job_location(job: Job) -> Span:
    # A `permissions:` key with a null value is the closest text to point at.
    if job.permissions_key_span is not None:
        return job.permissions_key_span
    return job.key_span
