"""Detection of third-party actions pinned to mutable refs."""

from ghaudit.parsers.expression import context_references, expressions
from ghaudit.policies.base import Finding, PolicyMetadata, Severity
from ghaudit.workflow.model import Spanned, Step, Workflow

METADATA = PolicyMetadata(
    id="no_unpinned_actions",
    short_description="Third-party actions and reusable workflows must be pinned to a full commit SHA.",
    long_description="""\
# no_unpinned_actions

Third-party actions should be referenced by a full commit SHA. Tags and
branches are mutable: whoever controls the upstream repository (or
compromises it) can move them to new code, which then runs inside your
workflow with access to its token and secrets.

Local actions (`./path`), Docker images (`docker://`) and actions owned by
GitHub (`actions/*`, `github/*`) are not flagged. Findings are raised to high
severity when the step hands secrets to the action through `with` or `env`.

## Not OK: Action pinned to a tag

```yaml
jobs:
  deploy:
    runs-on: ubuntu-latest
    steps:
      - uses: some-org/deploy-action@v2
        with:
          token: ${{ secrets.DEPLOY_TOKEN }}
```

## OK: Action pinned to a commit

```yaml
jobs:
  deploy:
    runs-on: ubuntu-latest
    steps:
      - uses: some-org/deploy-action@8f4b7f84864484a7bf31766abe9204da3cbe65b3 # v2.1.0
        with:
          token: ${{ secrets.DEPLOY_TOKEN }}
```

## References

- <https://docs.github.com/en/actions/security-for-github-actions/security-guides/security-hardening-for-github-actions#using-third-party-actions>
""",
    severity=Severity.LOW,
    category="supply-chain",
    cwe_id="CWE-829",
)


FIRST_PARTY_OWNERS: frozenset[str] = frozenset({"actions", "github"})


def is_valid_sha(version: str) -> bool:
    """True if ``version`` is a full SHA-1 (40 hex) or SHA-256 (64 hex)."""
    if len(version) not in (40, 64):
        return False
    return all(c in "0123456789abcdefABCDEF" for c in version)


def parse_reference(uses: str) -> tuple[str, str | None] | None:
    """Split ``owner/repo[/path]@ref`` into (action, ref).

    Returns None for references that are never pinned by SHA (local actions,
    Docker images).
    """
    if uses.startswith("./") or uses.startswith("docker://"):
        return None
    if "@" not in uses:
        return uses, None
    action, ref = uses.rsplit("@", 1)
    return action, ref


def is_third_party(action: str) -> bool:
    owner = action.split("/", 1)[0].lower()
    return owner not in FIRST_PARTY_OWNERS


def check(workflow: Workflow) -> list[Finding]:
    """Flag mutable third-party ``uses`` references on steps and jobs."""
    findings: list[Finding] = []

    for job in workflow.jobs:
        if job.uses is not None:
            finding = _check_reference(job.uses, has_secrets=False, job=job.name)
            if finding:
                findings.append(finding)

        for step in job.steps:
            if step.uses is None:
                continue
            finding = _check_reference(
                step.uses, has_secrets=bool(_secret_inputs(step)), job=job.name, step=step.index
            )
            if finding:
                findings.append(finding)

    return findings


def _check_reference(
    uses: Spanned[str], *, has_secrets: bool, job: str, step: int | None = None
) -> Finding | None:
    parsed = parse_reference(uses.value)
    if parsed is None:
        return None
    action, ref = parsed
    if not is_third_party(action) or (ref is not None and is_valid_sha(ref)):
        return None

    pinned = f"mutable ref '{ref}'" if ref else "no ref"
    where = f"Job {job}" if step is None else f"Step {step + 1} of job {job}"
    message = f"{where} uses third-party '{action}' with {pinned}; pin it to a full commit SHA."
    if has_secrets:
        message += " The step passes secrets to it."

    return METADATA.finding(
        message,
        uses.span,
        severity=Severity.HIGH if has_secrets else METADATA.severity,
        job=job,
        step=step,
    )


def _secret_inputs(step: Step) -> list[str]:
    """Names of ``with``/``env`` inputs whose expressions read ``secrets.*``."""
    names = []
    for location, entries in (("with", step.with_args), ("env", step.env)):
        for key, value in entries:
            for token in expressions(value.value):
                if any(_is_secret(ref) for ref in context_references(token.body)):
                    names.append(f"{location}.{key.value}")
                    break
    return names


def _is_secret(reference: str) -> bool:
    return reference == "secrets" or reference.startswith(("secrets.", "secrets["))
