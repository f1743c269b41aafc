"""Detection of GitHub expressions interpolated into ``run`` scripts."""

from ghaudit.parsers.expression import Token, context_references, is_literal, tokenize
from ghaudit.parsers.spans import offset_span
from ghaudit.policies.base import Finding, PolicyMetadata, Severity
from ghaudit.workflow.model import Job, Step, Workflow

METADATA = PolicyMetadata(
    id="no_github_expr_in_run",
    short_description="Steps must not use GitHub expressions directly in the 'run' field.",
    long_description="""\
# no_github_expr_in_run

No step should be using a GitHub Actions expression in the `run` field.

Instead, the expression should be assigned to an environment variable which
is used in the script. The result of an expression is substituted into the
script as-is before the shell runs, which can lead to quoting issues and is
exploitable by an attacker (script injection).

Expressions that are plain literals or that only read values controlled by
the runner (`github.sha`, `github.run_id`, `runner.os`, ...) are accepted.

## Not OK: Job uses expression in `run` field

A pull request titled `a"; ls "$GITHUB_WORKSPACE"; echo "b` turns the script
below into `echo "a"; ls "$GITHUB_WORKSPACE"; echo "b"`.

```yaml
on: [pull_request]
jobs:
  job-with-expression-in-run:
    runs-on: ubuntu-latest
    steps:
      - run: echo "${{ github.event.pull_request.title }}"
```

## OK: Job uses expression via `env` field

```yaml
on: [pull_request]
jobs:
  job-with-expression-in-env:
    runs-on: ubuntu-latest
    steps:
      - run: echo "${PULL_REQUEST_TITLE}"
        env:
          PULL_REQUEST_TITLE: ${{ github.event.pull_request.title }}
```

## References

- <https://docs.github.com/en/actions/security-for-github-actions/security-guides/security-hardening-for-github-actions#understanding-the-risk-of-script-injections>
- <https://docs.github.com/en/actions/security-for-github-actions/security-guides/security-hardening-for-github-actions#good-practices-for-mitigating-script-injection-attacks>
""",
    severity=Severity.HIGH,
    category="injection",
    cwe_id="CWE-77",
)


# Values the runner computes itself; an attacker cannot choose them.
SAFE_CONTEXTS: frozenset[str] = frozenset(
    [
        "github.sha",
        "github.run_id",
        "github.run_number",
        "github.run_attempt",
        "github.event_name",
        "github.job",
        "github.repository_id",
        "github.repository_owner_id",
        "github.workflow_sha",
        "runner.os",
        "runner.arch",
        "runner.temp",
        "runner.tool_cache",
        "job.status",
        "strategy.job-index",
        "strategy.job-total",
    ]
)


UNTRUSTED_PATHS = frozenset(
    [
        "github.event.pull_request.title",
        "github.event.pull_request.body",
        "github.event.pull_request.head.ref",
        "github.event.pull_request.head.label",
        "github.event.issue.title",
        "github.event.issue.body",
        "github.event.comment.body",
        "github.event.review.body",
        "github.event.head_commit.message",
        "github.head_ref",
    ]
)


# Triggers that run with repository privileges on attacker-supplied data.
PRIVILEGED_TRIGGERS = frozenset(
    [
        "pull_request_target",
        "issue_comment",
        "workflow_run",
    ]
)


def is_safe_expression(token: Token) -> bool:
    """True for literals and bare references to runner-controlled values."""
    if not token.terminated:
        return False
    body = token.body
    return is_literal(body) or body in SAFE_CONTEXTS


def check(workflow: Workflow) -> list[Finding]:
    """Flag each unsafe expression token at its exact position inside ``run``."""
    privileged = any(trigger in workflow.triggers for trigger in PRIVILEGED_TRIGGERS)
    findings: list[Finding] = []

    for job in workflow.jobs:
        for step in job.steps:
            findings.extend(_check_step(job, step, privileged))

    return findings


def _check_step(job: Job, step: Step, privileged: bool) -> list[Finding]:
    if step.run is None or step.run_raw is None:
        return []

    # The runner interpolates the parsed value, so scan that; the source text
    # is only used to locate each expression.
    locator = _RawLocator(step.run_raw)
    findings = []
    for token in tokenize(step.run.value):
        if not token.is_expression or is_safe_expression(token):
            continue

        untrusted = _untrusted_references(token.body)
        severity = Severity.CRITICAL if untrusted and privileged else METADATA.severity
        expression = step.run.value[token.start : token.end]

        raw_token = locator.find(expression)
        if raw_token is None:
            span = step.run.span
        else:
            span = offset_span(step.run.span, step.run_raw, raw_token.start, raw_token.end)

        findings.append(
            METADATA.finding(
                f"Step {step.index + 1} of job {job.name} should not directly include "
                f"GitHub expression '{_shorten(expression)}' in the 'run' field.",
                span,
                severity=severity,
                job=job.name,
                step=step.index,
            )
        )

    return findings


class _RawLocator:
    """Matches expressions of a scalar's value to their text in the source.

    Tokens are matched in order, ignoring whitespace differences introduced by
    block scalar indentation. An expression written with escape sequences has
    no counterpart in the source and is not matched.
    """

    def __init__(self, raw: str):
        self.raw = raw
        self._tokens = [token for token in tokenize(raw) if token.is_expression]
        self._next = 0

    def find(self, expression: str) -> Token | None:
        wanted = _normalize(expression)
        for position in range(self._next, len(self._tokens)):
            token = self._tokens[position]
            if _normalize(self.raw[token.start : token.end]) == wanted:
                self._next = position + 1
                return token
        return None


def _normalize(text: str) -> str:
    return " ".join(text.split())


def _untrusted_references(body: str) -> list[str]:
    untrusted = []
    for reference in context_references(body):
        if any(reference.startswith(path) for path in UNTRUSTED_PATHS):
            untrusted.append(reference)
    return untrusted


def _shorten(expression: str, limit: int = 60) -> str:
    single_line = " ".join(expression.split())
    if len(single_line) <= limit:
        return single_line
    return single_line[: limit - 3] + "..."
