"""Typed model of a GitHub Actions workflow.

Only fields that some policy cares about are modeled. Every field that is
present in the source keeps its Span; absent or inherited values have none.

Documentation:
<https://docs.github.com/en/actions/writing-workflows/workflow-syntax-for-github-actions>
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from ghaudit.parsers.spans import Span

T = TypeVar("T")


@dataclass(frozen=True)
class Spanned(Generic[T]):
    """A value together with the span of the text it was read from."""

    value: T
    span: Span

    def __str__(self) -> str:
        return str(self.value)


class ShorthandKind(Enum):
    """Token permissions granted to every scope at once."""

    READ_ALL = "read-all"
    WRITE_ALL = "write-all"


class PermissionLevel(Enum):
    """Access level for a single permission scope."""

    READ = "read"
    WRITE = "write"
    NONE = "none"


# Scopes documented for the GITHUB_TOKEN. Unknown scopes are kept as-is.
KNOWN_SCOPES: frozenset[str] = frozenset(
    {
        "actions",
        "attestations",
        "checks",
        "contents",
        "deployments",
        "discussions",
        "id-token",
        "issues",
        "models",
        "packages",
        "pages",
        "pull-requests",
        "repository-projects",
        "security-events",
        "statuses",
    }
)


@dataclass(frozen=True)
class Unspecified:
    """No ``permissions`` declared; the value is inherited."""

    def __repr__(self) -> str:
        return "UNSPECIFIED"


UNSPECIFIED = Unspecified()


@dataclass(frozen=True)
class Shorthand:
    """``permissions: read-all`` or ``permissions: write-all``."""

    kind: ShorthandKind
    span: Span


@dataclass(frozen=True)
class PermissionEntry:
    """One ``scope: level`` line of an explicit permissions map."""

    scope: str
    level: str
    scope_span: Span
    level_span: Span

    @property
    def known_level(self) -> PermissionLevel | None:
        try:
            return PermissionLevel(self.level)
        except ValueError:
            return None

    @property
    def is_known_scope(self) -> bool:
        return self.scope in KNOWN_SCOPES


@dataclass(frozen=True)
class ExplicitMap:
    """Fine-grained permissions, one level per scope."""

    entries: tuple[PermissionEntry, ...]
    span: Span

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def level(self, scope: str) -> PermissionLevel:
        """Level granted to ``scope``; unlisted scopes get no access."""
        for entry in self.entries:
            if entry.scope == scope:
                return entry.known_level or PermissionLevel.NONE
        return PermissionLevel.NONE

    def grants_nothing(self) -> bool:
        """True if every listed scope is ``none`` (vacuously true when empty)."""
        return all(entry.known_level is PermissionLevel.NONE for entry in self.entries)


Permissions = Unspecified | Shorthand | ExplicitMap


@dataclass(frozen=True)
class Triggers:
    """Events listed under ``on``."""

    events: tuple[Spanned[str], ...] = ()
    span: Span | None = None

    def names(self) -> list[str]:
        return [event.value for event in self.events]

    def __contains__(self, event: str) -> bool:
        return any(item.value == event for item in self.events)


StringMap = tuple[tuple[Spanned[str], Spanned[str]], ...]


@dataclass(frozen=True)
class Step:
    """A task that is run as part of a Job. ``index`` is 0-based."""

    index: int
    span: Span
    id: Spanned[str] | None = None
    name: Spanned[str] | None = None
    uses: Spanned[str] | None = None
    run: Spanned[str] | None = None
    run_raw: str | None = None
    shell: Spanned[str] | None = None
    working_directory: Spanned[str] | None = None
    if_condition: Spanned[str] | None = None
    with_args: StringMap = ()
    env: StringMap = ()

    @property
    def label(self) -> str:
        """Name used in messages: the step name, id, or its 1-based position."""
        if self.name is not None:
            return self.name.value
        if self.id is not None:
            return self.id.value
        return f"#{self.index + 1}"


@dataclass(frozen=True)
class Job:
    """A job in a workflow, keyed by its unique name."""

    name: str
    key_span: Span
    span: Span
    display_name: Spanned[str] | None = None
    permissions: Permissions = UNSPECIFIED
    permissions_key_span: Span | None = None
    runs_on: tuple[Spanned[str], ...] = ()
    environment: Spanned[str] | None = None
    needs: tuple[Spanned[str], ...] = ()
    if_condition: Spanned[str] | None = None
    uses: Spanned[str] | None = None
    steps: tuple[Step, ...] = ()
    env: StringMap = ()

    def effective_permissions(self, workflow: "Workflow") -> Permissions:
        """The job's own permissions, or the workflow default if it has none."""
        if isinstance(self.permissions, Unspecified):
            return workflow.permissions
        return self.permissions


@dataclass(frozen=True)
class Workflow:
    """A GitHub Actions workflow."""

    span: Span
    name: Spanned[str] | None = None
    run_name: Spanned[str] | None = None
    triggers: Triggers = field(default_factory=Triggers)
    permissions: Permissions = UNSPECIFIED
    permissions_key_span: Span | None = None
    env: StringMap = ()
    jobs: tuple[Job, ...] = ()
    jobs_span: Span | None = None

    def job(self, name: str) -> Job | None:
        for job in self.jobs:
            if job.name == name:
                return job
        return None

    def permission_declarations(self) -> list[tuple[Job | None, Permissions]]:
        """Every declared permissions value: workflow level first, then per job."""
        declared: list[tuple[Job | None, Permissions]] = []
        if not isinstance(self.permissions, Unspecified):
            declared.append((None, self.permissions))
        for job in self.jobs:
            if not isinstance(job.permissions, Unspecified):
                declared.append((job, job.permissions))
        return declared
