"""Builds the typed workflow model from the generic node tree.

The builder walks the keys policies care about and ignores everything else,
so new workflow syntax does not break analysis. Fields that are present but
have the wrong structure raise UnexpectedShapeError with the offending span.

Extracted data:
- Workflow: name, run-name, triggers, permissions, env, jobs
- Jobs: permissions, runs-on, environment, needs, if, reusable workflow, steps
- Steps: id, name, uses, run, shell, working-directory, if, with, env
"""

from ghaudit.exceptions import UnexpectedShapeError
from ghaudit.parsers.spans import Span
from ghaudit.parsers.yaml_loader import (
    MappingNode,
    Node,
    NullNode,
    ScalarNode,
    SequenceNode,
    describe_node,
)
from ghaudit.utils.logging import logger
from ghaudit.workflow.model import (
    UNSPECIFIED,
    ExplicitMap,
    Job,
    PermissionEntry,
    Permissions,
    Shorthand,
    ShorthandKind,
    Spanned,
    Step,
    StringMap,
    Triggers,
    Workflow,
)


def build(root: Node) -> Workflow:
    """Map a loaded document onto a Workflow.

    Args:
        root: Root node returned by the loader

    Returns:
        The typed workflow

    Raises:
        UnexpectedShapeError: If a modeled field has the wrong structure
    """
    return WorkflowBuilder().build(root)


class WorkflowBuilder:
    """Builder for GitHub Actions workflow documents."""

    def build(self, root: Node) -> Workflow:
        doc = _expect_mapping(root, "workflow")

        jobs_entry = doc.entry("jobs")
        if jobs_entry is None:
            raise UnexpectedShapeError(root.span, "a 'jobs' mapping", "no 'jobs' key", "jobs")
        jobs_node = _expect_mapping(jobs_entry[1], "jobs")

        permissions, permissions_key_span = self._permissions_field(doc, "permissions")

        workflow = Workflow(
            span=root.span,
            name=_string(doc.get("name"), "name"),
            run_name=_string(doc.get("run-name"), "run-name"),
            triggers=self._triggers(doc.get("on")),
            permissions=permissions,
            permissions_key_span=permissions_key_span,
            env=_string_map(doc.get("env"), "env"),
            jobs=tuple(self._job(key, value) for key, value in jobs_node.entries),
            jobs_span=jobs_node.span,
        )

        logger.debug(
            "Built workflow with {jobs} job(s), {steps} step(s)",
            jobs=len(workflow.jobs),
            steps=sum(len(job.steps) for job in workflow.jobs),
        )
        return workflow

    def _triggers(self, node: Node | None) -> Triggers:
        """Normalize the three forms of ``on`` into a list of events."""
        if node is None or isinstance(node, NullNode):
            return Triggers()

        if isinstance(node, ScalarNode):
            events = (Spanned(node.value, node.span),)
        elif isinstance(node, SequenceNode):
            events = tuple(
                Spanned(item.value, item.span)
                for item in (_expect_scalar(item, "on[]") for item in node.items)
            )
        else:
            events = tuple(Spanned(key.value, key.span) for key, _ in node.entries)

        return Triggers(events=events, span=node.span)

    def _permissions_field(
        self, mapping: MappingNode, field: str
    ) -> tuple[Permissions, Span | None]:
        entry = mapping.entry("permissions")
        if entry is None:
            return UNSPECIFIED, None
        key, value = entry
        return parse_permissions(value, field), key.span

    def _job(self, key: ScalarNode, node: Node) -> Job:
        name = key.value
        job = _expect_mapping(node, f"jobs.{name}")
        permissions, permissions_key_span = self._permissions_field(
            job, f"jobs.{name}.permissions"
        )

        steps_node = job.get("steps")
        steps: tuple[Step, ...] = ()
        if steps_node is not None and not isinstance(steps_node, NullNode):
            sequence = _expect_sequence(steps_node, f"jobs.{name}.steps")
            steps = tuple(
                self._step(index, item, f"jobs.{name}.steps[{index}]")
                for index, item in enumerate(sequence.items)
            )

        return Job(
            name=name,
            key_span=key.span,
            span=node.span,
            display_name=_string(job.get("name"), f"jobs.{name}.name"),
            permissions=permissions,
            permissions_key_span=permissions_key_span,
            runs_on=self._runs_on(job.get("runs-on"), f"jobs.{name}.runs-on"),
            environment=self._environment(job.get("environment"), f"jobs.{name}.environment"),
            needs=_string_list(job.get("needs"), f"jobs.{name}.needs"),
            if_condition=_string(job.get("if"), f"jobs.{name}.if"),
            uses=_string(job.get("uses"), f"jobs.{name}.uses"),
            steps=steps,
            env=_string_map(job.get("env"), f"jobs.{name}.env"),
        )

    def _runs_on(self, node: Node | None, field: str) -> tuple[Spanned[str], ...]:
        # runs-on: label | [labels] | {group: ..., labels: ...}
        if isinstance(node, MappingNode):
            return _string_list(node.get("labels"), f"{field}.labels")
        return _string_list(node, field)

    def _environment(self, node: Node | None, field: str) -> Spanned[str] | None:
        # environment: name | {name: ..., url: ...}
        if isinstance(node, MappingNode):
            return _string(node.get("name"), f"{field}.name")
        return _string(node, field)

    def _step(self, index: int, node: Node, field: str) -> Step:
        step = _expect_mapping(node, field)
        run = step.get("run")
        run_value = _string(run, f"{field}.run")

        return Step(
            index=index,
            span=node.span,
            id=_string(step.get("id"), f"{field}.id"),
            name=_string(step.get("name"), f"{field}.name"),
            uses=_string(step.get("uses"), f"{field}.uses"),
            run=run_value,
            run_raw=run.raw if run_value is not None else None,
            shell=_string(step.get("shell"), f"{field}.shell"),
            working_directory=_string(
                step.get("working-directory"), f"{field}.working-directory"
            ),
            if_condition=_string(step.get("if"), f"{field}.if"),
            with_args=_string_map(step.get("with"), f"{field}.with"),
            env=_string_map(step.get("env"), f"{field}.env"),
        )


def parse_permissions(node: Node, field: str = "permissions") -> Permissions:
    """Resolve a ``permissions`` value into its tri-state form.

    - ``read-all`` / ``write-all`` scalars become Shorthand
    - a mapping becomes ExplicitMap (unknown scopes and levels are kept)
    - an explicit null is treated like an absent key
    """
    if isinstance(node, NullNode):
        return UNSPECIFIED

    if isinstance(node, ScalarNode):
        try:
            kind = ShorthandKind(node.value)
        except ValueError:
            raise UnexpectedShapeError(
                node.span, "'read-all', 'write-all' or a mapping", describe_node(node), field
            ) from None
        return Shorthand(kind=kind, span=node.span)

    mapping = _expect_mapping(node, field)
    entries = []
    for key, value in mapping.entries:
        level = _expect_scalar(value, f"{field}.{key.value}")
        entries.append(
            PermissionEntry(
                scope=key.value,
                level=level.value,
                scope_span=key.span,
                level_span=level.span,
            )
        )
    return ExplicitMap(entries=tuple(entries), span=mapping.span)


def _expect_mapping(node: Node, field: str) -> MappingNode:
    if not isinstance(node, MappingNode):
        raise UnexpectedShapeError(node.span, "a mapping", describe_node(node), field)
    return node


def _expect_sequence(node: Node, field: str) -> SequenceNode:
    if not isinstance(node, SequenceNode):
        raise UnexpectedShapeError(node.span, "a sequence", describe_node(node), field)
    return node


def _expect_scalar(node: Node, field: str) -> ScalarNode:
    if not isinstance(node, ScalarNode):
        raise UnexpectedShapeError(node.span, "a string", describe_node(node), field)
    return node


def _string(node: Node | None, field: str) -> Spanned[str] | None:
    if node is None or isinstance(node, NullNode):
        return None
    scalar = _expect_scalar(node, field)
    return Spanned(scalar.value, scalar.span)


def _string_list(node: Node | None, field: str) -> tuple[Spanned[str], ...]:
    """Accept a single string or a sequence of strings."""
    if node is None or isinstance(node, NullNode):
        return ()
    if isinstance(node, SequenceNode):
        return tuple(
            Spanned(item.value, item.span)
            for item in (_expect_scalar(item, f"{field}[]") for item in node.items)
        )
    scalar = _expect_scalar(node, field)
    return (Spanned(scalar.value, scalar.span),)


def _string_map(node: Node | None, field: str) -> StringMap:
    """Read a ``with``/``env`` style mapping of scalars.

    A whole-map expression (``env: ${{ fromJSON(...) }}``) has no entries.
    """
    if node is None or isinstance(node, (NullNode, ScalarNode)):
        return ()
    mapping = _expect_mapping(node, field)
    entries = []
    for key, value in mapping.entries:
        if isinstance(value, NullNode):
            entries.append((Spanned(key.value, key.span), Spanned("", value.span)))
            continue
        scalar = _expect_scalar(value, f"{field}.{key.value}")
        entries.append((Spanned(key.value, key.span), Spanned(scalar.value, scalar.span)))
    return tuple(entries)
