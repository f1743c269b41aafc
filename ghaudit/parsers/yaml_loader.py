"""Position-tracking YAML loader.

Parses a workflow document into a tree of generic nodes that keep their
source spans. Uses PyYAML's composer (``yaml.compose``) so that every node
still carries its marks, instead of ``yaml.safe_load`` which throws them away.

Guarantees:
- Mapping key order is preserved.
- Duplicate keys within one mapping are rejected, never overwritten.
- Scalars keep their raw source text next to their value; nothing is
  type-coerced, so ``"true"`` and ``true`` stay distinguishable.
- Any failure raises MalformedInputError; a partial tree is never returned.
"""

import re
from dataclasses import dataclass
from typing import Union

import yaml

from ghaudit.exceptions import MalformedInputError
from ghaudit.parsers.spans import SourceMap, Span
from ghaudit.utils.logging import logger

NULL_TAG = "tag:yaml.org,2002:null"
STR_TAG = "tag:yaml.org,2002:str"

# Nodes that aliases may add to the tree beyond the document itself.
MAX_ALIAS_EXPANSION = 100_000

# Anchor and tag properties that may precede a scalar's content.
_NODE_PROPERTIES = re.compile(r"(?:[&!]\S*\s+)+")


@dataclass(frozen=True)
class ScalarNode:
    """A scalar value with its exact source text."""

    value: str
    raw: str
    span: Span
    style: str | None = None
    tag: str = STR_TAG

    @property
    def is_plain(self) -> bool:
        """True if the scalar was written without quotes or block indicators."""
        return self.style is None


@dataclass(frozen=True)
class NullNode:
    """An explicit or implicit null (``~``, ``null`` or an empty value)."""

    raw: str
    span: Span


@dataclass(frozen=True)
class SequenceNode:
    """An ordered list of nodes."""

    items: tuple["Node", ...]
    span: Span


@dataclass(frozen=True)
class MappingNode:
    """An ordered list of (key, value) pairs with unique keys."""

    entries: tuple[tuple[ScalarNode, "Node"], ...]
    span: Span

    def keys(self) -> list[str]:
        return [key.value for key, _ in self.entries]

    def entry(self, key: str) -> tuple[ScalarNode, "Node"] | None:
        """Return the (key node, value node) pair for ``key``, if present."""
        for key_node, value in self.entries:
            if key_node.value == key:
                return key_node, value
        return None

    def get(self, key: str) -> Union["Node", None]:
        found = self.entry(key)
        return found[1] if found else None

    def __contains__(self, key: str) -> bool:
        return self.entry(key) is not None

    def __len__(self) -> int:
        return len(self.entries)


Node = ScalarNode | NullNode | SequenceNode | MappingNode


def describe_node(node: Node) -> str:
    """Short human-readable description of a node, for error messages."""
    if isinstance(node, MappingNode):
        return "a mapping"
    if isinstance(node, SequenceNode):
        return "a sequence"
    if isinstance(node, NullNode):
        return "null"
    value = node.value if len(node.value) <= 40 else node.value[:37] + "..."
    return f"scalar {value!r}"


def load(data: bytes | str) -> Node:
    """Parse one YAML document into a generic node tree.

    Args:
        data: Raw document bytes (UTF-8) or already decoded text

    Returns:
        Root node of the document; an empty document yields a NullNode

    Raises:
        MalformedInputError: On any decoding, syntax or ambiguity error
    """
    text = decode(data)
    source = SourceMap(text)

    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        message = e.problem or e.context or "invalid YAML"
        raise MalformedInputError(message, _mark_span(source, mark)) from e
    except yaml.YAMLError as e:
        raise MalformedInputError(str(e), source.span(0, 0)) from e

    if root is None:
        logger.debug("Document is empty")
        return NullNode(raw="", span=source.span(0, 0))

    return _Converter(source).convert(root)


def decode(data: bytes | str) -> str:
    """Decode UTF-8 input, reporting the first invalid byte as a span."""
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        prefix = data[: e.start]
        line = prefix.count(b"\n") + 1
        line_start = prefix.rfind(b"\n") + 1
        column = len(prefix[line_start:].decode("utf-8", errors="replace")) + 1
        span = Span(offset=e.start, line=line, column=column, length=e.end - e.start)
        raise MalformedInputError(f"input is not valid UTF-8: {e.reason}", span) from e


def _mark_span(source: SourceMap, mark) -> Span:
    if mark is None:
        return source.span(0, 0)
    return source.span(mark.index, mark.index + 1)


class _Converter:
    """Turns PyYAML's node graph into the immutable generic tree.

    An aliased node is converted once and shared by every reference to it.
    The number of nodes reached through aliases is capped at
    MAX_ALIAS_EXPANSION so nested anchors cannot blow up the tree walked by
    the model builder.
    """

    def __init__(self, source: SourceMap):
        self.source = source
        self._active: set[int] = set()
        self._converted: dict[int, tuple[Node, int]] = {}
        self._expanded = 0

    def convert(self, node: yaml.Node) -> Node:
        if id(node) in self._active:
            raise MalformedInputError("recursive alias", self._node_span(node))

        converted = self._converted.get(id(node))
        if converted is not None:
            result, size = converted
            self._expanded += size
            if self._expanded > MAX_ALIAS_EXPANSION:
                raise MalformedInputError(
                    f"aliases expand to more than {MAX_ALIAS_EXPANSION} nodes",
                    self._node_span(node),
                )
            return result

        if isinstance(node, yaml.ScalarNode):
            result, size = self._scalar(node), 1
        else:
            self._active.add(id(node))
            try:
                if isinstance(node, yaml.SequenceNode):
                    items = tuple(self.convert(item) for item in node.value)
                    result = SequenceNode(items=items, span=self._node_span(node))
                    size = 1 + sum(self._size(item) for item in node.value)
                else:
                    result = self._mapping(node)
                    size = 1 + sum(1 + self._size(value) for _, value in node.value)
            finally:
                self._active.discard(id(node))

        self._converted[id(node)] = (result, size)
        return result

    def _size(self, node: yaml.Node) -> int:
        return self._converted[id(node)][1]

    def _scalar(self, node: yaml.ScalarNode) -> ScalarNode | NullNode:
        start = node.start_mark.index
        end = node.end_mark.index
        properties = _NODE_PROPERTIES.match(self.source.text, start, end)
        if properties:
            start = properties.end()

        span = self.source.span(start, end)
        raw = self.source.raw(start, end)
        if node.tag == NULL_TAG:
            return NullNode(raw=raw, span=span)
        return ScalarNode(value=node.value, raw=raw, span=span, style=node.style, tag=node.tag)

    def _mapping(self, node: yaml.MappingNode) -> MappingNode:
        entries: list[tuple[ScalarNode, Node]] = []
        seen: dict[str, ScalarNode] = {}

        for key_node, value_node in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                raise MalformedInputError(
                    "mapping keys must be scalars", self._node_span(key_node)
                )
            key = self._scalar(key_node)
            if isinstance(key, NullNode):
                key = ScalarNode(value=key.raw, raw=key.raw, span=key.span, tag=NULL_TAG)

            first = seen.get(key.value)
            if first is not None:
                raise MalformedInputError(
                    f"duplicate key {key.value!r} (first defined at {first.span})", key.span
                )
            seen[key.value] = key
            entries.append((key, self.convert(value_node)))

        return MappingNode(entries=tuple(entries), span=self._node_span(node))

    def _node_span(self, node: yaml.Node) -> Span:
        return self.source.span(node.start_mark.index, node.end_mark.index)
