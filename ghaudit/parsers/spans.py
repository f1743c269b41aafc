"""Source locations for parsed workflow values.

A Span always describes text that literally exists in the input. Offsets and
lengths are UTF-8 byte counts; lines and columns are 1-based, columns counted
in characters.
"""

from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Span:
    """Location of a value in the original document."""

    offset: int
    line: int
    column: int
    length: int

    @property
    def end(self) -> int:
        """Byte offset one past the last covered byte."""
        return self.offset + self.length

    def slice(self, data: bytes) -> bytes:
        """Return the bytes of ``data`` covered by this span."""
        return data[self.offset : self.end]

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            "offset": self.offset,
            "line": self.line,
            "column": self.column,
            "length": self.length,
        }

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class SourceMap:
    """Converts character indices of a decoded document into Spans.

    The YAML parser reports positions as indices into the decoded text. Byte
    offsets are derived from those so that a Span can be sliced out of the raw
    input bytes.
    """

    def __init__(self, text: str):
        self.text = text
        self._ascii = text.isascii()
        self._line_starts = [0]
        self._line_byte_starts = [0]
        for line in text.split("\n")[:-1]:
            self._line_starts.append(self._line_starts[-1] + len(line) + 1)
            self._line_byte_starts.append(
                self._line_byte_starts[-1] + len(line.encode("utf-8")) + 1
            )

    def byte_offset(self, index: int) -> int:
        """Byte offset of character ``index``."""
        if self._ascii:
            return index
        line_index = bisect_right(self._line_starts, index) - 1
        line_start = self._line_starts[line_index]
        return self._line_byte_starts[line_index] + len(
            self.text[line_start:index].encode("utf-8")
        )

    def line_column(self, index: int) -> tuple[int, int]:
        """1-based line and column of character ``index``."""
        line_index = bisect_right(self._line_starts, index) - 1
        return line_index + 1, index - self._line_starts[line_index] + 1

    def span(self, start: int, end: int) -> Span:
        """Span covering characters ``start`` (inclusive) to ``end`` (exclusive)."""
        end = max(start, min(end, len(self.text)))
        start = min(start, len(self.text))
        line, column = self.line_column(start)
        offset = self.byte_offset(start)
        return Span(
            offset=offset,
            line=line,
            column=column,
            length=self.byte_offset(end) - offset,
        )

    def raw(self, start: int, end: int) -> str:
        """Source text between two character indices."""
        return self.text[start:end]


def offset_span(base: Span, raw: str, start: int, end: int) -> Span:
    """Span of ``raw[start:end]`` where ``raw`` is the source text at ``base``.

    ``raw`` must be the literal source text beginning at ``base.offset`` (for a
    block scalar that includes its indicator line and indentation). Line and
    column are recomputed across any newlines that precede ``start``.

    Args:
        base: Span of the enclosing scalar
        raw: Source text of the enclosing scalar
        start: Character offset of the sub-string within ``raw``
        end: Character offset one past the sub-string

    Returns:
        Span of the sub-string in the original document
    """
    if not 0 <= start <= end <= len(raw):
        raise ValueError(f"sub-span {start}:{end} outside scalar of length {len(raw)}")

    newlines = raw.count("\n", 0, start)
    if newlines:
        line_start = raw.rfind("\n", 0, start) + 1
        line = base.line + newlines
        column = start - line_start + 1
    else:
        line = base.line
        column = base.column + start

    return Span(
        offset=base.offset + len(raw[:start].encode("utf-8")),
        line=line,
        column=column,
        length=len(raw[start:end].encode("utf-8")),
    )
