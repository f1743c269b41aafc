"""Tests for spans and the coordinate transform."""

import pytest

from ghaudit.parsers.spans import SourceMap, Span, offset_span


class TestSourceMap:
    def test_ascii_span(self):
        source = SourceMap("a: b\nc: d\n")
        span = source.span(5, 6)
        assert span == Span(offset=5, line=2, column=1, length=1)

    def test_non_ascii_uses_byte_offsets(self):
        text = "é: x\n"
        source = SourceMap(text)
        span = source.span(3, 4)

        assert span.line == 1
        assert span.column == 4
        assert span.offset == 4
        assert span.slice(text.encode("utf-8")) == b"x"

    def test_byte_offsets_after_multibyte_lines(self):
        text = "name: café\nenv:\n  A: ü€\n  B: x\n"
        source = SourceMap(text)
        index = text.index("B")
        span = source.span(index, index + 1)

        assert (span.line, span.column) == (4, 3)
        assert span.offset == len(text[:index].encode("utf-8"))
        assert span.slice(text.encode("utf-8")) == b"B"

    def test_span_is_clamped_to_text(self):
        source = SourceMap("abc")
        span = source.span(2, 10)
        assert span.end == 3

    def test_str_is_line_and_column(self):
        assert str(Span(offset=0, line=3, column=7, length=1)) == "3:7"


class TestOffsetSpan:
    def test_single_line(self):
        base = Span(offset=10, line=3, column=7, length=20)
        raw = 'echo "${{ x }}"'

        span = offset_span(base, raw, 6, 14)

        assert span == Span(offset=16, line=3, column=13, length=8)

    def test_across_newlines(self):
        base = Span(offset=50, line=4, column=10, length=18)
        raw = "|\n  echo ${{ a }}\n"
        start = raw.index("${{")

        span = offset_span(base, raw, start, start + len("${{ a }}"))

        assert span.line == 5
        assert span.column == 8
        assert span.offset == 50 + start
        assert span.length == 8

    def test_multibyte_prefix(self):
        base = Span(offset=0, line=1, column=1, length=0)
        raw = "é ${{ a }}"

        span = offset_span(base, raw, 2, len(raw))

        assert span.offset == 3
        assert span.column == 3
        assert span.slice(raw.encode("utf-8")) == b"${{ a }}"

    def test_out_of_range(self):
        base = Span(offset=0, line=1, column=1, length=3)
        with pytest.raises(ValueError):
            offset_span(base, "abc", 2, 5)
