"""Tests for the ${{ }} expression tokenizer."""

import pytest

from ghaudit.parsers.expression import (
    TokenKind,
    context_references,
    expressions,
    is_literal,
    tokenize,
)


class TestTokenize:
    def test_expression_between_strings(self):
        tokens = list(tokenize("echo ${{ a }} b"))

        assert [t.kind for t in tokens] == [
            TokenKind.STRING,
            TokenKind.EXPRESSION,
            TokenKind.STRING,
        ]
        assert [t.value for t in tokens] == ["echo ", " a ", " b"]
        assert (tokens[1].start, tokens[1].end) == (5, 13)
        assert tokens[1].body == "a"

    def test_empty_strings_around_expression(self):
        tokens = list(tokenize("${{ a }}"))
        assert [t.value for t in tokens] == ["", " a ", ""]

    def test_plain_text(self):
        tokens = list(tokenize("echo hello"))
        assert len(tokens) == 1
        assert tokens[0].kind is TokenKind.STRING

    def test_unterminated_expression_runs_to_end(self):
        text = "x ${{ a"
        last = list(tokenize(text))[-1]

        assert last.is_expression
        assert not last.terminated
        assert last.end == len(text)

    def test_offsets_slice_the_delimited_text(self):
        text = "a ${{ one }} b ${{ two }}"
        found = expressions(text)

        assert [text[t.start : t.end] for t in found] == ["${{ one }}", "${{ two }}"]


class TestLiterals:
    @pytest.mark.parametrize("body", ["true", "false", "null", "42", "-1.5", "1e5", "0xff", "'text'"])
    def test_literals(self, body):
        assert is_literal(body)

    @pytest.mark.parametrize("body", ["github.sha", "'a' == 'b'", "true && false"])
    def test_non_literals(self, body):
        assert not is_literal(body)


class TestContextReferences:
    def test_simple_path(self):
        assert context_references("github.event.issue.title") == ["github.event.issue.title"]

    def test_function_names_are_skipped(self):
        assert context_references("contains(github.ref, 'refs/heads')") == ["github.ref"]

    def test_strings_are_ignored(self):
        assert context_references("format('{0} secrets.X', secrets.TOKEN)") == ["secrets.TOKEN"]

    def test_number_exponent_is_not_a_reference(self):
        assert context_references("1e5 == x") == ["x"]

    def test_index_syntax(self):
        assert context_references("secrets[matrix.name]") == ["secrets[matrix.name]"]
