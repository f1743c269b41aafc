"""Tokenizer for ``${{ ... }}`` expressions embedded in workflow strings.

Expressions are not evaluated, only located. The tokenizer splits text into
alternating literal and expression tokens and records where each token sits
in the input, so callers can compute sub-spans.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

EXPRESSION_START = "${{"
EXPRESSION_END = "}}"


class TokenKind(Enum):
    """The kind of token."""

    STRING = "string"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class Token:
    """A slice of the input text.

    For expressions ``value`` is the text between the delimiters while
    ``start``/``end`` cover the delimiters too. ``terminated`` is False for an
    expression that runs to the end of the input without a closing ``}}``.
    """

    kind: TokenKind
    value: str
    start: int
    end: int
    terminated: bool = True

    @property
    def is_expression(self) -> bool:
        return self.kind is TokenKind.EXPRESSION

    @property
    def body(self) -> str:
        """Expression text without surrounding whitespace."""
        return self.value.strip()


def tokenize(text: str) -> Iterator[Token]:
    """Yield literal and expression tokens of ``text`` in order.

    A literal token is always emitted before and after every expression, even
    if empty, so ``"${{ a }}"`` gives ``STRING(""), EXPRESSION(" a "), STRING("")``.
    """
    position = 0
    while True:
        opening = text.find(EXPRESSION_START, position)
        if opening == -1:
            yield Token(TokenKind.STRING, text[position:], position, len(text))
            return

        yield Token(TokenKind.STRING, text[position:opening], position, opening)

        body_start = opening + len(EXPRESSION_START)
        closing = text.find(EXPRESSION_END, body_start)
        if closing == -1:
            # Missing end of expression: the rest of the text is the expression.
            yield Token(
                TokenKind.EXPRESSION, text[body_start:], opening, len(text), terminated=False
            )
            return

        position = closing + len(EXPRESSION_END)
        yield Token(TokenKind.EXPRESSION, text[body_start:closing], opening, position)


def expressions(text: str) -> list[Token]:
    """Return only the expression tokens of ``text``."""
    return [token for token in tokenize(text) if token.is_expression]


_CONTEXT_REFERENCE = re.compile(r"(?<![\w.-])[A-Za-z_][\w-]*(?:\.[A-Za-z_*][\w-]*|\[[^\]]*\])*")
_LITERAL = re.compile(
    r"""(?:true|false|null|-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|0x[0-9a-fA-F]+|'(?:[^']|'')*')"""
)


def is_literal(body: str) -> bool:
    """True if an expression body is a single literal (number, bool, null, string)."""
    return _LITERAL.fullmatch(body.strip()) is not None


def context_references(body: str) -> list[str]:
    """Best-effort list of context paths referenced by an expression body.

    String literals are removed first so that ``'github.token'`` inside quotes
    is not reported. Function names (``toJSON`` in ``toJSON(github)``) are
    skipped.
    """
    without_strings = re.sub(r"'(?:[^']|'')*'", "''", body)
    references = []
    for match in _CONTEXT_REFERENCE.finditer(without_strings):
        tail = without_strings[match.end() :].lstrip()
        if tail.startswith("("):
            continue
        if match.group(0) in ("true", "false", "null"):
            continue
        references.append(match.group(0))
    return references
