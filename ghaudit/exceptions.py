"""Custom exceptions for ghaudit.

Load and model errors are fatal for a single workflow file and carry the span
needed to render a one-line diagnostic. Registry errors are programming errors
and abort startup.
"""

from ghaudit.parsers.spans import Span


class GhauditError(Exception):
    """Base class for all errors raised by ghaudit."""


class LoadError(GhauditError):
    """Raised when raw input cannot be turned into a node tree."""


class MalformedInputError(LoadError):
    """Raised when the input is not well-formed YAML or is ambiguous.

    Attributes:
        span: Best-effort location of the problem
        message: Human-readable error description
    """

    def __init__(self, message: str, span: Span):
        super().__init__(f"{span}: {message}")
        self.message = message
        self.span = span


class ModelError(GhauditError):
    """Raised when a well-formed document is not a valid workflow."""


class UnexpectedShapeError(ModelError):
    """Raised when a workflow field has the wrong structure.

    Attributes:
        span: Location of the offending value
        expected: Description of the expected shape
        found: Description of the actual shape
        field: Dotted path of the field, when known
    """

    def __init__(self, span: Span, expected: str, found: str, field: str | None = None):
        location = f" for '{field}'" if field else ""
        super().__init__(f"{span}: expected {expected}{location}, found {found}")
        self.span = span
        self.expected = expected
        self.found = found
        self.field = field


class PolicyRegistryError(GhauditError):
    """Raised when the policy registry cannot be constructed."""


class InputTooLargeError(LoadError):
    """Raised when a file exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"file is {size} bytes, larger than the {limit} byte limit")
        self.size = size
        self.limit = limit
