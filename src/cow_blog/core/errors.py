"""Exceptions raised by the data layer.

The data layer never maps these to responses itself; request handlers do.
"""


class BlogError(RuntimeError):
    """Base class for all data-layer failures."""


class NotFound(BlogError):
    """Raised when an update targets a missing row or a single-row fetch matches nothing."""


class ConstraintViolation(BlogError):
    """Raised when the database rejects a write on a uniqueness or foreign-key constraint."""


class ValidationFailure(BlogError):
    """Raised when malformed input reaches a persistence operation.

    Attributes:
        field: Name of the offending field, when known.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
