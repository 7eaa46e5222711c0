"""Exception types raised by the conversion pipeline."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "ConversionFailure",
    "DependencyError",
    "DocmorphError",
    "EmptyInputError",
    "InvalidTransitionError",
    "PackagingError",
    "UnsupportedFormatError",
    "ValidationError",
]


class DocmorphError(RuntimeError):
    """Base class for docmorph errors."""


class ValidationError(DocmorphError):
    """Raised before any conversion when inputs are unacceptable.

    ``names`` lists the offending file names when the error is about
    specific files.
    """

    def __init__(self, message: str, *, names: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.names = tuple(names)


class EmptyInputError(ValidationError):
    """Raised when single-item Markdown input is blank."""


class UnsupportedFormatError(ValidationError):
    """Raised when a file extension is outside the accepted set."""


class ConversionFailure(DocmorphError):
    """Raised when a backend fails to convert one item."""

    def __init__(self, file_name: str, message: str) -> None:
        super().__init__(f"{file_name}: {message}")
        self.file_name = file_name
        self.message = message


class PackagingError(DocmorphError):
    """Raised when the deliverable cannot be assembled."""


class DependencyError(DocmorphError):
    """Raised when a conversion backend library is unavailable."""


class InvalidTransitionError(DocmorphError):
    """Raised on an illegal batch item status change."""
