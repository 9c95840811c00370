"""Exceptions raised by the read model.

All of them are ``ValueError`` subclasses: they signal bad input, never a
transient condition, and are not retried anywhere in this package.
"""

from __future__ import annotations

from typing import Any, Optional


class ReadModelError(ValueError):
    """Base class for read model failures."""


class InvalidReadError(ReadModelError):
    """Raised when a record cannot be turned into a read.

    The original exception (if any) is chained as ``__cause__``.
    """

    def __init__(self, message: str, record: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.record = record

    def __reduce__(self):
        # keep the record when crossing process boundaries
        return (self.__class__, (self.message, self.record))


class NotAlignedError(ReadModelError):
    """Raised by alignment-only queries on an unaligned read."""


class MissingAnnotationError(ReadModelError):
    """Raised when a read carries no mismatch (MD) annotation."""


class MissingReferenceLocationError(ReadModelError):
    """Raised when a residue has no reference coordinate."""


class UnexpectedBaseError(ReadModelError):
    """Raised for base characters outside A/C/G/T/N."""
