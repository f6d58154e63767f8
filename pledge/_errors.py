"""
Errors raised by pledge itself.

Everything else a promise rejects with is the caller's exception,
propagated untouched.
"""

from __future__ import annotations


class PromiseError(Exception):
    """Base for errors produced by the library."""


class ForeignRejection(PromiseError):
    """A thenable rejected with a reason that is not an exception."""

    def __init__(self, reason: object) -> None:
        super().__init__(str(reason))
        self.reason = reason


class PromiseCancelled(PromiseError):
    """The underlying future was cancelled before it settled."""

    def __init__(self, message: str = "promise cancelled") -> None:
        super().__init__(message)


def as_error(reason: object) -> Exception:
    """Normalize any rejection reason into one failure representation."""
    if isinstance(reason, Exception):
        return reason
    return ForeignRejection(reason)


__all__ = ("PromiseError", "ForeignRejection", "PromiseCancelled", "as_error")
