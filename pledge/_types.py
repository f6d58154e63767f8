"""
Core types for pledge.

Re-exports from kungfu + custom type aliases and protocols.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from collections.abc import Awaitable, Callable

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

if TYPE_CHECKING:
    from pledge._promise import Promise

# ═══════════════════════════════════════════════════════════════════════════════
# Foreign Protocol
# ═══════════════════════════════════════════════════════════════════════════════


@runtime_checkable
class Thenable[T](Protocol):
    """
    Minimal continuation-registration protocol.

    Any object with a single `then` that takes an optional success
    continuation and an optional failure continuation, and returns a new
    object of the same shape wrapping the continuation's result.
    """

    def then(
        self,
        on_fulfilled: Callable[[T], Any] | None = None,
        on_rejected: Callable[[Any], Any] | None = None,
    ) -> Thenable[Any]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Engine Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Source[T] = Promise[T] | Thenable[T]
"""Anything the builder can bind on."""

type Delayed[T] = Callable[[], Promise[T]]
"""The remaining computation from a suspension point forward."""

type Continuation[T, U] = Callable[[T], Source[U]]
"""Bind continuation: receives the success value, returns the next step."""

type Handler[U] = Callable[[Exception], Source[U]]
"""Failure continuation for try_with / catch_bind."""

type Finalizer = Callable[[], Awaitable[object] | object]
"""Cleanup for try_finally; may return an awaitable that is waited on."""

type Resolve[T] = Callable[[T], None]
type Reject = Callable[[Exception], None]

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Protocols
    "Thenable",
    # Type aliases
    "Source",
    "Delayed",
    "Continuation",
    "Handler",
    "Finalizer",
    "Resolve",
    "Reject",
)
