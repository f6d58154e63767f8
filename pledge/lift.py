"""
Lift — Helpers for lifting values into promises.

    from pledge import lift as L

    L.lift(42)                      # already fulfilled
    L.reject(ValueError("boom"))    # already rejected
    L.create(lambda ok, err: ok(1)) # settled by a callback
    L.sleep(100)                    # fulfils with None after 100 ms
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from collections.abc import Awaitable, Callable

from kungfu import LazyCoroResult, Result, Ok, Error

from pledge._errors import as_error
from pledge._promise import Promise
from pledge._types import Reject, Resolve

# ═══════════════════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════════════════


def lift[T](value: T) -> Promise[T]:
    """Already-fulfilled promise holding value."""
    promise: Promise[T] = Promise()
    promise._fulfil(value)
    return promise


def reject[T](error: Exception) -> Promise[T]:
    """Already-rejected promise holding error."""
    promise: Promise[T] = Promise()
    promise._reject(error)
    return promise


def create[T](executor: Callable[[Resolve[T], Reject], object]) -> Promise[T]:
    """
    Promise settled by whichever callback is invoked first.

    The executor runs immediately. Later calls to either callback are
    no-ops; an executor that raises before settling rejects the promise.

    Example:
        def executor(resolve, reject):
            loop.call_later(0.1, resolve, "done")

        p = L.create(executor)
    """
    promise: Promise[T] = Promise()
    claimed = False

    def resolve(value: T) -> None:
        nonlocal claimed
        if not claimed:
            claimed = True
            promise._adopt(value)

    def fail(error: Exception) -> None:
        nonlocal claimed
        if not claimed:
            claimed = True
            promise._reject_reason(error)

    try:
        executor(resolve, fail)
    except Exception as e:
        fail(e)
    return promise


def sleep(
    ms: float | None = None,
    *,
    duration: timedelta | None = None,
) -> Promise[None]:
    """
    Fulfil with None once the timer elapses.

    Example:
        await L.sleep(250)
        await L.sleep(duration=timedelta(seconds=1))
    """
    if duration is not None:
        seconds = duration.total_seconds()
    elif ms is not None:
        seconds = ms / 1000
    else:
        raise ValueError("Must provide ms or duration")

    promise: Promise[None] = Promise()
    asyncio.get_running_loop().call_later(max(seconds, 0), promise._fulfil, None)
    return promise


# ═══════════════════════════════════════════════════════════════════════════════
# Interop
# ═══════════════════════════════════════════════════════════════════════════════


def from_awaitable[T](awaitable: Awaitable[T]) -> Promise[T]:
    """Start a coroutine (or any awaitable) now, as a promise."""
    return Promise.of_awaitable(awaitable)


def from_result[T, E](result: Result[T, E]) -> Promise[T]:
    """Ok fulfils, Error rejects."""
    match result:
        case Ok(value):
            return lift(value)
        case Error(e):
            return reject(as_error(e))


def from_lazy[T, E](computation: LazyCoroResult[T, E]) -> Promise[T]:
    """
    Start a lazy kungfu computation hot.

    Its Error branch becomes the promise's failure.
    """

    async def _run() -> T:
        match await computation:
            case Ok(value):
                return value
            case Error(e):
                raise as_error(e)

    return Promise.of_awaitable(_run())


def to_lazy[T](promise: Promise[T]) -> LazyCoroResult[T, Exception]:
    """
    View a promise as a lazy kungfu computation.

    The promise is already running; the lazy view only observes it, so
    awaiting the view twice yields the same outcome twice.
    """

    async def _run() -> Result[T, Exception]:
        try:
            value = await promise
        except Exception as e:
            return Error(e)
        return Ok(value)

    return LazyCoroResult(_run)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "lift",
    "reject",
    "create",
    "sleep",
    "from_awaitable",
    "from_result",
    "from_lazy",
    "to_lazy",
)
