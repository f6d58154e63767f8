"""
Recover — failure interception points.

These are the only places (with the Result conversions) where a failure
stops propagating.
"""

from __future__ import annotations

from collections.abc import Callable

from pledge._policy import DEFAULT, Policy
from pledge._promise import Promise
from pledge._types import Handler, Source
from pledge.builder import PromiseBuilder
from pledge.lift import lift
from pledge.ops._concurrency import start

_B = PromiseBuilder()


# ═══════════════════════════════════════════════════════════════════════════════
# catch
# ═══════════════════════════════════════════════════════════════════════════════


def catch[T, U](source: Source[T], f: Callable[[Exception], U]) -> Promise[T | U]:
    """
    Turn a failure into a success holding f(error).

    Example:
        msg = await P.catch(fetch(url), lambda e: str(e))
    """
    return _B.try_with(lambda: _B.source(source), lambda error: lift(f(error)))


def catch_bind[T, U](source: Source[T], f: Handler[U]) -> Promise[T | U]:
    """Like catch, but f returns a promise that is adopted directly."""
    return _B.try_with(lambda: _B.source(source), f)


def catch_end[T](
    source: Source[T],
    f: Callable[[Exception], object],
    policy: Policy = DEFAULT,
) -> None:
    """Fire and forget, routing a failure to f."""
    start(catch(source, f), policy=policy)


# ═══════════════════════════════════════════════════════════════════════════════
# either
# ═══════════════════════════════════════════════════════════════════════════════


def either[T, U, V](
    source: Source[T],
    on_ok: Callable[[T], U],
    on_error: Callable[[Exception], V],
) -> Promise[U | V]:
    """
    Map success through on_ok or failure through on_error.

    Both branches fulfil. on_ok raising is not handed to on_error.
    """
    return _B.source(source).then(
        lambda value: lift(on_ok(value)),
        lambda error: lift(on_error(error)),
    )


def either_bind[T, U, V](
    source: Source[T],
    on_ok: Callable[[T], Source[U]],
    on_error: Callable[[Exception], Source[V]],
) -> Promise[U | V]:
    """Like either, but each branch returns a promise."""
    return _B.source(source).then(on_ok, on_error)


def either_end[T](
    source: Source[T],
    on_ok: Callable[[T], object],
    on_error: Callable[[Exception], object],
    policy: Policy = DEFAULT,
) -> None:
    """Fire and forget with both continuations."""
    start(either(source, on_ok, on_error), policy=policy)


__all__ = (
    "catch",
    "catch_bind",
    "catch_end",
    "either",
    "either_bind",
    "either_end",
)
