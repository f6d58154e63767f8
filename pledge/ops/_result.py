"""
Result conversions — fold failure into kungfu's Result.

A promise produced by `result()` never rejects: downstream code matches
on Ok / Error instead of catching.
"""

from __future__ import annotations

from collections.abc import Callable

from kungfu import Result, Ok, Error

from pledge._promise import Promise
from pledge._types import Source
from pledge.builder import PromiseBuilder
from pledge.lift import lift

_B = PromiseBuilder()


def result[T](source: Source[T]) -> Promise[Result[T, Exception]]:
    """
    Ok(value) on success, Error(exception) on failure.

    Example:
        match await P.result(fetch(url)):
            case Ok(body):
                ...
            case Error(e):
                log.warning("fetch failed: %s", e)
    """
    return _B.source(source).then(Ok, Error)


def bind_result[T, U, E](
    source: Source[Result[T, E]],
    f: Callable[[T], Source[U] | U],
) -> Promise[Result[U, E]]:
    """
    Continue the Ok branch with f, whose outcome is wrapped in Ok.

    f may return a promise or a plain value. Error passes through
    untouched; f failing rejects the result.
    """

    def on_result(outcome: Result[T, E]) -> Promise[Result[U, E]]:
        match outcome:
            case Ok(value):
                return _B.run(lambda: f(value)).then(Ok)
            case Error(e):
                return lift(Error(e))

    return _B.bind(source, on_result)


def map_result[T, U, E](
    source: Source[Result[T, E]],
    f: Callable[[T], U],
) -> Promise[Result[U, E]]:
    """Transform only the Ok payload."""

    def on_result(outcome: Result[T, E]) -> Result[U, E]:
        match outcome:
            case Ok(value):
                return Ok(f(value))
            case Error(e):
                return Error(e)

    return _B.source(source).then(on_result)


def map_result_error[T, E, F](
    source: Source[Result[T, E]],
    f: Callable[[E], F],
) -> Promise[Result[T, F]]:
    """Transform only the Error payload."""

    def on_result(outcome: Result[T, E]) -> Result[T, F]:
        match outcome:
            case Ok(value):
                return Ok(value)
            case Error(e):
                return Error(f(e))

    return _B.source(source).then(on_result)


__all__ = ("result", "bind_result", "map_result", "map_result_error")
