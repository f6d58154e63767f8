"""
Transform — success-path adapters.
"""

from __future__ import annotations

from typing import Any
from collections.abc import Callable

from pledge._promise import Promise
from pledge._types import Source
from pledge.builder import PromiseBuilder
from pledge.lift import lift

_B = PromiseBuilder()


def map[T, U](source: Source[T], f: Callable[[T], U]) -> Promise[U]:
    """
    Apply f to the success value.

    Example:
        length = P.map(L.lift("Hello"), len)   # fulfils with 5
    """
    return _B.bind(source, lambda value: lift(f(value)))


def bind[T, U](source: Source[T], f: Callable[[T], Source[U]]) -> Promise[U]:
    """Pipeline form of the builder's bind."""
    return _B.bind(source, f)


def tap[T](source: Source[T], f: Callable[[T], Any]) -> Promise[T]:
    """
    Run f for its effect, pass the original value through.

    If f raises, the rejection replaces the original success.
    """

    def effect(value: T) -> Promise[T]:
        f(value)
        return lift(value)

    return _B.bind(source, effect)


def iter[T](source: Source[T], f: Callable[[T], Any]) -> Promise[None]:
    """Run f on the success value, discard its result."""

    def effect(value: T) -> Promise[None]:
        f(value)
        return _B.zero()

    return _B.bind(source, effect)


__all__ = ("map", "bind", "tap", "iter")
