"""
Thenable — conversion boundary to and from foreign promise-likes.

    from pledge import thenable as TH

    p = TH.of_thenable(js_style_object)   # Promise view
    t = TH.to_thenable(p)                 # Thenable view

A foreign thenable is any object with `then(on_fulfilled?, on_rejected?)`
returning an object of the same shape. Conversion never re-executes the
underlying work and adds no buffering.
"""

from __future__ import annotations

from typing import TypeGuard, cast

from kungfu import Ok, Error

from pledge._promise import Promise
from pledge._types import Source, Thenable


def is_thenable(obj: object) -> TypeGuard[Thenable[object]]:
    """True for anything exposing a callable `then` (Results excluded)."""
    if isinstance(obj, (Ok, Error)):
        return False
    return callable(getattr(obj, "then", None))


def of_thenable[T](source: Source[T]) -> Promise[T]:
    """
    View a thenable as a native Promise.

    A Promise is returned as is. Anything else gets exactly one `then`
    registration feeding a fresh Promise.

    Raises:
        TypeError: source does not follow the protocol.
    """
    if isinstance(source, Promise):
        return source
    if not is_thenable(source):
        raise TypeError(f"{type(source).__name__} is not a thenable")
    target: Promise[T] = Promise()
    target._adopt(source)
    return target


def to_thenable[T](promise: Promise[T]) -> Thenable[T]:
    """A Promise already satisfies the protocol: pure reinterpretation."""
    return cast(Thenable[T], promise)


__all__ = ("is_thenable", "of_thenable", "to_thenable")
