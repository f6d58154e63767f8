"""
Applicative merge — join independently started promises.

Inputs are already running when they reach the merge, so their work
overlaps; the merge only waits. Output order is input order, whatever
order the inputs settle in. The first failure settles the merge; later
outcomes are observed and dropped.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, cast

from pledge._policy import DEFAULT, Policy
from pledge._promise import Promise
from pledge._types import Source

logger = logging.getLogger(__name__)


def merge_sources_n(
    *sources: Source[Any],
    policy: Policy = DEFAULT,
) -> Promise[tuple[Any, ...]]:
    """
    Tuple of all successes, in declaration order.

    Example:
        a, b, c = await merge_sources_n(fetch_a(), fetch_b(), fetch_c())
    """
    inputs = [Promise.of_source(s) for s in sources]
    merged: Promise[tuple[Any, ...]] = Promise()
    if not inputs:
        merged._fulfil(())
        return merged

    values: list[Any] = [None] * len(inputs)
    remaining = len(inputs)

    def fulfilled(index: int, value: Any) -> None:
        nonlocal remaining
        values[index] = value
        remaining -= 1
        if remaining == 0:
            merged._fulfil(tuple(values))

    def rejected(error: Exception) -> None:
        if merged.done():
            policy.report(logger, "merge input", error)
        else:
            merged._reject(error)

    for index, promise in enumerate(inputs):
        promise._observe(partial(fulfilled, index), rejected)
    return merged


def merge_sources[A, B](
    a: Source[A],
    b: Source[B],
    policy: Policy = DEFAULT,
) -> Promise[tuple[A, B]]:
    """Two-way merge: `let! a = ... and! b = ...`."""
    return cast(Promise[tuple[A, B]], merge_sources_n(a, b, policy=policy))


__all__ = ("merge_sources", "merge_sources_n")
