"""
Concurrency — ordered collection and fire-and-forget.
"""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable, Iterable

from pledge._policy import DEFAULT, Policy
from pledge._promise import Promise
from pledge._types import Source
from pledge.builder import merge_sources_n

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# all() / parallel() — Ordered Collection
# ═══════════════════════════════════════════════════════════════════════════════


def all[T](sources: Iterable[Source[T]], policy: Policy = DEFAULT) -> Promise[list[T]]:
    """
    Wait for every source, values in input order.

    Sources must already be running; the first failure wins.

    Example:
        p1, p2, p3 = fetch(1), fetch(2), fetch(3)   # all started
        values = await P.all([p1, p2, p3])
    """
    merged = merge_sources_n(*sources, policy=policy)
    return merged.then(list)


def parallel[T](sources: Iterable[Source[T]], policy: Policy = DEFAULT) -> Promise[list[T]]:
    """Alias of all()."""
    return all(sources, policy=policy)


# ═══════════════════════════════════════════════════════════════════════════════
# start() — Fire and Forget
# ═══════════════════════════════════════════════════════════════════════════════


def start(source: Source[Any], policy: Policy = DEFAULT) -> None:
    """
    Observe source and drop its outcome.

    Does not stop or speed up the work. A failure is reported through
    logging according to policy, since nobody else will see it.
    """
    Promise.of_source(source)._observe(
        _ignore,
        lambda error: policy.report(logger, "start", error),
    )


def try_start(
    source: Source[Any],
    on_error: Callable[[Exception], object],
    policy: Policy = DEFAULT,
) -> None:
    """Fire and forget, handing a failure to on_error."""

    def failed(error: Exception) -> None:
        try:
            on_error(error)
        except Exception as e:
            policy.report(logger, "try_start handler", e)

    Promise.of_source(source)._observe(_ignore, failed)


def _ignore(_: object) -> None:
    pass


__all__ = ("all", "parallel", "start", "try_start")
