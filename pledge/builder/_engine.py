"""
Sequencing engine — the builder core.

Every surface form (explicit calls, the @promise generator sugar, the
combinators) reduces to the operations here. Each `bind` boundary is a
suspension point: the continuation runs from the event loop once the
source settles, so chains of any length never grow the call stack.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, cast
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Iterator

from pledge._policy import DEFAULT, Policy
from pledge._promise import Promise
from pledge._types import Continuation, Delayed, Finalizer, Handler, Source
from pledge.builder._merge import merge_sources, merge_sources_n
from pledge.lift import lift, reject
from pledge.thenable import is_thenable

logger = logging.getLogger(__name__)

_EXHAUSTED = object()


# ═══════════════════════════════════════════════════════════════════════════════
# PromiseBuilder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PromiseBuilder:
    """
    Builder for composed promise computations.

    Stateless apart from its policy; one instance can drive any number
    of computations.

    Example:
        B = PromiseBuilder()

        p = B.run(B.delay(lambda: B.bind(
            fetch_user(uid),
            lambda user: B.return_(user.name),
        )))
    """

    policy: Policy = field(default=DEFAULT)

    # ───────────────────────────────────────────────────────────────────────────
    # Entry / exit
    # ───────────────────────────────────────────────────────────────────────────

    def delay[T](self, thunk: Delayed[T]) -> Delayed[T]:
        """Hold construction of the inner computation until run."""
        return thunk

    def run[T](self, delayed: Delayed[T]) -> Promise[T]:
        """
        Start the delayed computation now and return its promise.

        A synchronous raise inside the first step becomes a rejection.
        """
        if self.policy.trace:
            logger.debug("run %s", getattr(delayed, "__qualname__", delayed))
        try:
            outcome = delayed()
        except Exception as e:
            return reject(e)
        if isinstance(outcome, Promise):
            return outcome
        promise: Promise[T] = Promise()
        promise._adopt(outcome)
        return promise

    def source[T](self, value: Source[T]) -> Promise[T]:
        """Normalize a bindable value into a native Promise."""
        return Promise.of_source(value)

    def zero(self) -> Promise[None]:
        return lift(None)

    def return_[T](self, value: T) -> Promise[T]:
        return lift(value)

    def return_from[T](self, source: Source[T]) -> Promise[T]:
        return self.source(source)

    # ───────────────────────────────────────────────────────────────────────────
    # Sequencing
    # ───────────────────────────────────────────────────────────────────────────

    def bind[T, U](
        self,
        source: Source[T],
        continuation: Continuation[T, U],
    ) -> Promise[U]:
        """
        Feed the source's value into the continuation.

        Failure short-circuits: the continuation is skipped and the same
        error propagates. A continuation that raises rejects the result.
        """
        return self.source(source).then(continuation)

    def combine[T](self, first: Source[object], second: Delayed[T]) -> Promise[T]:
        """Run first for its effect, then second."""
        return self.bind(first, lambda _: second())

    # ───────────────────────────────────────────────────────────────────────────
    # Exception handling
    # ───────────────────────────────────────────────────────────────────────────

    def try_with[T, U](self, body: Delayed[T], handler: Handler[U]) -> Promise[T | U]:
        """Replace a failure of body by whatever handler produces."""
        started = self.run(body)
        return started.then(None, handler)

    def try_finally[T](self, body: Delayed[T], finalizer: Finalizer) -> Promise[T]:
        """
        Run finalizer after body settles, whatever the outcome.

        A failing finalizer supersedes body's outcome, success included.
        """
        started = self.run(body)

        def on_fulfilled(value: T) -> Promise[T]:
            return self._finalize(finalizer, "success").then(lambda _: value)

        def on_rejected(error: Exception) -> Promise[T]:
            return self._finalize(finalizer, error).then(lambda _: reject(error))

        return started.then(on_fulfilled, on_rejected)

    def _finalize(self, finalizer: Finalizer, pending: object) -> Promise[object]:
        finished: Promise[object] = Promise()
        finished._settle_with(lambda _: finalizer(), None)

        def superseded(error: Exception) -> Promise[object]:
            logger.debug("finalizer failed with %r, superseding %r", error, pending)
            return reject(error)

        return finished.then(None, superseded)

    def using[R, T](
        self,
        resource: R | Source[R],
        body: Callable[[Any], Source[T]],
    ) -> Promise[T]:
        """
        Scope a disposable resource around body.

        The resource (or the source resolving to it) is entered, handed to
        body, and released exactly once after body settles. Context
        managers are exited with body's exception info; their return value
        does not suppress the failure.
        """
        if isinstance(resource, Promise) or is_thenable(resource):
            return self.bind(resource, lambda r: self.using(r, body))

        scope = _Scope(resource)
        return self.bind(
            scope.enter(),
            lambda entered: self.try_finally(
                lambda: self.run(lambda: body(entered)).then(None, scope.fail),
                scope.exit,
            ),
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Iteration
    # ───────────────────────────────────────────────────────────────────────────

    def for_[T](
        self,
        source: Iterable[T] | AsyncIterable[T] | Source[T],
        body: Callable[[T], Source[object]],
    ) -> Promise[None]:
        """
        Run body for each element, one at a time.

        Element i+1's step is not built until element i's step settled
        successfully. The first failure aborts the loop.

        A single promise or thenable is a one-element source: its value
        is bound into body.
        """
        if isinstance(source, Promise) or is_thenable(source):
            return self.bind(
                source,
                lambda value: self.combine(self.run(lambda: body(value)), self.zero),
            )
        if isinstance(source, AsyncIterable):
            return self.run(lambda: self._for_async(aiter(source), body))
        return self.run(lambda: self._for_sync(iter(source), body))

    def _for_sync[T](
        self,
        iterator: Iterator[T],
        body: Callable[[T], Source[object]],
    ) -> Promise[None]:
        item = next(iterator, _EXHAUSTED)
        if item is _EXHAUSTED:
            return self.zero()
        return self.bind(
            self.run(lambda: body(cast(T, item))),
            lambda _: self._for_sync(iterator, body),
        )

    def _for_async[T](
        self,
        iterator: AsyncIterator[T],
        body: Callable[[T], Source[object]],
    ) -> Promise[None]:
        pulled: Promise[Any] = Promise.of_awaitable(anext(iterator, _EXHAUSTED))

        def step(item: object) -> Promise[None]:
            if item is _EXHAUSTED:
                return self.zero()
            return self.bind(
                self.run(lambda: body(cast(T, item))),
                lambda _: self._for_async(iterator, body),
            )

        return pulled.then(step)

    def while_(
        self,
        condition: Callable[[], bool],
        body: Delayed[object],
    ) -> Promise[None]:
        """Run body while condition holds; each turn waits for the last."""

        def turn() -> Promise[None]:
            if not condition():
                return self.zero()
            return self.bind(self.run(body), lambda _: turn())

        return self.run(turn)

    # ───────────────────────────────────────────────────────────────────────────
    # Applicative merge (see _merge.py)
    # ───────────────────────────────────────────────────────────────────────────

    def merge_sources[A, B](self, a: Source[A], b: Source[B]) -> Promise[tuple[A, B]]:
        return merge_sources(a, b, policy=self.policy)

    def merge_sources_n(self, *sources: Source[Any]) -> Promise[tuple[Any, ...]]:
        return merge_sources_n(*sources, policy=self.policy)

    def and_for[T](
        self,
        sources: Iterable[Source[Any]],
        body: Callable[..., Source[T]],
    ) -> Promise[T]:
        """Bind several independently started sources into one body."""
        return self.bind(self.merge_sources_n(*sources), lambda values: body(*values))


# ═══════════════════════════════════════════════════════════════════════════════
# Disposal
# ═══════════════════════════════════════════════════════════════════════════════


class _Scope:
    """Enter/exit adapter over the shapes of disposable Python objects."""

    __slots__ = ("_resource", "_error")

    def __init__(self, resource: object) -> None:
        self._resource = resource
        self._error: Exception | None = None

    def enter(self) -> Promise[Any]:
        r = self._resource
        if hasattr(r, "__aenter__") and hasattr(r, "__aexit__"):
            return Promise.of_awaitable(r.__aenter__())  # type: ignore[union-attr]
        if hasattr(r, "__enter__") and hasattr(r, "__exit__"):
            try:
                return lift(r.__enter__())  # type: ignore[union-attr]
            except Exception as e:
                return reject(e)
        return lift(r)

    def fail(self, error: Exception) -> Promise[Any]:
        self._error = error
        return reject(error)

    def exit(self) -> object:
        r = self._resource
        err = self._error
        exc_info = (type(err), err, err.__traceback__) if err is not None else (None, None, None)
        if hasattr(r, "__aexit__"):
            return r.__aexit__(*exc_info)  # type: ignore[union-attr]
        if hasattr(r, "__exit__"):
            r.__exit__(*exc_info)  # type: ignore[union-attr]
            return None
        for name in ("dispose", "close", "aclose"):
            release = getattr(r, name, None)
            if callable(release):
                return release()
        raise TypeError(f"{type(r).__name__} has no disposal operation")


__all__ = ("PromiseBuilder",)
