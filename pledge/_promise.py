"""
Promise — hot, single-settlement, many-observer deferred value.

A thin shell over `asyncio.Future`: the future owns settlement and
observer ordering, the shell adds `then` and adoption of other sources.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, cast
from collections.abc import Awaitable, Callable, Generator

from kungfu import Ok, Error

from pledge._errors import PromiseCancelled, PromiseError, as_error


# ═══════════════════════════════════════════════════════════════════════════════
# Promise
# ═══════════════════════════════════════════════════════════════════════════════


class Promise[T]:
    """
    Deferred value backed by an `asyncio.Future`.

    Requires a running event loop. Settles exactly once; later settlement
    attempts are no-ops. Observers run in registration order.

    Example:
        p = lift(41).then(lambda x: x + 1)
        assert await p == 42
    """

    __slots__ = ("_future",)

    def __init__(self, future: asyncio.Future[T] | None = None) -> None:
        self._future: asyncio.Future[T] = (
            future if future is not None else asyncio.get_running_loop().create_future()
        )

    @classmethod
    def of_awaitable(cls, awaitable: Awaitable[T]) -> Promise[T]:
        """Start an awaitable right away (as a task) and wrap it."""
        return cls(asyncio.ensure_future(awaitable))

    @classmethod
    def of_source(cls, source: object) -> Promise[Any]:
        """
        Normalize anything bindable into a Promise.

        Promises pass through, awaitables start as tasks, thenables get one
        `then` registration.

        Raises:
            TypeError: source is none of those.
        """
        if isinstance(source, Promise):
            return source
        if isinstance(source, (Ok, Error)) or not (
            inspect.isawaitable(source) or callable(getattr(source, "then", None))
        ):
            raise TypeError(f"cannot bind on {type(source).__name__}")
        promise: Promise[Any] = cls()
        promise._adopt(source)
        return promise

    # ───────────────────────────────────────────────────────────────────────────
    # Settlement
    # ───────────────────────────────────────────────────────────────────────────

    def _fulfil(self, value: T) -> None:
        if not self._future.done():
            self._future.set_result(value)

    def _reject(self, error: Exception) -> None:
        if self._future.done():
            return
        if isinstance(error, StopIteration):
            # asyncio refuses StopIteration as a future exception
            wrapped = PromiseError(f"step raised {error!r}")
            wrapped.__cause__ = error
            error = wrapped
        self._future.set_exception(error)

    def _reject_reason(self, reason: object) -> None:
        self._reject(as_error(reason))

    def _adopt(self, outcome: object) -> None:
        """Settle from a plain value, or follow another source."""
        if outcome is self:
            self._reject(TypeError("promise cannot adopt itself"))
        elif isinstance(outcome, Promise):
            outcome._observe(self._fulfil, self._reject)
        elif isinstance(outcome, (Ok, Error)):
            self._fulfil(cast(T, outcome))
        elif inspect.isawaitable(outcome):
            Promise.of_awaitable(outcome)._observe(self._fulfil, self._reject)
        elif callable(getattr(outcome, "then", None)):
            try:
                outcome.then(self._adopt, self._reject_reason)  # type: ignore[attr-defined]
            except Exception as e:
                self._reject(e)
        else:
            self._fulfil(cast(T, outcome))

    def _settle_with[A](self, fn: Callable[[A], object], arg: A) -> None:
        """Run a continuation; its raise rejects, its return is adopted."""
        try:
            outcome = fn(arg)
        except Exception as e:
            self._reject(e)
        else:
            self._adopt(outcome)

    # ───────────────────────────────────────────────────────────────────────────
    # Observation
    # ───────────────────────────────────────────────────────────────────────────

    def _observe(
        self,
        on_fulfilled: Callable[[T], None],
        on_rejected: Callable[[Exception], None],
    ) -> None:
        """Register raw observers. They must not raise."""

        def callback(future: asyncio.Future[T]) -> None:
            if future.cancelled():
                on_rejected(PromiseCancelled())
                return
            error = future.exception()
            if error is None:
                on_fulfilled(future.result())
            else:
                on_rejected(as_error(error))

        self._future.add_done_callback(callback)

    def then[U](
        self,
        on_fulfilled: Callable[[T], Any] | None = None,
        on_rejected: Callable[[Exception], Any] | None = None,
    ) -> Promise[U]:
        """
        Register continuations, get a promise of their outcome.

        A missing continuation passes the settlement through. Whatever a
        continuation returns is adopted: plain values fulfil, promises,
        thenables and awaitables are followed, a raise rejects.
        """
        child: Promise[U] = Promise(self._future.get_loop().create_future())

        def fulfilled(value: T) -> None:
            if on_fulfilled is None:
                child._fulfil(cast(U, value))
            else:
                child._settle_with(on_fulfilled, value)

        def rejected(error: Exception) -> None:
            if on_rejected is None:
                child._reject(error)
            else:
                child._settle_with(on_rejected, error)

        self._observe(fulfilled, rejected)
        return child

    # ───────────────────────────────────────────────────────────────────────────
    # Introspection
    # ───────────────────────────────────────────────────────────────────────────

    def done(self) -> bool:
        return self._future.done()

    @property
    def is_fulfilled(self) -> bool:
        f = self._future
        return f.done() and not f.cancelled() and f.exception() is None

    @property
    def is_rejected(self) -> bool:
        f = self._future
        return f.done() and (f.cancelled() or f.exception() is not None)

    def __await__(self) -> Generator[Any, None, T]:
        future = self._future
        if not future.done():
            # a private waiter: cancelling the awaiting task leaves the promise alone
            waiter = future.get_loop().create_future()

            def wake(_: asyncio.Future[T]) -> None:
                if not waiter.done():
                    waiter.set_result(None)

            future.add_done_callback(wake)
            try:
                yield from waiter.__await__()
            finally:
                future.remove_done_callback(wake)
        if future.cancelled():
            raise PromiseCancelled()
        return future.result()

    def __repr__(self) -> str:
        if not self._future.done():
            state = "pending"
        elif self.is_fulfilled:
            state = f"fulfilled={self._future.result()!r}"
        else:
            state = "rejected"
        return f"<Promise {state}>"


__all__ = ("Promise",)
