"""
@promise — generator syntax over the sequencing engine.

    @promise
    def checkout(cart_id: int):
        cart = yield load_cart(cart_id)          # let!
        user, stock = yield (load_user(cart.user_id), check_stock(cart))  # and!
        try:
            receipt = yield charge(user, cart)
        except PaymentDeclined:
            return None
        return receipt

    p = checkout(7)   # already running

Each `yield` is a bind: the generator resumes with the source's value, or
has the source's failure thrown in at the same line, so native
try/except/finally/with behave as they would in synchronous code.
"""

from __future__ import annotations

import inspect
from functools import wraps
from typing import Any
from collections.abc import Callable, Generator

from pledge._promise import Promise
from pledge.builder._engine import PromiseBuilder

type Step = Callable[[Any], Any]


class _Driver[T]:
    """Walks one generator through the engine, one suspension at a time."""

    __slots__ = ("_builder", "_gen")

    def __init__(self, builder: PromiseBuilder, gen: Generator[Any, Any, T]) -> None:
        self._builder = builder
        self._gen = gen

    def advance(self, resume: Step, arg: object) -> object:
        try:
            yielded = resume(arg)
        except StopIteration as stop:
            return stop.value

        try:
            if isinstance(yielded, (tuple, list)):
                source = self._builder.merge_sources_n(*yielded)
            else:
                source = self._builder.source(yielded)
        except Exception as e:
            # unbindable yield fails at the yield, like any other failure
            return self.advance(self._gen.throw, e)

        return source.then(
            lambda value: self.advance(self._gen.send, value),
            lambda error: self.advance(self._gen.throw, error),
        )


def promise(
    fn: Callable[..., Any] | None = None,
    /,
    *,
    builder: PromiseBuilder | None = None,
) -> Any:
    """
    Turn a function into one that returns a hot Promise.

    Generator functions are driven through the builder; any other return
    value is adopted (plain values fulfil, coroutines start as tasks,
    promises and thenables are followed).

    Example:
        @promise
        def total(order_id):
            order = yield fetch_order(order_id)
            return sum(line.price for line in order.lines)

        @promise(builder=PromiseBuilder(Policy().with_trace()))
        def traced():
            ...
    """
    b = builder if builder is not None else PromiseBuilder()

    def decorate(func: Callable[..., Any]) -> Callable[..., Promise[Any]]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Promise[Any]:
            def first_step() -> object:
                produced = func(*args, **kwargs)
                if inspect.isgenerator(produced):
                    return _Driver(b, produced).advance(produced.send, None)
                return produced

            return b.run(first_step)

        return wrapper

    if fn is not None:
        return decorate(fn)
    return decorate


__all__ = ("promise",)
