"""
Ops — combinators over promises.

    from pledge import ops as P

    P.map(p, len)
    P.catch(p, lambda e: str(e))
    P.either(p, on_ok, on_error)
    P.result(p)                      # never rejects: Ok / Error
    P.all([p1, p2, p3])              # input order, first failure wins
    P.start(p)                       # fire and forget

All take the source first, so they read top to bottom when nested.
"""

from pledge.ops._transform import map, bind, tap, iter
from pledge.ops._recover import (
    catch,
    catch_bind,
    catch_end,
    either,
    either_bind,
    either_end,
)
from pledge.ops._result import result, bind_result, map_result, map_result_error
from pledge.ops._concurrency import all, parallel, start, try_start

__all__ = (
    # Transform
    "map",
    "bind",
    "tap",
    "iter",
    # Recover
    "catch",
    "catch_bind",
    "catch_end",
    "either",
    "either_bind",
    "either_end",
    # Result
    "result",
    "bind_result",
    "map_result",
    "map_result_error",
    # Concurrency
    "all",
    "parallel",
    "start",
    "try_start",
)
