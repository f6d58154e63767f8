"""
Builder — sequential, exception-safe, scoped and parallel composition.

    from pledge import builder as B

    @B.promise
    def report(uid):
        user, orders = yield (fetch_user(uid), fetch_orders(uid))
        return render(user, orders)

Explicit form (what the sugar reduces to):

    E = B.PromiseBuilder()
    p = E.run(E.delay(lambda: E.bind(fetch_user(uid), lambda u: E.return_(u.name))))
"""

from __future__ import annotations

from pledge.builder._engine import PromiseBuilder
from pledge.builder._merge import merge_sources, merge_sources_n
from pledge.builder._sugar import promise

__all__ = (
    "PromiseBuilder",
    "merge_sources",
    "merge_sources_n",
    "promise",
)
