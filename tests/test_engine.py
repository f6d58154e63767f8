"""Tests for the sequencing engine, driven through explicit calls."""

from __future__ import annotations

import contextlib

import pytest

from pledge import PromiseBuilder
from pledge import lift as L

from tests.conftest import Boom, DisposableAction, raise_


# ═══════════════════════════════════════════════════════════════════════════════
# run / delay / bind / combine
# ═══════════════════════════════════════════════════════════════════════════════


async def test_run_starts_synchronously(engine: PromiseBuilder) -> None:
    trail: list[str] = []

    p = engine.run(engine.delay(lambda: (trail.append("ran"), engine.return_(1))[1]))

    assert trail == ["ran"]
    assert await p == 1


async def test_run_turns_sync_raise_into_rejection(engine: PromiseBuilder) -> None:
    p = engine.run(lambda: raise_(Boom("sync")))

    with pytest.raises(Boom, match="sync"):
        await p


async def test_bind_feeds_value(engine: PromiseBuilder) -> None:
    p = engine.bind(L.lift(20), lambda x: engine.return_(x + 22))

    assert await p == 42


async def test_bind_short_circuits_on_failure(engine: PromiseBuilder) -> None:
    called = False

    def continuation(_: object):
        nonlocal called
        called = True
        return engine.zero()

    p = engine.bind(L.reject(Boom("source")), continuation)

    with pytest.raises(Boom, match="source"):
        await p
    assert not called


async def test_bind_continuation_raise_rejects(engine: PromiseBuilder) -> None:
    p = engine.bind(L.lift(1), lambda _: raise_(Boom("continuation")))

    with pytest.raises(Boom, match="continuation"):
        await p


async def test_combine_sequences_steps(engine: PromiseBuilder, trail: list[str]) -> None:
    first = L.sleep(5).then(lambda _: trail.append("first"))
    p = engine.combine(first, lambda: (trail.append("second"), engine.return_("done"))[1])

    assert await p == "done"
    assert trail == ["first", "second"]


async def test_return_from_is_identity(engine: PromiseBuilder) -> None:
    p = L.lift(5)

    assert engine.return_from(p) is p
    assert await engine.zero() is None


# ═══════════════════════════════════════════════════════════════════════════════
# try_with / try_finally
# ═══════════════════════════════════════════════════════════════════════════════


async def test_try_with_handles_sync_failure(engine: PromiseBuilder) -> None:
    p = engine.try_with(lambda: raise_(Boom("sync")), lambda e: engine.return_(str(e)))

    assert await p == "sync"


async def test_try_with_handles_async_failure(engine: PromiseBuilder) -> None:
    body = lambda: L.sleep(5).then(lambda _: raise_(Boom("later")))
    p = engine.try_with(body, lambda e: engine.return_(f"handled {e}"))

    assert await p == "handled later"


async def test_try_with_passes_success_through(engine: PromiseBuilder) -> None:
    p = engine.try_with(lambda: L.lift(7), lambda e: engine.return_(-1))

    assert await p == 7


async def test_try_with_handler_failure_propagates(engine: PromiseBuilder) -> None:
    p = engine.try_with(lambda: L.reject(Boom("first")), lambda e: raise_(KeyError("second")))

    with pytest.raises(KeyError):
        await p


async def test_try_finally_runs_after_success(engine: PromiseBuilder, trail: list[str]) -> None:
    body = lambda: L.sleep(5).then(lambda _: (trail.append("body"), 1)[1])
    p = engine.try_finally(body, lambda: trail.append("finally"))

    assert await p == 1
    assert trail == ["body", "finally"]


async def test_try_finally_keeps_body_failure(engine: PromiseBuilder, trail: list[str]) -> None:
    p = engine.try_finally(lambda: L.reject(Boom("body")), lambda: trail.append("finally"))

    with pytest.raises(Boom, match="body"):
        await p
    assert trail == ["finally"]


async def test_finalizer_failure_supersedes_success(engine: PromiseBuilder) -> None:
    p = engine.try_finally(lambda: L.lift(1), lambda: raise_(Boom("finalizer")))

    with pytest.raises(Boom, match="finalizer"):
        await p


async def test_finalizer_failure_supersedes_body_failure(engine: PromiseBuilder) -> None:
    p = engine.try_finally(lambda: L.reject(KeyError("body")), lambda: raise_(Boom("finalizer")))

    with pytest.raises(Boom, match="finalizer"):
        await p


async def test_async_finalizer_completes_before_settlement(
    engine: PromiseBuilder,
    trail: list[str],
) -> None:
    async def cleanup() -> None:
        await L.sleep(10)
        trail.append("cleaned")

    p = engine.try_finally(lambda: L.lift("value"), cleanup)

    assert await p == "value"
    assert trail == ["cleaned"]


# ═══════════════════════════════════════════════════════════════════════════════
# using
# ═══════════════════════════════════════════════════════════════════════════════


async def test_using_disposes_after_body(engine: PromiseBuilder) -> None:
    disposed = False
    seen_before_dispose = None

    def body(resource: DisposableAction):
        nonlocal seen_before_dispose
        seen_before_dispose = disposed
        return L.sleep(5)

    def dispose() -> None:
        nonlocal disposed
        disposed = True

    await engine.using(L.lift(DisposableAction(dispose)), body)

    assert seen_before_dispose is False
    assert disposed is True


async def test_using_disposes_once_on_failure(engine: PromiseBuilder) -> None:
    disposals = 0

    def dispose() -> None:
        nonlocal disposals
        disposals += 1

    p = engine.using(DisposableAction(dispose), lambda _: L.reject(Boom("body")))

    with pytest.raises(Boom):
        await p
    assert disposals == 1


async def test_using_sync_context_manager(engine: PromiseBuilder, trail: list[str]) -> None:
    @contextlib.contextmanager
    def resource():
        trail.append("enter")
        try:
            yield "handle"
        finally:
            trail.append("exit")

    def body(handle: str):
        trail.append(f"body {handle}")
        return L.lift(handle.upper())

    assert await engine.using(resource(), body) == "HANDLE"
    assert trail == ["enter", "body handle", "exit"]


async def test_using_async_context_manager_sees_error(
    engine: PromiseBuilder,
    trail: list[str],
) -> None:
    @contextlib.asynccontextmanager
    async def resource():
        try:
            yield "conn"
        except Boom:
            trail.append("rollback")
            raise
        else:
            trail.append("commit")

    p = engine.using(resource(), lambda _: L.reject(Boom("body")))

    with pytest.raises(Boom):
        await p
    assert trail == ["rollback"]


async def test_using_disposal_failure_supersedes(engine: PromiseBuilder) -> None:
    def dispose() -> None:
        raise Boom("dispose")

    p = engine.using(DisposableAction(dispose), lambda _: L.lift(1))

    with pytest.raises(Boom, match="dispose"):
        await p


async def test_using_rejects_undisposable(engine: PromiseBuilder) -> None:
    with pytest.raises(TypeError):
        await engine.using(object(), lambda _: L.lift(1))


# ═══════════════════════════════════════════════════════════════════════════════
# for_ / while_
# ═══════════════════════════════════════════════════════════════════════════════


async def test_for_runs_in_order(engine: PromiseBuilder) -> None:
    total = 0
    order: list[int] = []

    def body(x: int):
        nonlocal total
        total += x
        order.append(x)
        return L.sleep(10 - 3 * x)

    await engine.for_([1, 2, 3], body)

    assert total == 6
    assert order == [1, 2, 3]


async def test_for_waits_before_building_next_step(engine: PromiseBuilder) -> None:
    pending = []

    def body(x: int):
        # the previous step must have settled before this one is built
        assert all(p.done() for p in pending)
        step = L.sleep(5)
        pending.append(step)
        return step

    await engine.for_(range(3), body)
    assert len(pending) == 3


async def test_for_aborts_on_failure(engine: PromiseBuilder) -> None:
    ran: list[int] = []

    def body(x: int):
        ran.append(x)
        if x == 2:
            return L.reject(Boom(f"at {x}"))
        return engine.zero()

    with pytest.raises(Boom, match="at 2"):
        await engine.for_([1, 2, 3, 4], body)
    assert ran == [1, 2]


async def test_for_over_empty_sequence_is_zero(engine: PromiseBuilder) -> None:
    p = engine.for_([], lambda _: pytest.fail("body must not run"))

    assert await p is None


async def test_for_over_async_iterable(engine: PromiseBuilder) -> None:
    async def numbers():
        for n in range(3):
            await L.sleep(1)
            yield n

    seen: list[int] = []
    await engine.for_(numbers(), lambda n: seen.append(n))

    assert seen == [0, 1, 2]


async def test_for_over_single_promise(engine: PromiseBuilder) -> None:
    seen: list[int] = []

    await engine.for_(L.lift(1), lambda a: seen.append(a))

    assert seen == [1]


async def test_long_for_chain_does_not_grow_the_stack(engine: PromiseBuilder) -> None:
    count = 0

    def body(_: int):
        nonlocal count
        count += 1
        return engine.zero()

    await engine.for_(range(10_000), body)
    assert count == 10_000


async def test_while_counts_up(engine: PromiseBuilder) -> None:
    result = 0

    def body():
        nonlocal result
        result += 1
        return engine.zero()

    await engine.while_(lambda: result < 10, body)
    assert result == 10


async def test_while_initially_false_is_zero(engine: PromiseBuilder) -> None:
    p = engine.while_(lambda: False, lambda: pytest.fail("body must not run"))

    assert await p is None


async def test_while_aborts_on_failure(engine: PromiseBuilder) -> None:
    turns = 0

    def body():
        nonlocal turns
        turns += 1
        if turns == 3:
            raise Boom("turn 3")
        return engine.zero()

    with pytest.raises(Boom, match="turn 3"):
        await engine.while_(lambda: True, body)
    assert turns == 3


async def test_for_over_failing_async_iterable_rejects(engine: PromiseBuilder) -> None:
    class Broken:
        def __aiter__(self):
            raise Boom("no iterator")

    p = engine.for_(Broken(), lambda _: pytest.fail("body must not run"))

    with pytest.raises(Boom, match="no iterator"):
        await p
