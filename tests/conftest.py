"""Test configuration and fixtures."""

from __future__ import annotations

from typing import Any
from collections.abc import Callable

import pytest

from pledge import PromiseBuilder


class Boom(Exception):
    """A failure no library code raises."""


def raise_(error: Exception):
    """Raise from inside a lambda."""
    raise error


class DisposableAction:
    """Calls f on dispose(); the plainest disposable shape."""

    def __init__(self, f: Callable[[], object]) -> None:
        self._f = f

    def dispose(self) -> None:
        self._f()


class FakeThenable:
    """
    A foreign promise-like that only knows `then`.

    Settled at construction, calls continuations synchronously.
    """

    def __init__(self, value: Any = None, reason: Any = None, failed: bool = False) -> None:
        self.value = value
        self.reason = reason
        self.failed = failed
        self.then_calls = 0

    def then(
        self,
        on_fulfilled: Callable[[Any], Any] | None = None,
        on_rejected: Callable[[Any], Any] | None = None,
    ) -> FakeThenable:
        self.then_calls += 1
        if not self.failed:
            if on_fulfilled is None:
                return self
            return FakeThenable(on_fulfilled(self.value))
        if on_rejected is None:
            return self
        return FakeThenable(on_rejected(self.reason))


@pytest.fixture
def engine() -> PromiseBuilder:
    """Provide a builder with the default policy."""
    return PromiseBuilder()


@pytest.fixture
def trail() -> list[str]:
    """Provide an ordered record of side effects."""
    return []
