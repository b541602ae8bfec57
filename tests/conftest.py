"""Shared fixtures: a controllable millisecond clock and container overrides."""

import asyncio

import pytest

from core.container import container


class FakeClock:
    """Callable clock returning a settable epoch-ms value."""

    def __init__(self, start: float = 1_700_000_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def run():
    def _run(coro):
        return asyncio.run(coro)
    return _run


@pytest.fixture(autouse=True)
def _reset_container_overrides():
    yield
    container.reset_override()
