"""Shared fakes for the search and description tests."""

from __future__ import annotations

import asyncio

import pytest

from tourguide.providers.base import Coordinate, RawPlace, Viewport


def make_place(source_id: str, lat: float, lng: float, **kwargs) -> RawPlace:
    kwargs.setdefault("name", f"Place {source_id}")
    return RawPlace(source="fake", source_id=source_id, lat=lat, lng=lng, **kwargs)


def make_viewport(lat: float, lng: float, delta: float = 0.01) -> Viewport:
    return Viewport(center=Coordinate(lat, lng), lat_delta=delta, lng_delta=delta)


class FakeSupplier:
    """Answers searches from a queue of results; exceptions in the queue are raised."""

    provider_name = "fake"

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: list[Viewport] = []
        self.filters: list[tuple] = []

    async def search(self, viewport, category_filter):
        self.calls.append(viewport)
        self.filters.append(tuple(category_filter))
        result = self.responses.pop(0) if self.responses else []
        if isinstance(result, Exception):
            raise result
        return result


class GatedSupplier:
    """Each call blocks until its gate opens, ignoring cancellation, like a slow backend."""

    provider_name = "gated"

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: list[Viewport] = []
        self.gates: list[asyncio.Event] = []
        self.finished: list[asyncio.Event] = []

    async def search(self, viewport, category_filter):
        index = len(self.calls)
        self.calls.append(viewport)
        gate = asyncio.Event()
        done = asyncio.Event()
        self.gates.append(gate)
        self.finished.append(done)
        try:
            while not gate.is_set():
                try:
                    await gate.wait()
                except asyncio.CancelledError:
                    continue
            result = self.responses[index]
        finally:
            done.set()
        if isinstance(result, Exception):
            raise result
        return result


class FakeTextClient:
    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []
        self.temperatures: list[float] = []
        self.gate: asyncio.Event | None = None

    async def generate_text(self, prompt, temperature=0.7, *, token=None):
        self.prompts.append(prompt)
        self.temperatures.append(temperature)
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if self.replies else "A lovely place."
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def eventually():
    async def _wait(predicate, timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not reached in time")
            await asyncio.sleep(0.005)

    return _wait
