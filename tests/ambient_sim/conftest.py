import asyncio
import random
from typing import Callable, List

import pytest

from src.ambient_sim.config import Settings
from src.ambient_sim.domain.events import EVENT_TYPES
from src.ambient_sim.services.events.bus import EventBus


class FixedRandom(random.Random):
    """Random generator whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class EventRecorder:
    """Collects every event published on a bus, in publish order."""

    def __init__(self, bus: EventBus) -> None:
        self.events: List = []
        for event_type in EVENT_TYPES:
            bus.subscribe(event_type, self.events.append)

    def names(self) -> List[str]:
        return [event.name for event in self.events]

    def of(self, name: str) -> List:
        return [event for event in self.events if event.name == name]


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def fast_settings() -> Settings:
    return Settings(
        tick_interval_seconds=0.05,
        entity_extraction_delay_seconds=0.01,
        note_generation_delay_seconds=0.01,
        note_synthesis_delay_seconds=0.01,
        review_suggestions_delay_seconds=0.01,
        latency_scale=0.0,
        random_seed=7,
    )


@pytest.fixture
def manual_settings() -> Settings:
    """Settings whose recurring tick never fires during a test."""

    return Settings(
        tick_interval_seconds=60.0,
        entity_extraction_delay_seconds=0.01,
        note_generation_delay_seconds=0.01,
        note_synthesis_delay_seconds=0.01,
        review_suggestions_delay_seconds=0.01,
        latency_scale=0.0,
        random_seed=7,
    )


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus: EventBus) -> EventRecorder:
    return EventRecorder(bus)


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture(name="wait_until")
def wait_until_fixture():
    return wait_until


@pytest.fixture
def make_recorder():
    return EventRecorder
