"""Shared test fixtures for the auid test suite."""

import pytest

from auid import clock
from auid.clock import UidGenerator


class FakeClock:
    """Manually driven clock returning Unix seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def counter_generator(fake_clock):
    """Generator with a fake clock and a counter discriminator starting at 0."""
    return UidGenerator(clock=fake_clock, random_discriminator=False)


@pytest.fixture
def installed_generator(counter_generator):
    """Install counter_generator as the process-wide generator for Uid.new()."""
    clock.reset_generator(counter_generator)
    yield counter_generator
    clock.reset_generator()

