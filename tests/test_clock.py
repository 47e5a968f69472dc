"""Tests for the process-wide generator: counters, clock regressions, threads."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from auid import clock
from auid.clock import DISCRIMINATOR_BITS, DISCRIMINATOR_MAX, TIMESTAMP_MAX, UidGenerator
from auid.uid import Uid


class TestSameSecond:
    def test_counter_increments(self, counter_generator):
        assert counter_generator.next_parts() == (1_700_000_000, 0)
        assert counter_generator.next_parts() == (1_700_000_000, 1)
        assert counter_generator.next_parts() == (1_700_000_000, 2)

    def test_new_second_resets_counter(self, counter_generator, fake_clock):
        counter_generator.next_parts()
        counter_generator.next_parts()
        fake_clock.advance(1)
        assert counter_generator.next_parts() == (1_700_000_001, 0)

    def test_sub_second_progress_is_same_tick(self, counter_generator, fake_clock):
        counter_generator.next_parts()
        fake_clock.advance(0.4)
        assert counter_generator.next_parts() == (1_700_000_000, 1)

    def test_packed_value_layout(self, counter_generator):
        value = counter_generator.next_value()
        assert value >> DISCRIMINATOR_BITS == 1_700_000_000
        assert value & DISCRIMINATOR_MAX == 0


class TestRandomDiscriminator:
    def test_starts_in_lower_half(self, fake_clock):
        gen = UidGenerator(clock=fake_clock)
        for _ in range(50):
            fake_clock.advance(1)
            _, discriminator = gen.next_parts()
            assert 0 <= discriminator < (1 << (DISCRIMINATOR_BITS - 1))

    def test_same_second_still_counts(self, fake_clock):
        gen = UidGenerator(clock=fake_clock)
        _, first = gen.next_parts()
        _, second = gen.next_parts()
        assert second == first + 1


class TestClockRegression:
    def test_holds_last_timestamp(self, counter_generator, fake_clock):
        assert counter_generator.next_parts() == (1_700_000_000, 0)
        fake_clock.advance(-30)
        assert counter_generator.next_parts() == (1_700_000_000, 1)
        assert counter_generator.next_parts() == (1_700_000_000, 2)

    def test_values_stay_strictly_increasing(self, counter_generator, fake_clock):
        values = [counter_generator.next_value()]
        for step in [5, -3, -10, 1, 20, -20, 0]:
            fake_clock.advance(step)
            values.append(counter_generator.next_value())
        assert values == sorted(values)
        assert len(set(values)) == len(values)

    def test_regression_logged(self, counter_generator, fake_clock, caplog):
        counter_generator.next_parts()
        fake_clock.advance(-5)
        with caplog.at_level(logging.WARNING, logger="auid.clock"):
            counter_generator.next_parts()
        assert "Clock moved backwards by 5s" in caplog.text

    def test_resumes_once_clock_catches_up(self, counter_generator, fake_clock):
        counter_generator.next_parts()
        fake_clock.advance(-5)
        counter_generator.next_parts()
        fake_clock.advance(6)
        assert counter_generator.next_parts() == (1_700_000_001, 0)


class TestDiscriminatorOverflow:
    def test_borrows_next_second(self, counter_generator):
        counter_generator.next_parts()
        counter_generator._last_discriminator = DISCRIMINATOR_MAX
        assert counter_generator.next_parts() == (1_700_000_001, 0)

    def test_borrowed_second_continues_counting(self, counter_generator, fake_clock):
        counter_generator.next_parts()
        counter_generator._last_discriminator = DISCRIMINATOR_MAX
        counter_generator.next_parts()
        fake_clock.advance(1)
        assert counter_generator.next_parts() == (1_700_000_001, 1)

    def test_saturated_timestamp_never_repeats(self, caplog):
        gen = UidGenerator(clock=lambda: float(1 << 50), random_discriminator=False)
        first = gen.next_value()
        gen._last_discriminator = DISCRIMINATOR_MAX
        with caplog.at_level(logging.ERROR, logger="auid.clock"):
            with pytest.raises(OverflowError):
                gen.next_value()
        assert "Uid space exhausted" in caplog.text
        with pytest.raises(OverflowError):
            gen.next_value()
        assert gen._last_discriminator == DISCRIMINATOR_MAX
        assert first == TIMESTAMP_MAX << DISCRIMINATOR_BITS


class TestClockEdges:
    def test_epoch_offset(self, fake_clock):
        gen = UidGenerator(clock=fake_clock, epoch=1_600_000_000, random_discriminator=False)
        assert gen.next_parts() == (100_000_000, 0)

    def test_before_epoch_clamps_to_zero(self, fake_clock):
        gen = UidGenerator(clock=fake_clock, epoch=2_000_000_000, random_discriminator=False)
        assert gen.next_parts() == (0, 0)

    def test_far_future_clamps_to_field(self):
        gen = UidGenerator(clock=lambda: float(1 << 50), random_discriminator=False)
        assert gen.next_parts() == (TIMESTAMP_MAX, 0)

    def test_clock_failure_reuses_last_timestamp(self, fake_clock):
        calls = {"fail": False}

        def flaky_clock():
            if calls["fail"]:
                raise OSError("clock unavailable")
            return fake_clock()

        gen = UidGenerator(clock=flaky_clock, random_discriminator=False)
        assert gen.next_parts() == (1_700_000_000, 0)
        calls["fail"] = True
        assert gen.next_parts() == (1_700_000_000, 1)

    def test_clock_failure_before_first_read(self):
        def broken_clock():
            raise OSError("clock unavailable")

        gen = UidGenerator(clock=broken_clock, random_discriminator=False)
        assert gen.next_parts() == (0, 0)
        assert gen.next_parts() == (0, 1)


# ---------------------------------------------------------------------------
# Process-wide generator
# ---------------------------------------------------------------------------

class TestProcessGenerator:
    def test_lazily_created_once(self):
        clock.reset_generator()
        try:
            first = clock.get_generator()
            assert clock.get_generator() is first
        finally:
            clock.reset_generator()

    def test_reset_installs_generator(self, installed_generator):
        assert clock.get_generator() is installed_generator
        assert Uid.new() == Uid(1_700_000_000 << DISCRIMINATOR_BITS)

    def test_concurrent_generation_is_unique(self):
        count = 10_000
        with ThreadPoolExecutor(max_workers=16) as pool:
            uids = list(pool.map(lambda _: Uid.new(), range(count)))
        assert len(set(uids)) == count

    def test_concurrent_generation_with_fake_clock(self, installed_generator):
        count = 10_000
        with ThreadPoolExecutor(max_workers=16) as pool:
            uids = list(pool.map(lambda _: Uid.new(), range(count)))
        assert len(set(uids)) == count
        assert max(uids).discriminator == count - 1
