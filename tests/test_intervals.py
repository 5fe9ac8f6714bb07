"""Tests for the exponential interval policies"""

from __future__ import annotations

import random
from datetime import timedelta

import pytest

from backstep.domain.config import IntervalsConfig
from backstep.domain.errors import SeedError
from backstep.domain.tries import MAX_ITERATION
from backstep.infrastructure.intervals import (
    Exponential,
    ExponentialJitter,
    Intervals,
    IntervalsFactory,
    default_binary_exponential,
    default_binary_exponential_jitter,
)
from backstep.infrastructure.intervals import jitter as jitter_module

ms = lambda n: timedelta(milliseconds=n)  # noqa: E731

DEFAULT_CASES = [
    pytest.param(0, ms(0), ms(500), id="initial"),
    pytest.param(1, ms(500), ms(1000), id="1"),
    pytest.param(2, ms(1000), ms(2000), id="2"),
    pytest.param(3, ms(2000), ms(4000), id="3"),
    pytest.param(4, ms(4000), ms(8000), id="4"),
    pytest.param(5, ms(8000), ms(16000), id="5"),
    pytest.param(6, ms(16000), ms(20000), id="6"),
    pytest.param(7, ms(20000), ms(20000), id="7"),
    pytest.param(0, ms(500), ms(500), id="i=0 is always initial value"),
    pytest.param(MAX_ITERATION, ms(0), ms(20000), id="i=max is always max"),
]


class TestDefaultBinaryExponential:
    """Tests for default_binary_exponential"""

    @pytest.mark.parametrize("i,last,want", DEFAULT_CASES)
    def test_next_follows_series(self, i, last, want):
        assert default_binary_exponential().next(i, last) == want

    def test_series_from_zero_wait(self):
        """Test the series fed back through `last`"""
        intervals = default_binary_exponential()
        last = timedelta(0)
        got = []
        for i in range(8):
            last = intervals.next(i, last)
            got.append(last)
        assert got == [ms(500), ms(1000), ms(2000), ms(4000), ms(8000), ms(16000), ms(20000), ms(20000)]

    def test_non_decreasing_and_capped(self):
        intervals = default_binary_exponential()
        previous = intervals.next(0, timedelta(0))
        for i in range(1, MAX_ITERATION + 1):
            current = intervals.next(i, previous)
            assert current >= previous
            assert current <= intervals.max
            previous = current


class TestExponential:
    """Tests for custom Exponential configurations"""

    @pytest.mark.parametrize(
        "i,want",
        [(0, 1000), (1, 3000), (2, 9000), (3, 27000), (4, 30000), (5, 30000)],
    )
    def test_base3(self, i, want):
        e = Exponential(
            base=timedelta(seconds=3),
            unit=timedelta(seconds=1),
            initial=timedelta(seconds=1),
            max=timedelta(seconds=30),
        )
        assert e.next(i, ms(0)) == ms(want)

    @pytest.mark.parametrize("i", range(7))
    def test_initial_zero_is_always_zero(self, i):
        e = Exponential(
            base=timedelta(seconds=3),
            unit=timedelta(seconds=1),
            initial=timedelta(0),
            max=timedelta(seconds=30),
        )
        assert e.next(i, timedelta(0)) == timedelta(0)

    def test_last_is_ignored(self):
        e = default_binary_exponential()
        assert e.next(3, timedelta(0)) == e.next(3, timedelta(hours=1))

    def test_overflowing_power_returns_max(self):
        """Test a base large enough to overflow a float at high iterations"""
        e = Exponential(
            base=timedelta(seconds=1000),
            unit=timedelta(seconds=1),
            initial=timedelta(seconds=1),
            max=timedelta(minutes=5),
        )
        assert e.next(MAX_ITERATION, timedelta(0)) == timedelta(minutes=5)

    def test_millisecond_unit(self):
        e = Exponential(base=ms(2), unit=ms(1), initial=ms(1), max=ms(20))
        assert [e.next(i, timedelta(0)) for i in range(6)] == [ms(1), ms(2), ms(4), ms(8), ms(16), ms(20)]

    def test_base_smaller_than_unit_collapses_to_zero(self):
        """Test that base // unit truncates, so only i=0 keeps the initial wait"""
        e = Exponential(base=ms(1500), unit=timedelta(seconds=2), initial=ms(100), max=ms(1000))
        assert e.next(0, timedelta(0)) == ms(100)
        assert e.next(1, timedelta(0)) == timedelta(0)

    def test_from_config(self):
        config = IntervalsConfig(base=3, unit=1, initial=1, max=30)
        e = Exponential.from_config(config)
        assert e == Exponential(
            base=timedelta(seconds=3),
            unit=timedelta(seconds=1),
            initial=timedelta(seconds=1),
            max=timedelta(seconds=30),
        )


class TestExponentialJitter:
    """Tests for ExponentialJitter"""

    @pytest.mark.parametrize("i,last,want", DEFAULT_CASES)
    def test_next_within_jitter_of_series(self, i, last, want):
        dbej = default_binary_exponential_jitter()
        got = dbej.next(i, last)
        assert want - dbej.jitter_max <= got <= want + dbej.jitter_max

    def test_random_input_within_range(self):
        """Test 1000 random draws stay within [0, max + jitter_max]"""
        dbej = default_binary_exponential_jitter()
        min_want = timedelta(0)
        max_want = dbej.max + dbej.jitter_max

        for _ in range(1000):
            i = random.randrange(20)
            last = timedelta(microseconds=random.randrange(dbej.jitter_max // timedelta(microseconds=1)))
            got = dbej.next(i, last)
            assert min_want <= got <= max_want, f"next({i}, {last}) = {got}"

    def test_results_are_not_clamped(self):
        """Test that jitter may push a wait below initial and above max"""
        dbej = ExponentialJitter(
            exponential=Exponential(base=ms(2), unit=ms(1), initial=ms(100), max=ms(100)),
            jitter_max=ms(500),
            rand=random.Random(7),
        )
        draws = [dbej.next(0, timedelta(0)) for _ in range(200)]
        assert min(draws) < timedelta(0)
        assert max(draws) > ms(100)
        assert all(ms(-400) <= d <= ms(600) for d in draws)

    def test_zero_jitter_matches_exponential(self):
        exponential = default_binary_exponential()
        dbej = ExponentialJitter(exponential=exponential, jitter_max=timedelta(0), rand=random.Random(1))
        assert [dbej.next(i, timedelta(0)) for i in range(8)] == [exponential.next(i, timedelta(0)) for i in range(8)]

    def test_negative_jitter_max_rejected(self):
        with pytest.raises(ValueError, match="jitter_max"):
            ExponentialJitter(
                exponential=default_binary_exponential(),
                jitter_max=timedelta(milliseconds=-1),
                rand=random.Random(1),
            )

    def test_seeded_once_from_secure_source(self, monkeypatch):
        seeds = []

        def fake_randbelow(n):
            seeds.append(n)
            return 42

        monkeypatch.setattr(jitter_module.secrets, "randbelow", fake_randbelow)
        first = default_binary_exponential_jitter()
        second = default_binary_exponential_jitter()
        assert len(seeds) == 2

        # same seed, same draws, no reseeding per draw
        assert [first.next(i, timedelta(0)) for i in range(10)] == [second.next(i, timedelta(0)) for i in range(10)]
        assert len(seeds) == 2

    def test_seed_failure_raises(self, monkeypatch):
        def failing_randbelow(n):
            raise OSError("entropy source unavailable")

        monkeypatch.setattr(jitter_module.secrets, "randbelow", failing_randbelow)
        with pytest.raises(SeedError, match="entropy source unavailable"):
            default_binary_exponential_jitter()

    def test_from_config(self):
        config = IntervalsConfig(kind="exponential_jitter", jitter_max=0.25)
        dbej = ExponentialJitter.from_config(config)
        assert dbej.jitter_max == ms(250)
        assert dbej.exponential == default_binary_exponential()


class TestIntervalsFactory:
    """Tests for IntervalsFactory"""

    def test_create_default(self):
        assert IntervalsFactory.create() == default_binary_exponential()

    def test_create_jitter(self):
        policy = IntervalsFactory.create(IntervalsConfig(kind="Exponential_Jitter"))
        assert isinstance(policy, ExponentialJitter)

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown interval policy"):
            IntervalsFactory.create(IntervalsConfig(kind="fibonacci"))

    def test_register_custom_policy(self, monkeypatch):
        monkeypatch.setattr(IntervalsFactory, "POLICIES", dict(IntervalsFactory.POLICIES))

        class Constant(Intervals):
            def __init__(self, wait: timedelta):
                self.wait = wait

            @classmethod
            def from_config(cls, config: IntervalsConfig) -> "Constant":
                return cls(config.initial)

            def next(self, i: int, last: timedelta) -> timedelta:
                return self.wait

        IntervalsFactory.register("constant", Constant)
        policy = IntervalsFactory.create(IntervalsConfig(kind="constant", initial=2))
        assert policy.next(5, timedelta(0)) == timedelta(seconds=2)

    def test_register_rejects_non_policy(self):
        with pytest.raises(ValueError, match="not an Intervals subclass"):
            IntervalsFactory.register("bad", dict)
