# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Tests for the tick scheduler and the resize debouncer."""

import random
import threading
import time
from types import SimpleNamespace
from typing import Callable, List, Optional, Tuple

import pytest

from pursuit.engine.clock import ResizeDebouncer, SimulationClock
from pursuit.engine.config import EngineConfig, SimulationConfig
from pursuit.engine.geometry import Vector2D
from pursuit.engine.simulation import Simulation


class FakeSimulation:
    """Minimal stand-in recording ticks, intents and resizes."""

    def __init__(self, catch_at: Optional[int] = None) -> None:
        """Create a fake that reports a capture on tick ``catch_at``."""
        self.catch_at = catch_at
        self.ticks = 0
        self.intents: List[Vector2D] = []
        self.resizes: List[Tuple[float, float]] = []

    def tick(self, intent: Vector2D) -> SimpleNamespace:
        """Count the tick and return a snapshot-like object."""
        self.ticks += 1
        self.intents.append(intent)
        caught = self.catch_at is not None and self.ticks >= self.catch_at
        return SimpleNamespace(tick=self.ticks, caught=caught)

    def resize(self, width: float, height: float) -> bool:
        """Record the requested size."""
        self.resizes.append((width, height))
        return True


def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestSimulationClock:
    """Scheduling and cancellation."""

    def test_rejects_non_positive_interval(self) -> None:
        """The frame interval must be positive."""
        with pytest.raises(ValueError):
            SimulationClock(FakeSimulation(), frame_interval=0)
        with pytest.raises(ValueError):
            SimulationClock(FakeSimulation(), frame_interval=-1)

    def test_run_ticks_stops_after_capture(self) -> None:
        """The synchronous runner stops on the capture frame."""
        fake = FakeSimulation(catch_at=3)
        seen: List[SimpleNamespace] = []
        frames = SimulationClock(fake, on_frame=seen.append).run_ticks(10)
        assert [f.tick for f in frames] == [1, 2, 3]
        assert frames[-1].caught
        assert seen == frames

    def test_intent_source_is_polled(self) -> None:
        """Every tick receives the current intent."""
        fake = FakeSimulation()
        SimulationClock(fake, intent_source=lambda: Vector2D(1, 0)).run_ticks(3)
        assert fake.intents == [Vector2D(1, 0)] * 3

    def test_missing_intent_source_means_standing_still(self) -> None:
        """Without an intent source the evader gets zero intent."""
        fake = FakeSimulation()
        SimulationClock(fake).run_ticks(1)
        assert fake.intents == [Vector2D(0, 0)]

    def test_single_terminal_frame(self) -> None:
        """After capture the clock delivers exactly one caught frame and stops."""
        fake = FakeSimulation(catch_at=3)
        frames: List[SimpleNamespace] = []
        handle = SimulationClock(fake, on_frame=frames.append, frame_interval=0.001).start()

        assert handle.join(timeout=2.0)
        assert fake.ticks == 3
        assert [f.caught for f in frames] == [False, False, True]
        assert not handle.is_running

    def test_cancel_stops_ticking(self) -> None:
        """No tick runs once cancel has returned."""
        fake = FakeSimulation()
        handle = SimulationClock(fake, frame_interval=0.001).start()
        assert _wait_for(lambda: fake.ticks > 2)

        handle.cancel()
        count = fake.ticks
        time.sleep(0.05)
        assert fake.ticks == count
        assert not handle.is_running
        handle.cancel()

    def test_cancel_from_frame_callback(self) -> None:
        """A callback may cancel its own clock."""
        fake = FakeSimulation()
        clock = SimulationClock(fake, frame_interval=0.001)

        def on_frame(frame: SimpleNamespace) -> None:
            if frame.tick == 2 and clock.handle is not None:
                clock.handle.cancel()

        clock.on_frame = on_frame
        handle = clock.start()
        assert handle.join(timeout=2.0)
        assert fake.ticks == 2

    def test_start_twice_rejected(self) -> None:
        """A running clock cannot be started again."""
        clock = SimulationClock(FakeSimulation(), frame_interval=0.01)
        handle = clock.start()
        try:
            with pytest.raises(RuntimeError):
                clock.start()
        finally:
            handle.cancel()

    def test_drives_real_simulation(self) -> None:
        """The clock advances a real simulation on its worker thread."""
        sim = Simulation(config=EngineConfig(simulation=SimulationConfig(seed=3)), rng=random.Random(3))
        handle = SimulationClock(sim, frame_interval=0.001).start()
        assert _wait_for(lambda: sim.tick_count >= 5 or sim.caught)
        handle.cancel()
        assert sim.tick_count >= 1


class TestResizeDebouncer:
    """Collapsing bursts of resize notifications."""

    def test_burst_collapses_to_last_size(self) -> None:
        """Several quick notifications produce a single resize with the last size."""
        fake = FakeSimulation()
        debouncer = ResizeDebouncer(fake, threading.Lock(), delay=0.05)
        debouncer.notify(900, 650)
        debouncer.notify(950, 680)
        debouncer.notify(1000, 700)

        assert _wait_for(lambda: fake.resizes != [])
        time.sleep(0.1)
        assert fake.resizes == [(1000, 700)]
        assert debouncer.pending is None

    def test_nothing_happens_before_quiescence(self) -> None:
        """The resize waits for the window to pass."""
        fake = FakeSimulation()
        debouncer = ResizeDebouncer(fake, threading.Lock(), delay=0.5)
        debouncer.notify(900, 650)
        assert fake.resizes == []
        assert debouncer.pending == (900, 650)
        debouncer.cancel()

    def test_cancel_drops_pending(self) -> None:
        """A cancelled debouncer never resizes."""
        fake = FakeSimulation()
        debouncer = ResizeDebouncer(fake, threading.Lock(), delay=0.02)
        debouncer.notify(900, 650)
        debouncer.cancel()
        time.sleep(0.1)
        assert fake.resizes == []

    def test_flush_applies_immediately(self) -> None:
        """Flushing applies the pending size to a real simulation."""
        sim = Simulation(config=EngineConfig(simulation=SimulationConfig(seed=4)))
        debouncer = ResizeDebouncer(sim, threading.Lock(), delay=5.0)
        debouncer.notify(1024, 768)
        assert debouncer.flush()
        assert (sim.arena.width, sim.arena.height) == (1024, 768)
        assert not debouncer.flush()
        debouncer.cancel()

    def test_default_window(self) -> None:
        """The default quiescence window is 150 ms."""
        debouncer = ResizeDebouncer(FakeSimulation(), threading.Lock())
        assert debouncer.delay == pytest.approx(0.15)
