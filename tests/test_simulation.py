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
"""End-to-end tests for the simulation tick."""

import dataclasses
import random
from pathlib import Path
from typing import List

import pytest

from pursuit.engine.actors import CAUGHT, CHASE, PATROL, SEARCH
from pursuit.engine.arena import Arena
from pursuit.engine.config import ActorConfig, EngineConfig, FeatureToggles, SimulationConfig
from pursuit.engine.geometry import Rect, Vector2D
from pursuit.engine.simulation import FrameSnapshot, Simulation, Trail
from pursuit.utils.debug import SimulationDebugger


def _scripted(
    evader: Vector2D,
    pursuer: Vector2D,
    heading: float = 0.0,
    config: EngineConfig | None = None,
    arena: Arena | None = None,
) -> Simulation:
    """Build a simulation with fixed spawn points in an open arena."""
    return Simulation.from_arena(
        arena if arena is not None else Arena(800, 600),
        evader,
        pursuer,
        heading,
        config=config if config is not None else EngineConfig(),
        rng=random.Random(0),
    )


def _seeded(seed: int = 7) -> EngineConfig:
    """Return a default configuration with a fixed seed."""
    return EngineConfig(simulation=SimulationConfig(seed=seed))


class TestCapture:
    """Capture detection and the terminal state."""

    def test_capture_just_inside_threshold(self) -> None:
        """A separation below the sum of radii ends the round."""
        sim = _scripted(Vector2D(139.9, 300), Vector2D(100, 300))
        frame = sim.tick()
        assert frame.caught
        assert frame.pursuer.state == CAUGHT
        assert sim.events[-1].event_type == "caught"

    def test_no_capture_just_outside_threshold(self) -> None:
        """A separation just above the sum of radii does not."""
        sim = _scripted(Vector2D(140.1, 300), Vector2D(100, 300))
        frame = sim.tick()
        assert not frame.caught
        assert frame.pursuer.state == CHASE

    def test_caught_is_absorbing(self) -> None:
        """After capture nothing moves and the tick counter stops."""
        sim = _scripted(Vector2D(139.9, 300), Vector2D(100, 300))
        terminal = sim.tick()
        for _ in range(5):
            frame = sim.tick(Vector2D(1, 0))
            assert frame == terminal
        assert sim.tick_count == 1
        assert not sim.resize(1000, 700)
        assert sim.arena.width == 800

    def test_chase_ends_in_capture(self) -> None:
        """A visible, stationary evader is reached within a few ticks."""
        config = EngineConfig(actors=ActorConfig(radius=10))
        sim = _scripted(Vector2D(130, 300), Vector2D(100, 300), config=config)

        first = sim.tick()
        assert first.visible
        assert first.pursuer.state == CHASE
        assert not first.caught

        frames: List[FrameSnapshot] = [first]
        while not frames[-1].caught and len(frames) < 20:
            frames.append(sim.tick())
        assert frames[-1].caught
        assert len(frames) == 7


class TestSearchAndPatrol:
    """State transitions driven through the tick."""

    def test_search_reaches_last_seen_then_patrols(self) -> None:
        """Losing sight sends the pursuer to the last-seen point and then back to patrol."""
        sim = _scripted(Vector2D(200, 300), Vector2D(100, 300))
        assert sim.tick().pursuer.state == CHASE

        sim.evader.position = Vector2D(100, 500)
        states = []
        for _ in range(120):
            frame = sim.tick()
            states.append(frame.pursuer.state)
            if frame.pursuer.state == PATROL:
                break

        assert SEARCH in states
        assert states[-1] == PATROL
        assert frame.last_seen is None
        descriptions = [e.description for e in sim.events if e.event_type == "state_change"]
        assert descriptions[0].startswith("patrol -> chase")
        assert descriptions[1].startswith("chase -> search")
        assert descriptions[2].startswith("search -> patrol")

    def test_memory_toggle_off(self) -> None:
        """Without memory the pursuer never searches."""
        config = EngineConfig(features=FeatureToggles(last_seen_memory=False))
        sim = _scripted(Vector2D(200, 300), Vector2D(100, 300), config=config)
        sim.tick()
        sim.evader.position = Vector2D(100, 500)
        assert sim.tick().pursuer.state == PATROL

    def test_wall_hides_evader(self) -> None:
        """An evader behind a wall is not seen even when in the cone."""
        arena = Arena(800, 600, obstacles=(Rect(150, 250, 8, 100),))
        sim = _scripted(Vector2D(220, 300), Vector2D(100, 300), arena=arena)
        frame = sim.tick()
        assert not frame.visible
        assert frame.pursuer.state == PATROL

    def test_snapshot_carries_perception_breakdown(self) -> None:
        """The frame reports which visibility checks passed."""
        arena = Arena(800, 600, obstacles=(Rect(150, 250, 8, 100),))
        sim = _scripted(Vector2D(220, 300), Vector2D(100, 300), arena=arena)
        assert sim.snapshot().perception is None

        seen = sim.tick().perception
        assert seen is not None
        assert (seen.in_range, seen.in_cone, seen.line_clear) == (True, True, False)
        assert seen.distance == pytest.approx(120.0)

        sim.resize(900, 650)
        assert sim.snapshot().perception is None


class TestTrail:
    """Bounded pursuer trail."""

    def test_trail_is_capped(self) -> None:
        """Only the most recent sixty positions are kept, oldest first."""
        sim = _scripted(Vector2D(700, 500), Vector2D(100, 100), heading=3.14)
        for _ in range(100):
            frame = sim.tick()
        assert not frame.caught
        assert len(frame.trail) == 60
        assert frame.trail[-1] == (frame.pursuer.x, frame.pursuer.y)

    def test_trail_rejects_non_positive_capacity(self) -> None:
        """A trail must be able to hold at least one point."""
        with pytest.raises(ValueError):
            Trail(0)

    def test_trail_evicts_oldest(self) -> None:
        """The oldest entry is dropped first."""
        trail = Trail(2)
        for x in range(3):
            trail.append(Vector2D(x, 0))
        assert trail.points() == ((1, 0), (2, 0))
        assert len(trail) == 2


class TestWorldGeneration:
    """Arena generation, seeding and regeneration."""

    def test_same_seed_same_world(self) -> None:
        """Seeded configurations reproduce the arena and spawn points."""
        a = Simulation(config=_seeded())
        b = Simulation(config=_seeded())
        assert a.arena == b.arena
        assert a.evader.position == b.evader.position
        assert a.pursuer.position == b.pursuer.position

    def test_spawns_are_collision_free(self) -> None:
        """Both actors start clear of every obstacle."""
        for seed in range(5):
            sim = Simulation(config=_seeded(seed))
            for actor in (sim.evader, sim.pursuer):
                assert not sim.arena.collides(actor.x, actor.y, actor.radius)

    def test_obstacles_toggle_off(self) -> None:
        """Disabling obstacles yields an open arena."""
        config = EngineConfig(features=FeatureToggles(obstacles=False), simulation=SimulationConfig(seed=1))
        assert Simulation(config=config).arena.obstacles == ()

    def test_unknown_line_of_sight_mode(self) -> None:
        """Configuration errors surface at construction time."""
        config = EngineConfig(features=FeatureToggles(line_of_sight="raycast"))  # type: ignore[arg-type]
        with pytest.raises(ValueError):
            Simulation(config=config)

    def test_resize_regenerates(self) -> None:
        """A new size rebuilds the arena and respawns both actors."""
        sim = Simulation(config=_seeded())
        old_arena = sim.arena
        assert sim.resize(1000, 700)
        assert (sim.arena.width, sim.arena.height) == (1000, 700)
        assert sim.arena is not old_arena
        assert sim.events[-1].event_type == "regenerate"
        assert not sim.resize(1000, 700)

    def test_resize_is_clamped(self) -> None:
        """Sizes below the minimum are raised to it."""
        sim = Simulation(config=_seeded())
        sim.resize(50, 50)
        assert (sim.arena.width, sim.arena.height) == (200, 200)

    def test_tick_with_new_size_regenerates_first(self) -> None:
        """Passing a changed size to tick rebuilds the world before stepping."""
        sim = Simulation(config=_seeded())
        frame = sim.tick(arena_size=(900, 650))
        assert (frame.width, frame.height) == (900, 650)
        assert frame.tick == 1

    def test_config_is_not_shared(self) -> None:
        """Replacing a nested block leaves the defaults untouched."""
        base = EngineConfig()
        changed = dataclasses.replace(base, actors=ActorConfig(radius=5))
        assert base.actors.radius == 20
        assert changed.actors.radius == 5


class TestDebuggerIntegration:
    """Events reach the debugger log."""

    def test_events_are_logged(self, tmp_path: Path) -> None:
        """State changes and the capture are written to the session file."""
        debugger = SimulationDebugger(output_dir=str(tmp_path))
        config = EngineConfig(actors=ActorConfig(radius=10), simulation=SimulationConfig(trace_actors=True))
        sim = Simulation.from_arena(
            Arena(800, 600), Vector2D(130, 300), Vector2D(100, 300), config=config, debugger=debugger
        )
        for _ in range(10):
            sim.tick()
        debugger.close()

        log_text = next(tmp_path.glob("pursuit_debug_*.txt")).read_text(encoding="utf-8")
        assert "Event: state_change | Details: patrol -> chase" in log_text
        assert "Event: caught" in log_text
        assert "ACTOR_STATE" in log_text
        assert "caught" in log_text
