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
"""The simulation value and its single-step ``tick`` function.

A :class:`Simulation` owns the arena, both actors, the pursuer trail and the
terminal flag. ``tick`` runs one full step synchronously:

1. move the evader along the input intent,
2. evaluate the pursuer's perception of the evader,
3. run the pursuer state machine,
4. check the capture distance measured in step 2,
5. append the pursuer position to the trail,

and returns a read-only :class:`FrameSnapshot` for rendering. Scheduling lives
in :mod:`pursuit.engine.clock`; ``tick`` itself has no notion of time.
"""
from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional, Tuple

from pursuit.utils.debug import SimulationDebugger

from .actors import CAUGHT, Evader, Pursuer
from .arena import Arena, build_arena, place_safely
from .behaviour import PursuerBehaviour
from .config import ENGINE_CONFIG, EngineConfig
from .events import SimulationEvent
from .geometry import Rect, Vector2D
from .perception import Perception, perceive
from .steering import steer_evader


class Trail:
    """Bounded FIFO of recent pursuer positions used as a rendering aid.

    Parameters
    ----------
    capacity : int, default=60
        Maximum number of positions kept; the oldest is evicted first.

    Raises
    ------
    ValueError
        If ``capacity`` is not positive.
    """

    def __init__(self, capacity: int = 60) -> None:
        """Create an empty trail.

        Parameters
        ----------
        capacity : int
            Maximum number of positions kept.
        """
        if capacity <= 0:
            raise ValueError(f"Trail capacity must be positive, got {capacity}")
        self._points: Deque[Tuple[float, float]] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        """Return the maximum number of retained positions."""
        return self._points.maxlen or 0

    def append(self, point: Vector2D) -> None:
        """Record ``point``, evicting the oldest entry when full.

        Parameters
        ----------
        point : Vector2D
            Position to record.
        """
        self._points.append((point.x, point.y))

    def points(self) -> Tuple[Tuple[float, float], ...]:
        """Return the recorded positions, oldest first.

        Returns
        -------
        Tuple[Tuple[float, float], ...]
            Immutable copy of the trail.
        """
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(self.points())


@dataclass(frozen=True)
class ActorView:
    """Read-only rendering view of the evader.

    Parameters
    ----------
    x : float
        Horizontal coordinate.
    y : float
        Vertical coordinate.
    radius : float
        Body radius.
    """

    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class PursuerView:
    """Read-only rendering view of the pursuer and its vision cone.

    Parameters
    ----------
    x : float
        Horizontal coordinate.
    y : float
        Vertical coordinate.
    radius : float
        Body radius.
    heading : float
        Facing direction in radians.
    vision_range : float
        Length of the vision cone.
    fov_angle : float
        Full opening angle of the vision cone in radians.
    state : str
        Behavioural state at the end of the tick.
    """

    x: float
    y: float
    radius: float
    heading: float
    vision_range: float
    fov_angle: float
    state: str


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything a renderer needs to draw one frame.

    Parameters
    ----------
    tick : int
        Number of ticks executed so far.
    width : float
        Arena width.
    height : float
        Arena height.
    evader : ActorView
        Evader view.
    pursuer : PursuerView
        Pursuer view.
    visible : bool
        Result of the last visibility evaluation.
    obstacles : Tuple[Rect, ...]
        Current obstacle rectangles.
    trail : Tuple[Tuple[float, float], ...]
        Recent pursuer positions, oldest first.
    caught : bool
        Whether the simulation has ended in a capture.
    last_seen : Tuple[float, float] | None
        Point the pursuer is searching, if any.
    perception : Perception | None
        Range, cone and sight-line breakdown of the last visibility check.
    """

    tick: int
    width: float
    height: float
    evader: ActorView
    pursuer: PursuerView
    visible: bool
    obstacles: Tuple[Rect, ...]
    trail: Tuple[Tuple[float, float], ...]
    caught: bool
    last_seen: Optional[Tuple[float, float]] = None
    perception: Optional[Perception] = None


class Simulation:
    """One pursuit round: arena, evader, pursuer, trail and terminal flag.

    Parameters
    ----------
    width : float | None, optional
        Arena width; defaults to ``config.arena.width``.
    height : float | None, optional
        Arena height; defaults to ``config.arena.height``.
    config : EngineConfig | None, optional
        Engine configuration; defaults to ``ENGINE_CONFIG``.
    rng : random.Random | None, optional
        Random source; seeded from ``config.simulation.seed`` when omitted.
    debugger : SimulationDebugger | None, optional
        Debugger receiving transitions, captures and regenerations.
    arena : Arena | None, optional
        Pre-built arena used instead of a generated one; ``width`` and ``height`` are then ignored.
    """

    def __init__(
        self,
        width: Optional[float] = None,
        height: Optional[float] = None,
        config: Optional[EngineConfig] = None,
        rng: Optional[random.Random] = None,
        debugger: Optional[SimulationDebugger] = None,
        arena: Optional[Arena] = None,
    ) -> None:
        """Generate the arena and spawn both actors.

        Parameters
        ----------
        width : float | None
            Arena width; defaults to ``config.arena.width``.
        height : float | None
            Arena height; defaults to ``config.arena.height``.
        config : EngineConfig | None
            Engine configuration; defaults to ``ENGINE_CONFIG``.
        rng : random.Random | None
            Random source; seeded from ``config.simulation.seed`` when omitted.
        debugger : SimulationDebugger | None
            Debugger receiving transitions, captures and regenerations.
        arena : Arena | None
            Pre-built arena used instead of a generated one.
        """
        self.config = config if config is not None else ENGINE_CONFIG
        if self.config.features.line_of_sight not in ("exact", "sampled"):
            raise ValueError(
                f"Unknown line-of-sight mode '{self.config.features.line_of_sight}'. Known modes: exact, sampled"
            )
        self.rng = rng if rng is not None else random.Random(self.config.simulation.seed)
        self.debugger = debugger
        self.behaviour = PursuerBehaviour(
            self.config.pursuer, self.config.actors, self.config.features, self.rng, debugger
        )
        self.trail = Trail(self.config.simulation.trail_capacity)
        self.events: List[SimulationEvent] = []
        self.tick_count = 0
        self.caught = False
        self.visible = False
        self.last_perception: Optional[Perception] = None

        width = self.config.arena.width if width is None else width
        height = self.config.arena.height if height is None else height
        if arena is None:
            self.arena, self.evader, self.pursuer = self._build_world(width, height)
        else:
            self.arena = arena
            self.evader, self.pursuer = self._spawn_actors(arena)
        self._record(
            "start",
            f"Arena {self.arena.width:.0f}x{self.arena.height:.0f} with {len(self.arena.obstacles)} obstacles",
        )

    @classmethod
    def from_arena(
        cls,
        arena: Arena,
        evader_position: Vector2D,
        pursuer_position: Vector2D,
        pursuer_heading: float = 0.0,
        config: Optional[EngineConfig] = None,
        rng: Optional[random.Random] = None,
        debugger: Optional[SimulationDebugger] = None,
    ) -> "Simulation":
        """Build a simulation around a fixed arena and fixed spawn points.

        Used for scripted scenarios and tests where the random layout would get
        in the way.

        Parameters
        ----------
        arena : Arena
            Arena to use as-is.
        evader_position : Vector2D
            Evader spawn point.
        pursuer_position : Vector2D
            Pursuer spawn point.
        pursuer_heading : float, optional
            Initial pursuer heading in radians.
        config : EngineConfig | None, optional
            Engine configuration; defaults to ``ENGINE_CONFIG``.
        rng : random.Random | None, optional
            Random source for the pursuer behaviour.
        debugger : SimulationDebugger | None, optional
            Debugger receiving simulation events.

        Returns
        -------
        Simulation
            Simulation whose arena and actors match the arguments.
        """
        sim = cls(config=config, rng=rng, debugger=debugger, arena=arena)
        sim.evader = sim._make_evader(evader_position)
        sim.pursuer = sim._make_pursuer(pursuer_position, pursuer_heading)
        return sim

    # --- world construction --------------------------------------------------------
    def _make_evader(self, position: Vector2D) -> Evader:
        """Create an evader at ``position``.

        Parameters
        ----------
        position : Vector2D
            Spawn point.

        Returns
        -------
        Evader
            Fresh evader using the configured radius.
        """
        return Evader(position=position, radius=self.config.actors.radius)

    def _make_pursuer(self, position: Vector2D, heading: float = 0.0) -> Pursuer:
        """Create a patrolling pursuer at ``position``.

        Parameters
        ----------
        position : Vector2D
            Spawn point.
        heading : float
            Initial heading in radians.

        Returns
        -------
        Pursuer
            Fresh pursuer with empty memory.
        """
        return Pursuer(
            position=position,
            radius=self.config.actors.radius,
            heading=heading,
            direction=Vector2D.from_angle(heading),
            patrol_timer=self.config.pursuer.initial_patrol_timer,
        )

    def _build_world(self, width: float, height: float) -> Tuple[Arena, Evader, Pursuer]:
        """Generate a new arena and spawn both actors inside it.

        Parameters
        ----------
        width : float
            Requested arena width.
        height : float
            Requested arena height.

        Returns
        -------
        Tuple[Arena, Evader, Pursuer]
            Complete replacement world.
        """
        arena = build_arena(width, height, self.config, self.rng, self.debugger)
        evader, pursuer = self._spawn_actors(arena)
        return arena, evader, pursuer

    def _spawn_actors(self, arena: Arena) -> Tuple[Evader, Pursuer]:
        """Place a fresh evader and pursuer at collision-free points of ``arena``.

        Parameters
        ----------
        arena : Arena
            Arena to spawn into.

        Returns
        -------
        Tuple[Evader, Pursuer]
            Newly created actors.
        """
        radius = self.config.actors.radius
        arena_cfg = self.config.arena
        positions = [
            place_safely(
                arena.width,
                arena.height,
                radius,
                arena.obstacles,
                rng=self.rng,
                margin=arena_cfg.spawn_margin,
                attempts=arena_cfg.spawn_attempts,
                debugger=self.debugger,
            )
            for _ in range(2)
        ]
        return self._make_evader(positions[0]), self._make_pursuer(positions[1])

    def resize(self, width: float, height: float) -> bool:
        """Regenerate the arena and respawn both actors for a new size.

        The replacement world is built completely before it is swapped in, so
        readers never see a half-built arena. Requests after a capture, and
        requests that do not change the (clamped) size, are ignored.

        Parameters
        ----------
        width : float
            New arena width.
        height : float
            New arena height.

        Returns
        -------
        bool
            ``True`` when the world was regenerated.
        """
        min_dim = self.config.arena.min_dimension
        width, height = max(min_dim, width), max(min_dim, height)
        if self.caught:
            if self.debugger:
                self.debugger.log_event(self.tick_count, "resize_ignored", "Simulation already finished")
            return False
        if width == self.arena.width and height == self.arena.height:
            return False

        arena, evader, pursuer = self._build_world(width, height)
        self.arena, self.evader, self.pursuer = arena, evader, pursuer
        self.visible = False
        self.last_perception = None
        self._record("regenerate", f"Arena resized to {width:.0f}x{height:.0f} with {len(arena.obstacles)} obstacles")
        return True

    # --- stepping ------------------------------------------------------------------
    def tick(self, intent: Optional[Vector2D] = None, arena_size: Optional[Tuple[float, float]] = None) -> FrameSnapshot:
        """Advance the simulation by one step.

        Once the pursuer has caught the evader every further call returns the
        terminal snapshot without changing anything.

        Parameters
        ----------
        intent : Vector2D | None, optional
            Evader directional intent; zero when omitted.
        arena_size : Tuple[float, float] | None, optional
            Current arena dimensions; a change regenerates the world first.

        Returns
        -------
        FrameSnapshot
            State after the step.
        """
        if self.caught:
            return self.snapshot()
        if arena_size is not None:
            self.resize(*arena_size)

        cfg = self.config
        self.tick_count += 1
        self.behaviour.tick = self.tick_count

        self._move_evader(intent if intent is not None else Vector2D(0, 0))

        perception = perceive(
            self.pursuer,
            self.evader.position,
            self.arena.obstacles,
            cfg.perception,
            cfg.features.line_of_sight,
        )
        self.last_perception = perception
        self.visible = perception.visible

        self.behaviour.update(self.pursuer, self.evader.position, self.visible, self.arena)
        for previous, current, reason in self.behaviour.drain_transitions():
            self.events.append(SimulationEvent(self.tick_count, "state_change", f"{previous} -> {current} ({reason})"))

        # Capture uses the separation measured before the pursuer moved.
        if perception.distance < self.evader.radius + self.pursuer.radius:
            self._finish(perception.distance)

        self.trail.append(self.pursuer.position)
        self._trace()
        return self.snapshot()

    def _move_evader(self, intent: Vector2D) -> None:
        """Apply the evader movement policy for this tick.

        Parameters
        ----------
        intent : Vector2D
            Raw directional intent.
        """
        steer_evader(self.evader, intent, self.config.actors.evader_speed, self.arena)

    def _finish(self, distance: float) -> None:
        """Mark the round as caught.

        Parameters
        ----------
        distance : float
            Separation that triggered the capture.
        """
        self.caught = True
        self.pursuer.state = CAUGHT
        self._record("caught", f"Evader caught at distance {distance:.2f}")

    def _record(self, event_type: str, description: str) -> None:
        """Store an event and forward it to the debugger.

        Parameters
        ----------
        event_type : str
            Event category.
        description : str
            Human-readable summary.
        """
        self.events.append(SimulationEvent(self.tick_count, event_type, description))
        if self.debugger:
            self.debugger.log_event(self.tick_count, event_type, description)

    def _trace(self) -> None:
        """Log both actor states when per-tick tracing is enabled."""
        if not (self.debugger and self.config.simulation.trace_actors):
            return
        evader, pursuer = self.evader, self.pursuer
        self.debugger.log_actor_state(self.tick_count, "evader", (evader.x, evader.y), evader.heading)
        target = (pursuer.last_seen.x, pursuer.last_seen.y) if pursuer.last_seen else None
        self.debugger.log_actor_state(
            self.tick_count, "pursuer", (pursuer.x, pursuer.y), pursuer.heading, pursuer.state, target
        )

    def snapshot(self) -> FrameSnapshot:
        """Return a read-only view of the current state.

        Returns
        -------
        FrameSnapshot
            Immutable copy suitable for handing to a renderer.
        """
        evader, pursuer = self.evader, self.pursuer
        vision = self.config.perception
        last_seen = (pursuer.last_seen.x, pursuer.last_seen.y) if pursuer.last_seen else None
        return FrameSnapshot(
            tick=self.tick_count,
            width=self.arena.width,
            height=self.arena.height,
            evader=ActorView(evader.x, evader.y, evader.radius),
            pursuer=PursuerView(
                pursuer.x,
                pursuer.y,
                pursuer.radius,
                pursuer.heading,
                vision.vision_range,
                vision.fov_angle,
                pursuer.state,
            ),
            visible=self.visible,
            obstacles=self.arena.obstacles,
            trail=self.trail.points(),
            caught=self.caught,
            last_seen=last_seen,
            perception=self.last_perception,
        )
