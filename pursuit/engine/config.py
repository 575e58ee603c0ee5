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
"""Central configuration for engine tuning parameters."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

from .geometry import Rect

LineOfSightMode = Literal["exact", "sampled"]


@dataclass(slots=True)
class ArenaConfig:
    """Dimensions of the play area and spawn placement limits.

    Parameters
    ----------
    width : float, default=800.0
        Arena width in world units.
    height : float, default=600.0
        Arena height in world units.
    min_dimension : float, default=200.0
        Smallest width or height accepted; smaller requests are clamped up.
    spawn_padding : float, default=80.0
        Size of the corner safety zones kept clear of obstacles.
    spawn_margin : float, default=30.0
        Edge margin applied when sampling spawn positions.
    spawn_attempts : int, default=300
        Number of samples tried before the spawn placer falls back.
    """

    width: float = 800.0
    height: float = 600.0
    min_dimension: float = 200.0
    spawn_padding: float = 80.0
    spawn_margin: float = 30.0
    spawn_attempts: int = 300


@dataclass(slots=True)
class ObstacleConfig:
    """Parameters steering the rejection-sampling obstacle generator.

    Parameters
    ----------
    desired_count : int | None, default=None
        Number of obstacles to aim for; scales with the arena perimeter when ``None``.
    min_count : int, default=6
        Lower bound for the perimeter-derived obstacle count.
    count_divisor : float, default=120.0
        Divisor applied to ``width + height`` to derive the obstacle count.
    min_len_factor : float, default=0.12
        Shortest obstacle length as a fraction of the smaller arena side.
    max_len_factor : float, default=0.35
        Longest obstacle length as a fraction of the smaller arena side.
    thickness : float, default=8.0
        Fixed size of every obstacle perpendicular to its length.
    min_gap_factor : float, default=0.08
        Minimum spacing between same-orientation obstacles, as a fraction of the smaller side.
    padding : float | None, default=None
        Edge margin kept clear of obstacles; derived from the arena size when ``None``.
    padding_factor : float, default=0.06
        Fraction of the smaller side used for the derived padding.
    min_padding : float, default=20.0
        Lower bound for the derived padding.
    reserved_zones : Tuple[Rect, ...], default=()
        Extra rectangles that obstacles must never overlap.
    max_attempts_multiplier : int, default=60
        Attempts allowed per desired obstacle before the generator gives up.
    """

    desired_count: Optional[int] = None
    min_count: int = 6
    count_divisor: float = 120.0
    min_len_factor: float = 0.12
    max_len_factor: float = 0.35
    thickness: float = 8.0
    min_gap_factor: float = 0.08
    padding: Optional[float] = None
    padding_factor: float = 0.06
    min_padding: float = 20.0
    reserved_zones: Tuple[Rect, ...] = ()
    max_attempts_multiplier: int = 60

    def count_for(self, width: float, height: float) -> int:
        """Return how many obstacles the generator should try to place.

        Parameters
        ----------
        width : float
            Arena width in world units.
        height : float
            Arena height in world units.

        Returns
        -------
        int
            The explicit ``desired_count`` or the perimeter-scaled default.
        """
        if self.desired_count is not None:
            return self.desired_count
        return max(self.min_count, int((width + height) // self.count_divisor))

    def padding_for(self, width: float, height: float) -> float:
        """Return the edge margin used for an arena of the given size.

        Parameters
        ----------
        width : float
            Arena width in world units.
        height : float
            Arena height in world units.

        Returns
        -------
        float
            The explicit ``padding`` or one derived from the smaller side.
        """
        if self.padding is not None:
            return self.padding
        return max(self.min_padding, math.floor(min(width, height) * self.padding_factor))


@dataclass(slots=True)
class ActorConfig:
    """Body size and movement speed for both actors.

    Parameters
    ----------
    radius : float, default=20.0
        Collision radius shared by the evader and the pursuer.
    evader_speed : float, default=2.3
        Distance the evader covers per tick at full intent.
    pursuer_speed : float, default=1.8
        Distance the pursuer covers per tick.
    """

    radius: float = 20.0
    evader_speed: float = 2.3
    pursuer_speed: float = 1.8


@dataclass(slots=True)
class PerceptionConfig:
    """Vision cone and line-of-sight sampling parameters.

    Parameters
    ----------
    fov_angle : float, default=pi/4
        Full opening angle of the vision cone in radians.
    vision_range : float, default=150.0
        Maximum distance at which the evader can be seen.
    sample_step : float, default=4.0
        Spacing between samples for the legacy sampled line-of-sight test.
    distance_epsilon : float, default=1e-4
        Substitute distance used when the two actors coincide.
    """

    fov_angle: float = math.pi / 4
    vision_range: float = 150.0
    sample_step: float = 4.0
    distance_epsilon: float = 1e-4


@dataclass(slots=True)
class PursuerConfig:
    """Timers and steering offsets used by the pursuer state machine.

    Parameters
    ----------
    last_seen_duration : int, default=160
        Ticks spent searching the last known evader position.
    arrive_radius : float, default=12.0
        Distance from the last-seen point at which the search ends.
    patrol_interval_min : int, default=100
        Shortest interval in ticks between patrol heading changes.
    patrol_interval_max : int, default=180
        Longest interval in ticks between patrol heading changes.
    initial_patrol_timer : int, default=1
        Patrol timer value for a freshly spawned pursuer.
    probe_distance : float, default=25.0
        Look-ahead distance used to reject patrol headings facing an obstacle.
    heading_retries : int, default=12
        Resamples allowed before a blocked patrol heading is accepted.
    turn_angle : float, default=pi/12
        Rotation applied for curves and blocked patrol steps (15 degrees).
    sidestep_degrees : Tuple[float, ...], default=(15, -15, 30, -30, 60, -60)
        Offsets tried in order when the direct and curved steps are blocked.
    """

    last_seen_duration: int = 160
    arrive_radius: float = 12.0
    patrol_interval_min: int = 100
    patrol_interval_max: int = 180
    initial_patrol_timer: int = 1
    probe_distance: float = 25.0
    heading_retries: int = 12
    turn_angle: float = math.pi / 12
    sidestep_degrees: Tuple[float, ...] = (15.0, -15.0, 30.0, -30.0, 60.0, -60.0)


@dataclass(slots=True)
class FeatureToggles:
    """Switches selecting between the behavioural generations of the pursuer.

    Parameters
    ----------
    obstacles : bool, default=True
        Generate obstacles; an open arena is used when ``False``.
    last_seen_memory : bool, default=True
        Search the last known position after losing sight; patrol immediately when ``False``.
    line_of_sight : {"exact", "sampled"}, default="exact"
        Strategy used to test whether obstacles block the view.
    """

    obstacles: bool = True
    last_seen_memory: bool = True
    line_of_sight: LineOfSightMode = "exact"


@dataclass(slots=True)
class SimulationConfig:
    """Timing controls for the scheduled simulation loop.

    Parameters
    ----------
    frame_interval : float, default=1/60
        Delay between scheduled ticks in seconds.
    resize_debounce : float, default=0.15
        Quiet period in seconds before a burst of resizes regenerates the arena.
    trail_capacity : int, default=60
        Number of past pursuer positions retained for rendering.
    seed : int | None, default=None
        Seed for the simulation random source; unseeded when ``None``.
    trace_actors : bool, default=False
        Log both actor states on every tick when a debugger is attached.
    """

    frame_interval: float = 1.0 / 60.0
    resize_debounce: float = 0.15
    trail_capacity: int = 60
    seed: Optional[int] = None
    trace_actors: bool = False


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all engine tuning structures.

    Parameters
    ----------
    arena : ArenaConfig, default=ArenaConfig()
        Arena dimension and spawn configuration.
    obstacles : ObstacleConfig, default=ObstacleConfig()
        Obstacle generator parameters.
    actors : ActorConfig, default=ActorConfig()
        Actor size and speeds.
    perception : PerceptionConfig, default=PerceptionConfig()
        Vision cone settings.
    pursuer : PursuerConfig, default=PursuerConfig()
        Pursuer state machine tuning.
    features : FeatureToggles, default=FeatureToggles()
        Behavioural feature switches.
    simulation : SimulationConfig, default=SimulationConfig()
        Loop timing and bookkeeping.
    """

    arena: ArenaConfig = field(default_factory=ArenaConfig)
    obstacles: ObstacleConfig = field(default_factory=ObstacleConfig)
    actors: ActorConfig = field(default_factory=ActorConfig)
    perception: PerceptionConfig = field(default_factory=PerceptionConfig)
    pursuer: PursuerConfig = field(default_factory=PursuerConfig)
    features: FeatureToggles = field(default_factory=FeatureToggles)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


ENGINE_CONFIG = EngineConfig()
"""Singleton-style access to the engine configuration."""
