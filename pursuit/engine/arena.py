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
"""Procedural arena layout and safe spawn placement.

The arena is a bounded rectangle holding a set of thin wall-like obstacles.
Layouts are produced by rejection sampling: candidate walls are drawn at random
and discarded when they break one of the placement rules (reserved zones,
overlap, minimum spacing between parallel walls). The generator degrades
gracefully, returning fewer walls when the space runs out rather than failing.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from pursuit.utils.debug import SimulationDebugger

from .config import ENGINE_CONFIG, EngineConfig, ObstacleConfig
from .geometry import Rect, Vector2D


@dataclass(frozen=True)
class Arena:
    """Immutable play area and its obstacle layout.

    A new arena is built whenever the play area is resized; instances are never
    patched in place, so any reader holding a reference sees a complete layout.

    Parameters
    ----------
    width : float
        Arena width in world units.
    height : float
        Arena height in world units.
    obstacles : Tuple[Rect, ...]
        Non-overlapping obstacle rectangles.
    reserved_zones : Tuple[Rect, ...]
        Rectangles that were kept clear of obstacles during generation.
    """

    width: float
    height: float
    obstacles: Tuple[Rect, ...] = ()
    reserved_zones: Tuple[Rect, ...] = ()

    def collides(self, x: float, y: float, radius: float) -> bool:
        """Return whether a circle at ``(x, y)`` overlaps any obstacle.

        Parameters
        ----------
        x : float
            Circle centre along ``x``.
        y : float
            Circle centre along ``y``.
        radius : float
            Circle radius; ``0`` tests the bare point.

        Returns
        -------
        bool
            ``True`` when at least one obstacle is hit.
        """
        return obstacle_collision(self.obstacles, x, y, radius)

    def in_bounds(self, x: float, y: float, radius: float) -> bool:
        """Return whether a circle at ``(x, y)`` stays inside the arena.

        Parameters
        ----------
        x : float
            Circle centre along ``x``.
        y : float
            Circle centre along ``y``.
        radius : float
            Circle radius.

        Returns
        -------
        bool
            ``True`` when the centre lies within ``[radius, dimension - radius]`` on both axes.
        """
        return radius <= x <= self.width - radius and radius <= y <= self.height - radius

    def is_free(self, x: float, y: float, radius: float) -> bool:
        """Return whether a circle fits at ``(x, y)`` without touching walls or edges.

        Parameters
        ----------
        x : float
            Circle centre along ``x``.
        y : float
            Circle centre along ``y``.
        radius : float
            Circle radius.

        Returns
        -------
        bool
            ``True`` when the position is inside the bounds and clear of every obstacle.
        """
        return self.in_bounds(x, y, radius) and not self.collides(x, y, radius)


def obstacle_collision(obstacles: Iterable[Rect], x: float, y: float, radius: float) -> bool:
    """Return whether a circle overlaps any of ``obstacles``.

    Parameters
    ----------
    obstacles : Iterable[Rect]
        Rectangles to test against.
    x : float
        Circle centre along ``x``.
    y : float
        Circle centre along ``y``.
    radius : float
        Circle radius; non-positive values test the bare point.

    Returns
    -------
    bool
        ``True`` when the circle intersects at least one rectangle.
    """
    return any(obs.intersects_circle(x, y, radius) for obs in obstacles)


def default_reserved_zones(width: float, height: float, spawn_padding: Optional[float] = None) -> Tuple[Rect, Rect]:
    """Return the corner safety zones kept free of obstacles.

    Parameters
    ----------
    width : float
        Arena width in world units.
    height : float
        Arena height in world units.
    spawn_padding : float | None, optional
        Size of each zone; defaults to ``ENGINE_CONFIG.arena.spawn_padding``.

    Returns
    -------
    Tuple[Rect, Rect]
        Top-left and bottom-right reserved rectangles.
    """
    pad = ENGINE_CONFIG.arena.spawn_padding if spawn_padding is None else spawn_padding
    return (
        Rect(10, 10, pad + 10, pad + 10),
        Rect(width - pad - 20, height - pad - 20, pad + 10, pad + 10),
    )


def _overlaps_any(candidate: Rect, zones: Sequence[Rect]) -> bool:
    """Return whether ``candidate`` shares area with any zone.

    Parameters
    ----------
    candidate : Rect
        Rectangle being placed.
    zones : Sequence[Rect]
        Rectangles it must not intersect.

    Returns
    -------
    bool
        ``True`` on the first strict overlap.
    """
    return any(candidate.overlaps(zone) for zone in zones)


def _conflicts_with_placed(candidate: Rect, placed: Sequence[Rect], min_gap: float) -> bool:
    """Return whether ``candidate`` breaks the overlap or spacing rules.

    Parameters
    ----------
    candidate : Rect
        Rectangle being placed.
    placed : Sequence[Rect]
        Obstacles already accepted.
    min_gap : float
        Minimum separation between obstacles of the same orientation.

    Returns
    -------
    bool
        ``True`` when the candidate overlaps an obstacle or sits too close to a parallel one.
    """
    for obs in placed:
        if candidate.overlaps(obs):
            return True
        # Crossing walls (one wide, one tall) may sit close together.
        if obs.is_horizontal == candidate.is_horizontal and candidate.gap_to(obs) < min_gap:
            return True
    return False


def generate_obstacles(
    width: float,
    height: float,
    config: Optional[ObstacleConfig] = None,
    rng: Optional[random.Random] = None,
    reserved_zones: Sequence[Rect] = (),
) -> Tuple[Rect, ...]:
    """Generate a non-overlapping obstacle layout by rejection sampling.

    Each attempt draws an orientation (50/50), an integer length between the
    configured bounds and a position inside the padded interior. Candidates are
    discarded when they overlap a reserved zone or an accepted obstacle, or when
    they sit closer than the minimum gap to an accepted obstacle of the same
    orientation. Sampling stops once the desired count is reached or the attempt
    budget (``desired_count * max_attempts_multiplier``) is spent.

    Parameters
    ----------
    width : float
        Arena width in world units.
    height : float
        Arena height in world units.
    config : ObstacleConfig | None, optional
        Generator parameters; defaults to ``ENGINE_CONFIG.obstacles``.
    rng : random.Random | None, optional
        Random source; a fresh unseeded generator is used when omitted.
    reserved_zones : Sequence[Rect], optional
        Zones to keep clear in addition to ``config.reserved_zones``.

    Returns
    -------
    Tuple[Rect, ...]
        Accepted obstacles, possibly fewer than requested for crowded arenas.
    """
    cfg = config if config is not None else ENGINE_CONFIG.obstacles
    rng = rng if rng is not None else random.Random()

    min_side = min(width, height)
    min_length = math.floor(min_side * cfg.min_len_factor)
    max_length = max(min_length, math.floor(min_side * cfg.max_len_factor))
    min_gap = math.floor(min_side * cfg.min_gap_factor)
    padding = cfg.padding_for(width, height)
    desired = cfg.count_for(width, height)
    zones = tuple(cfg.reserved_zones) + tuple(reserved_zones)

    placed: List[Rect] = []
    attempts = 0
    max_attempts = desired * cfg.max_attempts_multiplier
    while len(placed) < desired and attempts < max_attempts:
        attempts += 1
        length = rng.randint(min_length, max_length)
        if rng.random() < 0.5:
            w, h = float(length), cfg.thickness
        else:
            w, h = cfg.thickness, float(length)

        span_x = width - w - padding * 2
        span_y = height - h - padding * 2
        if span_x < 0 or span_y < 0:
            continue
        candidate = Rect(padding + rng.uniform(0, span_x), padding + rng.uniform(0, span_y), w, h)

        if _overlaps_any(candidate, zones):
            continue
        if _conflicts_with_placed(candidate, placed, min_gap):
            continue
        placed.append(candidate)

    return tuple(placed)


def build_arena(
    width: float,
    height: float,
    config: Optional[EngineConfig] = None,
    rng: Optional[random.Random] = None,
    debugger: Optional[SimulationDebugger] = None,
) -> Arena:
    """Create a fresh arena for the given dimensions.

    Dimensions below ``config.arena.min_dimension`` are clamped up. When the
    obstacle feature is disabled the arena is left open.

    Parameters
    ----------
    width : float
        Requested arena width.
    height : float
        Requested arena height.
    config : EngineConfig | None, optional
        Engine configuration; defaults to ``ENGINE_CONFIG``.
    rng : random.Random | None, optional
        Random source for the obstacle generator.
    debugger : SimulationDebugger | None, optional
        Debugger notified when the layout ends up sparser than requested.

    Returns
    -------
    Arena
        Newly generated arena.
    """
    cfg = config if config is not None else ENGINE_CONFIG
    width = max(cfg.arena.min_dimension, width)
    height = max(cfg.arena.min_dimension, height)
    spawn_zones = default_reserved_zones(width, height, cfg.arena.spawn_padding)
    zones = spawn_zones + tuple(cfg.obstacles.reserved_zones)

    if not cfg.features.obstacles:
        return Arena(width, height, (), zones)

    obstacles = generate_obstacles(width, height, cfg.obstacles, rng, reserved_zones=spawn_zones)
    desired = cfg.obstacles.count_for(width, height)
    if debugger and len(obstacles) < desired:
        debugger.log_error(
            "sparse_arena",
            f"Placed {len(obstacles)} of {desired} obstacles in {width:.0f}x{height:.0f} arena",
        )
    return Arena(width, height, obstacles, zones)


def place_safely(
    width: float,
    height: float,
    radius: float,
    obstacles: Sequence[Rect],
    rng: Optional[random.Random] = None,
    margin: Optional[float] = None,
    attempts: Optional[int] = None,
    debugger: Optional[SimulationDebugger] = None,
) -> Vector2D:
    """Find a spawn point that does not collide with any obstacle.

    Candidates are sampled uniformly inside the edge margin. When every attempt
    collides the last sampled point is returned anyway, so callers always get a
    position; the fallback is reported through ``debugger`` when provided.

    Parameters
    ----------
    width : float
        Arena width in world units.
    height : float
        Arena height in world units.
    radius : float
        Actor radius used to inflate the obstacle test.
    obstacles : Sequence[Rect]
        Obstacles to avoid.
    rng : random.Random | None, optional
        Random source; a fresh unseeded generator is used when omitted.
    margin : float | None, optional
        Edge margin; defaults to ``ENGINE_CONFIG.arena.spawn_margin``.
    attempts : int | None, optional
        Sample budget; defaults to ``ENGINE_CONFIG.arena.spawn_attempts``.
    debugger : SimulationDebugger | None, optional
        Debugger notified when the fallback is used.

    Returns
    -------
    Vector2D
        Collision-free spawn point, or the last sample after exhaustion.
    """
    rng = rng if rng is not None else random.Random()
    margin = ENGINE_CONFIG.arena.spawn_margin if margin is None else margin
    attempts = ENGINE_CONFIG.arena.spawn_attempts if attempts is None else attempts

    position = Vector2D(width / 2, height / 2)
    for _ in range(max(1, attempts)):
        position = Vector2D(
            margin + rng.random() * (width - margin * 2),
            margin + rng.random() * (height - margin * 2),
        )
        if not obstacle_collision(obstacles, position.x, position.y, radius):
            return position

    if debugger:
        debugger.log_error(
            "spawn_fallback",
            f"No clear spawn after {attempts} attempts; using ({position.x:.1f}, {position.y:.1f})",
        )
    return position
