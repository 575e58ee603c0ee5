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
"""Field-of-view and line-of-sight tests for the pursuer.

Perception is deliberately one-sided: whether the evader is seen depends on the
pursuer's heading, vision cone and range, never on where the evader is facing.
Two line-of-sight strategies are available. The exact strategy clips the sight
line against every obstacle. The sampled strategy walks the line in fixed steps
and is kept only as a legacy approximation, since it can slip through walls
thinner than its step.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .actors import Actor
from .config import ENGINE_CONFIG, LineOfSightMode, PerceptionConfig
from .geometry import Rect, Vector2D


@dataclass(frozen=True)
class Perception:
    """Breakdown of a single visibility evaluation.

    Parameters
    ----------
    distance : float
        Distance from the observer to the target.
    angle : float
        Angle in ``[0, pi]`` between the observer heading and the target direction.
    in_range : bool
        Whether ``distance`` is below the vision range.
    in_cone : bool
        Whether ``angle`` is below half the field of view.
    line_clear : bool
        Whether no obstacle blocks the sight line.
    """

    distance: float
    angle: float
    in_range: bool
    in_cone: bool
    line_clear: bool

    @property
    def visible(self) -> bool:
        """Return ``True`` when range, cone and sight line all agree."""
        return self.in_range and self.in_cone and self.line_clear


def line_of_sight_exact(start: Vector2D, end: Vector2D, obstacles: Sequence[Rect]) -> bool:
    """Return whether the segment between two points avoids every obstacle.

    Parameters
    ----------
    start : Vector2D
        Observer position.
    end : Vector2D
        Target position.
    obstacles : Sequence[Rect]
        Rectangles that block sight.

    Returns
    -------
    bool
        ``True`` when no obstacle touches the segment.
    """
    return not any(obs.intersects_segment(start, end) for obs in obstacles)


def line_of_sight_sampled(
    start: Vector2D, end: Vector2D, obstacles: Sequence[Rect], sample_step: float = 4.0
) -> bool:
    """Approximate line of sight by sampling points along the segment.

    Legacy approximation: obstacles thinner than ``sample_step`` can fall
    between two samples and be missed.

    Parameters
    ----------
    start : Vector2D
        Observer position.
    end : Vector2D
        Target position.
    obstacles : Sequence[Rect]
        Rectangles that block sight.
    sample_step : float, optional
        Approximate spacing between samples.

    Returns
    -------
    bool
        ``True`` when no sample lies strictly inside an obstacle.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    distance = math.sqrt(dx * dx + dy * dy)
    steps = max(2, math.ceil(distance / sample_step))
    for i in range(steps + 1):
        x = start.x + dx * i / steps
        y = start.y + dy * i / steps
        if any(obs.contains_point(x, y) for obs in obstacles):
            return False
    return True


def line_of_sight(
    start: Vector2D,
    end: Vector2D,
    obstacles: Sequence[Rect],
    mode: LineOfSightMode = "exact",
    sample_step: float = 4.0,
) -> bool:
    """Dispatch to the configured line-of-sight strategy.

    Parameters
    ----------
    start : Vector2D
        Observer position.
    end : Vector2D
        Target position.
    obstacles : Sequence[Rect]
        Rectangles that block sight.
    mode : {"exact", "sampled"}, optional
        Strategy to use.
    sample_step : float, optional
        Sample spacing for the ``"sampled"`` strategy.

    Returns
    -------
    bool
        ``True`` when the sight line is unobstructed.

    Raises
    ------
    ValueError
        If ``mode`` is not a known strategy.
    """
    if mode == "exact":
        return line_of_sight_exact(start, end, obstacles)
    if mode == "sampled":
        return line_of_sight_sampled(start, end, obstacles, sample_step)
    raise ValueError(f"Unknown line-of-sight mode '{mode}'. Known modes: exact, sampled")


def angle_to(observer: Actor, target: Vector2D, epsilon: float = 1e-4) -> float:
    """Return the angle between the observer heading and the direction to ``target``.

    Parameters
    ----------
    observer : Actor
        Actor whose heading defines the reference direction.
    target : Vector2D
        Point being looked at.
    epsilon : float, optional
        Distance substituted when the two points coincide.

    Returns
    -------
    float
        Angle in radians within ``[0, pi]``.
    """
    offset = target - observer.position
    distance = offset.magnitude() or epsilon
    direction = Vector2D(offset.x / distance, offset.y / distance)
    dot = Vector2D.from_angle(observer.heading).dot(direction)
    return math.acos(max(-1.0, min(1.0, dot)))


def perceive(
    observer: Actor,
    target: Vector2D,
    obstacles: Sequence[Rect],
    config: Optional[PerceptionConfig] = None,
    mode: Optional[LineOfSightMode] = None,
) -> Perception:
    """Evaluate every visibility criterion for ``target``.

    The sight line is only traced when the target is already in range and inside
    the cone.

    Parameters
    ----------
    observer : Actor
        Actor doing the looking, normally the pursuer.
    target : Vector2D
        Position being looked for.
    obstacles : Sequence[Rect]
        Rectangles that block sight.
    config : PerceptionConfig | None, optional
        Vision parameters; defaults to ``ENGINE_CONFIG.perception``.
    mode : {"exact", "sampled"} | None, optional
        Line-of-sight strategy; defaults to ``ENGINE_CONFIG.features.line_of_sight``.

    Returns
    -------
    Perception
        Distance, angle and the outcome of each test.
    """
    cfg = config if config is not None else ENGINE_CONFIG.perception
    mode = mode if mode is not None else ENGINE_CONFIG.features.line_of_sight

    distance = observer.distance_to(target)
    angle = angle_to(observer, target, cfg.distance_epsilon)
    in_range = distance < cfg.vision_range
    in_cone = angle < cfg.fov_angle / 2
    line_clear = False
    if in_range and in_cone:
        line_clear = line_of_sight(observer.position, target, obstacles, mode, cfg.sample_step)
    return Perception(distance, angle, in_range, in_cone, line_clear)


def is_visible(
    observer: Actor,
    target: Vector2D,
    obstacles: Sequence[Rect],
    config: Optional[PerceptionConfig] = None,
    mode: Optional[LineOfSightMode] = None,
) -> bool:
    """Return whether ``observer`` can currently see ``target``.

    Parameters
    ----------
    observer : Actor
        Actor doing the looking, normally the pursuer.
    target : Vector2D
        Position being looked for.
    obstacles : Sequence[Rect]
        Rectangles that block sight.
    config : PerceptionConfig | None, optional
        Vision parameters; defaults to ``ENGINE_CONFIG.perception``.
    mode : {"exact", "sampled"} | None, optional
        Line-of-sight strategy; defaults to ``ENGINE_CONFIG.features.line_of_sight``.

    Returns
    -------
    bool
        ``True`` when the target is in range, inside the cone and unobstructed.
    """
    return perceive(observer, target, obstacles, config, mode).visible
