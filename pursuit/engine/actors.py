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
"""Mutable state containers for the evader and the pursuer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from .geometry import Vector2D

PursuerMode = Literal["patrol", "chase", "search", "caught"]

PATROL: PursuerMode = "patrol"
CHASE: PursuerMode = "chase"
SEARCH: PursuerMode = "search"
CAUGHT: PursuerMode = "caught"


@dataclass
class Actor:
    """Circular body moving through the arena.

    Parameters
    ----------
    position : Vector2D
        Centre of the body in arena coordinates.
    radius : float
        Collision radius.
    heading : float, optional
        Facing direction in radians.
    """

    position: Vector2D
    radius: float
    heading: float = 0.0

    @property
    def x(self) -> float:
        """Return the horizontal coordinate of the centre."""
        return self.position.x

    @property
    def y(self) -> float:
        """Return the vertical coordinate of the centre."""
        return self.position.y

    def distance_to(self, point: Vector2D) -> float:
        """Return the distance between the actor centre and ``point``.

        Parameters
        ----------
        point : Vector2D
            Location to measure against.

        Returns
        -------
        float
            Euclidean distance in world units.
        """
        return self.position.distance_to(point)


@dataclass
class Evader(Actor):
    """Input-controlled actor trying to stay out of reach.

    Parameters
    ----------
    position : Vector2D
        Centre of the body in arena coordinates.
    radius : float
        Collision radius.
    heading : float, optional
        Direction of the last accepted move in radians.
    intent : Vector2D, optional
        Directional intent for the current tick; unit length or zero.
    """

    intent: Vector2D = field(default_factory=lambda: Vector2D(0, 0))


@dataclass
class Pursuer(Actor):
    """Autonomous actor and the working memory of its state machine.

    Parameters
    ----------
    position : Vector2D
        Centre of the body in arena coordinates.
    radius : float
        Collision radius.
    heading : float, optional
        Facing direction in radians; the centre line of the vision cone.
    state : {"patrol", "chase", "search", "caught"}, optional
        Current behavioural state.
    direction : Vector2D, optional
        Unit travel direction used while patrolling.
    last_seen : Vector2D | None, optional
        Last known evader position, kept while searching.
    last_seen_timer : int, optional
        Remaining search ticks for ``last_seen``.
    patrol_timer : int, optional
        Ticks until the next patrol heading change.
    """

    state: PursuerMode = PATROL
    direction: Vector2D = field(default_factory=lambda: Vector2D(1, 0))
    last_seen: Optional[Vector2D] = None
    last_seen_timer: int = 0
    patrol_timer: int = 1

    def forget(self) -> None:
        """Drop the last-seen memory."""
        self.last_seen = None
        self.last_seen_timer = 0
