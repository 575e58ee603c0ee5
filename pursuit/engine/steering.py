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
"""Obstacle-aware step resolution shared by both actors.

The resolver only answers one question: would this single step leave the actor
in a legal place? Recovery when a step is refused (curving, sidestepping,
rotating or simply standing still) is left to the caller, because the evader and
each pursuer state react differently.
"""
from __future__ import annotations

from dataclasses import dataclass

from .actors import Actor, Evader
from .arena import Arena
from .geometry import Vector2D


@dataclass(frozen=True)
class StepResult:
    """Outcome of a candidate step.

    Parameters
    ----------
    accepted : bool
        Whether the candidate position is legal.
    position : Vector2D
        Candidate position; only meaningful to apply when ``accepted`` is true.
    """

    accepted: bool
    position: Vector2D


def step_towards(actor: Actor, direction: Vector2D, speed: float, arena: Arena) -> StepResult:
    """Resolve a step of ``speed`` along ``direction`` without moving the actor.

    Parameters
    ----------
    actor : Actor
        Actor whose footprint is tested.
    direction : Vector2D
        Travel direction; callers pass unit vectors to move exactly ``speed``.
    speed : float
        Step length for unit directions.
    arena : Arena
        Arena providing bounds and obstacles.

    Returns
    -------
    StepResult
        Candidate position and whether it keeps the footprint clear of walls and edges.
    """
    candidate = actor.position + direction * speed
    return StepResult(arena.is_free(candidate.x, candidate.y, actor.radius), candidate)


def step(actor: Actor, heading: float, speed: float, arena: Arena) -> StepResult:
    """Resolve a step of ``speed`` along ``heading`` without moving the actor.

    Parameters
    ----------
    actor : Actor
        Actor whose footprint is tested.
    heading : float
        Travel direction in radians.
    speed : float
        Step length.
    arena : Arena
        Arena providing bounds and obstacles.

    Returns
    -------
    StepResult
        Candidate position and whether it may be taken.
    """
    return step_towards(actor, Vector2D.from_angle(heading), speed, arena)


def advance(actor: Actor, result: StepResult, heading: float | None = None) -> bool:
    """Apply an accepted step to ``actor``.

    Parameters
    ----------
    actor : Actor
        Actor to move.
    result : StepResult
        Resolved step.
    heading : float | None, optional
        New facing direction to store alongside the move.

    Returns
    -------
    bool
        ``True`` when the actor moved.
    """
    if not result.accepted:
        return False
    actor.position = result.position
    if heading is not None:
        actor.heading = heading
    return True


def steer_evader(evader: Evader, intent: Vector2D, speed: float, arena: Arena) -> bool:
    """Move the evader one step along its directional intent.

    The intent is normalised first so diagonal input is not faster than a
    straight one. A refused step leaves the evader where it is.

    Parameters
    ----------
    evader : Evader
        Evader to move.
    intent : Vector2D
        Raw directional intent; zero means stand still.
    speed : float
        Step length per tick.
    arena : Arena
        Arena providing bounds and obstacles.

    Returns
    -------
    bool
        ``True`` when the evader moved.
    """
    direction = intent.normalize()
    evader.intent = direction
    if direction.x == 0 and direction.y == 0:
        return False
    return advance(evader, step_towards(evader, direction, speed, arena), direction.angle())
