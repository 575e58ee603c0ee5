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
"""Patrol, chase and search behaviour for the pursuer.

The pursuer is a small state machine driven once per tick by the visibility
flag the perception model produced:

* ``patrol`` wanders on a randomised heading, turning away from walls.
* ``chase`` heads straight for the visible evader and refreshes the last-seen
  memory on every tick.
* ``search`` walks to the last-seen point until it arrives or the memory
  timer runs out.

Movement is purely local. When the direct step is refused the pursuer tries a
small curve and then a fan of sidesteps; it never plans a route around walls.
"""
from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING, List, Optional, Tuple

from .actors import CAUGHT, CHASE, PATROL, SEARCH, PursuerMode
from .config import ENGINE_CONFIG, ActorConfig, FeatureToggles, PursuerConfig
from .geometry import Vector2D
from .steering import advance, step

if TYPE_CHECKING:
    from pursuit.utils.debug import SimulationDebugger

    from .actors import Pursuer
    from .arena import Arena


class PursuerBehaviour:
    """State machine deciding what the pursuer does on each tick.

    Parameters
    ----------
    config : PursuerConfig | None, optional
        Timers and steering offsets; defaults to ``ENGINE_CONFIG.pursuer``.
    actors : ActorConfig | None, optional
        Speed settings; defaults to ``ENGINE_CONFIG.actors``.
    features : FeatureToggles | None, optional
        Feature switches; defaults to ``ENGINE_CONFIG.features``.
    rng : random.Random | None, optional
        Random source for patrol headings and curve directions.
    debugger : SimulationDebugger | None, optional
        Debugger receiving state transition logs.
    """

    def __init__(
        self,
        config: Optional[PursuerConfig] = None,
        actors: Optional[ActorConfig] = None,
        features: Optional[FeatureToggles] = None,
        rng: Optional[random.Random] = None,
        debugger: Optional["SimulationDebugger"] = None,
    ) -> None:
        """Store tuning, randomness and logging collaborators.

        Parameters
        ----------
        config : PursuerConfig | None
            Timers and steering offsets.
        actors : ActorConfig | None
            Speed settings.
        features : FeatureToggles | None
            Feature switches.
        rng : random.Random | None
            Random source for patrol headings and curve directions.
        debugger : SimulationDebugger | None
            Debugger receiving state transition logs.
        """
        self.config = config if config is not None else ENGINE_CONFIG.pursuer
        self.actors = actors if actors is not None else ENGINE_CONFIG.actors
        self.features = features if features is not None else ENGINE_CONFIG.features
        self.rng = rng if rng is not None else random.Random()
        self.debugger = debugger
        self.tick = 0
        self.transitions: List[Tuple[PursuerMode, PursuerMode, str]] = []

    # --- logging -------------------------------------------------------------------
    def _log_transition(self, previous: PursuerMode, current: PursuerMode, reason: str) -> None:
        """Emit a debug line describing a state change.

        Parameters
        ----------
        previous : str
            State before the transition.
        current : str
            State after the transition.
        reason : str
            Short explanation of the trigger.
        """
        if not self.debugger:
            return
        self.debugger.log_event(self.tick, "state_change", f"{previous} -> {current} ({reason})")

    def _enter(self, pursuer: "Pursuer", state: PursuerMode, reason: str) -> None:
        """Switch ``pursuer`` into ``state`` and log the change.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer whose state changes.
        state : str
            State to enter.
        reason : str
            Short explanation of the trigger.
        """
        if pursuer.state == state:
            return
        previous = pursuer.state
        pursuer.state = state
        self.transitions.append((previous, state, reason))
        self._log_transition(previous, state, reason)

    def drain_transitions(self) -> List[Tuple[PursuerMode, PursuerMode, str]]:
        """Return and clear the state changes recorded since the last call.

        Returns
        -------
        List[Tuple[str, str, str]]
            ``(previous, current, reason)`` triples in the order they happened.
        """
        drained, self.transitions = self.transitions, []
        return drained

    # --- entry point ---------------------------------------------------------------
    def update(self, pursuer: "Pursuer", evader_position: Vector2D, visible: bool, arena: "Arena") -> None:
        """Advance the state machine and move the pursuer by one tick.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer to update in place.
        evader_position : Vector2D
            Current evader position.
        visible : bool
            Result of the perception test for this tick.
        arena : Arena
            Arena providing bounds and obstacles.
        """
        if pursuer.state == CAUGHT:
            return

        if visible:
            self.chase(pursuer, evader_position, arena)
        elif pursuer.state in (CHASE, SEARCH) and self._has_memory(pursuer):
            self.search(pursuer, arena)
        else:
            if pursuer.state != PATROL:
                pursuer.forget()
                self._enter(pursuer, PATROL, "lost sight")
            self.patrol(pursuer, arena)

    def _has_memory(self, pursuer: "Pursuer") -> bool:
        """Return whether a last-seen point is available to search.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer whose memory is inspected.

        Returns
        -------
        bool
            ``True`` when memory is enabled and an unexpired point is stored.
        """
        return self.features.last_seen_memory and pursuer.last_seen is not None and pursuer.last_seen_timer > 0

    # --- states --------------------------------------------------------------------
    def chase(self, pursuer: "Pursuer", evader_position: Vector2D, arena: "Arena") -> None:
        """Head for the visible evader and refresh the last-seen memory.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer to move.
        evader_position : Vector2D
            Current evader position.
        arena : Arena
            Arena providing bounds and obstacles.
        """
        self._enter(pursuer, CHASE, "evader spotted")
        pursuer.last_seen = evader_position.copy()
        pursuer.last_seen_timer = self.config.last_seen_duration
        self.steer_towards(pursuer, evader_position, arena)

    def search(self, pursuer: "Pursuer", arena: "Arena") -> None:
        """Walk to the last-seen point until it is reached or forgotten.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer to move; must hold a last-seen point.
        arena : Arena
            Arena providing bounds and obstacles.
        """
        self._enter(pursuer, SEARCH, "lost sight")
        target = pursuer.last_seen
        if target is None:
            return
        pursuer.last_seen_timer = max(0, pursuer.last_seen_timer - 1)
        self.steer_towards(pursuer, target, arena)

        if pursuer.last_seen_timer == 0:
            pursuer.forget()
            self._enter(pursuer, PATROL, "search timed out")
        elif pursuer.distance_to(target) < self.config.arrive_radius:
            pursuer.forget()
            self._enter(pursuer, PATROL, "reached last seen point")

    def patrol(self, pursuer: "Pursuer", arena: "Arena") -> None:
        """Wander on a randomised heading, turning away from blocked steps.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer to move.
        arena : Arena
            Arena providing bounds and obstacles.
        """
        cfg = self.config
        pursuer.patrol_timer -= 1
        if pursuer.patrol_timer <= 0:
            heading = self.pick_patrol_heading(pursuer, arena)
            pursuer.heading = heading
            pursuer.direction = Vector2D.from_angle(heading)
            pursuer.patrol_timer = self.rng.randint(cfg.patrol_interval_min, cfg.patrol_interval_max)

        heading = pursuer.direction.angle()
        result = step(pursuer, heading, self.actors.pursuer_speed, arena)
        if advance(pursuer, result, heading):
            return

        # Rotate rather than reverse so the pursuer does not bounce in place.
        pursuer.heading = heading + self._random_sign() * cfg.turn_angle
        pursuer.direction = Vector2D.from_angle(pursuer.heading)

    # --- helpers -------------------------------------------------------------------
    def pick_patrol_heading(self, pursuer: "Pursuer", arena: "Arena") -> float:
        """Choose a random patrol heading that does not face a nearby wall.

        The point ``probe_distance`` ahead is tested against the obstacles; the
        heading is resampled up to ``heading_retries`` times and the last sample
        is kept even if it is still blocked.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer looking for a heading.
        arena : Arena
            Arena providing obstacles.

        Returns
        -------
        float
            New heading in radians within ``[0, 2*pi)``.
        """
        heading = self.rng.random() * 2 * math.pi
        retries = 0
        while self._probe_blocked(pursuer, heading, arena) and retries < self.config.heading_retries:
            heading = self.rng.random() * 2 * math.pi
            retries += 1
        return heading

    def _probe_blocked(self, pursuer: "Pursuer", heading: float, arena: "Arena") -> bool:
        """Return whether the look-ahead point along ``heading`` hits an obstacle.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer doing the probing.
        heading : float
            Direction to probe in radians.
        arena : Arena
            Arena providing obstacles.

        Returns
        -------
        bool
            ``True`` when the probe point, inflated by the pursuer radius, collides.
        """
        probe = pursuer.position + Vector2D.from_angle(heading, self.config.probe_distance)
        return arena.collides(probe.x, probe.y, pursuer.radius)

    def steer_towards(self, pursuer: "Pursuer", target: Vector2D, arena: "Arena") -> bool:
        """Move one step towards ``target`` using the curve and sidestep fallbacks.

        The pursuer first faces the target and tries the direct step. If it is
        refused a single curve of ``turn_angle`` in a random direction is tried,
        then each sidestep offset in order. When every option is refused the
        pursuer holds its position for this tick.

        Parameters
        ----------
        pursuer : Pursuer
            Pursuer to move.
        target : Vector2D
            Point to head for.
        arena : Arena
            Arena providing bounds and obstacles.

        Returns
        -------
        bool
            ``True`` when the pursuer moved.
        """
        speed = self.actors.pursuer_speed
        offset = target - pursuer.position
        base = math.atan2(offset.y, offset.x) if offset.magnitude() > 0 else pursuer.heading
        pursuer.heading = base

        if advance(pursuer, step(pursuer, base, speed, arena), base):
            return True

        curved = base + self._random_sign() * self.config.turn_angle
        if advance(pursuer, step(pursuer, curved, speed, arena), curved):
            return True

        for degrees in self.config.sidestep_degrees:
            heading = base + math.radians(degrees)
            if advance(pursuer, step(pursuer, heading, speed, arena), heading):
                return True
        return False

    def _random_sign(self) -> int:
        """Return ``1`` or ``-1`` with equal probability.

        Returns
        -------
        int
            Random turn direction.
        """
        return 1 if self.rng.random() > 0.5 else -1
