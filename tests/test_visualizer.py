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
"""Tests for the renderer helpers that do not need a display."""

import math
import random

import pytest

from pursuit.engine.arena import Arena
from pursuit.engine.geometry import Rect, Vector2D
from pursuit.engine.simulation import PursuerView, Simulation
from pursuit.visualizer.visualizer import cone_polygon, hud_text, trail_alpha


class TestConePolygon:
    """Vision cone outline."""

    def test_apex_and_arc(self) -> None:
        """The polygon starts at the pursuer and spans the field of view."""
        view = PursuerView(x=100, y=100, radius=20, heading=0.0, vision_range=150, fov_angle=math.pi / 2, state="patrol")
        points = cone_polygon(view, segments=2)

        assert points[0] == (100, 100)
        assert len(points) == 4
        assert points[2] == pytest.approx((250.0, 100.0))
        first_edge = math.atan2(points[1][1] - 100, points[1][0] - 100)
        last_edge = math.atan2(points[-1][1] - 100, points[-1][0] - 100)
        assert first_edge == pytest.approx(-math.pi / 4)
        assert last_edge == pytest.approx(math.pi / 4)
        for px, py in points[1:]:
            assert math.hypot(px - 100, py - 100) == pytest.approx(150.0)


class TestTrailAlpha:
    """Trail fading."""

    def test_oldest_is_transparent_newest_opaque(self) -> None:
        """Opacity grows from the oldest to the newest dot."""
        alphas = [trail_alpha(i, 60) for i in range(60)]
        assert alphas[0] == 0
        assert alphas[-1] == 250
        assert alphas == sorted(alphas)

    def test_empty_trail(self) -> None:
        """An empty trail never divides by zero."""
        assert trail_alpha(0, 0) == 0


class TestHudText:
    """Status line contents."""

    def _walled(self) -> Simulation:
        """Return a round where a wall hides an evader that is in range and in the cone."""
        arena = Arena(800, 600, obstacles=(Rect(150, 250, 8, 100),))
        return Simulation.from_arena(arena, Vector2D(220, 300), Vector2D(100, 300), 0.0, rng=random.Random(0))

    def test_before_first_tick(self) -> None:
        """Only the tick and state are shown until perception has run."""
        assert hud_text(self._walled().snapshot()) == "Tick 0  Pursuer: patrol"

    def test_shows_failed_sight_line(self) -> None:
        """The blocked sight line is called out next to the passing checks."""
        text = hud_text(self._walled().tick())
        assert text.startswith("Tick 1  Pursuer: patrol")
        assert "range:Y cone:Y sight:N" in text
        assert text.endswith("dist 120")
