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
"""Tests for the input translation helpers."""

import math

import pytest

from pursuit.engine.geometry import Vector2D
from pursuit.utils.controls import intent_from_keys, keys_from_joystick


class TestIntentFromKeys:
    """Arrow keys to evader intent."""

    def test_single_keys(self) -> None:
        """Each arrow maps to its screen direction."""
        assert intent_from_keys({"up"}) == Vector2D(0, -1)
        assert intent_from_keys({"down"}) == Vector2D(0, 1)
        assert intent_from_keys({"left"}) == Vector2D(-1, 0)
        assert intent_from_keys({"right"}) == Vector2D(1, 0)

    def test_diagonal_is_unit_length(self) -> None:
        """Two perpendicular keys give a normalised diagonal."""
        intent = intent_from_keys(["up", "right"])
        assert intent.magnitude() == pytest.approx(1.0)
        assert intent.x == pytest.approx(math.sqrt(0.5))
        assert intent.y == pytest.approx(-math.sqrt(0.5))

    def test_opposite_keys_cancel(self) -> None:
        """Holding left and right together means standing still."""
        assert intent_from_keys({"left", "right"}) == Vector2D(0, 0)

    def test_unknown_and_repeated_keys(self) -> None:
        """Unknown names are ignored and repeats count once."""
        assert intent_from_keys(["up", "up", "space"]) == Vector2D(0, -1)
        assert intent_from_keys([]) == Vector2D(0, 0)


class TestKeysFromJoystick:
    """Analog stick angle to emulated arrow keys."""

    @pytest.mark.parametrize(
        "angle, expected",
        [
            (0.0, {"right"}),
            (math.pi / 2, {"up"}),
            (math.pi, {"left"}),
            (3 * math.pi / 2, {"down"}),
            (math.pi / 3, {"up"}),
            (math.pi / 4, {"up", "right"}),
            (5 * math.pi / 4, {"down", "left"}),
        ],
    )
    def test_axis_threshold(self, angle: float, expected: set) -> None:
        """Axes count as pressed once their component exceeds 0.7."""
        assert keys_from_joystick(angle) == frozenset(expected)

    def test_angle_wraps(self) -> None:
        """Negative and oversized angles are wrapped first."""
        assert keys_from_joystick(-math.pi / 2) == frozenset({"down"})
        assert keys_from_joystick(2 * math.pi + 0.1) == frozenset({"right"})

    def test_custom_threshold(self) -> None:
        """A stricter threshold ignores the weaker axis of a diagonal."""
        assert keys_from_joystick(math.radians(40), threshold=0.75) == frozenset({"right"})
