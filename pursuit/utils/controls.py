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
"""Translate player input into evader intent.

Keys are identified by the names ``"up"``, ``"down"``, ``"left"`` and
``"right"``. Screen coordinates grow downwards, so ``"up"`` decreases ``y``.
"""
import math
from typing import Dict, FrozenSet, Iterable, Tuple

from pursuit.engine.geometry import Vector2D

ARROW_KEYS: Tuple[str, ...] = ("up", "down", "left", "right")

_KEY_DIRECTIONS: Dict[str, Tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


def intent_from_keys(keys: Iterable[str]) -> Vector2D:
    """Combine the held arrow keys into a normalised intent.

    Opposite keys cancel out and diagonals are scaled back to unit length.
    Unknown key names are ignored.

    Parameters
    ----------
    keys : Iterable[str]
        Names of the keys currently held.

    Returns
    -------
    Vector2D
        Unit direction, or the zero vector when nothing effective is held.
    """
    dx = dy = 0
    for key in set(keys):
        step = _KEY_DIRECTIONS.get(key)
        if step:
            dx += step[0]
            dy += step[1]
    return Vector2D(dx, dy).normalize()


def keys_from_joystick(angle: float, threshold: float = 0.7) -> FrozenSet[str]:
    """Map an analog stick angle onto the equivalent set of arrow keys.

    The angle follows the usual mathematical convention: ``0`` points right and
    ``pi / 2`` points up. An axis is pressed when the matching component of the
    unit direction exceeds ``threshold``, so angles close to a diagonal press
    both keys of that diagonal.

    Parameters
    ----------
    angle : float
        Stick direction in radians; any value, it is wrapped into ``[0, 2*pi)``.
    threshold : float, optional
        Minimum absolute component for an axis to count as pressed.

    Returns
    -------
    FrozenSet[str]
        Names of the keys the stick is emulating.
    """
    angle = angle % (2 * math.pi)
    sin_a, cos_a = math.sin(angle), math.cos(angle)
    keys = set()
    if abs(sin_a) > threshold:
        keys.add("up" if angle < math.pi else "down")
    if abs(cos_a) > threshold:
        keys.add("left" if math.pi / 2 < angle < 3 * math.pi / 2 else "right")
    return frozenset(keys)
