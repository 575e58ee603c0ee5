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
"""Low-level geometry primitives used by the pursuit engine.

The geometry layer provides a small vector maths helper and an axis-aligned
rectangle type used for obstacles and reserved zones. It encapsulates the raw
numeric operations (overlap tests, gap distances, segment clipping) so the
arena, perception and steering code can focus on behaviour.
"""
import math
from dataclasses import dataclass


@dataclass
class Vector2D:
    """Two-dimensional vector with convenience operations.

    The class mirrors the bare minimum functionality required by the
    simulation: addition/subtraction for positional offsets, scalar
    multiplication for step scaling, and helpers for magnitude/normalisation.
    Arena coordinates grow rightwards along ``x`` and downwards along ``y``.

    Parameters
    ----------
    x : float
        Horizontal component in world units.
    y : float
        Vertical component in world units.
    """

    x: float
    y: float

    def __add__(self, other: "Vector2D") -> "Vector2D":
        """Return the vector sum of ``self`` and ``other``."""
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        """Return the vector difference ``self - other``."""
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2D":
        """Scale the vector by ``scalar`` while preserving direction."""
        return Vector2D(self.x * scalar, self.y * scalar)

    @classmethod
    def from_angle(cls, angle: float, length: float = 1.0) -> "Vector2D":
        """Build a vector pointing along ``angle``.

        Parameters
        ----------
        angle : float
            Direction in radians, measured from the positive ``x`` axis.
        length : float, optional
            Magnitude of the resulting vector.

        Returns
        -------
        Vector2D
            Vector ``length * (cos(angle), sin(angle))``.
        """
        return cls(math.cos(angle) * length, math.sin(angle) * length)

    def magnitude(self) -> float:
        """Return the Euclidean length of the vector.

        Returns
        -------
        float
            Scalar magnitude in world units.
        """
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalize(self) -> "Vector2D":
        """Return a unit vector pointing in the same direction as ``self``.

        Returns
        -------
        Vector2D
            Normalised vector; zero vector when ``self`` has no magnitude.
        """
        mag = self.magnitude()
        if mag == 0:
            return Vector2D(0, 0)
        return Vector2D(self.x / mag, self.y / mag)

    def dot(self, other: "Vector2D") -> float:
        """Return the dot product of ``self`` and ``other``.

        Parameters
        ----------
        other : Vector2D
            Second operand.

        Returns
        -------
        float
            Sum of the component-wise products.
        """
        return self.x * other.x + self.y * other.y

    def angle(self) -> float:
        """Return the direction of the vector in radians.

        Returns
        -------
        float
            ``atan2(y, x)`` in the range ``[-pi, pi]``.
        """
        return math.atan2(self.y, self.x)

    def distance_to(self, other: "Vector2D") -> float:
        """Return the straight-line distance between ``self`` and ``other``.

        Parameters
        ----------
        other : Vector2D
            Vector whose separation from ``self`` should be measured.

        Returns
        -------
        float
            Euclidean distance between the two points.
        """
        return (other - self).magnitude()

    def copy(self) -> "Vector2D":
        """Return an independent copy of the vector.

        Returns
        -------
        Vector2D
            New vector with the same components.
        """
        return Vector2D(self.x, self.y)


@dataclass(frozen=True)
class Rect:
    """Immutable axis-aligned rectangle anchored at its top-left corner.

    Obstacles, reserved zones and the arena bounds are all expressed with this
    type. Overlap and containment tests are strict, so rectangles that merely
    share an edge do not overlap.

    Parameters
    ----------
    x : float
        Left edge.
    y : float
        Top edge.
    w : float
        Width along ``x``.
    h : float
        Height along ``y``.
    """

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        """Return the right edge coordinate."""
        return self.x + self.w

    @property
    def bottom(self) -> float:
        """Return the bottom edge coordinate."""
        return self.y + self.h

    @property
    def is_horizontal(self) -> bool:
        """Return ``True`` when the rectangle is wider than it is tall."""
        return self.w > self.h

    def overlaps(self, other: "Rect") -> bool:
        """Return whether the interiors of two rectangles intersect.

        Parameters
        ----------
        other : Rect
            Rectangle to test against.

        Returns
        -------
        bool
            ``True`` when the rectangles share interior area.
        """
        return self.x < other.right and self.right > other.x and self.y < other.bottom and self.bottom > other.y

    def gap_to(self, other: "Rect") -> float:
        """Return the shortest distance between the two rectangle outlines.

        Parameters
        ----------
        other : Rect
            Rectangle to measure against.

        Returns
        -------
        float
            Euclidean gap between the bounding boxes; ``0.0`` when they touch or overlap.
        """
        dx = max(0.0, self.x - other.right, other.x - self.right)
        dy = max(0.0, self.y - other.bottom, other.y - self.bottom)
        return math.sqrt(dx * dx + dy * dy)

    def contains_point(self, x: float, y: float) -> bool:
        """Return whether a point lies strictly inside the rectangle.

        Parameters
        ----------
        x : float
            Horizontal coordinate of the point.
        y : float
            Vertical coordinate of the point.

        Returns
        -------
        bool
            ``True`` for points in the open interior.
        """
        return self.x < x < self.right and self.y < y < self.bottom

    def distance_to_point(self, x: float, y: float) -> float:
        """Return the distance from a point to the closest point of the rectangle.

        Parameters
        ----------
        x : float
            Horizontal coordinate of the point.
        y : float
            Vertical coordinate of the point.

        Returns
        -------
        float
            ``0.0`` for points on or inside the rectangle.
        """
        nearest_x = min(max(x, self.x), self.right)
        nearest_y = min(max(y, self.y), self.bottom)
        dx = x - nearest_x
        dy = y - nearest_y
        return math.sqrt(dx * dx + dy * dy)

    def intersects_circle(self, x: float, y: float, radius: float) -> bool:
        """Return whether a circle overlaps the rectangle.

        A non-positive radius degenerates to the strict point-in-rectangle test.

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
            ``True`` when any part of the circle lies closer than ``radius`` to the rectangle.
        """
        if radius <= 0:
            return self.contains_point(x, y)
        return self.distance_to_point(x, y) < radius

    def intersects_segment(self, start: Vector2D, end: Vector2D) -> bool:
        """Return whether the segment ``start -> end`` touches the rectangle.

        Uses Liang-Barsky clipping: the segment is clipped against the slab of
        each of the four edges and intersects the rectangle when a non-empty
        parameter interval survives.

        Parameters
        ----------
        start : Vector2D
            First endpoint of the segment.
        end : Vector2D
            Second endpoint of the segment.

        Returns
        -------
        bool
            ``True`` when any point of the segment lies on or inside the rectangle.
        """
        dx = end.x - start.x
        dy = end.y - start.y
        t_enter, t_exit = 0.0, 1.0
        for p, q in (
            (-dx, start.x - self.x),
            (dx, self.right - start.x),
            (-dy, start.y - self.y),
            (dy, self.bottom - start.y),
        ):
            if p == 0:
                # Parallel to this edge: outside the slab means no hit at all.
                if q < 0:
                    return False
                continue
            t = q / p
            if p < 0:
                if t > t_exit:
                    return False
                t_enter = max(t_enter, t)
            else:
                if t < t_enter:
                    return False
                t_exit = min(t_exit, t)
        return t_enter <= t_exit
