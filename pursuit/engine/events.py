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
"""Event domain models for the simulation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SimulationEvent:
    """Snapshot of a noteworthy moment during a simulation.

    Parameters
    ----------
    tick : int
        Tick on which the event occurred.
    event_type : str
        Category of event (for example ``"state_change"`` or ``"caught"``).
    description : str
        Human-readable summary of what happened.
    """

    tick: int
    event_type: str  # state_change, caught, regenerate
    description: str
