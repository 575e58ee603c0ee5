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
"""Run a seeded round without a window and summarise what happened."""
from collections import Counter
from dataclasses import replace

from pursuit.engine.clock import SimulationClock
from pursuit.engine.config import ENGINE_CONFIG
from pursuit.engine.simulation import Simulation
from pursuit.utils.debug import SimulationDebugger


def run_headless(ticks: int = 3600, seed: int = 7, trace: bool = False) -> None:
    """Run a short round with a stationary evader as fast as possible.

    Parameters
    ----------
    ticks : int
        Maximum number of ticks to run (default 3600, one minute at 60 Hz).
    seed : int
        Seed for the arena layout and the pursuer's random choices.
    trace : bool
        Whether to log both actor positions on every tick.
    """
    config = replace(
        ENGINE_CONFIG,
        simulation=replace(ENGINE_CONFIG.simulation, seed=seed, trace_actors=trace),
    )
    debugger = SimulationDebugger()
    simulation = Simulation(config=config, debugger=debugger)

    frames = SimulationClock(simulation).run_ticks(ticks)

    states = Counter(frame.pursuer.state for frame in frames)
    debugger.close()
    print(f"Arena {simulation.arena.width:.0f}x{simulation.arena.height:.0f}, {len(simulation.arena.obstacles)} obstacles")
    print(f"Ran {len(frames)} ticks; caught: {simulation.caught}")
    for state, count in states.most_common():
        print(f"  {state}: {count} ticks")


if __name__ == "__main__":
    run_headless()
