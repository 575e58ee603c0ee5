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
"""Entry point for interactive pursuit rounds and the optional visualiser."""
import threading
import time

from pursuit.engine.clock import RunHandle, SimulationClock
from pursuit.engine.simulation import Simulation
from pursuit.utils.debug import SimulationDebugger


def print_simulation_status(simulation: Simulation, handle: RunHandle) -> None:
    """Print pursuer state changes and the outcome while the clock runs.

    Parameters
    ----------
    simulation : Simulation
        Running simulation whose events should be reported.
    handle : RunHandle
        Handle of the clock driving ``simulation``.
    """
    last_event_count = 0
    while True:
        still_running = handle.is_running
        new_events = simulation.events[last_event_count:]
        for event in new_events:
            if event.event_type in ["state_change", "caught", "regenerate"]:
                print(f"[{event.tick:05d}] {event.description}")
        last_event_count += len(new_events)
        if not still_running:
            break
        time.sleep(0.25)


def main() -> None:
    """Start a round, preferring the pygame window and falling back to a headless run."""
    debugger = SimulationDebugger()
    simulation = Simulation(debugger=debugger)

    try:
        from pursuit.visualizer.visualizer import pygame, start_visualizer
    except Exception:
        pygame = None

    try:
        if pygame is not None:
            print("Visualizer started. Use the arrow keys to run, q to quit.")
            start_visualizer(simulation)
            return

        # No window: the evader stands still and the pursuer patrols until it finds it.
        print("pygame not available, running headless. Press Ctrl+C to stop.")
        handle = SimulationClock(simulation).start()
        status_thread = threading.Thread(target=print_simulation_status, args=(simulation, handle))
        status_thread.start()
        try:
            while handle.is_running:
                time.sleep(0.1)
        except KeyboardInterrupt:
            print("\nSimulation interrupted.")
            handle.cancel()
        status_thread.join()
        print(f"\nFinished after {simulation.tick_count} ticks; caught: {simulation.caught}")
    finally:
        debugger.close()


if __name__ == "__main__":
    main()
