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
"""Structured logging utilities used to trace pursuit simulations."""
import time
from collections import deque
from contextlib import suppress
from pathlib import Path
from threading import Lock
from typing import Deque, List, Optional, TextIO, Tuple


class SimulationDebugger:
    """Helper object that streams structured simulation telemetry to disk.

    Parameters
    ----------
    output_dir : str, default="debug_logs"
        Directory where new session logs are created; created automatically when missing.
    write_to_disk : bool, default=True
        Keep only the in-memory ring of recent events when ``False``.
    """

    def __init__(self, output_dir: str = "debug_logs", write_to_disk: bool = True) -> None:
        """Initialise the debugger and start the first logging session.

        Parameters
        ----------
        output_dir : str
            Filesystem directory where log files are created.
        write_to_disk : bool
            Whether a session file should be opened at all.
        """
        self.output_dir = Path(output_dir)
        self.write_to_disk = write_to_disk
        self.log_file: Optional[TextIO] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=200)
        if self.write_to_disk:
            self.start_new_session()

    def start_new_session(self) -> None:
        """Start a new debug logging session."""
        if self.log_file:
            self.log_file.close()

        self.output_dir.mkdir(parents=True, exist_ok=True)
        filename = f"pursuit_debug_{self.session_start}.txt"
        self.log_file = open(self.output_dir / filename, "w", encoding="utf-8")
        self.log_file.write(f"=== Pursuit Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_actor_state(
        self,
        tick: int,
        label: str,
        position: tuple[float, float],
        heading: float,
        state: str | None = None,
        target: tuple[float, float] | None = None,
    ) -> None:
        """Log the current state of an actor.

        Parameters
        ----------
        tick : int
            Simulation tick being traced.
        label : str
            Actor name, ``"evader"`` or ``"pursuer"``.
        position : tuple[float, float]
            Actor coordinates (x, y).
        heading : float
            Facing direction in radians.
        state : str | None
            Behavioural state for the pursuer, when applicable.
        target : tuple[float, float] | None
            Point the actor is currently steering towards, if any.
        """
        state_str = f" | State: {state}" if state else ""
        target_str = f" | Target: ({target[0]:.1f}, {target[1]:.1f})" if target else ""
        self._write_log(
            "ACTOR_STATE",
            f"Tick: {tick} | {label} | "
            f"Pos: ({position[0]:.1f}, {position[1]:.1f}) | "
            f"Heading: {heading:.3f}"
            f"{state_str}"
            f"{target_str}",
        )

    def log_event(self, tick: int, event_type: str, description: str) -> None:
        """Log a simulation event (state change, capture, regeneration).

        Parameters
        ----------
        tick : int
            Simulation tick when the event happened.
        event_type : str
            Short label identifying the event category.
        description : str
            Human-readable summary of the event.
        """
        self._write_log("SIM_EVENT", f"Tick: {tick} | Event: {event_type} | Details: {description}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Write a log entry to the file.

        Parameters
        ----------
        event_type : str
            Category label for the log entry.
        details : str
            Formatted message body to persist.
        """
        timestamp = time.strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {event_type}: {details}"

        with self._lock:
            line_no = self._line_number
            self._line_number += 1
            self._recent_events.append((line_no, log_entry))

            if self.log_file:
                try:
                    self.log_file.write(f"{log_entry}\n")
                    self.log_file.flush()
                except OSError as exc:
                    # Keep the in-memory ring going once the file becomes unwritable.
                    broken, self.log_file = self.log_file, None
                    with suppress(OSError):
                        broken.close()
                    self._recent_events.append((line_no, f"[{timestamp}] ERROR: log file disabled: {exc}"))

    def get_recent_events(self, limit: int = 20) -> List[str]:
        """Return the latest debug entries with line numbers for live displays.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.

        Returns
        -------
        List[str]
            Up to ``limit`` most recent log lines with prefixed line numbers.
        """
        with self._lock:
            selected = list(self._recent_events)[-limit:]
        return [f"{line_no:05d} {entry}" for line_no, entry in selected]

    def close(self) -> None:
        """Close the log file."""
        with self._lock:
            if self.log_file:
                self.log_file.close()
                self.log_file = None
