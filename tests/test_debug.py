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
"""Tests for the simulation debugger."""

from pathlib import Path

from pursuit.utils.debug import SimulationDebugger


class BrokenLogFile:
    """Log file stand-in whose writes fail."""

    def __init__(self) -> None:
        """Start unclosed."""
        self.closed = False

    def write(self, text: str) -> int:
        """Fail like a full disk."""
        raise OSError(28, "No space left on device")

    def flush(self) -> None:
        """Nothing buffered."""

    def close(self) -> None:
        """Record the close."""
        self.closed = True


class TestSimulationDebugger:
    """File-backed event logging."""

    def test_session_file_created(self, tmp_path: Path) -> None:
        """Starting a debugger creates a session file in a fresh directory."""
        output_dir = tmp_path / "logs" / "nested"
        debugger = SimulationDebugger(output_dir=str(output_dir))
        debugger.close()
        files = list(output_dir.glob("pursuit_debug_*.txt"))
        assert len(files) == 1
        assert files[0].read_text(encoding="utf-8").startswith("=== Pursuit Debug Session")

    def test_events_written_and_kept(self, tmp_path: Path) -> None:
        """Entries are kept in the recent ring and written to disk."""
        debugger = SimulationDebugger(output_dir=str(tmp_path))
        debugger.log_event(4, "caught", "Evader caught at distance 39.90")
        debugger.log_actor_state(4, "pursuer", (101.0, 300.0), 0.0, "chase", (140.0, 300.0))
        debugger.log_error("spawn_fallback", "No clear spawn")
        debugger.close()

        recent = debugger.get_recent_events()
        assert len(recent) == 3
        assert recent[0].startswith("00001 ")
        assert recent[0].endswith("SIM_EVENT: Tick: 4 | Event: caught | Details: Evader caught at distance 39.90")
        text = next(tmp_path.glob("pursuit_debug_*.txt")).read_text(encoding="utf-8")
        assert "SIM_EVENT: Tick: 4 | Event: caught" in text
        assert "State: chase | Target: (140.0, 300.0)" in text
        assert "ERROR: Type: spawn_fallback" in text

    def test_memory_only_mode(self, tmp_path: Path) -> None:
        """Disabling disk output still records recent entries."""
        debugger = SimulationDebugger(output_dir=str(tmp_path / "unused"), write_to_disk=False)
        for tick in range(30):
            debugger.log_event(tick, "state_change", f"change {tick}")
        recent = debugger.get_recent_events(limit=5)
        debugger.close()

        assert not (tmp_path / "unused").exists()
        assert len(recent) == 5
        assert recent[-1].startswith("00030 ")
        assert recent[-1].endswith("Details: change 29")

    def test_unwritable_file_is_closed_and_dropped(self) -> None:
        """A failing write closes the file, keeps the ring and never raises."""
        debugger = SimulationDebugger(write_to_disk=False)
        broken = BrokenLogFile()
        debugger.log_file = broken  # type: ignore[assignment]

        debugger.log_event(1, "state_change", "patrol -> chase")
        debugger.log_event(2, "caught", "Evader caught at distance 30.00")

        assert broken.closed
        assert debugger.log_file is None
        recent = debugger.get_recent_events()
        assert "ERROR: log file disabled" in recent[1]
        assert recent[-1].endswith("Details: Evader caught at distance 30.00")
