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
"""Fixed-rate scheduling of simulation ticks and debounced arena resizing.

The clock drives :meth:`Simulation.tick` from a worker thread. Every tick, and
every regeneration triggered by the resize debouncer, runs while holding the
same lock, so a cancelled clock never ticks again and a tick never observes an
arena that is being rebuilt.
"""
from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from .config import ENGINE_CONFIG
from .geometry import Vector2D

if TYPE_CHECKING:
    from .simulation import FrameSnapshot, Simulation

FrameCallback = Callable[["FrameSnapshot"], None]
IntentSource = Callable[[], Vector2D]


class RunHandle:
    """Cancellation handle returned by :meth:`SimulationClock.start`.

    Parameters
    ----------
    thread : threading.Thread
        Worker thread running the tick loop.
    stop_event : threading.Event
        Flag checked by the worker before every tick.
    lock : threading.Lock
        Lock shared with the tick so cancellation and ticking never interleave.
    """

    def __init__(self, thread: threading.Thread, stop_event: threading.Event, lock: threading.Lock) -> None:
        """Wrap the worker thread and its stop flag.

        Parameters
        ----------
        thread : threading.Thread
            Worker thread running the tick loop.
        stop_event : threading.Event
            Flag checked by the worker before every tick.
        lock : threading.Lock
            Lock shared with the tick.
        """
        self.thread = thread
        self.stop_event = stop_event
        self.lock = lock

    @property
    def is_running(self) -> bool:
        """Return ``True`` while the worker thread is alive and not cancelled."""
        return self.thread.is_alive() and not self.stop_event.is_set()

    def cancel(self) -> None:
        """Stop the tick loop.

        Once this returns no further tick will run. Calling it from inside a
        frame callback is allowed; the worker then exits after the callback.
        Repeated calls are harmless.
        """
        with self.lock:
            self.stop_event.set()
        if threading.current_thread() is not self.thread:
            self.join()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker thread to exit.

        Parameters
        ----------
        timeout : float | None, optional
            Maximum number of seconds to wait.

        Returns
        -------
        bool
            ``True`` when the worker has finished.
        """
        if self.thread.ident is not None:
            self.thread.join(timeout)
        return not self.thread.is_alive()


class SimulationClock:
    """Run a simulation at a fixed frame interval on a worker thread.

    Parameters
    ----------
    simulation : Simulation
        Simulation to advance.
    on_frame : Callable[[FrameSnapshot], None] | None, optional
        Called with every snapshot, outside the tick lock.
    intent_source : Callable[[], Vector2D] | None, optional
        Polled before every tick for the evader intent; zero intent when omitted.
    frame_interval : float | None, optional
        Seconds between ticks; defaults to ``ENGINE_CONFIG.simulation.frame_interval``.
    lock : threading.Lock | None, optional
        Lock to share with other writers such as :class:`ResizeDebouncer`.

    Raises
    ------
    ValueError
        If ``frame_interval`` is not positive.
    """

    def __init__(
        self,
        simulation: "Simulation",
        on_frame: Optional[FrameCallback] = None,
        intent_source: Optional[IntentSource] = None,
        frame_interval: Optional[float] = None,
        lock: Optional[threading.Lock] = None,
    ) -> None:
        """Store the collaborators and validate the frame interval.

        Parameters
        ----------
        simulation : Simulation
            Simulation to advance.
        on_frame : Callable[[FrameSnapshot], None] | None
            Called with every snapshot.
        intent_source : Callable[[], Vector2D] | None
            Polled before every tick for the evader intent.
        frame_interval : float | None
            Seconds between ticks.
        lock : threading.Lock | None
            Lock to share with other writers.
        """
        interval = ENGINE_CONFIG.simulation.frame_interval if frame_interval is None else frame_interval
        if interval <= 0:
            raise ValueError(f"Frame interval must be positive, got {interval}")
        self.simulation = simulation
        self.on_frame = on_frame
        self.intent_source = intent_source
        self.frame_interval = interval
        self.lock = lock if lock is not None else threading.Lock()
        self.handle: Optional[RunHandle] = None

    def _intent(self) -> Vector2D:
        """Return the evader intent for the next tick.

        Returns
        -------
        Vector2D
            Intent from ``intent_source`` or zero.
        """
        if self.intent_source is None:
            return Vector2D(0, 0)
        return self.intent_source()

    def step(self, stop_event: Optional[threading.Event] = None) -> Optional["FrameSnapshot"]:
        """Run a single tick under the shared lock.

        Parameters
        ----------
        stop_event : threading.Event | None, optional
            When set, the tick is skipped.

        Returns
        -------
        FrameSnapshot | None
            Snapshot of the tick, or ``None`` when it was skipped.
        """
        intent = self._intent()
        with self.lock:
            if stop_event is not None and stop_event.is_set():
                return None
            return self.simulation.tick(intent)

    def run_ticks(self, count: int) -> List["FrameSnapshot"]:
        """Run up to ``count`` ticks synchronously without sleeping.

        Stops early after delivering the capture frame.

        Parameters
        ----------
        count : int
            Maximum number of ticks.

        Returns
        -------
        List[FrameSnapshot]
            Snapshots in the order they were produced.
        """
        frames: List["FrameSnapshot"] = []
        for _ in range(count):
            frame = self.step()
            if frame is None:
                break
            frames.append(frame)
            if self.on_frame:
                self.on_frame(frame)
            if frame.caught:
                break
        return frames

    def start(self) -> RunHandle:
        """Start ticking on a worker thread.

        Returns
        -------
        RunHandle
            Handle used to cancel the loop.

        Raises
        ------
        RuntimeError
            If the clock is already running.
        """
        if self.handle is not None and self.handle.is_running:
            raise RuntimeError("Simulation clock is already running")
        stop_event = threading.Event()
        thread = threading.Thread(target=self._run, args=(stop_event,), name="pursuit-clock", daemon=True)
        self.handle = RunHandle(thread, stop_event, self.lock)
        thread.start()
        return self.handle

    def _run(self, stop_event: threading.Event) -> None:
        """Tick loop executed on the worker thread.

        Parameters
        ----------
        stop_event : threading.Event
            Flag that ends the loop.
        """
        while not stop_event.is_set():
            started = time.monotonic()
            frame = self.step(stop_event)
            if frame is None:
                break
            if self.on_frame:
                self.on_frame(frame)
            if frame.caught:
                # The capture frame is the last one delivered.
                stop_event.set()
                break
            elapsed = time.monotonic() - started
            stop_event.wait(max(0.0, self.frame_interval - elapsed))


class ResizeDebouncer:
    """Collapse bursts of resize notifications into a single regeneration.

    Parameters
    ----------
    simulation : Simulation
        Simulation whose arena is regenerated.
    lock : threading.Lock
        Lock shared with the clock so regeneration never overlaps a tick.
    delay : float | None, optional
        Quiescence window in seconds; defaults to ``ENGINE_CONFIG.simulation.resize_debounce``.
    """

    def __init__(self, simulation: "Simulation", lock: threading.Lock, delay: Optional[float] = None) -> None:
        """Create an idle debouncer.

        Parameters
        ----------
        simulation : Simulation
            Simulation whose arena is regenerated.
        lock : threading.Lock
            Lock shared with the clock.
        delay : float | None
            Quiescence window in seconds.
        """
        self.simulation = simulation
        self.lock = lock
        self.delay = ENGINE_CONFIG.simulation.resize_debounce if delay is None else delay
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Tuple[float, float]] = None
        self._guard = threading.Lock()

    @property
    def pending(self) -> Optional[Tuple[float, float]]:
        """Return the size waiting to be applied, if any."""
        with self._guard:
            return self._pending

    def notify(self, width: float, height: float) -> None:
        """Record a new size and restart the quiescence window.

        Parameters
        ----------
        width : float
            Latest reported width.
        height : float
            Latest reported height.
        """
        with self._guard:
            self._pending = (width, height)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Apply the pending size immediately.

        Returns
        -------
        bool
            ``True`` when the simulation regenerated its arena.
        """
        with self._guard:
            size, self._pending = self._pending, None
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        if size is None:
            return False
        with self.lock:
            return self.simulation.resize(*size)

    def cancel(self) -> None:
        """Drop any pending size without applying it."""
        with self._guard:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
