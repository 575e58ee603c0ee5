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
"""Optional pygame front end for the pursuit simulation."""
import math
import threading
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

try:
    import pygame
except Exception:
    pygame = None

from pursuit.engine.clock import ResizeDebouncer, SimulationClock
from pursuit.engine.geometry import Vector2D
from pursuit.engine.simulation import FrameSnapshot, PursuerView, Simulation
from pursuit.utils.controls import intent_from_keys

# Colors
BACKGROUND = (0, 0, 0)
OBSTACLE = (128, 128, 128)
TRAIL = (255, 255, 0)
CONE_VISIBLE = (255, 0, 0, 64)
CONE_HIDDEN = (0, 0, 255, 38)
EVADER_VISIBLE = (255, 0, 0)
EVADER_HIDDEN = (0, 255, 255)
PURSUER = (255, 165, 0)
TEXT = (255, 255, 255)

TRAIL_DOT_RADIUS = 4


def cone_polygon(view: PursuerView, segments: int = 24) -> List[Tuple[float, float]]:
    """Return the outline of the pursuer's vision cone as a polygon.

    Parameters
    ----------
    view : PursuerView
        Pursuer position, heading and vision parameters.
    segments : int, optional
        Number of straight segments approximating the arc.

    Returns
    -------
    List[Tuple[float, float]]
        Apex followed by the arc points from one cone edge to the other.
    """
    start = view.heading - view.fov_angle / 2
    points = [(view.x, view.y)]
    for i in range(segments + 1):
        angle = start + view.fov_angle * i / segments
        points.append((view.x + math.cos(angle) * view.vision_range, view.y + math.sin(angle) * view.vision_range))
    return points


def trail_alpha(index: int, length: int) -> int:
    """Return the opacity of a trail dot, fading from oldest to newest.

    Parameters
    ----------
    index : int
        Position of the dot in the trail, ``0`` being the oldest.
    length : int
        Number of dots in the trail.

    Returns
    -------
    int
        Alpha value in ``[0, 255]``.
    """
    if length <= 0:
        return 0
    return int(255 * index / length)


def hud_text(frame: FrameSnapshot) -> str:
    """Return the status line drawn in the top-left corner.

    Parameters
    ----------
    frame : FrameSnapshot
        State to describe.

    Returns
    -------
    str
        Tick, pursuer state and, once evaluated, which visibility checks pass.
    """
    text = f"Tick {frame.tick}  Pursuer: {frame.pursuer.state}"
    seen = frame.perception
    if seen is not None:
        flags = ((seen.in_range, "range"), (seen.in_cone, "cone"), (seen.line_clear, "sight"))
        text += "  " + " ".join(f"{label}:{'Y' if ok else 'N'}" for ok, label in flags)
        text += f"  dist {seen.distance:.0f}"
    return text


def draw_frame(
    surface: "pygame.Surface",
    frame: FrameSnapshot,
    font: "pygame.font.Font",
    debug_lines: Sequence[str] = (),
) -> None:
    """Render one snapshot onto ``surface``.

    Parameters
    ----------
    surface : pygame.Surface
        Target surface, normally the display.
    frame : FrameSnapshot
        State to draw.
    font : pygame.font.Font
        Font used for the HUD and the game over banner.
    debug_lines : Sequence[str], optional
        Recent debugger entries shown in a panel along the bottom edge.
    """
    surface.fill(BACKGROUND)
    for obs in frame.obstacles:
        pygame.draw.rect(surface, OBSTACLE, pygame.Rect(int(obs.x), int(obs.y), int(obs.w), int(obs.h)))

    overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    for i, (tx, ty) in enumerate(frame.trail):
        pygame.draw.circle(overlay, (*TRAIL, trail_alpha(i, len(frame.trail))), (int(tx), int(ty)), TRAIL_DOT_RADIUS)
    pygame.draw.polygon(overlay, CONE_VISIBLE if frame.visible else CONE_HIDDEN, cone_polygon(frame.pursuer))
    surface.blit(overlay, (0, 0))

    evader, pursuer = frame.evader, frame.pursuer
    evader_color = EVADER_VISIBLE if frame.visible else EVADER_HIDDEN
    pygame.draw.circle(surface, evader_color, (int(evader.x), int(evader.y)), int(evader.radius))
    pygame.draw.circle(surface, PURSUER, (int(pursuer.x), int(pursuer.y)), int(pursuer.radius))

    surface.blit(font.render(hud_text(frame), True, TEXT), (10, 10))

    if frame.caught:
        banner = font.render("GAME OVER!", True, TEXT)
        bx = (surface.get_width() - banner.get_width()) // 2
        by = (surface.get_height() - banner.get_height()) // 2
        surface.blit(banner, (bx, by))

    if debug_lines:
        line_height = font.get_linesize()
        panel_height = line_height * len(debug_lines) + 12
        panel = pygame.Surface((surface.get_width(), panel_height), pygame.SRCALPHA)
        panel.fill((0, 0, 0, 140))
        surface.blit(panel, (0, surface.get_height() - panel_height))
        base_y = surface.get_height() - panel_height + 6
        for idx, entry in enumerate(debug_lines):
            surface.blit(font.render(entry, True, TEXT), (12, base_y + idx * line_height))


def start_visualizer(
    simulation: Simulation,
    fps: int = 60,
    frame_interval: Optional[float] = None,
    show_log: bool = False,
) -> None:
    """Open a window, run the simulation clock and draw every frame.

    Arrow keys steer the evader. Resizing the window regenerates the arena
    once the resize has settled. Closing the window or pressing ``q`` cancels
    the clock. If ``pygame`` is not installed the function returns immediately.

    Parameters
    ----------
    simulation : Simulation
        Simulation to drive and display.
    fps : int, optional
        Redraw rate of the window.
    frame_interval : float | None, optional
        Seconds between simulation ticks; defaults to the engine configuration.
    show_log : bool, optional
        Whether to overlay the most recent debugger entries.
    """
    if pygame is None:
        return

    pygame.init()
    screen_size = (int(simulation.arena.width), int(simulation.arena.height))
    screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
    pygame.display.set_caption("Pursuit")
    font = pygame.font.SysFont(None, 32)
    redraw_clock = pygame.time.Clock()

    key_bindings: Dict[int, str] = {
        pygame.K_UP: "up",
        pygame.K_DOWN: "down",
        pygame.K_LEFT: "left",
        pygame.K_RIGHT: "right",
    }
    held: Dict[str, FrozenSet[str]] = {"keys": frozenset()}
    latest: Dict[str, Optional[FrameSnapshot]] = {"frame": simulation.snapshot()}

    def on_frame(frame: FrameSnapshot) -> None:
        latest["frame"] = frame

    def intent() -> Vector2D:
        return intent_from_keys(held["keys"])

    lock = threading.Lock()
    sim_clock = SimulationClock(simulation, on_frame, intent, frame_interval, lock)
    debouncer = ResizeDebouncer(simulation, lock)
    handle = sim_clock.start()

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_q:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                debouncer.notify(event.w, event.h)

        pressed = pygame.key.get_pressed()
        held["keys"] = frozenset(name for key, name in key_bindings.items() if pressed[key])

        frame = latest["frame"]
        if frame is None or frame.width != simulation.arena.width or frame.height != simulation.arena.height:
            # A regeneration happened between ticks; show the new world straight away.
            with lock:
                frame = simulation.snapshot()
        debug_lines: List[str] = []
        if show_log and simulation.debugger is not None:
            debug_lines = simulation.debugger.get_recent_events(limit=6)
        draw_frame(screen, frame, font, debug_lines)
        pygame.display.flip()
        redraw_clock.tick(fps)

    handle.cancel()
    debouncer.cancel()
    pygame.quit()
