#!/usr/bin/env python3

# -------------------------------------------------------
# Script: render_torus.py
#
# Description:
# Renders an animated spinning 3D torus in ASCII art.
# Each frame is sized to the current terminal, shaded with a
# luminance palette and drawn in place. Stops cleanly on
# SIGINT or SIGTERM once the current frame is on screen.
#
# Usage:
#   ./render_torus.py [options]
#
# Options:
#   -v, --verbose           Enable verbose logging (INFO level).
#   -vv, --debug            Enable debug logging (DEBUG level).
#
# Template: ubuntu24.04
#
# Requirements:
#   - colorama (install via: pip install colorama==0.4.6)
#
# -------------------------------------------------------
# © 2025 Hendrik Buchwald. All rights reserved.
# -------------------------------------------------------

import argparse
import logging
import math
import signal
import subprocess
import sys
import threading
import time
from typing import Callable, Dict, Iterator, List, Optional, TextIO, Tuple

import colorama

# Torus geometry
TUBE_RADIUS = 1  # R1, thickness of the torus
REVOLUTION_RADIUS = 2  # R2, distance from the center to the middle of the tube
VIEWER_DISTANCE = 5  # K2, distance from the viewer to the torus center
THETA_SPACING = 0.03
PHI_SPACING = 0.01

# Animation
A_STEP = 0.04
B_STEP = 0.02
FRAME_DELAY = 0.01

LUMINANCE_CHARS = ".,-~:;=!*#$@"
CURSOR_HOME = "\x1b[H"

Frame = List[List[str]]
SizeProvider = Callable[[], Tuple[int, int]]


class TerminalSizeError(Exception):
    """Raised when the terminal size cannot be queried or parsed."""


def parse_arguments() -> argparse.Namespace:
    """
    Parses command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Renders an animated spinning 3D torus in ASCII art."
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level).",
    )
    parser.add_argument(
        "-vv",
        "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level).",
    )
    return parser.parse_args()


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Sets up the logging configuration.
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def parse_stty_size(output: str) -> Tuple[int, int]:
    """
    Parses the "<rows> <columns>" output of `stty size`.
    Returns (width, height).
    """
    tokens = output.split()
    if len(tokens) != 2:
        raise TerminalSizeError(f"Unexpected terminal size output: {output!r}")

    try:
        rows, columns = int(tokens[0]), int(tokens[1])
    except ValueError as e:
        raise TerminalSizeError(f"Invalid terminal size {output!r}: {e}") from e

    if rows < 1 or columns < 1:
        raise TerminalSizeError(f"Terminal size must be positive, got {output!r}")

    return columns, rows


def stty_terminal_size() -> Tuple[int, int]:
    """
    Queries the terminal size with `stty size` on the process's stdin.
    """
    try:
        output = subprocess.check_output(["stty", "size"], stdin=sys.stdin, text=True)
    except subprocess.CalledProcessError as e:
        raise TerminalSizeError(f"Error executing stty: {e}") from e
    except FileNotFoundError as e:
        raise TerminalSizeError("stty command not found.") from e

    return parse_stty_size(output)


def luminance_index(luminance: float) -> int:
    """
    Maps a luminance value to a palette index in [0, len(LUMINANCE_CHARS) - 1].
    """
    index = int(luminance * 8)
    return max(0, min(index, len(LUMINANCE_CHARS) - 1))


def torus_samples(a: float, b: float) -> Iterator[Tuple[float, float, float, float]]:
    """
    Walks the torus surface for rotation angles (a, b), theta outer and phi inner.
    Yields (x, y, z, luminance) for every sample in drawing order.
    """
    cos_a, sin_a = math.cos(a), math.sin(a)
    cos_b, sin_b = math.cos(b), math.sin(b)

    theta = 0.0
    while theta < 2 * math.pi:
        cos_theta, sin_theta = math.cos(theta), math.sin(theta)

        # Point on the tube's cross-section before revolution and rotation
        circle_x = REVOLUTION_RADIUS + TUBE_RADIUS * cos_theta
        circle_y = TUBE_RADIUS * sin_theta

        phi = 0.0
        while phi < 2 * math.pi:
            cos_phi, sin_phi = math.cos(phi), math.sin(phi)

            x = circle_x * (cos_b * cos_phi + sin_a * sin_b * sin_phi) - circle_y * cos_a * sin_b
            y = circle_x * (sin_b * cos_phi - sin_a * cos_b * sin_phi) + circle_y * cos_a * cos_b
            z = VIEWER_DISTANCE + cos_a * circle_x * sin_phi + circle_y * sin_a

            luminance = (
                cos_phi * cos_theta * sin_b
                - cos_a * cos_theta * sin_phi
                - sin_a * sin_theta
                + cos_b * (cos_a * sin_theta - cos_theta * sin_a * sin_phi)
            )

            yield x, y, z, luminance
            phi += PHI_SPACING
        theta += THETA_SPACING


def projection_scale(width: int) -> float:
    """
    Returns K1, scaled so the torus spans most of the screen width.
    """
    return width * VIEWER_DISTANCE * 3 / (8 * (TUBE_RADIUS + REVOLUTION_RADIUS))


def project(
    x: float, y: float, z: float, k1: float, width: int, height: int
) -> Tuple[int, int, float]:
    """
    Projects a 3D point onto the screen.
    Returns (column, row, inverse depth); screen rows grow downwards.
    """
    z_inverse = 1.0 / z
    x_proj = width // 2 + int(k1 * z_inverse * x)
    y_proj = height // 2 - int(k1 * z_inverse * y)
    return x_proj, y_proj, z_inverse


def plot(
    frame: Frame,
    zbuffer: List[List[float]],
    x_proj: int,
    y_proj: int,
    z_inverse: float,
    luminance: float,
) -> bool:
    """
    Draws one sample if it is lit, on screen and nearer than what the cell holds.
    Returns True when the cell was written.
    """
    if luminance <= 0:
        return False
    if not (0 <= y_proj < len(zbuffer) and 0 <= x_proj < len(zbuffer[y_proj])):
        return False
    if z_inverse <= zbuffer[y_proj][x_proj]:
        return False

    zbuffer[y_proj][x_proj] = z_inverse
    frame[y_proj][x_proj] = LUMINANCE_CHARS[luminance_index(luminance)]
    return True


def render_frame(a: float, b: float, width: int, height: int) -> Frame:
    """
    Renders one frame of the torus rotated by (a, b) as `height` rows of `width` characters.
    """
    frame = [[" "] * width for _ in range(height)]
    zbuffer = [[0.0] * width for _ in range(height)]
    k1 = projection_scale(width)

    for x, y, z, luminance in torus_samples(a, b):
        x_proj, y_proj, z_inverse = project(x, y, z, k1, width, height)
        plot(frame, zbuffer, x_proj, y_proj, z_inverse, luminance)

    return frame


def present_frame(frame: Frame, stream: Optional[TextIO] = None) -> None:
    """
    Moves the cursor home and writes the frame over the previous one.
    """
    if stream is None:
        stream = sys.stdout
    stream.write(CURSOR_HOME)
    for row in frame:
        stream.write("".join(row) + "\n")
    stream.flush()


def install_shutdown_handlers(shutdown: threading.Event) -> Dict[int, object]:
    """
    Sets `shutdown` on SIGINT or SIGTERM.
    Returns the previously installed handlers keyed by signal number.
    """

    def handle_signal(signum, frame) -> None:
        logging.debug(f"Received signal {signal.Signals(signum).name}, stopping after this frame.")
        shutdown.set()

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, handle_signal)
    return previous


def run_animation(
    shutdown: threading.Event,
    size_provider: SizeProvider = stty_terminal_size,
    presenter: Callable[[Frame], None] = present_frame,
    frame_delay: float = FRAME_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Renders and presents frames until `shutdown` is set.
    The frame in progress when shutdown is requested is still presented.
    Returns the number of frames presented.
    """
    a = 0.0
    b = 0.0
    frames = 0

    while True:
        width, height = size_provider()
        logging.debug(f"Frame {frames}: {width}x{height}, a={a:.2f}, b={b:.2f}")

        presenter(render_frame(a, b, width, height))
        frames += 1

        if shutdown.is_set():
            break

        a += A_STEP
        b += B_STEP
        sleep(frame_delay)

    return frames


def main() -> None:
    """
    Main function to orchestrate the torus animation.
    """
    args = parse_arguments()
    setup_logging(verbose=args.verbose, debug=args.debug)

    colorama.just_fix_windows_console()

    shutdown = threading.Event()
    install_shutdown_handlers(shutdown)

    logging.info("Starting torus animation.")
    try:
        frames = run_animation(shutdown)
    except TerminalSizeError as e:
        logging.error(f"Could not determine terminal size: {e}")
        sys.exit(1)

    logging.info(f"Animation finished after {frames} frames.")


if __name__ == "__main__":
    main()
