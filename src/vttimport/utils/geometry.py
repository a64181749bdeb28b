"""2D geometry helpers: grid-to-pixel mapping and path construction."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from vttimport.core.contracts import Command, Vector2


def to_pixel_space(
    points: Sequence[Vector2],
    density: float,
    scale: Vector2 = Vector2(x=1, y=1),
) -> np.ndarray:
    """Map grid-space points to pixels: (x, y) -> (x * density * sx, y * density * sy).

    Returns:
        (N, 2) float64 array, in input order.
    """
    xy = np.array([[p.x, p.y] for p in points], dtype=np.float64).reshape(-1, 2)
    return xy * density * np.array([scale.x, scale.y], dtype=np.float64)


def polyline_commands(xy: np.ndarray) -> list[tuple[int, float, float]]:
    """MOVE to the first point, then LINE to each following point."""
    if len(xy) == 0:
        return []
    commands = [(Command.MOVE.value, float(xy[0, 0]), float(xy[0, 1]))]
    commands.extend((Command.LINE.value, float(x), float(y)) for x, y in xy[1:])
    return commands


def span_length(xy: np.ndarray) -> float:
    """Euclidean distance between the first and last point."""
    dx, dy = xy[-1] - xy[0]
    return float(np.hypot(dx, dy))
