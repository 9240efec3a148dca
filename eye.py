"""
Eye (angular food sensor) for EvoForage.

The eye splits the animal's field of view into `cells` equal angular bins.
Every food within `fov_range` and within `fov_half_angle` of the heading
adds energy to the bin it falls into:

  energy = (fov_range − distance) / fov_range      (1 at contact, 0 at the edge)

Bins accumulate additively; the result feeds the brain's input layer.

Angles follow the animal's heading convention: rotation 0 faces +y and
positive angles turn counter-clockwise, so a heading θ moves along
(−sin θ, cos θ).
"""

import math

import numpy as np

from config import FOV_RANGE, FOV_HALF_ANGLE, EYE_CELLS


def wrap_angle(angle: float) -> float:
    """Normalise an angle into (−π, π]."""
    wrapped = math.fmod(angle + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


def bearing(dx: float, dy: float) -> float:
    """Angle of the vector (dx, dy) measured from +y, counter-clockwise."""
    return math.atan2(-dx, dy)


class Eye:
    """Fixed sensor geometry; stateless."""

    __slots__ = ("fov_range", "fov_half_angle", "cells")

    def __init__(self, fov_range: float = FOV_RANGE,
                 fov_half_angle: float = FOV_HALF_ANGLE,
                 cells: int = EYE_CELLS):
        if fov_range <= 0.0:
            raise ValueError(f"fov_range must be positive, got {fov_range}")
        if fov_half_angle <= 0.0:
            raise ValueError(
                f"fov_half_angle must be positive, got {fov_half_angle}")
        if cells <= 0:
            raise ValueError(f"eye needs at least one cell, got {cells}")
        self.fov_range      = fov_range
        self.fov_half_angle = fov_half_angle
        self.cells          = int(cells)

    def __repr__(self) -> str:
        return (f"Eye(fov_range={self.fov_range}, "
                f"fov_half_angle={self.fov_half_angle:.3f}, cells={self.cells})")

    def process_vision(self, position, rotation: float, foods) -> np.ndarray:
        """
        Args:
            position: (x, y) of the animal
            rotation: heading in radians
            foods:    iterable of objects with a `.position` (x, y)

        Returns:
            float array of shape (cells,), values ≥ 0
        """
        cells = np.zeros(self.cells, dtype=np.float64)
        px, py = position
        fov_width = 2.0 * self.fov_half_angle

        for food in foods:
            dx = food.position[0] - px
            dy = food.position[1] - py
            distance = math.hypot(dx, dy)
            if distance > self.fov_range:
                continue

            angle = wrap_angle(bearing(dx, dy) - rotation)
            if angle < -self.fov_half_angle or angle > self.fov_half_angle:
                continue

            # Map [−half, +half] linearly onto [0, cells)
            cell = int((angle + self.fov_half_angle) / fov_width * self.cells)
            cell = min(cell, self.cells - 1)

            cells[cell] += (self.fov_range - distance) / self.fov_range

        return cells
