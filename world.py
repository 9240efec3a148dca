"""
World for EvoForage.

The world is the unit torus [0,1) x [0,1): leaving one edge re-enters at
the opposite one. It owns the animals and the food pellets; the
Simulation mutates them tick by tick.

Also home to `SpatialGrid`, an optional bucket index over the food that
lets collision checks skip far-away pellets.
"""

import math

import numpy as np

from distribution import PointDistributor
from config import (NUM_ANIMALS, ANIMAL_MIN_DISTANCE,
                    NUM_FOODS, FOOD_MIN_DISTANCE, INITIAL_SPEED)


def wrap_unit(value: float) -> float:
    """Wrap a coordinate into [0, 1)."""
    wrapped = value % 1.0
    # −1e-18 % 1.0 rounds up to exactly 1.0
    if wrapped >= 1.0:
        wrapped = 0.0
    return wrapped


class Food:
    """A food pellet. Eaten pellets are moved, never destroyed."""

    __slots__ = ("position",)

    def __init__(self, position):
        self.position = np.array(position, dtype=np.float64)

    def relocate(self, rng):
        self.position = rng.random(2)

    def __repr__(self) -> str:
        return f"Food({self.position[0]:.4f}, {self.position[1]:.4f})"


class SpatialGrid:
    """
    Square buckets of item indices over the unit square.
    A query returns every index in the 3x3 block of cells around a point,
    so any item within `cell_size` of it is guaranteed to be included.
    """

    def __init__(self, cell_size: float):
        if cell_size <= 0.0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self.side = max(1, math.ceil(1.0 / cell_size))
        self._cells = [[] for _ in range(self.side * self.side)]

    def _cell_xy(self, position) -> tuple:
        cx = min(max(int(position[0] / self.cell_size), 0), self.side - 1)
        cy = min(max(int(position[1] / self.cell_size), 0), self.side - 1)
        return cx, cy

    def add(self, index: int, position):
        cx, cy = self._cell_xy(position)
        self._cells[cx + cy * self.side].append(index)

    def remove(self, index: int, position):
        cx, cy = self._cell_xy(position)
        self._cells[cx + cy * self.side].remove(index)

    def move(self, index: int, old_position, new_position):
        if self._cell_xy(old_position) != self._cell_xy(new_position):
            self.remove(index, old_position)
            self.add(index, new_position)

    def nearby(self, position) -> list:
        """Indices in the surrounding 3x3 cells, ascending."""
        cx, cy = self._cell_xy(position)
        found = []
        for y in range(max(0, cy - 1), min(self.side, cy + 2)):
            for x in range(max(0, cx - 1), min(self.side, cx + 2)):
                found.extend(self._cells[x + y * self.side])
        return sorted(found)


class World:
    """
    Owns all animals and food pellets.
    """

    def __init__(self, animals: list = None, foods: list = None):
        self.animals = animals if animals is not None else []
        self.foods   = foods   if foods   is not None else []

    @classmethod
    def random(cls, rng,
               num_animals: int = NUM_ANIMALS,
               num_foods: int = NUM_FOODS,
               animal_min_distance: float = ANIMAL_MIN_DISTANCE,
               food_min_distance: float = FOOD_MIN_DISTANCE,
               speed: float = INITIAL_SPEED,
               eye=None,
               distributor: PointDistributor = None) -> "World":
        """Scatter fresh random animals and food with blue-noise spacing."""
        from creature import Animal

        distributor = distributor or PointDistributor()
        animals = [
            Animal.random(rng, position, speed=speed, eye=eye)
            for position in distributor.generate(
                rng, 1.0, 1.0, num_animals, animal_min_distance)
        ]
        foods = [
            Food(position)
            for position in distributor.generate(
                rng, 1.0, 1.0, num_foods, food_min_distance)
        ]
        return cls(animals, foods)

    # ──────────────────────────────────────────────────────────────────────────
    # Snapshot for visualisation
    # ──────────────────────────────────────────────────────────────────────────

    def snapshot(self) -> dict:
        """
        Plain-Python view of the world for renderers:
          animals: list of {x, y, rotation, color}
          foods:   list of {x, y}
        """
        return {
            "animals": [
                {
                    "x": float(a.position[0]),
                    "y": float(a.position[1]),
                    "rotation": float(a.rotation),
                    "color": a.color,
                }
                for a in self.animals
            ],
            "foods": [
                {"x": float(f.position[0]), "y": float(f.position[1])}
                for f in self.foods
            ],
        }
