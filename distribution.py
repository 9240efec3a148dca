"""
Blue-noise point placement for EvoForage.

Scatters points over a [0, width) x [0, height) rectangle so that no two
are within `min_distance` of each other. Used to lay out animals at the
start of every generation and the initial food pellets.

The sampler is rejection-based: every round it cycles the processing queue,
draws an independent uniform candidate and keeps it only if it is further
than `min_distance` from every accepted point. It stops after `count`
acceptances, or raises `DistributionError` once `max_attempts` candidates
have been rejected (the request is too dense to satisfy).
"""

import math

from config import MAX_PLACEMENT_ATTEMPTS


class DistributionError(RuntimeError):
    """The requested points could not be placed within the attempt budget."""


class RandomQueue:
    """Bag that inserts at and removes from random positions."""

    def __init__(self):
        self.items = []

    def __len__(self) -> int:
        return len(self.items)

    def push(self, item, rng):
        index = int(rng.integers(0, len(self.items) + 1))
        self.items.insert(index, item)

    def pop(self, rng):
        if not self.items:
            return None
        index = int(rng.integers(0, len(self.items)))
        return self.items.pop(index)


class PointDistributor:

    def __init__(self, max_attempts: int = MAX_PLACEMENT_ATTEMPTS):
        self.max_attempts = max_attempts

    @staticmethod
    def _random_point(rng, width: float, height: float) -> tuple:
        return (float(rng.uniform(0.0, width)), float(rng.uniform(0.0, height)))

    def generate(self, rng, width: float, height: float, count: int,
                 min_distance: float) -> list:
        """
        Returns:
            list of `count` (x, y) tuples, pairwise further apart than
            `min_distance`
        """
        if count <= 0:
            return []

        queue = RandomQueue()
        first = self._random_point(rng, width, height)
        queue.push(first, rng)
        points = [first]

        rejected = 0
        while len(points) < count:
            # The popped entry is not reused; each round samples afresh
            queue.pop(rng)
            candidate = self._random_point(rng, width, height)

            nearest = min(math.dist(candidate, p) for p in points)
            if nearest > min_distance:
                queue.push(candidate, rng)
                points.append(candidate)
            else:
                rejected += 1
                if rejected >= self.max_attempts:
                    raise DistributionError(
                        f"placed only {len(points)}/{count} points with "
                        f"min_distance={min_distance} in {width}x{height} "
                        f"after {rejected} rejected candidates")

        return points
