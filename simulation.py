"""
Simulation Engine for EvoForage.

Advances the world one tick per `step(rng)` call:
  1. Collisions  – animals eat nearby food; eaten food reappears elsewhere
  2. Brains      – eye → network → clamped (Δspeed, Δrotation)
  3. Movement    – move along heading, wrap around the torus
  4. Age         – after `generation_length` ticks the animals are replaced
                   by an evolved generation (food is left as is)

Evolution:
  1. Snapshot every animal as an AnimalIndividual (fitness = satiation)
  2. Roulette selection → uniform crossover → gaussian mutation
  3. Place the offspring with blue-noise spacing
  4. Log stats

The random generator is supplied by the caller on every call; two
simulations built and stepped with identically seeded generators follow
identical trajectories.
"""

import math
import time

import numpy as np

from world import World, SpatialGrid
from creature import AnimalIndividual
from distribution import PointDistributor
from eye import Eye
from genome import genome_similarity
from genetic_algorithm import (GeneticAlgorithm, RouletteWheelSelection,
                               UniformCrossover, GaussianMutation)
from config import (
    NUM_ANIMALS, NUM_FOODS, ANIMAL_MIN_DISTANCE, FOOD_MIN_DISTANCE,
    EAT_RADIUS, FOV_RANGE, FOV_HALF_ANGLE, EYE_CELLS,
    SPEED_MIN, SPEED_MAX, SPEED_ACCEL, ROTATION_ACCEL, INITIAL_SPEED,
    GENERATION_LENGTH, MUTATION_CHANCE, MUTATION_COEFF,
    MAX_PLACEMENT_ATTEMPTS, DIVERSITY_SAMPLE, GRID_CELL_SIZE,
)


class Simulation:
    """
    Main simulation controller.
    """

    def __init__(
        self,
        world:               World,
        eye:                 Eye   = None,
        generation_length:   int   = GENERATION_LENGTH,
        mutation_chance:     float = MUTATION_CHANCE,
        mutation_coeff:      float = MUTATION_COEFF,
        eat_radius:          float = EAT_RADIUS,
        speed_min:           float = SPEED_MIN,
        speed_max:           float = SPEED_MAX,
        speed_accel:         float = SPEED_ACCEL,
        rotation_accel:      float = ROTATION_ACCEL,
        initial_speed:       float = INITIAL_SPEED,
        animal_min_distance: float = ANIMAL_MIN_DISTANCE,
        max_placement_attempts: int = MAX_PLACEMENT_ATTEMPTS,
        use_grid:            bool  = False,
        verbose:             bool  = True,
        on_gen_callback      = None,    # called after each evolution
    ):
        if generation_length < 1:
            raise ValueError(
                f"generation_length must be at least 1, got {generation_length}")
        self.world               = world
        self.eye                 = eye if eye is not None else Eye()
        self.generation_length   = generation_length
        self.eat_radius          = eat_radius
        self.speed_min           = speed_min
        self.speed_max           = speed_max
        self.speed_accel         = speed_accel
        self.rotation_accel      = rotation_accel
        self.initial_speed       = initial_speed
        self.animal_min_distance = animal_min_distance
        self.use_grid            = use_grid
        self.verbose             = verbose
        self.on_gen_callback     = on_gen_callback

        self.ga = GeneticAlgorithm(
            RouletteWheelSelection(),
            UniformCrossover(),
            GaussianMutation(mutation_chance, mutation_coeff),
        )
        self.distributor = PointDistributor(max_placement_attempts)

        # State
        self.age        = 0          # ticks into the current generation
        self.generation = 0
        self.stats      = []         # list of dicts, one per generation
        self._gen_started = time.time()

    @classmethod
    def random(
        cls,
        rng,
        num_animals:         int   = NUM_ANIMALS,
        num_foods:           int   = NUM_FOODS,
        food_min_distance:   float = FOOD_MIN_DISTANCE,
        fov_range:           float = FOV_RANGE,
        fov_half_angle:      float = FOV_HALF_ANGLE,
        eye_cells:           int   = EYE_CELLS,
        **kwargs,
    ) -> "Simulation":
        """Build a simulation over a freshly scattered random world."""
        eye = Eye(fov_range, fov_half_angle, eye_cells)
        world = World.random(
            rng,
            num_animals=num_animals,
            num_foods=num_foods,
            animal_min_distance=kwargs.get("animal_min_distance",
                                           ANIMAL_MIN_DISTANCE),
            food_min_distance=food_min_distance,
            speed=kwargs.get("initial_speed", INITIAL_SPEED),
            eye=eye,
            distributor=PointDistributor(
                kwargs.get("max_placement_attempts", MAX_PLACEMENT_ATTEMPTS)),
        )
        return cls(world, eye=eye, **kwargs)

    # ──────────────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────────────

    def step(self, rng):
        """
        Advance one tick.

        Returns:
            the generation's stats dict if this tick triggered evolution,
            otherwise None
        """
        self._process_collisions(rng)
        self._process_brains()
        self._process_movements()

        self.age += 1
        if self.age >= self.generation_length:
            return self._evolve(rng)
        return None

    def train(self, rng) -> dict:
        """Step until the current generation ends; return its stats."""
        while True:
            stats = self.step(rng)
            if stats is not None:
                return stats

    # ──────────────────────────────────────────────────────────────────────────
    # Per-tick phases
    # ──────────────────────────────────────────────────────────────────────────

    def _process_collisions(self, rng):
        if self.use_grid:
            self._process_collisions_grid(rng)
            return

        for animal in self.world.animals:
            for food in self.world.foods:
                distance = np.linalg.norm(animal.position - food.position)
                if distance <= self.eat_radius:
                    animal.satiation += 1
                    food.relocate(rng)

    def _process_collisions_grid(self, rng):
        """
        Same outcome as the brute-force pass: foods are visited in index
        order per animal and moved between buckets as soon as they are eaten.
        """
        foods = self.world.foods
        grid = SpatialGrid(max(self.eat_radius, GRID_CELL_SIZE))
        for idx, food in enumerate(foods):
            grid.add(idx, food.position)

        for animal in self.world.animals:
            for idx in grid.nearby(animal.position):
                food = foods[idx]
                distance = np.linalg.norm(animal.position - food.position)
                if distance <= self.eat_radius:
                    animal.satiation += 1
                    old_position = food.position
                    food.relocate(rng)
                    grid.move(idx, old_position, food.position)

    def _process_brains(self):
        for animal in self.world.animals:
            vision   = animal.sense(self.world.foods)
            response = animal.brain.nn.propagate(vision)

            d_speed    = float(np.clip(response[0], -self.speed_accel,
                                       self.speed_accel))
            d_rotation = float(np.clip(response[1], -self.rotation_accel,
                                       self.rotation_accel))
            animal.steer(d_speed, d_rotation, self.speed_min, self.speed_max)

    def _process_movements(self):
        for animal in self.world.animals:
            animal.move()

    # ──────────────────────────────────────────────────────────────────────────
    # Evolution
    # ──────────────────────────────────────────────────────────────────────────

    def _evolve(self, rng) -> dict:
        # State is only touched once the new generation is fully built
        current_population = [
            AnimalIndividual.from_animal(animal)
            for animal in self.world.animals
        ]
        stats = self._compute_stats(current_population)

        new_population = self.ga.evolve(rng, current_population)
        positions = self.distributor.generate(
            rng, 1.0, 1.0, len(new_population), self.animal_min_distance)

        new_animals = [
            individual.into_animal(rng, position,
                                   speed=self.initial_speed, eye=self.eye)
            for individual, position in zip(new_population, positions)
        ]

        self.world.animals = new_animals
        self.age = 0

        now = time.time()
        stats["elapsed_s"] = round(now - self._gen_started, 3)
        self._gen_started = now
        self.stats.append(stats)

        if self.verbose:
            self._print_stats(self.generation, stats)
        if self.on_gen_callback:
            self.on_gen_callback(self.generation, stats, self.world)

        self.generation += 1
        return stats

    # ──────────────────────────────────────────────────────────────────────────
    # Stats
    # ──────────────────────────────────────────────────────────────────────────

    def _compute_stats(self, population: list) -> dict:
        fitnesses = [ind.fitness() for ind in population]
        return {
            "generation":  self.generation,
            "population":  len(population),
            "min_fitness": min(fitnesses) if fitnesses else 0.0,
            "max_fitness": max(fitnesses) if fitnesses else 0.0,
            "avg_fitness": sum(fitnesses) / len(fitnesses) if fitnesses else 0.0,
            "diversity":   self._genetic_diversity(population),
        }

    def _genetic_diversity(self, population: list,
                           sample: int = DIVERSITY_SAMPLE) -> float:
        """
        Estimate genetic diversity as average pairwise dissimilarity over an
        evenly spaced sample (no draws from the simulation's generator).
        Returns value 0 (identical) → 1 (maximally diverse).
        """
        if len(population) < 2:
            return 0.0
        stride = max(1, math.ceil(len(population) / sample))
        sampled = [ind.chromosome() for ind in population[::stride]]
        total, count = 0.0, 0
        for i in range(len(sampled)):
            for j in range(i + 1, len(sampled)):
                total += 1.0 - genome_similarity(sampled[i], sampled[j])
                count += 1
        return total / count if count else 0.0

    def _print_stats(self, gen_idx: int, stats: dict):
        if gen_idx % 10 == 0 or gen_idx < 5:
            print(
                f"Gen {gen_idx:>5}  |  "
                f"fitness min {stats['min_fitness']:>5.1f} "
                f"avg {stats['avg_fitness']:>6.2f} "
                f"max {stats['max_fitness']:>5.1f}  |  "
                f"diversity {stats['diversity']:.3f}  |  "
                f"{stats['elapsed_s']:.2f}s"
            )
