"""
Generic genetic algorithm for EvoForage.

The engine knows nothing about animals or brains. It works on any
population whose members implement `Individual`, and delegates each step
of reproduction to a swappable strategy:

  SelectionMethod  – pick one parent from the population
  CrossoverMethod  – blend two parent chromosomes into a child
  MutationMethod   – perturb a child chromosome in place

One call to `GeneticAlgorithm.evolve` maps a population of N individuals to
a fresh population of N individuals. The random generator is always passed
in by the caller.
"""

import bisect

import numpy as np

from genome import Chromosome


# ──────────────────────────────────────────────────────────────────────────────
# Capabilities
# ──────────────────────────────────────────────────────────────────────────────

class Individual:
    """Anything that can be evolved: a chromosome plus an observed fitness."""

    def fitness(self) -> float:
        raise NotImplementedError

    def chromosome(self) -> Chromosome:
        raise NotImplementedError

    @classmethod
    def create(cls, chromosome: Chromosome) -> "Individual":
        """Build a fresh individual; its fitness is earned later, not derived."""
        raise NotImplementedError


class SelectionMethod:
    def select(self, rng, population: list) -> Individual:
        raise NotImplementedError


class CrossoverMethod:
    def crossover(self, rng, parent_a: Chromosome,
                  parent_b: Chromosome) -> Chromosome:
        raise NotImplementedError


class MutationMethod:
    def mutate(self, rng, child: Chromosome) -> None:
        raise NotImplementedError


# ──────────────────────────────────────────────────────────────────────────────
# Strategies
# ──────────────────────────────────────────────────────────────────────────────

class RouletteWheelSelection(SelectionMethod):
    """
    Fitness-proportionate selection, with replacement.

    If every individual has zero fitness (e.g. a first generation that never
    found food) the wheel has no area, so the pick falls back to uniform.
    """

    def select(self, rng, population: list) -> Individual:
        if not population:
            raise ValueError("population must not be empty")

        fitnesses = [float(ind.fitness()) for ind in population]
        if any(f < 0.0 for f in fitnesses):
            raise ValueError("roulette selection needs non-negative fitness")

        total = sum(fitnesses)
        if total <= 0.0:
            return population[int(rng.integers(0, len(population)))]

        cumulative = []
        running = 0.0
        for f in fitnesses:
            running += f
            cumulative.append(running)

        spin = rng.random() * total
        idx = bisect.bisect_right(cumulative, spin)
        # Guard against spin landing on the float-rounded upper edge
        return population[min(idx, len(population) - 1)]


class UniformCrossover(CrossoverMethod):
    """
    Each gene comes from parent A or parent B with probability 0.5.
    Parents are expected to have equal length; otherwise only the
    overlapping prefix is produced.
    """

    def crossover(self, rng, parent_a: Chromosome,
                  parent_b: Chromosome) -> Chromosome:
        n = min(len(parent_a), len(parent_b))
        take_a = rng.random(n) < 0.5
        return Chromosome(np.where(take_a, parent_a.genes[:n], parent_b.genes[:n]))


class GaussianMutation(MutationMethod):
    """
    With probability `chance` per gene, add ± coeff * U(0, 1)
    (sign chosen uniformly).
    """

    def __init__(self, chance: float, coeff: float):
        if not 0.0 <= chance <= 1.0:
            raise ValueError(f"mutation chance must be in [0, 1], got {chance}")
        self.chance = chance
        self.coeff  = coeff

    def mutate(self, rng, child: Chromosome) -> None:
        n = len(child)
        signs  = np.where(rng.random(n) < 0.5, 1.0, -1.0)
        hits   = rng.random(n) < self.chance
        deltas = rng.random(n)
        child.genes += np.where(hits, signs * self.coeff * deltas, 0.0)

    def __repr__(self) -> str:
        return f"GaussianMutation(chance={self.chance}, coeff={self.coeff})"


# ──────────────────────────────────────────────────────────────────────────────
# Engine
# ──────────────────────────────────────────────────────────────────────────────

class GeneticAlgorithm:
    """Stateless evolutionary step over a pluggable strategy triple."""

    def __init__(self, selection_method: SelectionMethod,
                 crossover_method: CrossoverMethod,
                 mutation_method: MutationMethod):
        self.selection_method = selection_method
        self.crossover_method = crossover_method
        self.mutation_method  = mutation_method

    def evolve(self, rng, population: list) -> list:
        """
        Produce a new population of the same size.

        Every slot draws two parents independently (they may coincide),
        crosses them over, mutates the child and wraps it with
        `create` of the population's individual type.
        """
        if not population:
            raise ValueError("cannot evolve an empty population")

        individual_type = type(population[0])
        new_population = []
        for _ in range(len(population)):
            parent_a = self.selection_method.select(rng, population).chromosome()
            parent_b = self.selection_method.select(rng, population).chromosome()
            child = self.crossover_method.crossover(rng, parent_a, parent_b)
            self.mutation_method.mutate(rng, child)
            new_population.append(individual_type.create(child))
        return new_population
