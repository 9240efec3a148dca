"""
Animal class for EvoForage.

Each animal has:
  - a position on the unit torus and a heading (radians, 0 = facing +y)
  - a scalar speed
  - an Eye (fixed geometry) and a Brain (feed-forward network)
  - satiation: food eaten this generation, which doubles as fitness

Every simulation tick the animal:
  1. Looks at the food around it through its eye
  2. Runs its brain to get (Δspeed, Δrotation)
  3. Moves along its heading, wrapping at the world edges

`AnimalIndividual` is the bridge to the genetic algorithm: it carries an
animal's fitness and flattened brain between generations.
"""

import math

import numpy as np

from eye import Eye
from genome import Chromosome, genome_to_color
from genetic_algorithm import Individual
from neural_network import NeuralNetwork
from world import wrap_unit
from config import HIDDEN_PER_CELL, BRAIN_OUTPUTS, INITIAL_SPEED


class Brain:
    """The animal's network, shaped by its eye: [cells] → [2·cells] → [2]."""

    __slots__ = ("nn",)

    def __init__(self, nn: NeuralNetwork):
        self.nn = nn

    @staticmethod
    def topology(eye: Eye) -> list:
        return [eye.cells, HIDDEN_PER_CELL * eye.cells, BRAIN_OUTPUTS]

    @classmethod
    def random(cls, rng, eye: Eye) -> "Brain":
        return cls(NeuralNetwork.random(rng, cls.topology(eye)))

    @classmethod
    def from_chromosome(cls, chromosome: Chromosome, eye: Eye) -> "Brain":
        return cls(NeuralNetwork.from_weights(chromosome, cls.topology(eye)))

    def as_chromosome(self) -> Chromosome:
        return Chromosome(self.nn.weights())


class Animal:
    """
    A single agent in the simulation.
    """
    __slots__ = (
        "position", "rotation", "speed",
        "eye", "brain", "satiation", "color",
    )

    def __init__(self, position, rotation: float, speed: float,
                 eye: Eye, brain: Brain):
        self.position  = np.array(position, dtype=np.float64)
        self.rotation  = float(rotation)
        self.speed     = float(speed)
        self.eye       = eye
        self.brain     = brain
        self.satiation = 0
        self.color     = genome_to_color(brain.as_chromosome())

    @classmethod
    def random(cls, rng, position, speed: float = INITIAL_SPEED,
               eye: Eye = None) -> "Animal":
        eye = eye if eye is not None else Eye()
        rotation = rng.uniform(-math.pi, math.pi)
        brain = Brain.random(rng, eye)
        return cls(position, rotation, speed, eye, brain)

    @classmethod
    def from_chromosome(cls, chromosome: Chromosome, rng, position,
                        speed: float = INITIAL_SPEED,
                        eye: Eye = None) -> "Animal":
        eye = eye if eye is not None else Eye()
        brain = Brain.from_chromosome(chromosome, eye)
        return cls(position, rng.uniform(-math.pi, math.pi), speed, eye, brain)

    def as_chromosome(self) -> Chromosome:
        return self.brain.as_chromosome()

    # ──────────────────────────────────────────────────────────────────────────

    def heading(self) -> np.ndarray:
        """Unit vector the animal is facing."""
        return np.array([-math.sin(self.rotation), math.cos(self.rotation)])

    def sense(self, foods) -> np.ndarray:
        return self.eye.process_vision(self.position, self.rotation, foods)

    def steer(self, d_speed: float, d_rotation: float,
              speed_min: float, speed_max: float):
        """Apply already-clamped brain outputs."""
        self.speed = min(max(self.speed + d_speed, speed_min), speed_max)
        self.rotation += d_rotation

    def move(self):
        """Advance one tick along the heading; the world is a torus."""
        self.position += self.heading() * self.speed
        self.position[0] = wrap_unit(self.position[0])
        self.position[1] = wrap_unit(self.position[1])


# ──────────────────────────────────────────────────────────────────────────────
# Genetic-algorithm bridge
# ──────────────────────────────────────────────────────────────────────────────

class AnimalIndividual(Individual):
    """Snapshot of an animal as the genetic algorithm sees it."""

    __slots__ = ("_fitness", "_chromosome")

    def __init__(self, fitness: float, chromosome: Chromosome):
        self._fitness    = fitness
        self._chromosome = chromosome

    @classmethod
    def create(cls, chromosome: Chromosome) -> "AnimalIndividual":
        return cls(0.0, chromosome)

    @classmethod
    def from_animal(cls, animal: Animal) -> "AnimalIndividual":
        return cls(float(animal.satiation), animal.as_chromosome())

    def fitness(self) -> float:
        return self._fitness

    def chromosome(self) -> Chromosome:
        return self._chromosome

    def into_animal(self, rng, position, speed: float = INITIAL_SPEED,
                    eye: Eye = None) -> Animal:
        return Animal.from_chromosome(self._chromosome, rng, position,
                                      speed=speed, eye=eye)
