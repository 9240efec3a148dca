"""
Chromosome representation for EvoForage.

A chromosome is the flattened brain of one animal: an ordered sequence of
real-valued genes in the network's canonical weight order

  layer 0: neuron 0 (bias, w0, w1, ...), neuron 1 (bias, w0, ...), ...
  layer 1: ...

It carries no behaviour of its own; crossover and mutation act on it from
the genetic algorithm, and the brain is rebuilt from it every generation.
"""

import numpy as np


class Chromosome:
    """Ordered, real-valued gene sequence."""

    __slots__ = ("genes",)

    def __init__(self, genes):
        self.genes = np.array(genes, dtype=np.float64).ravel()

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self):
        return iter(self.genes.tolist())

    def __getitem__(self, index):
        return self.genes[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Chromosome):
            return NotImplemented
        return np.array_equal(self.genes, other.genes)

    def __repr__(self) -> str:
        return f"Chromosome({len(self)} genes)"

    def copy(self) -> "Chromosome":
        return Chromosome(self.genes.copy())


# ──────────────────────────────────────────────────────────────────────────────
# Population-level helpers
# ──────────────────────────────────────────────────────────────────────────────

def genome_similarity(genome_a: Chromosome, genome_b: Chromosome) -> float:
    """
    Genetic similarity (0..1) from the mean absolute gene difference.
    Identical genomes score 1; the score decays towards 0 as they drift apart.
    Only the overlapping prefix is compared.
    """
    n = min(len(genome_a), len(genome_b))
    if n == 0:
        return 0.0
    diff = np.abs(genome_a.genes[:n] - genome_b.genes[:n]).mean()
    return float(1.0 / (1.0 + diff))


def genome_to_color(genome: Chromosome) -> tuple:
    """
    Map a genome to an RGB colour so that genetically similar animals
    have similar colours (useful visual diversity indicator).
    """
    if len(genome) == 0:
        return (128, 128, 128)
    # Fold genes into three channels by index modulo 3
    channels = []
    for k in range(3):
        part = genome.genes[k::3]
        value = part.mean() if len(part) else 0.0
        # tanh squashes the channel mean into (−1, 1) → 0..255
        channels.append(int((np.tanh(value * 4.0) + 1.0) * 127.5))
    # Brighten so they're visible
    return tuple(max(50, min(255, c)) for c in channels)
