"""
Neural Network Brain for EvoForage.

A plain fully-connected feed-forward network with a fixed topology
(a list of layer widths, e.g. [9, 18, 2]).

Each layer stores one row per neuron:
  biases[i]     – bias of neuron i
  weights[i, j] – weight from input j of the previous layer into neuron i

Forward pass (per simulation tick):
  out_i = max(0, bias_i + Σ_j weights[i, j] * in_j)      (ReLU)

The flat weight stream produced by `weights()` and consumed by
`from_weights()` is layer-major, then neuron-major, bias first:

  [b0, w00, w01, ..., b1, w10, w11, ..., <next layer> ...]

The genetic algorithm evolves exactly this sequence, so the order must
not change.
"""

import numpy as np


class Layer:
    """One fully-connected layer: `len(biases)` neurons over `n_inputs` inputs."""

    __slots__ = ("biases", "weights")

    def __init__(self, biases: np.ndarray, weights: np.ndarray):
        self.biases  = biases
        self.weights = weights

    @property
    def n_inputs(self) -> int:
        return self.weights.shape[1]

    @property
    def n_neurons(self) -> int:
        return self.weights.shape[0]

    @classmethod
    def random(cls, rng, n_inputs: int, n_neurons: int) -> "Layer":
        # Column 0 is the bias, the rest are the input weights
        params = rng.uniform(-1.0, 1.0, size=(n_neurons, n_inputs + 1))
        return cls(params[:, 0].copy(), params[:, 1:].copy())

    def propagate(self, inputs: np.ndarray) -> np.ndarray:
        return np.maximum(0.0, self.biases + self.weights @ inputs)


class NeuralNetwork:
    """
    Feed-forward network built either randomly or from a flat weight stream.
    Immutable after construction.
    """

    def __init__(self, layers: list):
        self.layers = layers

    # ──────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _check_topology(topology) -> list:
        topology = [int(n) for n in topology]
        if len(topology) < 2:
            raise ValueError(
                f"topology needs at least 2 layers, got {len(topology)}")
        if any(n <= 0 for n in topology):
            raise ValueError(f"layer widths must be positive, got {topology}")
        return topology

    @classmethod
    def random(cls, rng, topology) -> "NeuralNetwork":
        """Build a network with every bias and weight drawn from U(−1, 1)."""
        topology = cls._check_topology(topology)
        layers = [
            Layer.random(rng, n_in, n_out)
            for n_in, n_out in zip(topology[:-1], topology[1:])
        ]
        return cls(layers)

    @classmethod
    def from_weights(cls, weights, topology) -> "NeuralNetwork":
        """
        Rebuild a network from the canonical flat weight stream.

        Raises ValueError if the stream is shorter ("not enough weights") or
        longer ("too many weights") than the topology requires.
        """
        topology = cls._check_topology(topology)
        flat = np.fromiter(weights, dtype=np.float64)

        layers = []
        pos = 0
        for n_in, n_out in zip(topology[:-1], topology[1:]):
            size = n_out * (n_in + 1)
            if pos + size > len(flat):
                raise ValueError(
                    f"not enough weights: topology {topology} needs more "
                    f"than the {len(flat)} given")
            rows = flat[pos:pos + size].reshape(n_out, n_in + 1)
            layers.append(Layer(rows[:, 0].copy(), rows[:, 1:].copy()))
            pos += size

        if pos != len(flat):
            raise ValueError(
                f"too many weights: topology {topology} uses {pos}, "
                f"got {len(flat)}")
        return cls(layers)

    # ──────────────────────────────────────────────────────────────────────────

    @property
    def topology(self) -> list:
        return [self.layers[0].n_inputs] + [l.n_neurons for l in self.layers]

    def propagate(self, inputs) -> np.ndarray:
        """
        Run one forward pass.

        Args:
            inputs: sequence of floats, length = first topology width

        Returns:
            float array with one entry per neuron of the last layer (all ≥ 0)
        """
        values = np.asarray(inputs, dtype=np.float64)
        expected = self.layers[0].n_inputs
        if values.shape != (expected,):
            raise ValueError(
                f"expected {expected} inputs, got shape {values.shape}")
        for layer in self.layers:
            values = layer.propagate(values)
        return values

    def weights(self) -> np.ndarray:
        """Flatten every bias and weight in canonical order."""
        parts = []
        for layer in self.layers:
            for i in range(layer.n_neurons):
                parts.append(layer.biases[i:i + 1])
                parts.append(layer.weights[i])
        return np.concatenate(parts)

    def summary(self) -> str:
        lines = [f"NeuralNetwork {self.topology} "
                 f"({len(self.weights())} parameters)"]
        for idx, layer in enumerate(self.layers):
            lines.append(
                f"  L{idx}: {layer.n_inputs:>3} → {layer.n_neurons:<3}"
                f"  |w| mean={np.abs(layer.weights).mean():.3f}"
                f"  b mean={layer.biases.mean():+.3f}"
            )
        return "\n".join(lines)
