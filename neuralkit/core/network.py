"""Feed-forward neural network model."""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .activations import ActivationFunction, resolve_all
from .errors import NonFiniteError, ShapeError
from .types import Array, FeedForwardCache, Item, as_column

Shape = List[int]
Range = Tuple[float, float]


class NeuralNetwork:
    """Layers of weights, biases and activation functions.

    Layer ``i`` maps a vector of length ``n_i`` to one of length ``n_{i+1}``
    through ``f_i(W_i @ x + b_i)`` where ``W_i`` has shape
    ``(n_{i+1}, n_i)`` and ``b_i`` is a ``(n_{i+1}, 1)`` column. The weight
    and bias lists are public and are updated in place by the optimizers.
    """

    def __init__(
        self,
        weights: Sequence[Array],
        biases: Sequence[Array],
        activation_functions: ActivationFunction | str | Sequence[ActivationFunction | str],
    ) -> None:
        self.weights: List[Array] = [np.array(w, dtype=np.float64, ndmin=2) for w in weights]
        self.biases: List[Array] = [as_column(b) for b in biases]
        self.activation_functions: List[ActivationFunction] = resolve_all(
            activation_functions, len(self.weights)
        )
        self._check_shapes()

    # ------------------------------------------------------------------
    # Construction

    @classmethod
    def zeros(
        cls,
        shape: Sequence[int],
        activation_functions: ActivationFunction | str | Sequence[ActivationFunction | str],
    ) -> "NeuralNetwork":
        """Create a network of ``shape`` with every parameter set to zero."""

        dims = _check_dims(shape)
        weights = [np.zeros((n_out, n_in)) for n_in, n_out in zip(dims[:-1], dims[1:])]
        biases = [np.zeros((n_out, 1)) for n_out in dims[1:]]
        return cls(weights, biases, activation_functions)

    @classmethod
    def random(
        cls,
        shape: Sequence[int],
        activation_functions: ActivationFunction | str | Sequence[ActivationFunction | str],
        rng: np.random.Generator | None = None,
        weight_range: Range = (-5.0, 5.0),
        bias_range: Range = (-5.0, 5.0),
    ) -> "NeuralNetwork":
        """Create a network with parameters drawn uniformly from the given ranges."""

        rng = rng if rng is not None else np.random.default_rng()
        dims = _check_dims(shape)
        weights = [
            rng.uniform(weight_range[0], weight_range[1], size=(n_out, n_in))
            for n_in, n_out in zip(dims[:-1], dims[1:])
        ]
        biases = [rng.uniform(bias_range[0], bias_range[1], size=(n_out, 1)) for n_out in dims[1:]]
        return cls(weights, biases, activation_functions)

    @classmethod
    def from_augmented(
        cls,
        matrices: Sequence[Array],
        activation_functions: ActivationFunction | str | Sequence[ActivationFunction | str],
    ) -> "NeuralNetwork":
        """Build a network from ``[W | b]`` matrices (bias in the last column)."""

        weights, biases = [], []
        for matrix in matrices:
            matrix = np.asarray(matrix, dtype=np.float64)
            if matrix.ndim != 2 or matrix.shape[1] < 2:
                raise ShapeError(f"Augmented matrix must have at least 2 columns: {matrix.shape}")
            weights.append(matrix[:, :-1])
            biases.append(matrix[:, -1:])
        return cls(weights, biases, activation_functions)

    def copy(self) -> "NeuralNetwork":
        return NeuralNetwork(
            [w.copy() for w in self.weights],
            [b.copy() for b in self.biases],
            list(self.activation_functions),
        )

    # ------------------------------------------------------------------
    # Structure

    @property
    def layer_count(self) -> int:
        """Number of layers, counting the input and output layers."""

        return len(self.weights) + 1

    @property
    def shape(self) -> Shape:
        return [int(self.weights[0].shape[1])] + [int(w.shape[0]) for w in self.weights]

    def parameter_count(self) -> int:
        return int(sum(w.size + b.size for w, b in zip(self.weights, self.biases)))

    def augmented_matrices(self) -> List[Array]:
        """Return each layer as a single ``[W | b]`` matrix."""

        return [np.hstack([w, b]) for w, b in zip(self.weights, self.biases)]

    def validate(self) -> None:
        """Raise if any representation invariant does not hold."""

        self._check_shapes()
        self.check_finite()

    @property
    def invariant_satisfied(self) -> bool:
        try:
            self.validate()
        except (ShapeError, NonFiniteError):
            return False
        return True

    def check_finite(self) -> None:
        for idx, (w, b) in enumerate(zip(self.weights, self.biases)):
            if not np.all(np.isfinite(w)):
                raise NonFiniteError(f"Non-finite value in weights of layer {idx}")
            if not np.all(np.isfinite(b)):
                raise NonFiniteError(f"Non-finite value in biases of layer {idx}")

    def _check_shapes(self) -> None:
        if not self.weights:
            raise ShapeError("A network needs at least one layer of weights")
        if len(self.biases) != len(self.weights):
            raise ShapeError(
                f"Got {len(self.weights)} weight matrices but {len(self.biases)} bias vectors"
            )
        if len(self.activation_functions) != len(self.weights):
            raise ShapeError(
                f"Got {len(self.weights)} layers but "
                f"{len(self.activation_functions)} activation functions"
            )
        for idx, (w, b) in enumerate(zip(self.weights, self.biases)):
            if w.ndim != 2:
                raise ShapeError(f"Weights of layer {idx} must be 2-D, got {w.shape}")
            if w.size == 0:
                raise ShapeError(f"Layer {idx} has a zero-width weight matrix {w.shape}")
            if b.shape != (w.shape[0], 1):
                raise ShapeError(
                    f"Biases of layer {idx} have shape {b.shape}, expected {(w.shape[0], 1)}"
                )
            if idx and w.shape[1] != self.weights[idx - 1].shape[0]:
                raise ShapeError(
                    f"Layer {idx} expects {w.shape[1]} inputs but layer {idx - 1} "
                    f"produces {self.weights[idx - 1].shape[0]}"
                )

    # ------------------------------------------------------------------
    # Computation

    def _input_column(self, values: Sequence[float] | Array) -> Array:
        column = as_column(values)
        expected = self.weights[0].shape[1]
        if column.shape[0] != expected:
            raise ShapeError(f"Input has {column.shape[0]} entries, network expects {expected}")
        return column

    def compute_output_layer(self, input: Sequence[float] | Array) -> Array:
        """Return the output-layer activations for ``input`` as a column vector."""

        current = self._input_column(input)
        for w, b, f in zip(self.weights, self.biases, self.activation_functions):
            current = f.compute(w @ current + b)
        return current

    __call__ = compute_output_layer

    def feed_forward(self, input: Sequence[float] | Array, keep_raw: bool = True) -> FeedForwardCache:
        """Run the forward pass, recording every layer's activation.

        With ``keep_raw`` the pre-activation vectors needed by
        backpropagation are recorded as well.
        """

        current = self._input_column(input)
        cache = FeedForwardCache(activations=[current])
        for w, b, f in zip(self.weights, self.biases, self.activation_functions):
            raw = w @ current + b
            if keep_raw:
                cache.raw.append(raw)
            current = f.compute(raw)
            cache.activations.append(current)
        return cache

    def cost(self, item: Item) -> float:
        """Squared distance between the network output and ``item.output``."""

        diff = self.compute_output_layer(item.input) - item.output
        return float(np.sum(diff * diff))

    def __repr__(self) -> str:
        names = ", ".join(f.name.lower() for f in self.activation_functions)
        return f"NeuralNetwork(shape={self.shape}, activations=[{names}])"


def _check_dims(shape: Sequence[int]) -> List[int]:
    dims = [int(n) for n in shape]
    if len(dims) < 2:
        raise ShapeError(f"A network shape needs at least 2 layers, got {dims}")
    if any(n <= 0 for n in dims):
        raise ShapeError(f"Layer sizes must be positive, got {dims}")
    return dims


__all__ = ["NeuralNetwork", "Shape"]
