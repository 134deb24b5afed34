"""Binary encoding of matrices and networks.

All integers are little-endian int64 and all elements little-endian float64.

A matrix is ``[rows][cols][rows * cols elements, row-major]``. A network is
``[layer_count][activation tag per layer][weight matrices][bias matrices]``.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np

from .activations import ActivationFunction
from .errors import FormatError, ShapeError
from .network import NeuralNetwork
from .types import Array

INT = np.dtype("<i8")
FLOAT = np.dtype("<f8")
WORD = INT.itemsize


def encode_ints(values: Sequence[int]) -> bytes:
    return np.asarray(values, dtype=INT).tobytes()


def read_int(buffer: bytes | memoryview, offset: int) -> Tuple[int, int]:
    """Read one integer at ``offset`` and return it with the next offset."""

    end = offset + WORD
    if end > len(buffer):
        raise FormatError(f"Unexpected end of data reading an integer at byte {offset}")
    return int(np.frombuffer(buffer, dtype=INT, count=1, offset=offset)[0]), end


def encode_matrix(matrix: Array) -> bytes:
    array = np.asarray(matrix, dtype=np.float64)
    if array.ndim == 1:
        array = array.reshape(-1, 1)
    rows, cols = array.shape
    return encode_ints([rows, cols]) + np.ascontiguousarray(array, dtype=FLOAT).tobytes()


def encoded_matrix_size(rows: int, cols: int) -> int:
    return 2 * WORD + rows * cols * FLOAT.itemsize


def decode_matrix(buffer: bytes | memoryview, offset: int = 0) -> Tuple[Array, int]:
    """Decode the matrix starting at ``offset``; return it and the next offset."""

    rows, offset = read_int(buffer, offset)
    cols, offset = read_int(buffer, offset)
    if rows < 0 or cols < 0:
        raise FormatError(f"Invalid matrix dimensions {rows}x{cols}")
    count = rows * cols
    end = offset + count * FLOAT.itemsize
    if end > len(buffer):
        raise FormatError(
            f"Matrix of {rows}x{cols} needs {end - offset} bytes, "
            f"only {len(buffer) - offset} remain"
        )
    values = np.frombuffer(buffer, dtype=FLOAT, count=count, offset=offset)
    return values.astype(np.float64).reshape(rows, cols), end


def encode_network(network: NeuralNetwork) -> bytes:
    chunks: List[bytes] = [
        encode_ints([network.layer_count]),
        encode_ints([f.tag for f in network.activation_functions]),
    ]
    chunks.extend(encode_matrix(w) for w in network.weights)
    chunks.extend(encode_matrix(b) for b in network.biases)
    return b"".join(chunks)


def decode_network(data: bytes | bytearray | memoryview) -> NeuralNetwork:
    buffer = memoryview(bytes(data))
    layer_count, offset = read_int(buffer, 0)
    if layer_count < 2:
        raise FormatError(f"Encoded network reports {layer_count} layers")

    activations = []
    for _ in range(layer_count - 1):
        tag, offset = read_int(buffer, offset)
        activations.append(ActivationFunction.from_tag(tag))

    weights, biases = [], []
    for _ in range(layer_count - 1):
        matrix, offset = decode_matrix(buffer, offset)
        weights.append(matrix)
    for _ in range(layer_count - 1):
        matrix, offset = decode_matrix(buffer, offset)
        biases.append(matrix)

    if offset != len(buffer):
        raise FormatError(f"{len(buffer) - offset} trailing bytes after encoded network")
    try:
        return NeuralNetwork(weights, biases, activations)
    except ShapeError as exc:
        raise FormatError(f"Encoded layers do not chain: {exc}") from exc


def save_network(network: NeuralNetwork, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_network(network))
    return path


def load_network(path: str | Path) -> NeuralNetwork:
    return decode_network(Path(path).read_bytes())


__all__ = [
    "decode_matrix",
    "decode_network",
    "encode_matrix",
    "encode_network",
    "encoded_matrix_size",
    "load_network",
    "save_network",
]
