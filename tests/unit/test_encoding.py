import struct

import numpy as np
import pytest

from neuralkit.core import encoding
from neuralkit.core.activations import ActivationFunction
from neuralkit.core.errors import FormatError, UnknownActivationError
from neuralkit.core.network import NeuralNetwork


def _assert_same_network(a, b):
    assert a.shape == b.shape
    assert a.activation_functions == b.activation_functions
    for wa, wb in zip(a.weights, b.weights):
        np.testing.assert_array_equal(wa, wb)
    for ba, bb in zip(a.biases, b.biases):
        np.testing.assert_array_equal(ba, bb)


def test_matrix_layout_is_little_endian_row_major():
    data = encoding.encode_matrix(np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]))
    assert data[:16] == struct.pack("<qq", 2, 3)
    assert data[16:] == struct.pack("<6d", 1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
    assert len(data) == encoding.encoded_matrix_size(2, 3)


def test_decode_matrix_returns_next_offset():
    payload = encoding.encode_matrix(np.ones((2, 2))) + encoding.encode_matrix(np.zeros((1, 3)))
    first, offset = encoding.decode_matrix(payload)
    second, end = encoding.decode_matrix(payload, offset)
    assert first.shape == (2, 2)
    assert second.shape == (1, 3)
    assert end == len(payload)


def test_network_layout():
    net = NeuralNetwork([np.array([[1.5, -2.0]])], [np.array([0.25])], "tanh")
    data = encoding.encode_network(net)
    assert data[:8] == struct.pack("<q", 2)
    assert data[8:16] == struct.pack("<q", ActivationFunction.TANH.tag)
    assert data[16:48] == struct.pack("<qqdd", 1, 2, 1.5, -2.0)
    assert data[48:] == struct.pack("<qqd", 1, 1, 0.25)


@pytest.mark.parametrize(
    "shape",
    [[1, 1], [3, 5, 2], [1000, 1000], [1000, 3, 1000]],
)
def test_round_trip(shape):
    rng = np.random.default_rng(len(shape))
    afs = [ActivationFunction(int(t)) for t in rng.integers(0, 5, size=len(shape) - 1)]
    net = NeuralNetwork.random(shape, afs, rng=rng, weight_range=(-1e6, 1e6))
    _assert_same_network(net, encoding.decode_network(encoding.encode_network(net)))


def test_round_trip_deep_network():
    rng = np.random.default_rng(50)
    shape = [int(n) for n in rng.integers(1, 9, size=61)]
    net = NeuralNetwork.random(shape, "relu", rng=rng)
    decoded = encoding.decode_network(encoding.encode_network(net))
    assert decoded.layer_count == 61
    _assert_same_network(net, decoded)


def test_round_trip_preserves_special_values():
    net = NeuralNetwork(
        [np.array([[0.0, -0.0, 1e-308, np.finfo(np.float64).max]])],
        [np.array([np.finfo(np.float64).tiny])],
        "identity",
    )
    decoded = encoding.decode_network(encoding.encode_network(net))
    assert np.signbit(decoded.weights[0][0, 1])
    _assert_same_network(net, decoded)


def test_save_and_load(tmp_path, rng):
    net = NeuralNetwork.random([4, 3, 2], ["relu", "sigmoid"], rng=rng)
    path = encoding.save_network(net, tmp_path / "nested" / "model.nknn")
    assert path.exists()
    _assert_same_network(net, encoding.load_network(path))


def test_unknown_activation_tag_rejected():
    net = NeuralNetwork.zeros([2, 1], "identity")
    data = bytearray(encoding.encode_network(net))
    data[8:16] = struct.pack("<q", 42)
    with pytest.raises(UnknownActivationError):
        encoding.decode_network(bytes(data))


def test_truncated_data_rejected(rng):
    data = encoding.encode_network(NeuralNetwork.random([3, 2], "tanh", rng=rng))
    for cut in (0, 4, 12, len(data) - 1):
        with pytest.raises(FormatError):
            encoding.decode_network(data[:cut])


def test_trailing_bytes_rejected():
    data = encoding.encode_network(NeuralNetwork.zeros([2, 1], "identity"))
    with pytest.raises(FormatError, match="trailing"):
        encoding.decode_network(data + b"\x00")


def test_single_layer_count_rejected():
    with pytest.raises(FormatError):
        encoding.decode_network(struct.pack("<q", 1))


def test_zero_width_layer_rejected():
    data = struct.pack("<qq", 2, 0) + struct.pack("<qq", 0, 2) + struct.pack("<qq", 0, 1)
    with pytest.raises(FormatError, match="do not chain"):
        encoding.decode_network(data)
