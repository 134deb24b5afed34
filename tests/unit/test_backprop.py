import numpy as np
import pytest

from neuralkit.core.errors import NonFiniteError, ShapeError
from neuralkit.core.network import NeuralNetwork
from neuralkit.core.types import Item
from neuralkit.training.backprop import compute_gradients, normalize

H = 1e-6


def _numeric_gradients(net, item):
    grads = []
    for params in (net.weights, net.biases):
        layer_grads = []
        for array in params:
            estimate = np.zeros_like(array)
            for idx in np.ndindex(array.shape):
                original = array[idx]
                array[idx] = original + H
                upper = net.cost(item)
                array[idx] = original - H
                lower = net.cost(item)
                array[idx] = original
                estimate[idx] = (upper - lower) / (2 * H)
            layer_grads.append(estimate)
        grads.append(layer_grads)
    return grads


@pytest.mark.parametrize(
    ("shape", "activations"),
    [
        ([2, 1], "identity"),
        ([3, 4, 2], ["tanh", "sigmoid"]),
        ([2, 5, 5, 3], ["sigmoid", "tanh", "identity"]),
    ],
)
def test_gradients_match_finite_differences(shape, activations):
    rng = np.random.default_rng(7)
    net = NeuralNetwork.random(shape, activations, rng=rng, weight_range=(-1, 1), bias_range=(-1, 1))
    item = Item(input=rng.uniform(-1, 1, shape[0]), output=rng.uniform(0, 1, shape[-1]))
    grads = compute_gradients(net, item)
    numeric_w, numeric_b = _numeric_gradients(net, item)
    for analytic, numeric in zip(grads.weights, numeric_w):
        np.testing.assert_allclose(analytic, numeric, rtol=1e-4, atol=1e-6)
    for analytic, numeric in zip(grads.biases, numeric_b):
        np.testing.assert_allclose(analytic, numeric, rtol=1e-4, atol=1e-6)


def test_gradient_shapes_follow_parameters(rng):
    net = NeuralNetwork.random([4, 6, 3], "relu", rng=rng)
    grads = compute_gradients(net, Item(input=np.ones(4), output=np.zeros(3)))
    assert len(grads) == 2
    assert [g.shape for g in grads.weights] == [w.shape for w in net.weights]
    assert [g.shape for g in grads.biases] == [b.shape for b in net.biases]
    assert [g.shape for g in grads.augmented()] == [(6, 5), (3, 7)]


def test_gradient_is_zero_at_perfect_fit():
    net = NeuralNetwork([np.array([[2.0]])], [np.array([1.0])], "identity")
    grads = compute_gradients(net, Item.from_lists([3.0], [7.0]))
    assert grads.weights[0][0, 0] == 0.0
    assert grads.biases[0][0, 0] == 0.0


def test_single_layer_identity_gradient_by_hand():
    net = NeuralNetwork([np.array([[1.0, -1.0]])], [np.array([0.5])], "identity")
    item = Item.from_lists([2.0, 1.0], [0.0])
    grads = compute_gradients(net, item)
    # output 1.5, dC/dy = 3
    np.testing.assert_allclose(grads.weights[0], [[6.0, 3.0]])
    np.testing.assert_allclose(grads.biases[0], [[3.0]])


def test_normalized_gradients_have_unit_norm(rng):
    net = NeuralNetwork.random([3, 3, 2], "tanh", rng=rng, weight_range=(-1, 1))
    grads = compute_gradients(
        net, Item(input=np.ones(3), output=np.zeros(2)), normalize_gradients=True
    )
    for g in grads.weights + grads.biases:
        assert np.linalg.norm(g) == pytest.approx(1.0)


def test_normalize_keeps_zero_gradient():
    zero = np.zeros((2, 2))
    assert normalize(zero) is zero


def test_output_dimension_mismatch_rejected():
    net = NeuralNetwork.zeros([2, 3], "identity")
    with pytest.raises(ShapeError):
        compute_gradients(net, Item.from_lists([1.0, 1.0], [1.0]))


def test_non_finite_error_signal_detected():
    net = NeuralNetwork([np.array([[1e308]])], [np.array([0.0])], "identity")
    with pytest.raises(NonFiniteError):
        compute_gradients(net, Item.from_lists([10.0], [0.0]))


def test_mse_loss_scales_gradient(rng):
    net = NeuralNetwork.random([2, 4], "identity", rng=rng)
    item = Item(input=np.ones(2), output=np.zeros(4))
    sse = compute_gradients(net, item)
    mse = compute_gradients(net, item, loss="mse")
    np.testing.assert_allclose(mse.weights[0], sse.weights[0] / 4)


def test_loss_registry_aliases_and_unknown_names():
    from neuralkit.training.losses import REGISTRY

    sse = REGISTRY.resolve("squared_distance")
    assert sse is REGISTRY.resolve("sse")
    cost, grad = sse(np.array([[1.0], [2.0]]), np.zeros((2, 1)))
    assert cost == 5.0
    np.testing.assert_allclose(grad, [[2.0], [4.0]])
    assert "mse" in REGISTRY.names()
    with pytest.raises(KeyError, match="Available losses"):
        REGISTRY.resolve("huber")
