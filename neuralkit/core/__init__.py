"""Core numerical primitives for neuralkit."""

from . import activations, encoding, errors, network, types
from .activations import ActivationFunction
from .network import NeuralNetwork
from .types import FeedForwardCache, Gradients, Item

__all__ = [
    "ActivationFunction",
    "FeedForwardCache",
    "Gradients",
    "Item",
    "NeuralNetwork",
    "activations",
    "encoding",
    "errors",
    "network",
    "types",
]
