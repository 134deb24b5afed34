"""neuralkit public API."""

from ._version import __version__
from .classifier import Classifier, argmax_class
from .core import activations, encoding, errors, types  # noqa: F401
from .core.activations import ActivationFunction
from .core.encoding import load_network, save_network
from .core.network import NeuralNetwork
from .core.types import Item
from .data.dataset import DataSet
from .training.backprop import compute_gradients
from .training.breeding import GeneticOptimizer
from .training.genetic import GeneticAlgorithm
from .training.gradient_descent import GradientDescent
from .training.pipelines import load_preset, presets, run_pipeline

__all__ = [
    "ActivationFunction",
    "Classifier",
    "DataSet",
    "GeneticAlgorithm",
    "GeneticOptimizer",
    "GradientDescent",
    "Item",
    "NeuralNetwork",
    "__version__",
    "activations",
    "argmax_class",
    "compute_gradients",
    "encoding",
    "errors",
    "load_network",
    "load_preset",
    "presets",
    "run_pipeline",
    "save_network",
    "types",
]
