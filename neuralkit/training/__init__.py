"""Optimizers and training pipelines for neuralkit."""

from .backprop import compute_gradients, normalize
from .breeding import GeneticOptimizer, arithmetic_mean, arithmetic_mean_with_mutation
from .genetic import GeneticAlgorithm, evolve
from .gradient_descent import GradientDescent
from .pipelines import load_config, load_preset, presets, run_pipeline

__all__ = [
    "GeneticAlgorithm",
    "GeneticOptimizer",
    "GradientDescent",
    "arithmetic_mean",
    "arithmetic_mean_with_mutation",
    "compute_gradients",
    "evolve",
    "load_config",
    "load_preset",
    "normalize",
    "presets",
    "run_pipeline",
]
