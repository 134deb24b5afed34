"""Exception hierarchy for neuralkit."""

from __future__ import annotations


class NeuralKitError(Exception):
    """Base class for all library errors."""


class ShapeError(NeuralKitError, ValueError):
    """Raised when matrix dimensions or call preconditions do not line up."""


class NonFiniteError(NeuralKitError, ArithmeticError):
    """Raised when NaN or infinite values appear in parameters or gradients."""


class FormatError(NeuralKitError, ValueError):
    """Raised when encoded network bytes cannot be decoded."""


class UnknownActivationError(FormatError):
    """Raised for an activation tag or name outside the supported set."""


class DataSetError(NeuralKitError):
    """Raised for data-set level failures."""


class DataSetFormatError(DataSetError):
    """Raised when a data-set file is missing, truncated or malformed."""


__all__ = [
    "NeuralKitError",
    "ShapeError",
    "NonFiniteError",
    "FormatError",
    "UnknownActivationError",
    "DataSetError",
    "DataSetFormatError",
]
