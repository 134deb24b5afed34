from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import numpy as np
import pytest

from neuralkit.core.network import NeuralNetwork
from neuralkit.data.dataset import DataSet
from neuralkit.data.registry import xor_items


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def xor_dataset(tmp_path):
    items = xor_items()
    return DataSet.create("xor", items, items, tmp_path / "data")


@pytest.fixture
def xor_network():
    """Hand-set 2-2-1 step network computing XOR."""

    weights = [np.array([[1.0, 1.0], [-1.0, -1.0]]), np.array([[1.0, 1.0]])]
    biases = [np.array([[-0.5], [1.5]]), np.array([[-1.5]])]
    return NeuralNetwork(weights, biases, "step")


@pytest.fixture(autouse=True)
def _isolated_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("NEURALKIT_DATA_DIR", str(tmp_path / "neuralkit-data"))
