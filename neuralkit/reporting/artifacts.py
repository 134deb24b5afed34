"""Descriptions of a finished run written next to its metrics."""

from __future__ import annotations

import json
import platform
import time
from pathlib import Path
from typing import Dict, Mapping

import numpy as np

from .._version import __version__
from ..core.network import NeuralNetwork
from ..data.dataset import DataSet


def describe_network(network: NeuralNetwork) -> Dict[str, object]:
    return {
        "shape": network.shape,
        "activations": [fn.name.lower() for fn in network.activation_functions],
        "parameters": network.parameter_count(),
    }


def describe_dataset(dataset: DataSet) -> Dict[str, object]:
    return {
        "name": dataset.name,
        "directory": str(dataset.directory),
        "training_items": dataset.training_items_count,
        "testing_items": dataset.testing_items_count,
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset: Mapping[str, object],
    network: Mapping[str, object],
) -> str:
    """Write ``manifest.json``: the config, what was trained and on which versions."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "created": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": dict(config),
        "dataset": dict(dataset),
        "network": dict(network),
        "environment": {
            "neuralkit": __version__,
            "numpy": np.__version__,
            "python": platform.python_version(),
            "platform": platform.platform(),
        },
    }
    path.write_text(json.dumps(manifest, indent=2, sort_keys=True))
    return str(path)


__all__ = ["describe_dataset", "describe_network", "write_manifest"]
