"""Config-driven training runs for neuralkit."""

from __future__ import annotations

import json
import logging
import time
from contextlib import closing
from copy import deepcopy
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Sequence

import numpy as np
import yaml

from ..core.activations import ActivationFunction, resolve_all
from ..core.encoding import save_network
from ..core.errors import ShapeError
from ..core.network import NeuralNetwork
from ..core.types import RunResult
from ..data import registry
from ..data.dataset import DataSet
from ..reporting.artifacts import describe_dataset, describe_network, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .breeding import GeneticOptimizer, arithmetic_mean, arithmetic_mean_with_mutation
from .gradient_descent import GradientDescent

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = {"data", "model", "train"}

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-gd": {
        "data": {"name": "xor", "options": {}},
        "model": {
            "shape": [2, 3, 1],
            "activations": "sigmoid",
            "weight_range": [-1.0, 1.0],
            "bias_range": [-1.0, 1.0],
        },
        "train": {
            "optimizer": "gd",
            "epochs": 200,
            "lr": 0.5,
            "update_biases": True,
            "normalize_gradients": False,
            "seed": 0,
            "run_dir": "runs/xor-gd",
            "enable_plots": False,
        },
    },
    "xor-genetic": {
        "data": {"name": "xor", "options": {}},
        "model": {
            "shape": [2, 2, 1],
            "activations": "sigmoid",
            "weight_range": [-10.0, 10.0],
            "bias_range": [-10.0, 10.0],
        },
        "train": {
            "optimizer": "genetic",
            "population": 40,
            "fitness": 0.5,
            "generations": 25,
            "mutation_frequency": 0.1,
            "mutation_range": [0.5, 1.5],
            "seed": 0,
            "run_dir": "runs/xor-genetic",
            "enable_plots": False,
        },
    },
}

PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"


def _parse_yaml(text: str) -> object:
    return yaml.safe_load(text)


_LOADERS: Dict[str, Callable[[str], object]] = {
    ".yaml": _parse_yaml,
    ".yml": _parse_yaml,
    ".json": json.loads,
}


def _require_sections(config: Mapping[str, object], source: str) -> None:
    absent = sorted(REQUIRED_SECTIONS.difference(config))
    if absent:
        raise KeyError(f"{source} is missing required sections: {', '.join(absent)}")


def load_config(path: str | Path) -> Mapping[str, object]:
    """Read a JSON or YAML run config (possibly only a partial override)."""

    path = Path(path)
    loader = _LOADERS.get(path.suffix.lower())
    if loader is None:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text(encoding="utf-8")
    data = loader(text) if text.strip() else {}
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


@lru_cache(maxsize=None)
def _preset_files(directory: Path) -> Dict[str, Mapping[str, object]]:
    if not directory.is_dir():
        return {}
    found: Dict[str, Mapping[str, object]] = {}
    for file in sorted(directory.iterdir()):
        if file.suffix.lower() in _LOADERS:
            config = load_config(file)
            _require_sections(config, f"Preset {file.name}")
            found[file.stem] = config
    return found


def presets() -> Mapping[str, Mapping[str, object]]:
    """Built-in presets overlaid with the files in :data:`PRESET_DIR`."""

    catalog = {**_PRESETS, **_preset_files(PRESET_DIR)}
    return {name: deepcopy(config) for name, config in catalog.items()}


def load_preset(name: str) -> Mapping[str, object]:
    catalog = presets()
    if name not in catalog:
        raise KeyError(f"Unknown preset {name!r}. Available presets: {', '.join(sorted(catalog))}")
    return catalog[name]


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Build the data set and network described by ``config`` and train it."""

    _require_sections(config, "Config")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = registry.get_dataset(
        str(data_cfg["name"]),
        directory=train_cfg.get("data_dir") or config.get("data_dir"),
        **dict(data_cfg.get("options") or {}),
    )
    seed = int(train_cfg.get("seed", 0))
    rng = np.random.default_rng(seed)

    shape = [int(n) for n in model_cfg["shape"]]  # type: ignore[union-attr]
    activations = resolve_all(model_cfg.get("activations", "sigmoid"), len(shape) - 1)  # type: ignore[arg-type]
    _check_dataset_shape(dataset, shape)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    optimizer_name = str(train_cfg.get("optimizer", "gd")).lower()

    metrics_path = run_dir / "metrics.jsonl"
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks = [JsonlSink(metrics_path, run=optimizer_name, seed=seed), CsvSink(run_dir / "metrics.csv"), plots]
    callbacks.append(_log_progress)

    _log_startup_summary(dataset, shape, activations, optimizer_name)

    if optimizer_name in {"gd", "sgd", "gradient_descent"}:
        network, steps = _run_gradient_descent(dataset, shape, activations, model_cfg, train_cfg, rng, callbacks)
    elif optimizer_name == "genetic":
        network, steps = _run_genetic(dataset, shape, activations, model_cfg, train_cfg, rng, callbacks)
    else:
        raise ValueError(f"Unknown optimizer {optimizer_name!r}; expected 'gd' or 'genetic'")

    plots.close()
    network_path = save_network(network, run_dir / "network.nknn")
    safe_config = json.loads(json.dumps(config))
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset=describe_dataset(dataset),
        network=describe_network(network),
    )
    return RunResult(
        steps=steps,
        metrics_path=str(metrics_path),
        manifest_path=manifest,
        network_path=str(network_path),
    )


def _run_gradient_descent(
    dataset: DataSet,
    shape: Sequence[int],
    activations: Sequence[ActivationFunction],
    model_cfg: Mapping[str, object],
    train_cfg: Mapping[str, object],
    rng: np.random.Generator,
    callbacks: List[object],
) -> tuple[NeuralNetwork, int]:
    network = NeuralNetwork.random(
        shape,
        activations,
        rng=rng,
        weight_range=_range(model_cfg.get("weight_range"), (-1.0, 1.0)),
        bias_range=_range(model_cfg.get("bias_range"), (-1.0, 1.0)),
    )
    optimizer = GradientDescent(
        network,
        learning_rate=float(train_cfg.get("lr", 0.1)),
        update_biases=bool(train_cfg.get("update_biases", True)),
        normalize_gradients=bool(train_cfg.get("normalize_gradients", False)),
        callbacks=callbacks,
    )
    epochs = int(train_cfg.get("epochs", 1))
    optimizer.train(dataset, epochs)
    return network, epochs * dataset.training_items_count


def _run_genetic(
    dataset: DataSet,
    shape: Sequence[int],
    activations: Sequence[ActivationFunction],
    model_cfg: Mapping[str, object],
    train_cfg: Mapping[str, object],
    rng: np.random.Generator,
    callbacks: List[object],
) -> tuple[NeuralNetwork, int]:
    frequency = float(train_cfg.get("mutation_frequency", 0.2))
    if frequency > 0:
        breed = arithmetic_mean_with_mutation(
            mutation_frequency=frequency,
            mutation_range=_range(train_cfg.get("mutation_range"), (-10.0, 10.0)),
            rng=rng,
        )
    else:
        breed = arithmetic_mean
    optimizer = GeneticOptimizer(shape, list(activations), dataset, breed=breed, rng=rng)
    generation = 0

    def _on_generation(population: List[NeuralNetwork]) -> None:
        nonlocal generation
        generation += 1
        costs = [dataset.training_cost(network) for network in population]
        metrics = {"training_cost": min(costs), "mean_training_cost": float(np.mean(costs))}
        for callback in callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(generation, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(generation, metrics)

    generations = int(train_cfg.get("generations", 10))
    network = optimizer.find_optimal_network(
        population_size=int(train_cfg.get("population", 20)),
        eliminating_portion=float(train_cfg.get("fitness", 0.5)),
        generations=generations,
        weight_range=_range(model_cfg.get("weight_range"), (-10.0, 10.0)),
        bias_range=_range(model_cfg.get("bias_range"), (-10.0, 10.0)),
        on_generation=_on_generation,
    )
    return network, generations


def _check_dataset_shape(dataset: DataSet, shape: Sequence[int]) -> None:
    with closing(dataset.training_items()) as items:
        first = next(items, None)
    if first is None:
        return
    if first.input.shape[0] != shape[0] or first.output.shape[0] != shape[-1]:
        raise ShapeError(
            f"Data set {dataset.name!r} maps {first.input.shape[0]} inputs to "
            f"{first.output.shape[0]} outputs but the network shape is {list(shape)}"
        )


def _range(value: object, default: tuple[float, float]) -> tuple[float, float]:
    if value is None:
        return default
    low, high = value  # type: ignore[misc]
    return float(low), float(high)


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _log_progress(epoch: int, metrics: Mapping[str, float]) -> None:
    formatted = " ".join(f"{name}={value:.6g}" for name, value in sorted(metrics.items()))
    logger.info("epoch %d: %s", epoch, formatted)


def _log_startup_summary(
    dataset: DataSet,
    shape: Sequence[int],
    activations: Sequence[ActivationFunction],
    optimizer: str,
) -> None:
    parameters = sum(shape[i + 1] * (shape[i] + 1) for i in range(len(shape) - 1))
    logger.info("=== neuralkit run ===")
    logger.info("Data set      : %s (%d training, %d testing)", dataset.name,
                dataset.training_items_count, dataset.testing_items_count)
    logger.info("Shape         : %s", list(shape))
    logger.info("Activations   : %s", [f.name.lower() for f in activations])
    logger.info("Optimizer     : %s", optimizer)
    logger.info("Parameters    : %d", parameters)


__all__ = ["load_config", "load_preset", "presets", "run_pipeline"]
