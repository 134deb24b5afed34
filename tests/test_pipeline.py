from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from neuralkit.classifier import Classifier
from neuralkit.core.encoding import load_network
from neuralkit.core.errors import ShapeError
from neuralkit.training import pipelines


def _xor_accuracy(network):
    classifier = Classifier(network, lambda out: int(out[0, 0] > 0.5))
    return np.mean(
        [classifier([a, b]) == (a ^ b) for a in (0, 1) for b in (0, 1)]
    )


def test_presets_include_builtins_and_files():
    names = set(pipelines.presets())
    assert {"xor-gd", "xor-genetic", "xor-tanh-gd"} <= names
    for config in pipelines.presets().values():
        assert pipelines.REQUIRED_SECTIONS <= set(config)


def test_load_preset_returns_copies():
    first = pipelines.load_preset("xor-gd")
    first["train"]["epochs"] = 1
    assert pipelines.load_preset("xor-gd")["train"]["epochs"] != 1


def test_unknown_preset():
    with pytest.raises(KeyError):
        pipelines.load_preset("does-not-exist")


def test_load_config_yaml_and_json(tmp_path):
    (tmp_path / "a.yaml").write_text("train:\n  epochs: 3\n")
    (tmp_path / "b.json").write_text(json.dumps({"train": {"epochs": 4}}))
    assert pipelines.load_config(tmp_path / "a.yaml") == {"train": {"epochs": 3}}
    assert pipelines.load_config(tmp_path / "b.json") == {"train": {"epochs": 4}}
    (tmp_path / "c.toml").write_text("")
    with pytest.raises(ValueError):
        pipelines.load_config(tmp_path / "c.toml")


def test_gradient_descent_pipeline_writes_artifacts(tmp_path):
    config = pipelines.load_preset("xor-gd")
    config["train"]["run_dir"] = str(tmp_path / "run")
    config["train"]["epochs"] = 500
    config["train"]["data_dir"] = str(tmp_path / "data")
    result = pipelines.run_pipeline(config)

    run_dir = tmp_path / "run"
    assert result.steps == 500 * 4
    assert Path(result.metrics_path) == run_dir / "metrics.jsonl"
    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert len(records) == 500
    assert records[-1]["training_cost"] < records[0]["training_cost"]
    assert (run_dir / "metrics.csv").exists()
    assert (run_dir / "config.json").exists()
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["network"]["shape"] == [2, 3, 1]
    assert manifest["dataset"]["training_items"] == 4

    network = load_network(result.network_path)
    assert network.shape == [2, 3, 1]
    assert _xor_accuracy(network) >= 0.5


def test_pipeline_is_reproducible(tmp_path):
    paths = []
    for name in ("a", "b"):
        config = pipelines.load_preset("xor-gd")
        config["train"].update(run_dir=str(tmp_path / name), epochs=5, seed=42)
        paths.append(pipelines.run_pipeline(config).network_path)
    assert Path(paths[0]).read_bytes() == Path(paths[1]).read_bytes()


def test_genetic_pipeline(tmp_path):
    config = pipelines.load_preset("xor-genetic")
    config["train"].update(run_dir=str(tmp_path / "ga"), generations=5, population=10)
    result = pipelines.run_pipeline(config)
    assert result.steps == 5
    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [record["epoch"] for record in records] == [1, 2, 3, 4, 5]
    assert all(r["training_cost"] <= r["mean_training_cost"] + 1e-12 for r in records)
    assert records[0]["run"] == "genetic"
    assert load_network(result.network_path).shape == [2, 2, 1]


def test_plots_written_when_enabled(tmp_path):
    config = pipelines.load_preset("xor-gd")
    config["train"].update(run_dir=str(tmp_path / "plots"), epochs=3, enable_plots=True)
    pipelines.run_pipeline(config)
    assert (tmp_path / "plots" / "cost.png").exists()


def test_shape_mismatch_with_dataset(tmp_path):
    config = pipelines.load_preset("xor-gd")
    config["model"]["shape"] = [3, 2, 1]
    config["train"]["run_dir"] = str(tmp_path / "bad")
    with pytest.raises(ShapeError):
        pipelines.run_pipeline(config)


def test_unknown_optimizer(tmp_path):
    config = pipelines.load_preset("xor-gd")
    config["train"].update(run_dir=str(tmp_path / "bad"), optimizer="adam")
    with pytest.raises(ValueError, match="Unknown optimizer"):
        pipelines.run_pipeline(config)


def test_missing_sections():
    with pytest.raises(KeyError):
        pipelines.run_pipeline({"data": {"name": "xor"}})


def test_shape_check_closes_the_training_file(tmp_path, xor_dataset, monkeypatch):
    opened = []
    read_items = type(xor_dataset).training_items

    def _tracked(self):
        items = read_items(self)
        opened.append(items)
        return items

    monkeypatch.setattr(type(xor_dataset), "training_items", _tracked)
    pipelines._check_dataset_shape(xor_dataset, [2, 3, 1])
    assert len(opened) == 1
    assert opened[0].gi_frame is None
