import numpy as np
import pytest

from neuralkit.classifier import Classifier, argmax_class
from neuralkit.core.network import NeuralNetwork
from neuralkit.data import registry
from neuralkit.data.dataset import DataSet


def test_builtin_datasets_listed():
    names = list(registry.available_datasets())
    assert "xor" in names
    assert "mnist_idx" in names


def test_unknown_dataset_lists_alternatives(tmp_path):
    with pytest.raises(KeyError, match="Available datasets"):
        registry.get_dataset("nope", directory=tmp_path)


def test_xor_dataset_created_in_env_directory(tmp_path, monkeypatch):
    monkeypatch.setenv("NEURALKIT_DATA_DIR", str(tmp_path / "env"))
    dataset = registry.get_dataset("xor")
    assert dataset.directory == tmp_path / "env"
    assert dataset.training_items_count == 4
    assert DataSet.exists("xor", tmp_path / "env")


def test_explicit_directory_wins_over_env(tmp_path):
    dataset = registry.get_dataset("xor", directory=tmp_path / "explicit", name="xor2")
    assert dataset.training_path == tmp_path / "explicit" / "xor2_train_data.nkds"


def test_register_dataset_direct_and_decorator(tmp_path, monkeypatch):
    monkeypatch.setattr(registry, "_REGISTRY", dict(registry._REGISTRY))

    def _tiny(directory, **_):
        items = registry.xor_items()[:2]
        return DataSet.create("tiny", items, items, directory)

    registry.register_dataset("tiny-direct", _tiny)

    @registry.register_dataset("tiny-decorated")
    def _decorated(directory, **options):
        return _tiny(directory, **options)

    assert registry.get_dataset("tiny-direct", directory=tmp_path).training_items_count == 2
    assert registry.get_dataset("tiny-decorated", directory=tmp_path).testing_items_count == 2


def test_registrations_do_not_leak_between_tests():
    assert "tiny-direct" not in registry.available_datasets()
    assert "tiny-decorated" not in registry.available_datasets()


def test_argmax_class_prefers_first_on_ties():
    assert argmax_class(np.array([[0.1], [0.9], [0.9]])) == 1


def test_classifier_accuracy(xor_dataset, xor_network):
    classifier = Classifier(xor_network, lambda out: int(out[0, 0] > 0.5))
    assert classifier([1.0, 0.0]) == 1
    assert classifier.classify([1.0, 1.0]) == 0
    assert classifier.accuracy(xor_dataset) == 1.0
    assert classifier.accuracy(xor_dataset, split="training") == 1.0


def test_classifier_accuracy_of_constant_network(xor_dataset):
    classifier = Classifier(NeuralNetwork.zeros([2, 1], "identity"), lambda out: int(out[0, 0] > 0.5))
    assert classifier.accuracy(xor_dataset) == 0.5
    with pytest.raises(ValueError):
        classifier.accuracy(xor_dataset, split="validation")
