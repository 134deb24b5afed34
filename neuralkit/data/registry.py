"""Registry of named data-set factories."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Iterable, MutableMapping

from ..core.types import Item
from .dataset import DataSet
from .idx import convert_mnist

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".cache" / "neuralkit"

DatasetFactory = Callable[..., DataSet]

_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(name: str | None = None, factory: DatasetFactory | None = None):
    """Make ``factory`` available to :func:`get_dataset` under ``name``.

    Called with a factory it registers immediately; called with only a name
    it returns a decorator. A factory is called as
    ``factory(directory, **options)`` and must return an opened
    :class:`DataSet`. Registering a name again replaces the earlier factory.
    """

    def _register(func: DatasetFactory) -> DatasetFactory:
        key = name if name is not None else func.__name__.lstrip("_")
        if key in _REGISTRY and _REGISTRY[key] is not func:
            logger.debug("replacing data-set factory %r", key)
        _REGISTRY[key] = func
        return func

    if factory is None and name is None:
        raise TypeError("register_dataset needs a name, a factory, or both")
    return _register if factory is None else _register(factory)


def resolve_data_dir(directory: str | Path | None = None) -> Path:
    if directory is not None:
        return Path(directory)
    env = os.environ.get("NEURALKIT_DATA_DIR")
    return Path(env) if env else DEFAULT_DATA_DIR


def get_dataset(
    dataset: str,
    /,
    *,
    directory: str | Path | None = None,
    **options: Any,
) -> DataSet:
    """Build (or reopen) the data set registered as ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")
    target = resolve_data_dir(directory)
    logger.debug("loading data set %r from %s", dataset, target)
    return _REGISTRY[dataset](target, **options)


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available data-set identifiers."""

    return sorted(_REGISTRY)


# Built-in data sets -----------------------------------------------------------------------


def xor_items() -> list[Item]:
    return [
        Item.from_lists([float(a), float(b)], [float(a ^ b)])
        for a in (0, 1)
        for b in (0, 1)
    ]


@register_dataset("xor")
def _xor(directory: Path, *, name: str = "xor", overwrite: bool = False, **_: object) -> DataSet:
    if overwrite or not DataSet.exists(name, directory):
        items = xor_items()
        return DataSet.create(name, items, items, directory)
    return DataSet.open(name, directory)


@register_dataset("mnist_idx")
def _mnist_idx(
    directory: Path,
    *,
    train_images: str,
    train_labels: str,
    test_images: str,
    test_labels: str,
    name: str = "mnist",
    limit: int | None = None,
    overwrite: bool = False,
    **_: object,
) -> DataSet:
    if overwrite or not DataSet.exists(name, directory):
        return convert_mnist(
            name, directory, train_images, train_labels, test_images, test_labels, limit=limit
        )
    return DataSet.open(name, directory)


__all__ = [
    "DEFAULT_DATA_DIR",
    "available_datasets",
    "get_dataset",
    "register_dataset",
    "resolve_data_dir",
    "xor_items",
]
