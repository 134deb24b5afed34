"""Data-set storage and loaders for neuralkit."""

from .dataset import DataSet, iter_items, read_header, write_items
from .idx import convert_mnist, idx_items, read_idx
from .registry import available_datasets, get_dataset, register_dataset

__all__ = [
    "DataSet",
    "available_datasets",
    "convert_mnist",
    "get_dataset",
    "idx_items",
    "iter_items",
    "read_header",
    "read_idx",
    "register_dataset",
    "write_items",
]
