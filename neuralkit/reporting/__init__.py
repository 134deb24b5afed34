"""Reporting utilities for neuralkit."""

from .artifacts import describe_dataset, describe_network, write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "describe_dataset",
    "describe_network",
    "write_manifest",
]
