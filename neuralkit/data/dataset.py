"""Labelled data sets stored in the NKDS binary format.

An NKDS file starts with two little-endian int64 values, the item count and
the size in bytes of every item, followed by the items back to back. Each
item is its input vector followed by its expected output vector, both in the
matrix encoding of :mod:`neuralkit.core.encoding`. A named data set is a
directory holding ``<name>_train_data.nkds`` and ``<name>_test_data.nkds``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Iterator, List, Tuple

from ..core.encoding import WORD, decode_matrix, encode_ints, encode_matrix, read_int
from ..core.errors import DataSetError, DataSetFormatError, FormatError, ShapeError
from ..core.network import NeuralNetwork
from ..core.types import Item

logger = logging.getLogger(__name__)

FILE_EXTENSION = ".nkds"
TRAINING_SUFFIX = "_train_data"
TESTING_SUFFIX = "_test_data"
HEADER_SIZE = 2 * WORD


def encode_item(item: Item) -> bytes:
    return encode_matrix(item.input) + encode_matrix(item.output)


def decode_item(buffer: bytes | memoryview) -> Item:
    try:
        inputs, offset = decode_matrix(buffer, 0)
        outputs, offset = decode_matrix(buffer, offset)
    except FormatError as exc:
        raise DataSetFormatError(f"Malformed data-set record: {exc}") from exc
    if offset != len(buffer):
        raise DataSetFormatError(f"Record has {len(buffer) - offset} unexpected trailing bytes")
    try:
        return Item(input=inputs, output=outputs)
    except ShapeError as exc:
        raise DataSetFormatError(f"Record does not hold two vectors: {exc}") from exc


def write_items(items: Iterable[Item], path: str | Path) -> int:
    """Write ``items`` to an NKDS file and return how many were written.

    Every item must encode to the same number of bytes.
    """

    records = [encode_item(item) for item in items]
    size = len(records[0]) if records else 0
    for idx, record in enumerate(records):
        if len(record) != size:
            raise ShapeError(
                f"Item {idx} encodes to {len(record)} bytes but item 0 encodes to {size}; "
                "all items of a data set must have the same dimensions"
            )
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        handle.write(encode_ints([len(records), size]))
        for record in records:
            handle.write(record)
    return len(records)


def _read_header(handle: BinaryIO, path: Path) -> Tuple[int, int]:
    header = handle.read(HEADER_SIZE)
    if len(header) != HEADER_SIZE:
        raise DataSetFormatError(f"{path} is too short to hold an NKDS header")
    count, _ = read_int(header, 0)
    size, _ = read_int(header, WORD)
    if count < 0 or size < 0:
        raise DataSetFormatError(f"{path} has an invalid header ({count} items of {size} bytes)")
    return count, size


def read_header(path: str | Path) -> Tuple[int, int]:
    """Return ``(item_count, item_size)`` after checking the file length."""

    path = Path(path)
    try:
        with path.open("rb") as handle:
            count, size = _read_header(handle, path)
    except OSError as exc:
        raise DataSetFormatError(f"Cannot read data-set file {path}") from exc
    expected = HEADER_SIZE + count * size
    actual = path.stat().st_size
    if actual != expected:
        raise DataSetFormatError(
            f"{path} should hold {expected} bytes for {count} items of {size} bytes, "
            f"found {actual}"
        )
    return count, size


def iter_items(path: str | Path) -> Iterator[Item]:
    """Stream the items of an NKDS file in file order."""

    path = Path(path)
    read_header(path)
    with path.open("rb") as handle:
        count, size = _read_header(handle, path)
        for idx in range(count):
            record = handle.read(size)
            if len(record) != size:
                raise DataSetFormatError(f"{path} is truncated at item {idx}")
            yield decode_item(record)


class DataSet:
    """A named pair of training and testing NKDS files."""

    def __init__(self, name: str, directory: str | Path) -> None:
        self.name = name
        self.directory = Path(directory)
        self.training_items_count, _ = read_header(self.training_path)
        self.testing_items_count, _ = read_header(self.testing_path)

    @classmethod
    def open(cls, name: str, directory: str | Path) -> "DataSet":
        return cls(name, directory)

    @classmethod
    def create(
        cls,
        name: str,
        training_items: Iterable[Item],
        testing_items: Iterable[Item],
        directory: str | Path,
    ) -> "DataSet":
        """Write both files of a data set and open it."""

        directory = Path(directory)
        train = write_items(training_items, cls.file_path(name, directory, TRAINING_SUFFIX))
        test = write_items(testing_items, cls.file_path(name, directory, TESTING_SUFFIX))
        logger.info("wrote data set %r to %s (%d training, %d testing)", name, directory, train, test)
        return cls(name, directory)

    @staticmethod
    def file_path(name: str, directory: str | Path, suffix: str) -> Path:
        return Path(directory) / f"{name}{suffix}{FILE_EXTENSION}"

    @staticmethod
    def exists(name: str, directory: str | Path) -> bool:
        return all(
            DataSet.file_path(name, directory, suffix).exists()
            for suffix in (TRAINING_SUFFIX, TESTING_SUFFIX)
        )

    @property
    def training_path(self) -> Path:
        return self.file_path(self.name, self.directory, TRAINING_SUFFIX)

    @property
    def testing_path(self) -> Path:
        return self.file_path(self.name, self.directory, TESTING_SUFFIX)

    # ------------------------------------------------------------------
    # Iteration

    def training_items(self) -> Iterator[Item]:
        return iter_items(self.training_path)

    def testing_items(self) -> Iterator[Item]:
        return iter_items(self.testing_path)

    def iterate_training_data(self, visit: Callable[[Item], None]) -> None:
        """Call ``visit`` once for every training item."""

        for item in self.training_items():
            visit(item)

    def iterate_testing_data(self, visit: Callable[[Item], None]) -> None:
        """Call ``visit`` once for every testing item."""

        for item in self.testing_items():
            visit(item)

    # ------------------------------------------------------------------
    # Cost

    def training_cost(self, network: NeuralNetwork) -> float:
        """Mean cost of ``network`` over the training items."""

        return _average_cost(network, self.training_items(), "training")

    def testing_cost(self, network: NeuralNetwork) -> float:
        """Mean cost of ``network`` over the testing items."""

        return _average_cost(network, self.testing_items(), "testing")

    def __repr__(self) -> str:
        return (
            f"DataSet(name={self.name!r}, directory={str(self.directory)!r}, "
            f"training={self.training_items_count}, testing={self.testing_items_count})"
        )


def _average_cost(network: NeuralNetwork, items: Iterator[Item], split: str) -> float:
    costs: List[float] = [network.cost(item) for item in items]
    if not costs:
        raise DataSetError(f"Cannot average the cost over an empty {split} split")
    return sum(costs) / len(costs)


__all__ = [
    "DataSet",
    "decode_item",
    "encode_item",
    "iter_items",
    "read_header",
    "write_items",
]
