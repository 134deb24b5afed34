"""IDX file reader and MNIST-to-NKDS conversion."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import numpy as np

from ..core.errors import DataSetFormatError
from ..core.types import Array, Item
from .dataset import DataSet

logger = logging.getLogger(__name__)

# IDX type codes, payload is big-endian
_IDX_DTYPES = {
    0x08: np.dtype(">u1"),
    0x09: np.dtype(">i1"),
    0x0B: np.dtype(">i2"),
    0x0C: np.dtype(">i4"),
    0x0D: np.dtype(">f4"),
    0x0E: np.dtype(">f8"),
}

NUM_CLASSES = 10


def read_idx(path: str | Path) -> Array:
    """Read an IDX file into an array of its declared shape."""

    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DataSetFormatError(f"Cannot read IDX file {path}") from exc
    if len(data) < 4 or data[0] != 0 or data[1] != 0:
        raise DataSetFormatError(f"{path} does not start with an IDX magic number")
    dtype = _IDX_DTYPES.get(data[2])
    if dtype is None:
        raise DataSetFormatError(f"{path} declares unknown IDX type 0x{data[2]:02x}")
    ndim = data[3]
    header = 4 + 4 * ndim
    if len(data) < header:
        raise DataSetFormatError(f"{path} is too short for {ndim} IDX dimensions")
    dims = tuple(int(d) for d in np.frombuffer(data, dtype=">u4", count=ndim, offset=4))
    count = int(np.prod(dims)) if dims else 1
    if len(data) != header + count * dtype.itemsize:
        raise DataSetFormatError(
            f"{path} holds {len(data) - header} payload bytes, expected {count * dtype.itemsize}"
        )
    return np.frombuffer(data, dtype=dtype, count=count, offset=header).reshape(dims)


def write_idx(array: Array, path: str | Path) -> Path:
    """Write ``array`` as an unsigned-byte IDX file."""

    array = np.asarray(array, dtype=np.uint8)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    header = bytes([0, 0, 0x08, array.ndim]) + np.asarray(array.shape, dtype=">u4").tobytes()
    path.write_bytes(header + array.tobytes())
    return path


def idx_items(
    images_path: str | Path,
    labels_path: str | Path,
    limit: int | None = None,
) -> Iterator[Item]:
    """Yield MNIST-style items: pixels scaled to [0, 1], one-hot labels."""

    images = read_idx(images_path)
    labels = read_idx(labels_path).reshape(-1)
    if images.shape[0] != labels.shape[0]:
        raise DataSetFormatError(
            f"{images.shape[0]} images but {labels.shape[0]} labels in {images_path}"
        )
    pixels = images.reshape(images.shape[0], -1).astype(np.float64)
    scale = 255.0 if pixels.size and pixels.max() > 1 else 1.0
    eye = np.eye(NUM_CLASSES)
    total = labels.shape[0] if limit is None else min(limit, labels.shape[0])
    for idx in range(total):
        label = int(labels[idx])
        if not 0 <= label < NUM_CLASSES:
            raise DataSetFormatError(f"Label {label} at index {idx} is not a digit")
        yield Item(input=pixels[idx] / scale, output=eye[label])


def convert_mnist(
    name: str,
    directory: str | Path,
    train_images: str | Path,
    train_labels: str | Path,
    test_images: str | Path,
    test_labels: str | Path,
    limit: int | None = None,
) -> DataSet:
    """Convert the four MNIST IDX files into an NKDS data set."""

    logger.info("converting MNIST IDX files into data set %r", name)
    return DataSet.create(
        name,
        idx_items(train_images, train_labels, limit),
        idx_items(test_images, test_labels, limit),
        directory,
    )


__all__ = ["convert_mnist", "idx_items", "read_idx", "write_idx"]
