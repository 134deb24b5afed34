"""Metric sinks fed by the optimizers once per epoch or generation."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, List, Mapping


class _FileSink:
    """Owns an output file that is emptied when the sink is created."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.rows_written = 0

    def row(self, epoch: int, metrics: Mapping[str, object]) -> Dict[str, object]:
        values: Dict[str, object] = {"epoch": int(epoch)}
        for name, value in metrics.items():
            # Only numbers are recorded; labels and nested values are dropped
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                values[name] = float(value)
        return values

    def on_epoch(self, epoch: int, metrics: Mapping[str, object]) -> None:
        self.write(self.row(epoch, metrics))
        self.rows_written += 1

    __call__ = on_epoch

    def write(self, row: Mapping[str, object]) -> None:
        raise NotImplementedError


class JsonlSink(_FileSink):
    """One JSON object per line, tagged with the optimizer name and seed."""

    def __init__(
        self,
        path: str | Path,
        *,
        run: str = "train",
        seed: int | None = None,
    ) -> None:
        super().__init__(path)
        self.run = run
        self.seed = seed

    def row(self, epoch: int, metrics: Mapping[str, object]) -> Dict[str, object]:
        values = super().row(epoch, metrics)
        tagged: Dict[str, object] = {"epoch": values.pop("epoch"), "run": self.run, "seed": self.seed}
        tagged.update(values)
        return tagged

    def write(self, row: Mapping[str, object]) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(row) + "\n")

    def read(self) -> List[Dict[str, object]]:
        lines = self.path.read_text(encoding="utf-8").splitlines()
        return [json.loads(line) for line in lines if line]


class CsvSink(_FileSink):
    """Comma-separated rows; the column set is fixed by the first row."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(path)
        self._columns: List[str] | None = None

    def write(self, row: Mapping[str, object]) -> None:
        if self._columns is None:
            self._columns = ["epoch"] + sorted(k for k in row if k != "epoch")
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self._columns, extrasaction="ignore")
            if self.rows_written == 0:
                writer.writeheader()
            writer.writerow(row)


__all__ = ["CsvSink", "JsonlSink"]
