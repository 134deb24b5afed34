"""Cost curves rendered with matplotlib's non-interactive backend."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Tuple

DEFAULT_METRICS = ("training_cost", "testing_cost")


class PlotAdapter:
    """Record costs per epoch and draw them into ``cost.png`` on :meth:`close`.

    Nothing is recorded, and matplotlib is never imported, unless
    ``enable_plots`` is set.
    """

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        metrics: Sequence[str] = DEFAULT_METRICS,
        filename: str = "cost.png",
    ) -> None:
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.metrics = tuple(metrics)
        self.filename = filename
        self._curves: Dict[str, List[Tuple[int, float]]] = {name: [] for name in self.metrics}

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots:
            return
        for name in self.metrics:
            if name in metrics:
                self._curves[name].append((int(epoch), float(metrics[name])))

    __call__ = on_epoch

    def close(self) -> Path | None:
        """Save the figure and return its path, or ``None`` if nothing was drawn."""

        curves = {name: points for name, points in self._curves.items() if points}
        if not self.enable_plots or not curves:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots()
        positive = True
        for name, points in curves.items():
            epochs, values = zip(*points)
            positive = positive and min(values) > 0
            ax.plot(epochs, values, label=name.replace("_", " "))
        if positive:
            ax.set_yscale("log")
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Mean squared distance")
        ax.legend()
        self.run_dir.mkdir(parents=True, exist_ok=True)
        path = self.run_dir / self.filename
        fig.savefig(path)
        plt.close(fig)
        return path


__all__ = ["PlotAdapter"]
