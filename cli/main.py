"""Train a neuralkit network from a preset or config file."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable, Mapping

from neuralkit.core.types import RunResult
from neuralkit.training import pipelines

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neuralkit", description=__doc__)
    source = parser.add_argument_group("run selection")
    source.add_argument("--preset", default="xor-gd", choices=sorted(pipelines.presets()),
                        help="named run configuration (default: %(default)s)")
    source.add_argument("--config", type=Path,
                        help="YAML/JSON file; a full config replaces the preset, "
                             "a partial one is merged into it")
    source.add_argument("--list-presets", action="store_true",
                        help="print the preset names and exit")

    overrides = parser.add_argument_group("overrides")
    overrides.add_argument("--seed", type=int, help="seed for initialisation and selection")
    overrides.add_argument("--data-dir", type=Path,
                           help="data-set directory (default: $NEURALKIT_DATA_DIR)")
    overrides.add_argument("--run-dir", type=Path, help="where run artifacts are written")
    overrides.add_argument("--enable-plots", action="store_true",
                           help="also save the cost curve as cost.png")

    parser.add_argument("--dump-config", type=Path,
                        help="write the fully resolved config as JSON before training")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(None if argv is None else list(argv))


def _deep_update(target: dict, changes: Mapping[str, object]) -> dict:
    for key, value in changes.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            target[key] = _deep_update(dict(current), value)
        else:
            target[key] = value
    return target


def resolve_config(args: argparse.Namespace) -> dict:
    """Preset, then config file, then command line flags."""

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))
    if args.config is not None:
        loaded = json.loads(json.dumps(pipelines.load_config(args.config)))
        if pipelines.REQUIRED_SECTIONS.issubset(loaded):
            config = loaded
        else:
            config = _deep_update(config, loaded)

    flags = {
        "seed": args.seed,
        "data_dir": None if args.data_dir is None else str(args.data_dir),
        "run_dir": None if args.run_dir is None else str(args.run_dir),
        "enable_plots": True if args.enable_plots else None,
    }
    train = config.setdefault("train", {})
    train.update({key: value for key, value in flags.items() if value is not None})
    return config


def describe(result: RunResult) -> str:
    return json.dumps(
        {
            "manifest": result.manifest_path,
            "metrics": result.metrics_path,
            "network": result.network_path,
            "steps": result.steps,
        },
        sort_keys=True,
    )


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    if args.list_presets:
        print("\n".join(sorted(pipelines.presets())))
        raise SystemExit(0)

    config = resolve_config(args)
    if args.dump_config is not None:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    print(describe(pipelines.run_pipeline(config)))


if __name__ == "__main__":
    main()
