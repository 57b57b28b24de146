"""
Summary trees from the command line.

Reads a JSON config naming a tree file and the run parameters, prints the
entropy table and optionally writes the full result as JSON.

Usage: python -m summarytrees config.json [--output result.json]

Config:
    {
        "tree": "tree.json",
        "K": 10,
        "method": "optimal",
        "epsilon": 0.0
    }

Tree file:
    {"ids": [...], "parents": [...], "weights": [...], "labels": [...]}
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from summarytrees.api import SummaryResult, summarize
from summarytrees.common.params import PlannerParams
from summarytrees.common.schema_utils import SchemaClass

logger = logging.getLogger(__name__)


@dataclass
class CliConfig(SchemaClass):
    tree: str = ""
    K: int = 1
    method: str = "optimal"
    epsilon: float = 0.0
    output: Optional[str] = None

    @classmethod
    def from_json(cls, path: Path) -> CliConfig:
        with open(path) as f:
            raw: Dict[str, Any] = json.load(f)
        unknown = set(raw) - {"tree", "K", "method", "epsilon", "output"}
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        config = cls(**raw)
        # tree paths are relative to the config file
        tree_path = Path(config.tree)
        if not tree_path.is_absolute():
            config.tree = str(path.parent / tree_path)
        return config

    def params(self) -> PlannerParams:
        return PlannerParams(max_k=self.K, epsilon=self.epsilon, method=self.method)


@dataclass
class TreeInput:
    ids: List[int]
    parents: List[int]
    weights: List[float]
    labels: Optional[List[Any]] = None

    @classmethod
    def from_json(cls, path: Path) -> TreeInput:
        with open(path) as f:
            raw = json.load(f)
        missing = {"ids", "parents", "weights"} - set(raw)
        if missing:
            raise ValueError(f"Tree file {path} is missing {sorted(missing)}")
        return cls(
            ids=raw["ids"],
            parents=raw["parents"],
            weights=raw["weights"],
            labels=raw.get("labels"),
        )


# -----------------------------------------------------------------------------
# CLI
# -----------------------------------------------------------------------------


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.split("\n")[1])
    parser.add_argument("config", type=Path, help="JSON run config")
    parser.add_argument("--output", type=Path, default=None, help="Write result JSON here")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def input_from_args(args: argparse.Namespace) -> CliConfig:
    config = CliConfig.from_json(args.config)
    if args.output is not None:
        config.output = str(args.output)
    return config


def run(config: CliConfig) -> SummaryResult:
    logger.debug(f"Run config:\n{config}")
    tree = TreeInput.from_json(Path(config.tree))
    return summarize(tree.ids, tree.parents, tree.weights, tree.labels, config.params())


def save_output(config: CliConfig, result: SummaryResult) -> None:
    if config.output is None:
        return
    with open(config.output, "w") as f:
        json.dump(result.to_dict(), f, indent=2)
    logger.info(f"Wrote result to {config.output}")


def print_output(config: CliConfig, result: SummaryResult) -> None:
    print(f"Method: {config.method} (epsilon={config.epsilon})")
    print(f"{'k':>6}  {'entropy':>12}")
    for k, entropy in result.entropy:
        print(f"{int(k):>6}  {entropy:>12.6f}")


def main(argv: Optional[List[str]] = None) -> int:
    args = get_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = input_from_args(args)
        result = run(config)
    except (OSError, ValueError, TypeError) as exc:
        logger.error(f"{type(exc).__name__}: {exc}")
        return 1
    save_output(config, result)
    print_output(config, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
