"""Command-line entry point for suggestion-evaluation runs."""

from __future__ import annotations

import argparse
import logging
import math
from typing import Any, Sequence

from suggestion_eval.analysis import print_statistics
from suggestion_eval.plugins import build_default_registry
from suggestion_eval.runtime.from_config import load_config, run_simulation_from_config

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for :func:`run_cli`."""

    parser = argparse.ArgumentParser(
        description="Evaluate a POMDP agent that receives imperfect action suggestions.",
    )
    parser.add_argument("--config", help="Path to a JSON or YAML run config. Overrides all other flags.")
    parser.add_argument("--problem", default="tiger", help="Problem ID from the plugin registry.")
    parser.add_argument("--list-problems", action="store_true", help="Print registered problem IDs and exit.")
    parser.add_argument(
        "--agent",
        default="normal",
        choices=("normal", "perfect", "random", "naive", "scaled", "noisy"),
        help="Agent kind to simulate.",
    )
    parser.add_argument("--nu", type=float, help="Naive agent: probability of following a suggestion.")
    parser.add_argument("--tau", type=float, help="Scaled agent: sharpness of the belief update.")
    parser.add_argument("--lam", type=float, help="Noisy agent: Boltzmann rationality of the suggester.")
    parser.add_argument("--num-steps", type=int, default=50, help="Step budget per trial.")
    parser.add_argument("--num-sims", type=int, default=1, help="Number of trials.")
    parser.add_argument(
        "--max-suggestions",
        type=float,
        default=math.inf,
        help="Maximum admitted suggestions per trial.",
    )
    parser.add_argument("--reception-rate", type=float, default=1.0, help="Suggestion reception rate in [0, 1].")
    parser.add_argument(
        "--mix-ratio",
        type=float,
        default=1.0,
        help="Probability of an informed (vs. uniformly random) suggestion.",
    )
    parser.add_argument("--seed", type=int, help="Root random seed.")
    parser.add_argument("--workers", type=int, help="Worker threads.")
    parser.add_argument("--verbose", action="store_true", help="Log every step.")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar.")
    return parser


def config_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed flags into the declarative config mapping."""

    agent: dict[str, Any] = {"kind": args.agent}
    for key in ("nu", "tau", "lam"):
        value = getattr(args, key)
        if value is not None:
            agent[key] = value

    simulation: dict[str, Any] = {
        "num_steps": args.num_steps,
        "num_sims": args.num_sims,
        "max_suggestions": args.max_suggestions,
        "msg_reception_rate": args.reception_rate,
        "mix_ratio": args.mix_ratio,
        "verbose": args.verbose,
        "progress": args.progress,
    }
    if args.seed is not None:
        simulation["seed"] = args.seed
    if args.workers is not None:
        simulation["num_workers"] = args.workers

    return {"problem": {"component_id": args.problem}, "agent": agent, "simulation": simulation}


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Run simulations and print the statistics table.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        CLI argument list. When ``None``, process arguments are used.

    Returns
    -------
    int
        Exit code (`0` on success).
    """

    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format=LOG_FORMAT)

    if args.list_problems:
        for manifest in build_default_registry().list("problem"):
            print(f"{manifest.component_id:15s} {manifest.description}")
        return 0

    config = load_config(args.config) if args.config else config_from_args(args)
    result = run_simulation_from_config(config)
    print_statistics(result.statistics)
    return 0


def main() -> None:
    """Console-script entry point."""

    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
