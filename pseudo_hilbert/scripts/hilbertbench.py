#!/usr/bin/env python3
"""
Micro-benchmark of the scan engines.

Each run sums ``x + y`` over a full scan so the whole sequence is actually
produced.  Reports best and mean wall-clock time per size and algorithm.

Usage:
    python -m pseudo_hilbert.scripts.hilbertbench
    python -m pseudo_hilbert.scripts.hilbertbench --size 256x256 --size 114x514 -r 10
    python -m pseudo_hilbert.scripts.hilbertbench --config configs/hilbertbench.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, List, Optional, Sequence, Tuple

from pseudo_hilbert.arb import ALGORITHMS, make_scan
from pseudo_hilbert.configs.loader import (
    BenchConfig,
    ConfigError,
    load_raw_config,
    validate_config,
)
from pseudo_hilbert.core import DEFAULT_COORD_BITS
from pseudo_hilbert.utils.logging_config import setup_logging, shutdown
from pseudo_hilbert.utils.profiler import TimerAccumulator

logger = logging.getLogger(__name__)


def parse_size(text: str) -> Tuple[int, int]:
    """Parse ``WxH`` (e.g. ``114x514``)."""
    try:
        w, h = text.lower().split("x")
        return (int(w), int(h))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}") from None


def scan_checksum(size: Sequence[int], algorithm: str, coord_bits: int = DEFAULT_COORD_BITS) -> int:
    """Sum of ``x + y`` over the scan; also keeps the loop from being skipped."""
    return sum(x + y for x, y in make_scan(size, algorithm, coord_bits))


def run_benchmarks(cfg: BenchConfig) -> List[Dict[str, object]]:
    """Time every (case, algorithm) pair.

    Returns
    -------
    list[dict]
        One row per pair: size, algorithm, checksum, best_s, mean_s, repeats
    """
    results = []
    for case in cfg.cases:
        for algorithm in cfg.algorithms:
            acc = TimerAccumulator(f"{algorithm} {case.width}x{case.height}")
            checksum = 0
            for _ in range(cfg.repeats):
                with acc.measure():
                    checksum = scan_checksum(case.size, algorithm, cfg.coord_bits)
            logger.debug("%r", acc)
            results.append({
                "size": case.size,
                "algorithm": algorithm,
                "checksum": checksum,
                "best_s": acc.best(),
                "mean_s": acc.mean(),
                "repeats": acc.count,
            })
    return results


def format_results(results: List[Dict[str, object]]) -> str:
    lines = [f"{'size':>12} {'algorithm':>10} {'best (ms)':>10} {'mean (ms)':>10} {'ns/cell':>8}"]
    for row in results:
        w, h = row["size"]
        cells = max(w * h, 1)
        lines.append(
            f"{f'{w}x{h}':>12} {row['algorithm']:>10} "
            f"{row['best_s'] * 1e3:>10.3f} {row['mean_s'] * 1e3:>10.3f} "
            f"{row['best_s'] * 1e9 / cells:>8.0f}"
        )
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="hilbertbench",
        description="Benchmark the pseudo-Hilbert scan engines",
    )
    parser.add_argument("--config", "-c", type=str, help="YAML config file")
    parser.add_argument(
        "--size",
        "-s",
        type=parse_size,
        action="append",
        help="Benchmark size as WIDTHxHEIGHT (repeatable)",
    )
    parser.add_argument(
        "--algorithm",
        "-a",
        choices=sorted(ALGORITHMS),
        action="append",
        help="Algorithm to benchmark (repeatable; default: all)",
    )
    parser.add_argument("--repeats", "-r", type=int, help="Runs per case (default: 5)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    try:
        raw = load_raw_config(args.config) if args.config else {}
        if args.size:
            raw["cases"] = [{"width": w, "height": h} for w, h in args.size]
        if args.algorithm:
            raw["algorithms"] = args.algorithm
        if args.repeats is not None:
            raw["repeats"] = args.repeats
        if args.log_level:
            log_raw = raw.get("logging") or {}
            if not isinstance(log_raw, dict):
                raise ConfigError(f"Invalid config {args.config}: 'logging' must be a mapping")
            raw["logging"] = {**log_raw, "log_level": args.log_level}
        cfg = validate_config(raw, BenchConfig, args.config or "<command line>")
    except ConfigError as e:
        parser.error(str(e))

    setup_logging(**cfg.logging.setup_kwargs(), context={"app": "hilbertbench"})
    try:
        logger.info("Running %d case(s) x %d algorithm(s)", len(cfg.cases), len(cfg.algorithms))
        print(format_results(run_benchmarks(cfg)))
    finally:
        shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
