#!/usr/bin/env python3
"""
Generate a pseudo-Hilbert scan and render it.

Usage:
    python -m pseudo_hilbert.scripts.hilbertgen 6 7
    python -m pseudo_hilbert.scripts.hilbertgen 64 48 --format svg -o scan.svg
    python -m pseudo_hilbert.scripts.hilbertgen 300 20 --algorithm zhang --format csv
    python -m pseudo_hilbert.scripts.hilbertgen --config configs/hilbertgen.yaml

Available formats:
    ascii, svg, json, csv, tsv, png (png requires --output)
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pseudo_hilbert.arb import ALGORITHMS, make_scan
from pseudo_hilbert.configs.loader import (
    OUTPUT_FORMATS,
    ConfigError,
    GenerateConfig,
    load_raw_config,
    validate_config,
)
from pseudo_hilbert.render import rank_image, render
from pseudo_hilbert.utils import fs
from pseudo_hilbert.utils.logging_config import (
    pop_context,
    push_context,
    setup_logging,
    shutdown,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hilbertgen",
        description="Generate a pseudo-Hilbert curve",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available formats: {', '.join(OUTPUT_FORMATS)}",
    )
    parser.add_argument("width", type=int, nargs="?", help="Width of the generated scan")
    parser.add_argument("height", type=int, nargs="?", help="Height of the generated scan")
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="YAML config file; command-line flags override it",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=OUTPUT_FORMATS,
        help="Output format (default: ascii)",
    )
    parser.add_argument(
        "--algorithm",
        "-a",
        choices=sorted(ALGORITHMS),
        help="Scan algorithm (default: zhang-arb)",
    )
    parser.add_argument("--output", "-o", type=str, help="Write to file instead of stdout")
    parser.add_argument("--scale", type=int, help="SVG pixels per cell (default: 10)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> GenerateConfig:
    """Merge the optional config file with command-line overrides.

    The file is read as a raw mapping and validated once, after the flags
    are applied, so a file may leave out anything the command line supplies.

    Raises
    ------
    ConfigError
        If the file cannot be read or the merged configuration is invalid.
    """
    if args.config:
        raw = load_raw_config(args.config)
    else:
        if args.width is None or args.height is None:
            raise ConfigError("WIDTH and HEIGHT are required without --config")
        raw = {}

    for section in ("scan", "output", "logging"):
        if raw.get(section) is None:
            raw[section] = {}
        elif not isinstance(raw[section], dict):
            raise ConfigError(f"Invalid config {args.config}: '{section}' must be a mapping")

    if args.width is not None:
        raw["scan"]["width"] = args.width
    if args.height is not None:
        raw["scan"]["height"] = args.height
    if args.algorithm:
        raw["scan"]["algorithm"] = args.algorithm
    if args.format:
        raw["output"]["format"] = args.format
    if args.output:
        raw["output"]["path"] = args.output
    if args.scale is not None:
        raw["output"]["svg_scale"] = args.scale
    if args.log_level:
        raw["logging"]["log_level"] = args.log_level

    return validate_config(raw, GenerateConfig, args.config or "<command line>")


def generate(cfg: GenerateConfig) -> Optional[str]:
    """Produce the configured output.

    Returns the rendered text when no output path is set, otherwise writes
    the file and returns None.
    """
    scan_cfg, out_cfg = cfg.scan, cfg.output
    push_context(size=f"{scan_cfg.width}x{scan_cfg.height}", algorithm=scan_cfg.algorithm)
    try:
        if out_cfg.format == "png":
            image = rank_image(
                scan_cfg.size,
                arb=scan_cfg.algorithm == "zhang-arb",
                coord_bits=scan_cfg.coord_bits,
            )
            fs.atomic_save_image(image, out_cfg.path)
            logger.info("Wrote rank image to %s", out_cfg.path)
            return None

        points = make_scan(scan_cfg.size, scan_cfg.algorithm, scan_cfg.coord_bits)
        kwargs = {"scale": out_cfg.svg_scale} if out_cfg.format == "svg" else {}
        text = render(out_cfg.format, points, scan_cfg.size, **kwargs)
        if out_cfg.format == "ascii":
            text += "\n"

        if out_cfg.path is None:
            return text
        fs.atomic_write_text(out_cfg.path, text)
        logger.info("Wrote %s output to %s", out_cfg.format, out_cfg.path)
        return None
    finally:
        pop_context(keys=["size", "algorithm"])


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = resolve_config(args)
    except ConfigError as e:
        parser.error(str(e))

    setup_logging(**cfg.logging.setup_kwargs(), context={"app": "hilbertgen"})
    try:
        text = generate(cfg)
    except (OSError, RuntimeError, ValueError) as e:
        logger.exception("Generation failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        shutdown()

    if text is not None:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
