"""Pseudo-Hilbert scans for arbitrarily-sized 2-D grids.

Produces an ordering of the cells of a ``W x H`` grid in which consecutive
cells are always edge-neighbours and every cell is visited once, following
"A Pseudo-Hilbert Scan for Arbitrarily-Sized Arrays" (Zhang et al.).

Layers (strict one-way dependency):
    scripts/ -> {render, arrays, configs}/ -> {arb, core} -> utils/

Subpackages / modules:
    core: subdivision scan engine (``HilbertScanCore``)
    arb: aspect-ratio-bounded wrapper (``ArbHilbertScanCore``)
    arrays: numpy views of a scan (rank grids, reordering)
    render: ASCII / SVG / JSON / CSV / TSV output
    configs: YAML configuration loading and validation
    scripts: ``hilbertgen`` and ``hilbertbench`` entry points
    utils: logging, filesystem and profiling helpers
"""

from pseudo_hilbert.arb import (
    ALGORITHMS,
    ArbHilbertScan32,
    ArbHilbertScanCore,
    make_scan,
)
from pseudo_hilbert.core import (
    HilbertScan32,
    HilbertScanCore,
    LevelState,
    ScanContractError,
    num_levels_for_size,
)

__version__ = "0.3.0"

__all__ = [
    "ALGORITHMS",
    "ArbHilbertScan32",
    "ArbHilbertScanCore",
    "HilbertScan32",
    "HilbertScanCore",
    "LevelState",
    "ScanContractError",
    "make_scan",
    "num_levels_for_size",
]
