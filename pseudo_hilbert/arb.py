"""Aspect-ratio-bounded tiling on top of ``HilbertScanCore``.

The core engine accepts any rectangle but its locality degrades as the
rectangle gets elongated.  ``ArbHilbertScanCore`` cuts the longer side into
near-square segments, scans each one with a fresh core engine and stitches
them together.  Every segment except the last has an even width, so each
one leaves at its lower-right corner and the next one starts right beside
it.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from pseudo_hilbert.core import (
    DEFAULT_COORD_BITS,
    HilbertScanCore,
    LevelState,
    Point,
    ScanContractError,
    check_size,
    new_level_state_storage,
    num_levels_for_size,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Divider
# ---------------------------------------------------------------------------


def division_count(major: int, minor: int) -> int:
    """Estimate how many near-square segments a ``major`` side splits into.

    Picks ``k = major // minor`` or ``k + 1``, whichever makes the average
    segment closer to ``minor``.
    """
    if major <= minor:
        return 1
    if minor <= 0:
        raise ScanContractError(f"minor side must be positive, got {minor}")

    k = major // minor
    longer_by = major // k - minor
    shorter_by = minor - major // (k + 1)
    return k if longer_by < shorter_by else k + 1


def segment_widths(major: int, minor: int) -> Iterator[int]:
    """Yield segment widths along the major axis; they sum to ``major``.

    Widths are rounded up to even so that every segment but the last ends
    on row 0.  The last segment takes whatever remains.
    """
    remaining = major
    while remaining:
        count = division_count(remaining, minor)
        if count == 1:
            width = remaining
        else:
            width = remaining // count
            if width & 1:
                width += 1
        remaining -= width
        yield width


# ---------------------------------------------------------------------------
# Wrapper
# ---------------------------------------------------------------------------


class ArbHilbertScanCore:
    """Pseudo-Hilbert scan assembled from near-square segments.

    Same construction and iteration contract as ``HilbertScanCore``.  A
    single core engine is alive at any time; its level-state storage is
    handed to the engine of the next segment.

    Parameters
    ----------
    size : (int, int)
        Grid width and height.
    level_states : list[LevelState], optional
        Scratch storage, at least ``num_levels_for_size(size)`` slots.
    coord_bits : int
        Coordinate width.
    """

    def __init__(
        self,
        size: Sequence[int],
        level_states: Optional[List[LevelState]] = None,
        coord_bits: int = DEFAULT_COORD_BITS,
    ) -> None:
        size = check_size(size, coord_bits)
        if level_states is None:
            level_states = new_level_state_storage(coord_bits)
        elif len(level_states) < num_levels_for_size(size):
            raise ScanContractError(
                f"level-state storage has {len(level_states)} slots, "
                f"size {size} needs {num_levels_for_size(size)}"
            )

        self.size = size
        self.coord_bits = coord_bits
        self._offset = 0

        if size[0] == 0 or size[1] == 0:
            self._major_axis = 0
            self._minor = 0
            self._width = 0
            self._segments: Iterator[int] = iter(())
            self._inner = HilbertScanCore(size, level_states, coord_bits)
            return

        self._major_axis = 1 if size[1] > size[0] else 0
        self._minor = size[self._major_axis ^ 1]
        self._segments = segment_widths(size[self._major_axis], self._minor)
        self._width = next(self._segments)
        self._inner = HilbertScanCore((self._width, self._minor), level_states, coord_bits)
        logger.debug(
            "Arb scan %s: major axis %d, first segment %d",
            size, self._major_axis, self._width,
        )

    @classmethod
    def with_level_state_storage(
        cls,
        level_states: List[LevelState],
        size: Sequence[int],
        coord_bits: int = DEFAULT_COORD_BITS,
    ) -> "ArbHilbertScanCore":
        """Construct a scan on caller-supplied storage."""
        return cls(size, level_states, coord_bits)

    @property
    def major_axis(self) -> int:
        return self._major_axis

    def has_next(self) -> bool:
        return self._inner.has_next() or self._width_pending()

    def step(self) -> Optional[Point]:
        """Return the next coordinate, or ``None`` once the scan is exhausted."""
        point = self._inner.step()
        if point is None:
            width = next(self._segments, None)
            if width is None:
                return None
            level_states = self._inner.into_level_states()
            self._offset += self._width
            self._width = width
            self._inner = HilbertScanCore(
                (width, self._minor), level_states, self.coord_bits
            )
            point = self._inner.step()
        return self._to_global(point)

    def __iter__(self) -> Iterator[Point]:
        return self

    def __next__(self) -> Point:
        point = self.step()
        if point is None:
            raise StopIteration
        return point

    def __repr__(self) -> str:
        return (
            f"ArbHilbertScanCore(size={self.size}, major_axis={self._major_axis}, "
            f"offset={self._offset})"
        )

    def _width_pending(self) -> bool:
        # The last segment is the only one that ends exactly at ``size[major]``.
        return self._minor > 0 and self._offset + self._width < self.size[self._major_axis]

    def _to_global(self, point: Point) -> Point:
        x = point[0] + self._offset
        if self._major_axis:
            return (point[1], x)
        return (x, point[1])


ArbHilbertScan32 = ArbHilbertScanCore
"""``ArbHilbertScanCore`` with the default 32-bit coordinate width."""


# ---------------------------------------------------------------------------
# Algorithm selection
# ---------------------------------------------------------------------------

ALGORITHMS: Dict[str, Callable[..., Iterator[Point]]] = {
    "zhang": HilbertScanCore,
    "zhang-arb": ArbHilbertScanCore,
}
"""Scan constructors by name, as accepted by the CLI and config files."""


def make_scan(
    size: Sequence[int],
    algorithm: str = "zhang-arb",
    coord_bits: int = DEFAULT_COORD_BITS,
) -> Iterator[Point]:
    """Construct a scan by algorithm name.

    Raises
    ------
    ValueError
        If ``algorithm`` is not a key of ``ALGORITHMS``.
    """
    try:
        factory = ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(
            f"Unknown algorithm {algorithm!r}, expected one of {sorted(ALGORITHMS)}"
        ) from None
    return factory(size, coord_bits=coord_bits)
