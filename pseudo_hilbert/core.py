"""Subdivision scan engine: pseudo-Hilbert order over any ``W x H`` grid.

The rectangle is split recursively into four sub-blocks, Hilbert style,
until the blocks are small enough to be scanned with a simple zigzag.
The engine never materialises the recursion: it keeps one ``LevelState``
per subdivision level and walks up and down that stack whenever a leaf
block is exhausted.

Orientation
-----------
Every block is traversed from an *entry corner* to an *exit corner* that
shares a side with it.  The side joining the two corners runs along the
*parallel* axis; the other axis is *perpendicular*.  A curve type packs::

    curve_type = parallel_axis | parallel_neg << 1 | perpendicular_neg << 2

Types 0-3 are the base orientations, 4-7 their mirror images across the
parallel axis.

Continuity
----------
A corner-to-adjacent-corner path exists only when the parallel side is
even or both sides are odd.  Splits keep that property for every child:
the part of each side that touches the entry corner gets the even share
``division_l1(n)``.  Odd x odd leaves end with a 2-wide *helper strip*
so they still leave at their exit corner.

Leaf patterns
-------------
A leaf is scanned by looking up ``BASIC_PATTERN_TABLE[curve_type]``.  No
separate (approach direction, entry corner) key is needed, because the
curve type already holds both: the parallel axis and ``parallel_neg`` give
the direction the block is crossed in, and the two sign bits pick the
entry corner.  Each row therefore decodes to (parallel axis, parallel sign,
perpendicular sign), and the exit corner is the entry corner moved to the
far end of the parallel axis.

Usage::

    from pseudo_hilbert.core import HilbertScanCore
    for x, y in HilbertScanCore((6, 7)):
        ...
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

Point = Tuple[int, int]
Size = Tuple[int, int]

DEFAULT_COORD_BITS = 32
"""Coordinate width used when the caller does not pick one."""


class ScanContractError(ValueError):
    """Raised when a scan is constructed in violation of its preconditions."""

    pass


@dataclass(slots=True)
class LevelState:
    """State of one subdivision level.

    ``curve_type`` of level ``i > 0`` always equals
    ``CURVE_INDUCTION_TABLE[parent.curve_type][parent.progress]``.
    ``progress`` (index of the active sub-block) is unused on the leaf level.
    """

    size: Size = (0, 0)
    curve_type: int = 0
    progress: int = 0


class BasicPattern(NamedTuple):
    """Zigzag layout of a leaf block with a given curve type."""

    parallel_axis: int
    parallel_sign: int
    perpendicular_sign: int


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

CURVE_ADDRESS_TABLE: Tuple[Tuple[int, int, int, int], ...] = (
    (0, 2, 3, 1),
    (0, 1, 3, 2),
    (1, 3, 2, 0),
    (2, 3, 1, 0),
    (2, 0, 1, 3),
    (1, 0, 2, 3),
    (3, 1, 0, 2),
    (3, 2, 0, 1),
)
"""``CURVE_ADDRESS_TABLE[γ][i]``: position of the ``i``-th visited sub-block.

Bit 0 set = upper X part, bit 1 set = upper Y part.  Consecutive entries
differ in exactly one bit.
"""

CURVE_INDUCTION_TABLE: Tuple[Tuple[int, int, int, int], ...] = (
    (1, 0, 0, 7),
    (0, 1, 1, 6),
    (5, 2, 2, 3),
    (4, 3, 3, 2),
    (3, 4, 4, 5),
    (2, 5, 5, 4),
    (7, 6, 6, 1),
    (6, 7, 7, 0),
)
"""``CURVE_INDUCTION_TABLE[γ][i]``: curve type of the ``i``-th visited sub-block."""

SUBBLOCK_ROLE_TABLE: Tuple[Tuple[int, int], ...] = ((0, 0), (0, 1), (1, 1), (1, 0))
"""Per visit index: (second part along the parallel axis, far part along the
perpendicular axis).  Orientation independent."""

BASIC_PATTERN_TABLE: Tuple[BasicPattern, ...] = (
    BasicPattern(0, 1, 1),
    BasicPattern(1, 1, 1),
    BasicPattern(0, -1, 1),
    BasicPattern(1, -1, 1),
    BasicPattern(0, 1, -1),
    BasicPattern(1, 1, -1),
    BasicPattern(0, -1, -1),
    BasicPattern(1, -1, -1),
)
"""``BASIC_PATTERN_TABLE[γ]``: leaf scan of a block of curve type ``γ``, the
bits of ``γ`` decoded.  A sign of +1 puts the entry corner at coordinate 0
on that axis, -1 at the far edge."""


# ---------------------------------------------------------------------------
# Size helpers
# ---------------------------------------------------------------------------


def log2_floor(x: int) -> int:
    """``floor(log2(x))`` for ``x >= 1``."""
    return x.bit_length() - 1


def division_l1(n: int) -> int:
    """Length of the part of a side of length ``n`` touching the entry corner.

    Even for ``n >= 3``; for ``n >= 4`` both ``l1`` and ``n - l1`` are at
    least 2.  ``n`` must be at least 2.
    """
    mask = 1 << (log2_floor(n) - 1)
    return (n & mask) + mask


def num_levels_for_size(size: Sequence[int]) -> int:
    """Number of ``LevelState`` slots a scan of ``size`` needs.

    Parameters
    ----------
    size : (int, int)
        Grid width and height.

    Returns
    -------
    int
        ``floor(log2(min(W, H))) + 1``, or 0 for a zero-area grid.
    """
    shortest = min(size[0], size[1])
    if shortest <= 0:
        return 0
    return log2_floor(shortest) + 1


def new_level_state_storage(num_levels: int = DEFAULT_COORD_BITS) -> List[LevelState]:
    """Allocate level-state storage; the default fits any 32-bit size."""
    return [LevelState() for _ in range(num_levels)]


def check_size(size: Sequence[int], coord_bits: int = DEFAULT_COORD_BITS) -> Size:
    """Validate a ``(W, H)`` pair and return it as a tuple of ints.

    Raises
    ------
    ScanContractError
        If ``size`` is not two non-negative integers below ``2**coord_bits``.
    """
    try:
        width, height = (operator.index(v) for v in size)
    except (TypeError, ValueError) as e:
        raise ScanContractError(f"size must be a pair of integers, got {size!r}") from e
    limit = 1 << coord_bits
    for name, value in (("width", width), ("height", height)):
        if not 0 <= value < limit:
            raise ScanContractError(
                f"{name}={value} does not fit in a {coord_bits}-bit coordinate"
            )
    return (width, height)


def _root_curve_type(size: Size) -> int:
    width, height = size
    if width % 2 == 0:
        return 0
    if height % 2 == 0 or width == 1:
        return 1
    return 0


def _is_split(size: Size, curve_type: int) -> bool:
    axis = curve_type & 1
    return size[axis] >= 4 and size[axis ^ 1] >= 3


def _child(size: Size, curve_type: int, progress: int) -> Tuple[Size, int]:
    axis = curve_type & 1
    second, far = SUBBLOCK_ROLE_TABLE[progress]

    parallel = size[axis]
    perpendicular = size[axis ^ 1]
    parallel_l1 = division_l1(parallel)
    perpendicular_l1 = division_l1(perpendicular)

    child_parallel = parallel - parallel_l1 if second else parallel_l1
    child_perpendicular = perpendicular - perpendicular_l1 if far else perpendicular_l1

    if axis == 0:
        child_size = (child_parallel, child_perpendicular)
    else:
        child_size = (child_perpendicular, child_parallel)
    return child_size, CURVE_INDUCTION_TABLE[curve_type][progress]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class HilbertScanCore:
    """Iterator producing a pseudo-Hilbert scan of a ``W x H`` grid.

    Parameters
    ----------
    size : (int, int)
        Grid width and height.  Zero on either axis gives an empty scan.
    level_states : list[LevelState], optional
        Scratch storage with at least ``num_levels_for_size(size)`` slots.
        Overwritten by the engine.  Allocated with ``coord_bits`` slots if
        omitted.
    coord_bits : int
        Coordinate width; both sides must be below ``2**coord_bits``.

    Notes
    -----
    The scan starts at ``(0, 0)``.  It ends at ``(W - 1, 0)`` when ``W`` is
    even or both sides are odd (``W > 1``), otherwise at ``(0, H - 1)``.
    """

    def __init__(
        self,
        size: Sequence[int],
        level_states: Optional[List[LevelState]] = None,
        coord_bits: int = DEFAULT_COORD_BITS,
    ) -> None:
        size = check_size(size, coord_bits)
        num_levels = num_levels_for_size(size)
        if level_states is None:
            level_states = new_level_state_storage(coord_bits)
        elif len(level_states) < num_levels:
            raise ScanContractError(
                f"level-state storage has {len(level_states)} slots, "
                f"size {size} needs {num_levels}"
            )

        self.size = size
        self.coord_bits = coord_bits
        self._level_states = level_states
        self._num_levels = num_levels
        self._depth = 0
        self._position = [0, 0]

        # Leaf scan: rows run along the secondary axis, the primary axis
        # advances one unit per row.
        self._pri_axis = 0
        self._pri_sign = 1
        self._sec_axis = 1
        self._sec_sign = 1
        self._row_width = 0
        self._rows_left = 0
        self._cells_left = 0
        self._helper_rows = 0

        self._done = num_levels == 0
        if self._done:
            logger.debug("Zero-area scan %s", size)
            return

        root = level_states[0]
        root.size = size
        root.curve_type = _root_curve_type(size)
        root.progress = 0
        self._descend(0)

    @classmethod
    def with_level_state_storage(
        cls,
        level_states: List[LevelState],
        size: Sequence[int],
        coord_bits: int = DEFAULT_COORD_BITS,
    ) -> "HilbertScanCore":
        """Construct a scan on caller-supplied storage."""
        return cls(size, level_states, coord_bits)

    # -- public API ---------------------------------------------------------

    @property
    def depth(self) -> int:
        """Index of the current leaf level in the level-state stack."""
        return self._depth

    @property
    def active_levels(self) -> Tuple[LevelState, ...]:
        """Levels from the root down to the current leaf (empty once done)."""
        if self._done:
            return ()
        return tuple(self._level_states[: self._depth + 1])

    def has_next(self) -> bool:
        return not self._done

    def step(self) -> Optional[Point]:
        """Return the next coordinate, or ``None`` once the scan is exhausted."""
        if self._done:
            return None
        position = self._position
        point = (position[0], position[1])

        if self._cells_left:
            self._cells_left -= 1
            position[self._sec_axis] += self._sec_sign
        elif self._rows_left:
            # Zigzag
            self._rows_left -= 1
            position[self._pri_axis] += self._pri_sign
            self._sec_sign = -self._sec_sign
            self._cells_left = self._row_width - 1
        elif self._helper_rows:
            self._begin_helper_strip()
        else:
            self._next_leaf()
        return point

    def into_level_states(self) -> List[LevelState]:
        """Release the storage for reuse by a new scan.  Ends this scan."""
        self._done = True
        return self._level_states

    def __iter__(self) -> Iterator[Point]:
        return self

    def __next__(self) -> Point:
        point = self.step()
        if point is None:
            raise StopIteration
        return point

    def __repr__(self) -> str:
        return f"HilbertScanCore(size={self.size}, depth={self._depth}, done={self._done})"

    # -- state machine --------------------------------------------------------

    def _descend(self, i: int) -> None:
        """Fill levels below ``i`` down to the leaf of its active sub-block."""
        levels = self._level_states
        level = levels[i]
        while _is_split(level.size, level.curve_type):
            size, curve_type = _child(level.size, level.curve_type, level.progress)
            i += 1
            level = levels[i]
            level.size = size
            level.curve_type = curve_type
            level.progress = 0
        self._depth = i
        self._begin_leaf(level.size, level.curve_type)

    def _begin_leaf(self, size: Size, curve_type: int) -> None:
        pattern = BASIC_PATTERN_TABLE[curve_type]
        parallel = size[pattern.parallel_axis]
        perpendicular = size[pattern.parallel_axis ^ 1]

        self._pri_axis = pattern.parallel_axis
        self._pri_sign = pattern.parallel_sign
        self._sec_axis = pattern.parallel_axis ^ 1
        self._sec_sign = pattern.perpendicular_sign
        self._row_width = perpendicular
        self._cells_left = perpendicular - 1

        if parallel % 2 == 1 and parallel > 1:
            # Odd x odd: leave the last two rows to the helper strip.
            self._rows_left = parallel - 3
            self._helper_rows = perpendicular
        else:
            self._rows_left = parallel - 1
            self._helper_rows = 0

    def _begin_helper_strip(self) -> None:
        # The zigzag stopped on the far side, one row short of the strip.
        pattern = BASIC_PATTERN_TABLE[self._level_states[self._depth].curve_type]
        self._position[pattern.parallel_axis] += pattern.parallel_sign

        self._pri_axis = pattern.parallel_axis ^ 1
        self._pri_sign = -pattern.perpendicular_sign
        self._sec_axis = pattern.parallel_axis
        self._sec_sign = pattern.parallel_sign
        self._row_width = 2
        self._cells_left = 1
        self._rows_left = self._helper_rows - 1
        self._helper_rows = 0

    def _next_leaf(self) -> None:
        levels = self._level_states
        i = self._depth - 1
        while i >= 0:
            level = levels[i]
            if level.progress < 3:
                addresses = CURVE_ADDRESS_TABLE[level.curve_type]
                target = addresses[level.progress + 1]
                adr_rel = addresses[level.progress] ^ target
                assert adr_rel in (1, 2), adr_rel

                # Step across the boundary into the next sub-block.
                self._position[adr_rel >> 1] += 1 if target & adr_rel else -1
                level.progress += 1
                self._descend(i)
                return
            i -= 1

        self._done = True
        logger.debug("Scan %s complete", self.size)


HilbertScan32 = HilbertScanCore
"""``HilbertScanCore`` with the default 32-bit coordinate width."""
