"""Test the aspect-ratio-bounded wrapper.

Tests for pseudo_hilbert.arb:
    - division_count / segment_widths values and invariants
    - Exhaustive sweep 0 <= W, H < 64: coverage, adjacency, boundedness
    - Elongated grids along both axes
    - Segment seams stay adjacent; storage is shared between segments
    - make_scan() algorithm selection

Run:
    pytest tests/test_arb.py -v
"""

from __future__ import annotations

import pytest

from pseudo_hilbert.arb import (
    ALGORITHMS,
    ArbHilbertScan32,
    ArbHilbertScanCore,
    division_count,
    make_scan,
    segment_widths,
)
from pseudo_hilbert.core import HilbertScanCore, LevelState, ScanContractError, num_levels_for_size
from scan_checks import assert_valid_scan


# ---------------------------------------------------------------------------
# Divider
# ---------------------------------------------------------------------------


class TestDivider:
    @pytest.mark.parametrize(
        "major,minor,expected",
        [(10, 10, 1), (5, 10, 1), (20, 10, 2), (25, 10, 3), (29, 10, 3), (100, 10, 10)],
    )
    def test_division_count(self, major: int, minor: int, expected: int) -> None:
        assert division_count(major, minor) == expected

    def test_division_count_zero_minor(self) -> None:
        with pytest.raises(ScanContractError):
            division_count(5, 0)

    @pytest.mark.parametrize(
        "major,minor,expected",
        [
            (25, 10, [8, 8, 9]),
            (7, 3, [4, 3]),
            (100, 10, [10] * 10),
            (7, 1, [2, 2, 2, 1]),
            (3, 2, [2, 1]),
            (10, 10, [10]),
        ],
    )
    def test_segment_widths(self, major: int, minor: int, expected) -> None:
        assert list(segment_widths(major, minor)) == expected

    @pytest.mark.parametrize("minor", range(1, 20))
    def test_segment_widths_invariants(self, minor: int) -> None:
        for major in range(minor, 200):
            widths = list(segment_widths(major, minor))
            assert sum(widths) == major
            assert all(w > 0 for w in widths)
            assert all(w % 2 == 0 for w in widths[:-1]), (major, minor, widths)


# ---------------------------------------------------------------------------
# Scan properties
# ---------------------------------------------------------------------------


class TestArbScan:
    @pytest.mark.parametrize("height", range(64))
    def test_exhaustive_small_sizes(self, height: int) -> None:
        for width in range(64):
            assert_valid_scan(ArbHilbertScanCore((width, height)), width, height)

    @pytest.mark.parametrize(
        "size", [(300, 7), (7, 300), (114, 514), (1, 100), (100, 1), (2, 77), (1000, 3)]
    )
    def test_elongated_sizes(self, size) -> None:
        assert_valid_scan(ArbHilbertScanCore(size), *size)

    def test_square_matches_core(self) -> None:
        assert list(ArbHilbertScanCore((16, 16))) == list(HilbertScanCore((16, 16)))

    def test_3x2_sequence(self) -> None:
        assert list(ArbHilbertScanCore((3, 2))) == [
            (0, 0), (0, 1), (1, 1), (1, 0), (2, 0), (2, 1),
        ]

    def test_major_axis(self) -> None:
        assert ArbHilbertScanCore((30, 10)).major_axis == 0
        assert ArbHilbertScanCore((10, 30)).major_axis == 1
        assert ArbHilbertScanCore((10, 10)).major_axis == 0

    def test_tall_grid_advances_along_y(self) -> None:
        points = list(ArbHilbertScanCore((4, 40)))
        # Segments are stacked vertically: the first 16 cells stay in the bottom 4x4 block.
        assert all(y < 4 for _, y in points[:16])
        assert points[-1][1] >= 36

    def test_locality_improves_on_elongated_grid(self) -> None:
        size = (256, 8)
        window = 64

        def max_span(points):
            spans = []
            for i in range(0, len(points) - window + 1, window):
                xs = [x for x, _ in points[i:i + window]]
                spans.append(max(xs) - min(xs))
            return max(spans)

        arb = list(ArbHilbertScanCore(size))
        assert max_span(arb) <= 16

    def test_has_next(self) -> None:
        scan = ArbHilbertScanCore((25, 10))
        count = 0
        while scan.has_next():
            assert scan.step() is not None
            count += 1
        assert count == 250
        assert scan.step() is None

    @pytest.mark.parametrize("size", [(0, 0), (0, 7), (7, 0)])
    def test_zero_area(self, size) -> None:
        scan = ArbHilbertScanCore(size)
        assert not scan.has_next()
        assert list(scan) == []

    def test_exact_storage_is_enough(self) -> None:
        size = (300, 7)
        storage = [LevelState() for _ in range(num_levels_for_size(size))]
        scan = ArbHilbertScanCore.with_level_state_storage(storage, size)
        assert_valid_scan(scan, *size)

    def test_undersized_storage(self) -> None:
        with pytest.raises(ScanContractError):
            ArbHilbertScanCore((8, 8), [LevelState()])

    def test_size_overflows_coord_bits(self) -> None:
        with pytest.raises(ScanContractError):
            ArbHilbertScanCore((300, 2), coord_bits=8)

    def test_alias(self) -> None:
        assert ArbHilbertScan32 is ArbHilbertScanCore


# ---------------------------------------------------------------------------
# Algorithm selection
# ---------------------------------------------------------------------------


class TestMakeScan:
    def test_registry(self) -> None:
        assert set(ALGORITHMS) == {"zhang", "zhang-arb"}

    def test_default_is_arb(self) -> None:
        assert isinstance(make_scan((4, 4)), ArbHilbertScanCore)

    def test_named_algorithm(self) -> None:
        scan = make_scan((6, 7), "zhang", coord_bits=16)
        assert isinstance(scan, HilbertScanCore)
        assert scan.coord_bits == 16

    def test_unknown_algorithm(self) -> None:
        with pytest.raises(ValueError, match="Unknown algorithm"):
            make_scan((4, 4), "peano")
