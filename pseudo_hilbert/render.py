"""Text renderers for scan sequences.

Formats:
    - ascii: box-drawing trace (``-``, ``|`` and ``,``/``'`` corners)
    - svg: standalone SVG document with one ``<path>`` (svgwrite)
    - json: one ``[x, y]`` JSON array per line
    - csv / tsv: ``x,y`` header followed by one row per point
    - rank image: (H, W) uint8 array for PNG export

Renderers consume any iterable of ``(x, y)`` points; they do not care which
scan produced it.  Drawings put ``+Y`` upward: the first text row / image
row shows ``y = H - 1``.
"""

from __future__ import annotations

import json
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import svgwrite

from pseudo_hilbert.arrays import rank_grid
from pseudo_hilbert.core import DEFAULT_COORD_BITS, Point, check_size

Direction = Tuple[int, int]


# ---------------------------------------------------------------------------
# ASCII
# ---------------------------------------------------------------------------


def _corner(last_dir: Optional[Direction], new_dir: Direction) -> str:
    """Glyph for the cell where the trace turns from ``last_dir`` to ``new_dir``.

    Directions are in text coordinates (row grows downward).
    """
    if new_dir[1] == 0:
        # Leaving horizontally
        if last_dir is None or last_dir[1] == 0:
            return '-'
        return ',' if last_dir[1] < 0 else "'"
    # Leaving vertically
    if last_dir is None or last_dir[0] == 0:
        return '|'
    return ',' if new_dir[1] > 0 else "'"


def render_ascii(points: Iterable[Point], size: Sequence[int]) -> str:
    """Draw a rook-move path as ASCII art.

    Cells are two characters apart horizontally so horizontal runs stay
    visible.  Trailing spaces are stripped.

    Raises
    ------
    ValueError
        If two consecutive points are not on a common row or column.
    """
    width, height = check_size(size)
    if width == 0 or height == 0:
        return ""

    grid: List[List[str]] = [[' '] * (width * 2 - 1) for _ in range(height)]
    prev: Optional[Tuple[int, int]] = None
    last_dir: Optional[Direction] = None

    for x, y in points:
        col, row = x * 2, height - 1 - y
        if prev is not None:
            pcol, prow = prev
            if pcol != col and prow != row:
                raise ValueError(f"Diagonal move into {(x, y)} cannot be drawn")
            if (pcol, prow) != (col, row):
                new_dir = ((col > pcol) - (col < pcol), (row > prow) - (row < prow))
                grid[prow][pcol] = _corner(last_dir, new_dir)
                fill = '-' if new_dir[1] == 0 else '|'
                while (pcol, prow) != (col, row):
                    pcol += new_dir[0]
                    prow += new_dir[1]
                    grid[prow][pcol] = fill
                last_dir = new_dir
        prev = (col, row)

    return "\n".join(''.join(line).rstrip() for line in grid)


# ---------------------------------------------------------------------------
# SVG
# ---------------------------------------------------------------------------


def svg_path_data(points: Iterable[Point], size: Sequence[int], scale: int = 10) -> str:
    """SVG path ``d`` attribute through the cell centres."""
    _, height = check_size(size)
    half = scale / 2
    commands = []
    for i, (x, y) in enumerate(points):
        cx = x * scale + half
        cy = (height - 1 - y) * scale + half
        commands.append(f"{'M' if i == 0 else 'L'}{cx:g} {cy:g}")
    return ' '.join(commands)


def render_svg(points: Iterable[Point], size: Sequence[int], scale: int = 10) -> str:
    """Standalone SVG document drawing the scan as a single path.

    Parameters
    ----------
    points : iterable of (int, int)
        Scan coordinates
    size : (int, int)
        Grid width and height
    scale : int
        Pixels per cell, default 10
    """
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")
    width, height = check_size(size)
    w_px, h_px = width * scale, height * scale

    # Validation off: the path of a large scan is a very long attribute.
    dwg = svgwrite.Drawing(
        profile="full",
        size=(f"{w_px}px", f"{h_px}px"),
        viewBox=f"0 0 {w_px} {h_px}",
        debug=False,
    )
    d = svg_path_data(points, (width, height), scale)
    if d:
        dwg.add(dwg.path(
            d=d,
            fill="none",
            stroke="black",
            stroke_width=max(1, scale // 4),
            stroke_linejoin="round",
        ))
    return dwg.tostring() + "\n"


# ---------------------------------------------------------------------------
# Line formats
# ---------------------------------------------------------------------------


def render_json(points: Iterable[Point], size: Optional[Sequence[int]] = None) -> str:
    """One JSON array per line (JSON Lines)."""
    return ''.join(json.dumps([x, y]) + '\n' for x, y in points)


def render_delimited(
    points: Iterable[Point],
    size: Optional[Sequence[int]] = None,
    delimiter: str = ',',
) -> str:
    """Delimiter-separated rows with an ``x<delimiter>y`` header."""
    lines = [f"x{delimiter}y"]
    lines.extend(f"{x}{delimiter}{y}" for x, y in points)
    return '\n'.join(lines) + '\n'


def render_csv(points: Iterable[Point], size: Optional[Sequence[int]] = None) -> str:
    return render_delimited(points, size, ',')


def render_tsv(points: Iterable[Point], size: Optional[Sequence[int]] = None) -> str:
    return render_delimited(points, size, '\t')


# ---------------------------------------------------------------------------
# Image
# ---------------------------------------------------------------------------


def rank_image(
    size: Sequence[int],
    arb: bool = True,
    coord_bits: int = DEFAULT_COORD_BITS,
) -> np.ndarray:
    """Visiting order as a grayscale gradient (black = first, white = last).

    Sides must fit in ``coord_bits`` bits, as for ``make_scan()``.

    Returns
    -------
    np.ndarray
        Shape (H, W), dtype uint8, row 0 is ``y = H - 1``
    """
    ranks = rank_grid(size, arb, coord_bits)
    if ranks.size == 0:
        return ranks.astype(np.uint8)
    top = max(ranks.size - 1, 1)
    return (ranks[::-1] * 255 // top).astype(np.uint8)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

RENDERERS: Dict[str, Callable[..., str]] = {
    "ascii": render_ascii,
    "svg": render_svg,
    "json": render_json,
    "csv": render_csv,
    "tsv": render_tsv,
}
"""Text formats accepted by ``render()`` and the hilbertgen CLI."""


def render(fmt: str, points: Iterable[Point], size: Sequence[int], **kwargs) -> str:
    """Render ``points`` in format ``fmt``.

    Raises
    ------
    ValueError
        If ``fmt`` is not a key of ``RENDERERS``.
    """
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"Unknown format {fmt!r}, expected one of {sorted(RENDERERS)}") from None
    return renderer(points, size, **kwargs)
