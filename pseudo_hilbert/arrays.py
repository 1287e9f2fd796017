"""numpy views of a scan: coordinate arrays, rank grids and reordering.

Provides:
    - scan_to_array: (W*H, 2) array of (x, y) in visiting order
    - rank_grid: (H, W) array holding the step at which each cell is visited
    - flatten_by_scan / unflatten_by_scan: reorder an image-like array into
      scan order and back

Arrays are indexed ``[y, x]`` (row-major image convention); scan
coordinates are ``(x, y)``.
"""

from __future__ import annotations

from itertools import chain
from typing import Sequence

import numpy as np

from pseudo_hilbert.arb import make_scan
from pseudo_hilbert.core import DEFAULT_COORD_BITS, check_size


def _algorithm(arb: bool) -> str:
    return "zhang-arb" if arb else "zhang"


def scan_to_array(
    size: Sequence[int],
    arb: bool = True,
    coord_bits: int = DEFAULT_COORD_BITS,
) -> np.ndarray:
    """Collect a scan into an integer array.

    Parameters
    ----------
    size : (int, int)
        Grid width and height
    arb : bool
        Use the aspect-ratio-bounded wrapper, default True
    coord_bits : int
        Coordinate width the sides must fit in, default 32

    Returns
    -------
    np.ndarray
        Shape (W*H, 2), dtype int64, columns (x, y)
    """
    width, height = check_size(size, coord_bits)
    n = width * height
    scan = make_scan((width, height), _algorithm(arb), coord_bits)
    flat = np.fromiter(chain.from_iterable(scan), dtype=np.int64, count=2 * n)
    return flat.reshape(n, 2)


def rank_grid(
    size: Sequence[int],
    arb: bool = True,
    coord_bits: int = DEFAULT_COORD_BITS,
) -> np.ndarray:
    """Visiting step of every cell.

    Returns
    -------
    np.ndarray
        Shape (H, W), dtype int64; ``grid[y, x]`` is the index of ``(x, y)``
        in the scan
    """
    width, height = check_size(size, coord_bits)
    points = scan_to_array((width, height), arb, coord_bits)
    grid = np.empty((height, width), dtype=np.int64)
    grid[points[:, 1], points[:, 0]] = np.arange(len(points))
    return grid


def flatten_by_scan(image: np.ndarray, arb: bool = True) -> np.ndarray:
    """Reorder the first two axes of ``image`` into scan order.

    Parameters
    ----------
    image : np.ndarray
        Shape (H, W, ...)

    Returns
    -------
    np.ndarray
        Shape (H*W, ...), element ``i`` is the ``i``-th visited cell
    """
    if image.ndim < 2:
        raise ValueError(f"Expected an array with at least 2 dims, got shape {image.shape}")
    height, width = image.shape[:2]
    points = scan_to_array((width, height), arb)
    return image[points[:, 1], points[:, 0]]


def unflatten_by_scan(sequence: np.ndarray, size: Sequence[int], arb: bool = True) -> np.ndarray:
    """Inverse of ``flatten_by_scan``.

    Parameters
    ----------
    sequence : np.ndarray
        Shape (W*H, ...), elements in scan order
    size : (int, int)
        Grid width and height

    Returns
    -------
    np.ndarray
        Shape (H, W, ...)
    """
    width, height = check_size(size)
    if sequence.shape[0] != width * height:
        raise ValueError(
            f"Sequence length {sequence.shape[0]} does not match size {width}x{height}"
        )
    points = scan_to_array((width, height), arb)
    image = np.empty((height, width) + sequence.shape[1:], dtype=sequence.dtype)
    image[points[:, 1], points[:, 0]] = sequence
    return image


def locality_stats(size: Sequence[int], window: int = 16, arb: bool = True) -> dict:
    """Bounding-box statistics of consecutive runs of ``window`` steps.

    Smaller boxes mean better spatial locality.

    Returns
    -------
    dict
        {"mean_area": float, "max_area": int, "windows": int}
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    points = scan_to_array(size, arb)
    n_windows = len(points) // window
    if n_windows == 0:
        return {"mean_area": 0.0, "max_area": 0, "windows": 0}

    chunks = points[: n_windows * window].reshape(n_windows, window, 2)
    extent = chunks.max(axis=1) - chunks.min(axis=1) + 1
    areas = extent[:, 0] * extent[:, 1]
    return {
        "mean_area": float(areas.mean()),
        "max_area": int(areas.max()),
        "windows": int(n_windows),
    }
