"""Best-first branch-and-bound distance search over a binary image pyramid.

Pixel i of the finest level is treated as the lattice point i. A cell (x, y)
at level k covers the pixels [x * 2**k, (x + 1) * 2**k - 1] on each axis, so
the distance from a query point to its bounding box never overestimates the
distance to any pixel inside it.

Sign convention: background (outside) pixels report +d, the distance to the
nearest foreground pixel. Foreground (inside) pixels report -(d - 1), where d
is the distance to the nearest background pixel, so the outermost foreground
layer sits at 0.
"""
import logging
import math
import os
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional
import numpy as np

from mipsdf.mipmap import Pyramid
from mipsdf.raster_ingest import is_power_of_two
from mipsdf.search_task import SearchTask, TaskQueue
from mipsdf.types import BinaryImage, DistanceField, FOREGROUND

logger = logging.getLogger(__name__)

# Per-process state for pool workers, set once by _init_worker
_worker_state = {}


def lower_bound_sqr(qx: int, qy: int, level: int, x: int, y: int) -> int:
    """Squared distance from (qx, qy) to the bounding box of a pyramid cell; 0 inside."""
    side = 1 << level
    x0 = x * side
    y0 = y * side
    x1 = x0 + side - 1
    y1 = y0 + side - 1

    if qx < x0:
        dx = x0 - qx
    elif qx > x1:
        dx = qx - x1
    else:
        dx = 0

    if qy < y0:
        dy = y0 - qy
    elif qy > y1:
        dy = qy - y1
    else:
        dy = 0

    return dx * dx + dy * dy


def nearest_differing_sqr(pyramid: Pyramid, qx: int, qy: int, prune: bool = True) -> Optional[int]:
    """
    Find the squared distance from a pixel to the nearest pixel of the other color.

    Cells are expanded in order of their lower bound. The first finest-level
    cell of the other color to be popped is the answer: every task left in the
    queue has a bound at least as large.

    Args:
        pyramid: Pyramid over the binary image
        qx, qy: Query pixel on the finest level
        prune: Skip homogeneous cells of the query's own color. Disabling
            this only costs time; the result is the same.

    Returns:
        Squared distance, or None if the image holds a single color
    """
    own_color = pyramid.color_at(qx, qy)
    top = pyramid.max_level
    levels = [pyramid.level(k) for k in range(pyramid.levels_count())]

    queue = TaskQueue()
    top_side = levels[top].shape[0]
    for y in range(top_side):
        for x in range(top_side):
            queue.push(SearchTask(lower_bound_sqr(qx, qy, top, x, y), top, x, y))

    while queue:
        task = queue.pop()
        color = int(levels[task.level][task.y, task.x])

        if task.level == 0:
            if color != own_color:
                return int(task.best_case_dst_sqr)
            continue

        if prune and color == own_color:
            continue

        child_level = task.level - 1
        for cy in (2 * task.y, 2 * task.y + 1):
            for cx in (2 * task.x, 2 * task.x + 1):
                queue.push(
                    SearchTask(lower_bound_sqr(qx, qy, child_level, cx, cy), child_level, cx, cy)
                )

    return None


def signed_distance(
    pyramid: Pyramid,
    qx: int,
    qy: int,
    saturation: float,
    prune: bool = True
) -> float:
    """
    Signed distance of one finest-level pixel.

    Args:
        pyramid: Pyramid over the binary image
        qx, qy: Query pixel on the finest level
        saturation: Value reported (with sign) when no boundary exists
        prune: Forwarded to nearest_differing_sqr

    Returns:
        Positive outside the shape, zero or negative inside
    """
    inside = pyramid.color_at(qx, qy) == FOREGROUND
    dst_sqr = nearest_differing_sqr(pyramid, qx, qy, prune)

    if dst_sqr is None:
        return -saturation if inside else saturation

    dst = math.sqrt(dst_sqr)
    return 1.0 - dst if inside else dst


def validate_sdf_request(size: int, sdf_size: int, saturation: float) -> None:
    """Raise ValueError unless sdf_size and saturation suit an input of side size."""
    if not is_power_of_two(sdf_size):
        raise ValueError(f"SDF size must be a power of two, got {sdf_size}")
    if sdf_size > size:
        raise ValueError(f"SDF size {sdf_size} exceeds input size {size}")
    if not math.isfinite(saturation) or saturation <= 0:
        raise ValueError(f"Saturation distance must be positive and finite, got {saturation}")


def _compute_row(
    pyramid: Pyramid,
    oy: int,
    sdf_size: int,
    saturation: float,
    prune: bool
) -> List[float]:
    step = pyramid.size // sdf_size
    offset = step // 2
    qy = oy * step + offset
    return [
        signed_distance(pyramid, ox * step + offset, qy, saturation, prune)
        for ox in range(sdf_size)
    ]


def _init_worker(pyramid: Pyramid, sdf_size: int, saturation: float, prune: bool) -> None:
    _worker_state["pyramid"] = pyramid
    _worker_state["sdf_size"] = sdf_size
    _worker_state["saturation"] = saturation
    _worker_state["prune"] = prune


def _worker_row(oy: int) -> List[float]:
    return _compute_row(
        _worker_state["pyramid"],
        oy,
        _worker_state["sdf_size"],
        _worker_state["saturation"],
        _worker_state["prune"],
    )


def calculate_sdf(
    pyramid: Pyramid,
    sdf_size: int,
    saturation: float,
    prune: bool = True,
    workers: int = 1
) -> DistanceField:
    """
    Compute the signed distance field of a pyramid's image.

    Output pixel (ox, oy) samples the finest pixel at
    (ox * step + step // 2, oy * step + step // 2), step = size // sdf_size.

    Args:
        pyramid: Pyramid over the binary image
        sdf_size: Output side length, a power of two no larger than the input
        saturation: Magnitude reported for a single-colored image
        prune: Skip homogeneous cells of the query's own color
        workers: Number of processes; rows are spread over a pool when > 1

    Returns:
        (sdf_size, sdf_size) float64 array, indexed [y, x]
    """
    validate_sdf_request(pyramid.size, sdf_size, saturation)

    if workers == -1:
        workers = os.cpu_count() or 1
    workers = min(workers, sdf_size)

    if workers > 1:
        logger.info(f"Searching {sdf_size} rows using {workers} workers...")
        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=_init_worker,
            initargs=(pyramid, sdf_size, saturation, prune),
        ) as executor:
            chunksize = max(sdf_size // (workers * 4), 1)
            rows = list(executor.map(_worker_row, range(sdf_size), chunksize=chunksize))
    else:
        rows = [
            _compute_row(pyramid, oy, sdf_size, saturation, prune)
            for oy in range(sdf_size)
        ]

    return np.array(rows, dtype=np.float64)


def brute_force_sdf(bits: BinaryImage, sdf_size: int, saturation: float) -> DistanceField:
    """
    O(N^2) reference for calculate_sdf using the same sampling and sign rules.

    Args:
        bits: (W, W) boolean array, True = foreground
        sdf_size: Output side length
        saturation: Magnitude reported for a single-colored image

    Returns:
        (sdf_size, sdf_size) float64 array
    """
    bits = np.asarray(bits, dtype=bool)
    size = bits.shape[0]
    validate_sdf_request(size, sdf_size, saturation)

    step = size // sdf_size
    offset = step // 2
    fg = np.argwhere(bits)
    bg = np.argwhere(~bits)

    sdf = np.empty((sdf_size, sdf_size), dtype=np.float64)
    for oy in range(sdf_size):
        for ox in range(sdf_size):
            qy = oy * step + offset
            qx = ox * step + offset
            inside = bits[qy, qx]
            others = bg if inside else fg
            if len(others) == 0:
                sdf[oy, ox] = -saturation if inside else saturation
                continue
            dst = np.sqrt(np.min((others[:, 0] - qy) ** 2 + (others[:, 1] - qx) ** 2))
            sdf[oy, ox] = 1.0 - dst if inside else dst

    return sdf
