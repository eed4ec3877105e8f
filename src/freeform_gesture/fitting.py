"""Closed-form polygon-to-polygon transform fitting.

Given up to four point correspondences, find the matrix that maps the
"before" points exactly onto the "after" points:

    1 point   translation
    2 points  similarity (uniform scale, rotation, translation)
    3 points  affine (adds non-uniform scale and skew)
    4 points  quadrilateral mapping (adds perspective)

When a configuration is degenerate for its solver (coincident or collinear
source points) the fitter drops the last correspondence and tries the solver
below it, so losing a usable finger degrades the gesture instead of
breaking it.

The 2/3/4-point solvers share one construction: build the matrix that maps
a canonical shape (unit segment, unit triangle, unit square) onto the source
points and onto the destination points, then ``dst_basis @ inv(src_basis)``.

Usage:
    result = fit_transform(before, after, max_pointers=4)
    if result is not None:
        print(result.pointer_count, result.matrix)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from freeform_gesture import matrix as mx
from freeform_gesture.config import MAX_SUPPORTED_POINTERS, validate_max_pointers

logger = logging.getLogger("freeform_gesture.fitting")

# Bases with a smaller determinant are treated as singular.
DEGENERATE_EPSILON = 1e-9

Solver = Callable[[np.ndarray, np.ndarray], Optional[np.ndarray]]


@dataclass
class FitResult:
    """Outcome of a successful fit."""
    matrix: np.ndarray  # (3, 3) delta mapping before → after
    pointer_count: int  # correspondences actually used

    @property
    def is_identity(self) -> bool:
        return mx.is_identity(self.matrix)


def _segment_basis(pts: np.ndarray) -> np.ndarray:
    """(0, 0) → p0, (1, 0) → p1, keeping right angles."""
    (x0, y0), (x1, y1) = pts[0], pts[1]
    dx, dy = x1 - x0, y1 - y0
    return np.array([
        [dx, -dy, x0],
        [dy, dx, y0],
        [0.0, 0.0, 1.0],
    ])


def _triangle_basis(pts: np.ndarray) -> np.ndarray:
    """(0, 0) → p0, (1, 0) → p1, (0, 1) → p2."""
    (x0, y0), (x1, y1), (x2, y2) = pts[0], pts[1], pts[2]
    return np.array([
        [x1 - x0, x2 - x0, x0],
        [y1 - y0, y2 - y0, y0],
        [0.0, 0.0, 1.0],
    ])


def _square_basis(pts: np.ndarray) -> Optional[np.ndarray]:
    """(0, 0) → p0, (1, 0) → p1, (1, 1) → p2, (0, 1) → p3.

    Returns None when p1, p2 and p3 leave no unique projective solution.
    """
    (x0, y0), (x1, y1), (x2, y2), (x3, y3) = pts[0], pts[1], pts[2], pts[3]
    sx = x0 - x1 + x2 - x3
    sy = y0 - y1 + y2 - y3
    dx1, dy1 = x1 - x2, y1 - y2
    dx2, dy2 = x3 - x2, y3 - y2

    den = dx1 * dy2 - dx2 * dy1
    if abs(den) < DEGENERATE_EPSILON:
        return None

    g = (sx * dy2 - dx2 * sy) / den
    h = (dx1 * sy - sx * dy1) / den
    return np.array([
        [x1 - x0 + g * x1, x3 - x0 + h * x3, x0],
        [y1 - y0 + g * y1, y3 - y0 + h * y3, y0],
        [g, h, 1.0],
    ])


def _map_through_bases(src_basis: Optional[np.ndarray], dst_basis: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if src_basis is None or dst_basis is None:
        return None
    if abs(np.linalg.det(src_basis)) < DEGENERATE_EPSILON:
        return None
    result = dst_basis @ np.linalg.inv(src_basis)
    return result / result[2, 2] if result[2, 2] != 0 else result


def solve_translation(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """Pure translation by ``dst[0] - src[0]``. Always succeeds."""
    dx, dy = dst[0] - src[0]
    return mx.translation(dx, dy)


def solve_similarity(src: np.ndarray, dst: np.ndarray) -> Optional[np.ndarray]:
    """Uniform scale, rotation and translation from two pairs."""
    return _map_through_bases(_segment_basis(src), _segment_basis(dst))


def solve_affine(src: np.ndarray, dst: np.ndarray) -> Optional[np.ndarray]:
    """Affine map from three pairs; None if the source points are collinear."""
    return _map_through_bases(_triangle_basis(src), _triangle_basis(dst))


def solve_quad(src: np.ndarray, dst: np.ndarray) -> Optional[np.ndarray]:
    """Quadrilateral-to-quadrilateral map from four pairs."""
    return _map_through_bases(_square_basis(src), _square_basis(dst))


# Fallback ladder, indexed by correspondence count.
SOLVERS: dict[int, Solver] = {
    4: solve_quad,
    3: solve_affine,
    2: solve_similarity,
    1: solve_translation,
}


def fit_transform(before, after, max_pointers: int = MAX_SUPPORTED_POINTERS) -> Optional[FitResult]:
    """Fit the delta matrix mapping ``before`` onto ``after``.

    Args:
        before: (N, 2) positions at the start of the update.
        after: (N, 2) positions of the same pointers, same row order.
        max_pointers: Upper bound on correspondences used (0 to 4).

    Returns:
        FitResult for the largest solvable correspondence count, or None
        when no correspondence is available.
    """
    max_pointers = validate_max_pointers(max_pointers)
    src = np.asarray(before, dtype=np.float64).reshape(-1, 2)
    dst = np.asarray(after, dtype=np.float64).reshape(-1, 2)
    if src.shape != dst.shape:
        raise ValueError(f"before/after shapes differ: {src.shape} vs {dst.shape}")

    start = min(max_pointers, len(src))
    for k in range(start, 0, -1):
        result = SOLVERS[k](src[:k], dst[:k])
        if result is not None:
            if k < start:
                logger.debug("Fell back from %d-point to %d-point fit", start, k)
            return FitResult(matrix=result, pointer_count=k)
        logger.debug("%d-point fit is degenerate", k)
    return None
