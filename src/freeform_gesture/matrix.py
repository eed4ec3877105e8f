"""3x3 homogeneous matrix helpers.

Matrices act on column vectors ``(x, y, 1)``, so ``b @ a`` applies ``a``
first and then ``b``. The nine values use the same row-major layout as a
2D graphics matrix: ``[scale_x, skew_x, trans_x, skew_y, scale_y, trans_y,
persp_0, persp_1, persp_2]``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass
class MatrixComponents:
    """Affine part of a matrix split into readable parameters.

    The linear part is ``rotation @ [[scale_x, 0], [0, scale_y]] @ [[1, skew], [0, 1]]``.
    """
    translate_x: float
    translate_y: float
    scale_x: float
    scale_y: float
    rotation_degrees: float
    skew: float

    def to_dict(self) -> dict:
        return {
            "translate_x": round(self.translate_x, 4),
            "translate_y": round(self.translate_y, 4),
            "scale_x": round(self.scale_x, 4),
            "scale_y": round(self.scale_y, 4),
            "rotation_degrees": round(self.rotation_degrees, 4),
            "skew": round(self.skew, 4),
        }


def identity() -> np.ndarray:
    return np.eye(3, dtype=np.float64)


def translation(dx: float, dy: float) -> np.ndarray:
    m = identity()
    m[0, 2] = dx
    m[1, 2] = dy
    return m


def scaling(sx: float, sy: float, px: float = 0.0, py: float = 0.0) -> np.ndarray:
    """Scale by (sx, sy) about the pivot (px, py)."""
    m = np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]])
    return translation(px, py) @ m @ translation(-px, -py)


def rotation(degrees: float, px: float = 0.0, py: float = 0.0) -> np.ndarray:
    """Rotate by ``degrees`` about the pivot (px, py)."""
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    m = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    return translation(px, py) @ m @ translation(-px, -py)


def concat(*matrices: np.ndarray) -> np.ndarray:
    """Compose matrices so that the first argument is applied first."""
    result = identity()
    for m in matrices:
        result = m @ result
    return result


def map_points(matrix: np.ndarray, points) -> np.ndarray:
    """Map an (N, 2) array of points, applying the perspective divide."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    homogeneous = np.hstack([pts, np.ones((len(pts), 1))])
    mapped = homogeneous @ matrix.T
    return mapped[:, :2] / mapped[:, 2:3]


def is_identity(matrix: np.ndarray, atol: float = 1e-9) -> bool:
    return bool(np.allclose(matrix, np.eye(3), rtol=0.0, atol=atol))


def is_affine(matrix: np.ndarray, atol: float = 1e-12) -> bool:
    return bool(np.allclose(matrix[2], [0.0, 0.0, 1.0], rtol=0.0, atol=atol))


def decompose(matrix: np.ndarray) -> MatrixComponents:
    """Split the affine part of ``matrix`` into translation, scale, rotation and skew.

    Perspective terms are ignored; check :func:`is_affine` first if that matters.
    """
    m = matrix / matrix[2, 2]
    a, b, c, d = m[0, 0], m[0, 1], m[1, 0], m[1, 1]

    scale_x = math.hypot(a, c)
    if scale_x < 1e-12:
        return MatrixComponents(float(m[0, 2]), float(m[1, 2]), 0.0, 0.0, 0.0, 0.0)

    theta = math.atan2(c, a)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    shear = b * cos_t + d * sin_t
    scale_y = d * cos_t - b * sin_t

    return MatrixComponents(
        translate_x=float(m[0, 2]),
        translate_y=float(m[1, 2]),
        scale_x=float(scale_x),
        scale_y=float(scale_y),
        rotation_degrees=math.degrees(theta),
        skew=float(shear / scale_x),
    )


def to_values(matrix: np.ndarray) -> list[float]:
    return [float(v) for v in np.asarray(matrix).reshape(9)]


def from_values(values: Sequence[float]) -> np.ndarray:
    if len(values) != 9:
        raise ValueError(f"expected 9 matrix values, got {len(values)}")
    return np.array(values, dtype=np.float64).reshape(3, 3)
