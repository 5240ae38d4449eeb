"""Pure geometry operations on vertex arrays.

Lengths are planar unless a geographic CRS is given, in which case they are
geodesic distances in metres on the CRS ellipsoid.
"""

from typing import Any, Optional

import numpy as np

from tracksmith.primitives.crs import parse_crs


def points_to_line(coords: Any) -> np.ndarray:
    """Validate an ordered point sequence as a polyline.

    Args:
        coords: Sequence of (x, y) or (x, y, z) points.

    Returns:
        Float array (k, 2|3).

    Raises:
        ValueError: If fewer than two points are given.
    """
    line = np.asarray(coords, dtype=np.float64)
    if line.ndim != 2 or line.shape[1] not in (2, 3):
        raise ValueError(f"Points must have shape (k, 2) or (k, 3), got {line.shape}")
    if len(line) < 2:
        raise ValueError(f"A line needs at least 2 points, got {len(line)}")
    return line


def line_endpoints(vertices: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return (first vertex, last vertex)."""
    vertices = np.asarray(vertices, dtype=np.float64)
    return vertices[0], vertices[-1]


def split_into_segments(vertices: np.ndarray) -> list[np.ndarray]:
    """Break a polyline into its consecutive two-vertex segments."""
    vertices = points_to_line(vertices)
    return [vertices[i : i + 2].copy() for i in range(len(vertices) - 1)]


def round_coordinates(coords: np.ndarray, precision: Optional[int]) -> np.ndarray:
    """Round coordinates to a number of decimals; None leaves them untouched."""
    coords = np.asarray(coords, dtype=np.float64)
    if precision is None:
        return coords
    # +0.0 folds -0.0 into 0.0 so both round to the same key
    return np.round(coords, int(precision)) + 0.0


def segment_lengths(vertices: np.ndarray, crs: Any = None) -> np.ndarray:
    """Length of every segment of a polyline.

    Args:
        vertices: Polyline vertices (k, 2|3).
        crs: Optional CRS. Geographic CRSs give geodesic metres.

    Returns:
        Array of k - 1 lengths.
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    if len(vertices) < 2:
        return np.zeros(0)
    if crs is not None:
        crs_obj = parse_crs(crs)
        if crs_obj.is_geographic:
            geod = crs_obj.get_geod()
            _, _, dist = geod.inv(
                vertices[:-1, 0], vertices[:-1, 1], vertices[1:, 0], vertices[1:, 1]
            )
            return np.abs(np.asarray(dist, dtype=np.float64))
    deltas = np.diff(vertices[:, :2], axis=0)
    return np.hypot(deltas[:, 0], deltas[:, 1])


def line_length(vertices: np.ndarray, crs: Any = None) -> float:
    """Total length of a polyline (geodesic metres for geographic CRSs)."""
    return float(segment_lengths(vertices, crs).sum())
