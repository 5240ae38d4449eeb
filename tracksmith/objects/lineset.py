"""Line collections with attributes and CRS metadata.

A LineSet is the tabular "features + geometry" shape used throughout the
package: one row of attributes per line, one vertex array per line.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from tracksmith.objects.pointset import _validate_attributes, _validate_coordinates


@dataclass(frozen=True)
class LineSet:
    """A set of polylines with optional per-line attributes.

    Attributes:
        vertices: List of arrays, each (k, 2) or (k, 3) with k >= 2.
        attributes: Optional DataFrame with one row per line.
        crs: CRS as given by the user (EPSG code, PROJ4 or WKT string).
    """

    vertices: list
    attributes: Optional[pd.DataFrame] = None
    crs: Optional[str] = None

    def __post_init__(self) -> None:
        lines = [np.asarray(v, dtype=np.float64) for v in self.vertices]
        dims = set()
        for i, line in enumerate(lines):
            _validate_coordinates(line, f"Vertices of line {i}")
            if len(line) < 2:
                raise ValueError(
                    f"Line {i} has {len(line)} vertex; lines need at least 2"
                )
            dims.add(line.shape[1])
        if len(dims) > 1:
            raise ValueError(
                f"All lines must have the same dimension, got {sorted(dims)}"
            )
        object.__setattr__(self, "vertices", lines)

        if self.attributes is not None:
            attributes = self.attributes.reset_index(drop=True)
            object.__setattr__(self, "attributes", attributes)
        _validate_attributes(self.attributes, len(lines))

    def __len__(self) -> int:
        return len(self.vertices)

    @property
    def ndim(self) -> int:
        """Number of coordinate dimensions, 2 when the set is empty."""
        if not self.vertices:
            return 2
        return self.vertices[0].shape[1]

    @property
    def n_vertices(self) -> int:
        """Total number of vertices over all lines."""
        return int(sum(len(v) for v in self.vertices))

    def start_points(self) -> np.ndarray:
        """First vertex of every line, shape (n, ndim)."""
        if not self.vertices:
            return np.empty((0, self.ndim))
        return np.vstack([v[0] for v in self.vertices])

    def end_points(self) -> np.ndarray:
        """Last vertex of every line, shape (n, ndim)."""
        if not self.vertices:
            return np.empty((0, self.ndim))
        return np.vstack([v[-1] for v in self.vertices])

    def bounds(self) -> tuple[float, float, float, float]:
        """Return (xmin, ymin, xmax, ymax) over all vertices."""
        if not self.vertices:
            raise ValueError("Cannot compute bounds of an empty LineSet")
        xy = np.vstack(self.vertices)[:, :2]
        xmin, ymin = xy.min(axis=0)
        xmax, ymax = xy.max(axis=0)
        return float(xmin), float(ymin), float(xmax), float(ymax)

    def __repr__(self) -> str:
        crs_str = f", crs={self.crs!r}" if self.crs is not None else ""
        return (
            f"LineSet(n_lines={len(self)}, n_vertices={self.n_vertices}{crs_str})"
        )
