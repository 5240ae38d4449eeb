"""Point collections with attributes and CRS metadata."""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd


def _validate_coordinates(coords: np.ndarray, label: str) -> None:
    if coords.ndim != 2 or coords.shape[1] not in (2, 3):
        raise ValueError(
            f"{label} must be a 2D array with 2 or 3 columns, got shape {coords.shape}"
        )
    if not np.all(np.isfinite(coords)):
        raise ValueError(f"{label} contain NaN or infinite values")


def _validate_attributes(attributes: Optional[pd.DataFrame], n: int) -> None:
    if attributes is None:
        return
    if not isinstance(attributes, pd.DataFrame):
        raise ValueError(
            f"attributes must be a pandas DataFrame, got {type(attributes)}"
        )
    if len(attributes) != n:
        raise ValueError(
            f"attributes has {len(attributes)} rows but there are {n} features"
        )


@dataclass(frozen=True)
class PointSet:
    """A set of points with optional per-point attributes.

    Attributes:
        coordinates: Array of shape (n, 2) or (n, 3).
        attributes: Optional DataFrame with one row per point.
        crs: CRS as given by the user (EPSG code, PROJ4 or WKT string).
    """

    coordinates: np.ndarray
    attributes: Optional[pd.DataFrame] = None
    crs: Optional[str] = None

    def __post_init__(self) -> None:
        coords = np.asarray(self.coordinates, dtype=np.float64)
        _validate_coordinates(coords, "Coordinates")
        object.__setattr__(self, "coordinates", coords)

        if self.attributes is not None:
            attributes = self.attributes.reset_index(drop=True)
            object.__setattr__(self, "attributes", attributes)
        _validate_attributes(self.attributes, len(coords))

    def __len__(self) -> int:
        return len(self.coordinates)

    @property
    def ndim(self) -> int:
        """Number of coordinate dimensions (2 or 3)."""
        return self.coordinates.shape[1]

    def bounds(self) -> tuple[float, float, float, float]:
        """Return (xmin, ymin, xmax, ymax)."""
        if len(self) == 0:
            raise ValueError("Cannot compute bounds of an empty PointSet")
        xy = self.coordinates[:, :2]
        xmin, ymin = xy.min(axis=0)
        xmax, ymax = xy.max(axis=0)
        return float(xmin), float(ymin), float(xmax), float(ymax)

    def __repr__(self) -> str:
        crs_str = f", crs={self.crs!r}" if self.crs is not None else ""
        return f"PointSet(n_points={len(self)}, ndim={self.ndim}{crs_str})"
