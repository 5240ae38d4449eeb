"""Vector and tabular I/O.

Reads line and point layers through geopandas (any format GDAL can open:
GeoPackage, Shapefile, GeoJSON, ...) and converts them to and from the
package's LineSet, PointSet and SpatialNetwork objects.

Layer 4: Workflows - Public entry points with file I/O.
"""

import io
import logging
from pathlib import Path
from typing import Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd
from shapely.geometry import LineString, Point

from tracksmith.objects.lineset import LineSet
from tracksmith.objects.network import SpatialNetwork
from tracksmith.objects.pointset import PointSet
from tracksmith.primitives.crs import crs_label
from tracksmith.primitives.tracks import observation_times
from tracksmith.utils.errors import raise_validation_error

logger = logging.getLogger(__name__)

VECTOR_DRIVERS = {
    ".shp": "ESRI Shapefile",
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
    ".gpkg": "GPKG",
}

PathLike = Union[str, Path]


def _read_file(path: PathLike, layer: Optional[str]) -> gpd.GeoDataFrame:
    if layer is None:
        return gpd.read_file(path)
    return gpd.read_file(path, layer=layer)


def _attributes(gdf: gpd.GeoDataFrame) -> pd.DataFrame:
    return pd.DataFrame(gdf.drop(columns=gdf.geometry.name)).reset_index(drop=True)


def _gdf_crs(gdf: gpd.GeoDataFrame) -> Optional[str]:
    return crs_label(gdf.crs) if gdf.crs is not None else None


def geodataframe_to_lineset(gdf: gpd.GeoDataFrame) -> LineSet:
    """Convert a GeoDataFrame of (Multi)LineStrings to a LineSet.

    MultiLineStrings are exploded into their parts, each part keeping the
    attributes of its feature. Empty geometries are dropped. The CRS is
    stored as an 'AUTH:CODE' label only for an exact authority match and as
    WKT2 otherwise.
    """
    gdf = gdf[~(gdf.geometry.isna() | gdf.geometry.is_empty)]
    gdf = gdf.explode(index_parts=False)
    geom_types = set(gdf.geom_type.unique())
    if geom_types - {"LineString"}:
        raise_validation_error(
            "Layer must contain only line geometries",
            expected="LineString or MultiLineString",
            received=", ".join(sorted(geom_types)),
        )
    vertices = [np.asarray(geom.coords, dtype=np.float64) for geom in gdf.geometry]
    return LineSet(vertices, attributes=_attributes(gdf), crs=_gdf_crs(gdf))


def geodataframe_to_pointset(gdf: gpd.GeoDataFrame) -> PointSet:
    """Convert a GeoDataFrame of (Multi)Points to a PointSet."""
    gdf = gdf[~(gdf.geometry.isna() | gdf.geometry.is_empty)]
    gdf = gdf.explode(index_parts=False)
    geom_types = set(gdf.geom_type.unique())
    if geom_types - {"Point"}:
        raise_validation_error(
            "Layer must contain only point geometries",
            expected="Point or MultiPoint",
            received=", ".join(sorted(geom_types)),
        )
    if len(gdf) == 0:
        coords = np.empty((0, 2))
    elif gdf.geometry.has_z.all():
        coords = np.array([geom.coords[0] for geom in gdf.geometry])
    else:
        coords = np.column_stack([gdf.geometry.x, gdf.geometry.y])
    return PointSet(coords, attributes=_attributes(gdf), crs=_gdf_crs(gdf))


def read_lines(path: PathLike, layer: Optional[str] = None) -> LineSet:
    """Read a line layer from any vector format GDAL supports."""
    gdf = _read_file(path, layer)
    lines = geodataframe_to_lineset(gdf)
    logger.info(f"Read {len(lines)} lines from {path}")
    return lines


def read_points(path: PathLike, layer: Optional[str] = None) -> PointSet:
    """Read a point layer from any vector format GDAL supports."""
    gdf = _read_file(path, layer)
    points = geodataframe_to_pointset(gdf)
    logger.info(f"Read {len(points)} points from {path}")
    return points


def lines_to_geodataframe(lines: LineSet) -> gpd.GeoDataFrame:
    attributes = (
        lines.attributes
        if lines.attributes is not None
        else pd.DataFrame(index=pd.RangeIndex(len(lines)))
    )
    geometry = [LineString(v) for v in lines.vertices]
    return gpd.GeoDataFrame(attributes.copy(), geometry=geometry, crs=lines.crs)


def points_to_geodataframe(points: PointSet) -> gpd.GeoDataFrame:
    attributes = (
        points.attributes
        if points.attributes is not None
        else pd.DataFrame(index=pd.RangeIndex(len(points)))
    )
    geometry = [Point(c) for c in points.coordinates]
    return gpd.GeoDataFrame(attributes.copy(), geometry=geometry, crs=points.crs)


def network_to_geodataframes(
    network: SpatialNetwork,
) -> tuple[gpd.GeoDataFrame, gpd.GeoDataFrame]:
    """Node and edge tables as GeoDataFrames (points and lines).

    Returns:
        Tuple of (nodes, edges). Node rows keep their id as ``node_id``.
    """
    nodes = network.nodes.copy()
    nodes.insert(0, "node_id", np.arange(network.n_nodes))
    nodes_gdf = gpd.GeoDataFrame(
        nodes,
        geometry=gpd.points_from_xy(nodes["x"], nodes["y"]),
        crs=network.crs,
    )
    edges_gdf = gpd.GeoDataFrame(
        network.edges.copy(),
        geometry=[LineString(g) for g in network.geometry],
        crs=network.crs,
    )
    return nodes_gdf, edges_gdf


def write_vector(
    data: Union[gpd.GeoDataFrame, LineSet, PointSet],
    output_path: PathLike,
    layer: Optional[str] = None,
) -> Path:
    """Write features to a vector file; the format follows the suffix.

    Args:
        data: GeoDataFrame, LineSet or PointSet.
        output_path: Destination with suffix .shp, .geojson, .json or .gpkg.
        layer: Layer name (GeoPackage only).

    Returns:
        Path written.

    Raises:
        ValueError: If the suffix is not a supported vector format.
    """
    output_path = Path(output_path)
    driver = VECTOR_DRIVERS.get(output_path.suffix.lower())
    if driver is None:
        raise ValueError(
            f"Unsupported vector format: {output_path.suffix}. "
            f"Use one of {sorted(VECTOR_DRIVERS)}"
        )

    if isinstance(data, LineSet):
        gdf = lines_to_geodataframe(data)
    elif isinstance(data, PointSet):
        gdf = points_to_geodataframe(data)
    else:
        gdf = data

    output_path.parent.mkdir(parents=True, exist_ok=True)
    kwargs = {"driver": driver}
    if layer is not None:
        kwargs["layer"] = layer
    gdf.to_file(output_path, **kwargs)
    logger.info(f"Wrote {len(gdf)} features to {output_path}")
    return output_path


def read_storm_observations(
    source: Union[PathLike, io.StringIO],
    time_col: str = "time",
    **read_csv_kwargs,
) -> pd.DataFrame:
    """Read a storm observation table from CSV.

    The table is expected to hold one row per observation with position
    columns (e.g. ``lat``/``long``). When ``time_col`` is absent it is built
    from year/month/day/hour columns.

    Args:
        source: Path, URL or text buffer.
        time_col: Name of the timestamp column to ensure.
        **read_csv_kwargs: Passed to pandas.read_csv.

    Returns:
        DataFrame with a datetime ``time_col``.
    """
    df = pd.read_csv(source, **read_csv_kwargs)
    if time_col in df.columns:
        df[time_col] = pd.to_datetime(df[time_col])
    elif {"year", "month", "day"}.issubset(df.columns):
        parts = ["year", "month", "day"] + (["hour"] if "hour" in df.columns else [])
        df[time_col] = observation_times(df, parts).to_numpy()
    else:
        logger.warning(
            f"No '{time_col}' column and no year/month/day columns; "
            "observations are unordered in time"
        )
    logger.info(f"Read {len(df)} storm observations")
    return df


def load_csv_from_string(text: str, **read_csv_kwargs) -> pd.DataFrame:
    """Read CSV content held in a string."""
    return pd.read_csv(io.StringIO(text), **read_csv_kwargs)
