"""Coordinate Reference System (CRS) handling.

Wraps pyproj so the rest of the package can accept any CRS description a
user is likely to have at hand: EPSG codes, authority strings, PROJ4 strings,
WKT1 (GDAL/ESRI) and WKT2 text, or PROJJSON.

Since PROJ 6 / GDAL 3, WKT2 is the lossless exchange format. PROJ4 strings
drop datum names, ensembles and axis order, so conversions to PROJ4 are
logged as lossy.
"""

from __future__ import annotations

import logging
import re
import warnings
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
from pyproj import CRS, Transformer
from pyproj.aoi import AreaOfInterest
from pyproj.database import query_utm_crs_info
from pyproj.enums import WktVersion
from pyproj.exceptions import CRSError as PyprojCRSError

from tracksmith.utils.errors import CRSError, raise_parameter_error

if TYPE_CHECKING:
    from tracksmith.objects.lineset import LineSet
    from tracksmith.objects.pointset import PointSet

logger = logging.getLogger(__name__)

WKT1_KEYWORDS = frozenset(
    {"GEOGCS", "PROJCS", "GEOCCS", "VERT_CS", "COMPD_CS", "LOCAL_CS", "FITTED_CS"}
)
WKT_VERSIONS = tuple(v.value for v in WktVersion)

_EPSG_RE = re.compile(r"^\s*(epsg:)?\d+\s*$", re.IGNORECASE)
_AUTHORITY_RE = re.compile(r"^\s*(urn:ogc:def:crs:\S+|[A-Za-z]+:\S+)\s*$")
_WKT_RE = re.compile(r"^\s*([A-Z_0-9]+)\s*[\[(]", re.IGNORECASE)


@dataclass(frozen=True)
class CRSDescription:
    """Human-readable summary of a CRS.

    Attributes:
        name: CRS name as reported by PROJ.
        authority: Authority name (e.g. 'EPSG'), or None.
        code: Authority code, or None.
        datum: Datum (or datum ensemble) name, or None.
        ellipsoid: Ellipsoid name, or None.
        units: Unit name of the first axis.
        is_geographic: True for longitude/latitude systems.
        is_projected: True for projected systems.
        axis_order: Axis directions in CRS order, e.g. ('north', 'east').
    """

    name: str
    authority: str | None
    code: str | None
    datum: str | None
    ellipsoid: str | None
    units: str
    is_geographic: bool
    is_projected: bool
    axis_order: tuple[str, ...]


def detect_crs_format(text: str) -> str:
    """Classify a textual CRS description without parsing it.

    Args:
        text: CRS description.

    Returns:
        One of 'epsg', 'authority', 'proj4', 'wkt1', 'wkt2', 'projjson' or
        'unknown'.

    Examples:
        >>> detect_crs_format("EPSG:4326")
        'epsg'
        >>> detect_crs_format("+proj=longlat +datum=WGS84")
        'proj4'
    """
    if not isinstance(text, str):
        return "unknown"
    stripped = text.strip()
    if not stripped:
        return "unknown"
    if stripped.startswith("{"):
        return "projjson"
    if _EPSG_RE.match(stripped):
        return "epsg"
    if "+proj=" in stripped or "+init=" in stripped:
        return "proj4"
    match = _WKT_RE.match(stripped)
    if match:
        keyword = match.group(1).upper()
        return "wkt1" if keyword in WKT1_KEYWORDS else "wkt2"
    if _AUTHORITY_RE.match(stripped):
        return "authority"
    return "unknown"


def parse_crs(value: Any) -> CRS:
    """Build a pyproj CRS from any supported description.

    Args:
        value: EPSG code (int or 'EPSG:n'), authority string, PROJ4 string,
            WKT text, PROJJSON, pyproj CRS or SpatialReference.

    Returns:
        pyproj CRS object.

    Raises:
        CRSError: If the value is missing or PROJ cannot interpret it.
    """
    if isinstance(value, SpatialReference):
        if value.crs is None:
            raise CRSError("SpatialReference has no CRS set")
        return value.crs
    if isinstance(value, CRS):
        return value
    if value is None:
        raise CRSError(
            "No CRS given",
            suggestion="Pass an EPSG code, a PROJ4 string or WKT text",
        )
    try:
        return CRS.from_user_input(value)
    except PyprojCRSError as e:
        fmt = detect_crs_format(value) if isinstance(value, str) else type(value).__name__
        raise CRSError(
            f"Could not interpret CRS ({fmt}): {value!r}",
            suggestion="Check the EPSG code, or pass WKT2 text exported by PROJ/GDAL",
            details={"format": fmt, "proj_error": str(e)},
        ) from e


def crs_label(crs: Any) -> str:
    """Compact string for a CRS: 'AUTH:CODE' when known, otherwise WKT2.

    Only an exact authority match counts, so a custom CRS close to an EPSG
    definition keeps its full WKT.
    """
    crs = parse_crs(crs)
    authority = crs.to_authority(min_confidence=100)
    if authority is not None:
        return f"{authority[0]}:{authority[1]}"
    return crs.to_wkt()


def to_wkt(crs: Any, version: str = "WKT2_2019", pretty: bool = False) -> str:
    """Export a CRS as Well-Known Text.

    Args:
        crs: Any CRS description accepted by parse_crs.
        version: WKT flavour, e.g. 'WKT2_2019', 'WKT2_2015', 'WKT1_GDAL',
            'WKT1_ESRI'.
        pretty: Multi-line indented output.

    Returns:
        WKT string.

    Raises:
        ParameterError: If the version is unknown.
        CRSError: If the CRS cannot be written in the requested flavour.
    """
    if version not in WKT_VERSIONS:
        raise_parameter_error("version", version, valid_values=list(WKT_VERSIONS))
    crs_obj = parse_crs(crs)
    wkt = crs_obj.to_wkt(version=version, pretty=pretty)
    if wkt is None:
        raise CRSError(
            f"CRS '{crs_obj.name}' cannot be represented as {version}",
            suggestion="Use WKT2_2019, which can represent every PROJ CRS",
        )
    return wkt


def _proj4_quiet(crs_obj: CRS) -> str | None:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        return crs_obj.to_proj4()


def to_proj4(crs: Any) -> str:
    """Export a CRS as a PROJ4 string.

    PROJ4 strings cannot carry datum names, datum ensembles or axis order;
    the conversion is logged as lossy.

    Raises:
        CRSError: If PROJ cannot express the CRS as PROJ4.
    """
    crs_obj = parse_crs(crs)
    proj4 = _proj4_quiet(crs_obj)
    if proj4 is None:
        raise CRSError(f"CRS '{crs_obj.name}' has no PROJ4 representation")
    logger.warning(
        f"PROJ4 export of '{crs_obj.name}' may lose datum and axis information; "
        "prefer WKT2 for storage and exchange"
    )
    return proj4


def proj4_is_lossy(crs: Any) -> bool:
    """Check whether a PROJ4 round trip changes the CRS.

    Returns:
        True when the CRS rebuilt from its PROJ4 string is not equivalent to
        the original (axis order ignored).
    """
    crs_obj = parse_crs(crs)
    proj4 = _proj4_quiet(crs_obj)
    if proj4 is None:
        return True
    rebuilt = CRS.from_proj4(proj4)
    return not crs_obj.equals(rebuilt, ignore_axis_order=True)


def describe_crs(crs: Any) -> CRSDescription:
    """Summarize the main properties of a CRS."""
    crs_obj = parse_crs(crs)
    authority = crs_obj.to_authority()
    axis_info = crs_obj.axis_info
    datum = crs_obj.datum
    ellipsoid = crs_obj.ellipsoid
    return CRSDescription(
        name=crs_obj.name,
        authority=authority[0] if authority else None,
        code=authority[1] if authority else None,
        datum=datum.name if datum is not None else None,
        ellipsoid=ellipsoid.name if ellipsoid is not None else None,
        units=axis_info[0].unit_name if axis_info else "unknown",
        is_geographic=bool(crs_obj.is_geographic),
        is_projected=bool(crs_obj.is_projected),
        axis_order=tuple(axis.direction for axis in axis_info),
    )


def crs_equal(a: Any, b: Any, ignore_axis_order: bool = True) -> bool:
    """Compare two CRS descriptions for equivalence.

    Names are not compared, so 'EPSG:4326' and its WKT2 export are equal.
    """
    return parse_crs(a).equals(parse_crs(b), ignore_axis_order=ignore_axis_order)


class SpatialReference:
    """Holds a CRS and transforms coordinates out of it."""

    def __init__(self, crs: Any = None):
        """Initialize spatial reference.

        Args:
            crs: Coordinate Reference System. Can be:
                - EPSG code (int or string like 'EPSG:32633')
                - CRS object from pyproj
                - PROJ4 string or WKT text
                - None (no CRS specified)
        """
        self._crs: CRS | None = None
        if crs is not None:
            self.crs = crs

    @property
    def crs(self) -> CRS | None:
        return self._crs

    @crs.setter
    def crs(self, value: Any) -> None:
        self._crs = parse_crs(value)
        logger.info(f"CRS set to: {self._crs.name}")

    def _require_crs(self) -> CRS:
        if self._crs is None:
            raise CRSError(
                "Source CRS not set",
                suggestion="Set CRS before transforming or exporting",
            )
        return self._crs

    def transform(self, coordinates: np.ndarray, target_crs: Any) -> np.ndarray:
        """Transform coordinates to target CRS.

        Args:
            coordinates: Input coordinates [N, 2] or [N, 3] (x, y, [z])
            target_crs: Target CRS (EPSG code, CRS object, or string)

        Returns:
            Transformed coordinates with the same shape as the input
        """
        return transform_coordinates(coordinates, self._require_crs(), target_crs)

    def to_wkt(self, version: str = "WKT2_2019", pretty: bool = False) -> str:
        return to_wkt(self._require_crs(), version=version, pretty=pretty)

    def to_proj4(self) -> str:
        return to_proj4(self._require_crs())

    def describe(self) -> CRSDescription:
        return describe_crs(self._require_crs())

    def get_units(self) -> str:
        """Get the units of the CRS, e.g. 'metre' or 'degree'."""
        if self._crs is None:
            return "unknown"
        axis_info = self._crs.axis_info
        if axis_info:
            return axis_info[0].unit_name
        return "unknown"

    def get_epsg(self) -> int | None:
        """Get EPSG code if available."""
        if self._crs is None:
            return None
        return self._crs.to_epsg()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpatialReference):
            return NotImplemented
        if self._crs is None or other._crs is None:
            return self._crs is other._crs
        return crs_equal(self._crs, other._crs)

    def __repr__(self) -> str:
        if self._crs is None:
            return "SpatialReference(crs=None)"
        epsg = self.get_epsg()
        if epsg:
            return f"SpatialReference(crs=EPSG:{epsg})"
        return f"SpatialReference(crs={self._crs.name!r})"


def transform_coordinates(
    coordinates: np.ndarray,
    source_crs: Any,
    target_crs: Any,
) -> np.ndarray:
    """Transform coordinates between CRS.

    Coordinates are always in x/y (longitude/latitude) order regardless of
    the axis order declared by the CRS. A third column is carried through
    unchanged.

    Args:
        coordinates: Input coordinates [N, 2] or [N, 3]
        source_crs: Source CRS (EPSG code, CRS object, or string)
        target_crs: Target CRS (EPSG code, CRS object, or string)

    Returns:
        Transformed coordinates with the same shape as the input

    Examples:
        >>> coords = np.array([[500000.0, 0.0]])
        >>> # UTM zone 33N central meridian -> (15.0, 0.0) in WGS84
        >>> lonlat = transform_coordinates(coords, "EPSG:32633", "EPSG:4326")
    """
    coordinates = np.asarray(coordinates, dtype=np.float64)
    if coordinates.ndim != 2 or coordinates.shape[1] not in (2, 3):
        raise ValueError(
            f"Coordinates must have shape [N, 2] or [N, 3], got {coordinates.shape}"
        )

    source = parse_crs(source_crs)
    target = parse_crs(target_crs)
    transformer = Transformer.from_crs(source, target, always_xy=True)

    x_new, y_new = transformer.transform(coordinates[:, 0], coordinates[:, 1])
    columns = [np.asarray(x_new), np.asarray(y_new)]
    if coordinates.shape[1] == 3:
        columns.append(coordinates[:, 2])
    return np.column_stack(columns)


def estimate_utm_crs(lon: Any, lat: Any, datum_name: str = "WGS 84") -> CRS:
    """Find the UTM zone CRS covering the given longitude/latitude points.

    Args:
        lon: Longitude or array of longitudes (degrees).
        lat: Latitude or array of latitudes (degrees).
        datum_name: Datum of the UTM family to search.

    Returns:
        pyproj CRS of the best-matching UTM zone.

    Raises:
        CRSError: If no UTM zone covers the area.
    """
    lon = np.atleast_1d(np.asarray(lon, dtype=np.float64))
    lat = np.atleast_1d(np.asarray(lat, dtype=np.float64))
    aoi = AreaOfInterest(
        west_lon_degree=float(lon.min()),
        south_lat_degree=float(lat.min()),
        east_lon_degree=float(lon.max()),
        north_lat_degree=float(lat.max()),
    )
    candidates = query_utm_crs_info(datum_name=datum_name, area_of_interest=aoi)
    if not candidates:
        raise CRSError(
            f"No {datum_name} UTM zone covers lon [{lon.min()}, {lon.max()}], "
            f"lat [{lat.min()}, {lat.max()}]"
        )
    return CRS.from_authority(candidates[0].auth_name, candidates[0].code)


def _require_source(obj: Any) -> Any:
    if obj.crs is None:
        raise CRSError(
            f"{type(obj).__name__} has no CRS; cannot reproject",
            suggestion="Create the object with crs=... first",
        )
    return obj.crs


def reproject_points(points: "PointSet", target_crs: Any) -> "PointSet":
    """Return a copy of a PointSet in another CRS."""
    from tracksmith.objects.pointset import PointSet

    source = _require_source(points)
    coords = transform_coordinates(points.coordinates, source, target_crs)
    return PointSet(coords, attributes=points.attributes, crs=crs_label(target_crs))


def reproject_lines(lines: "LineSet", target_crs: Any) -> "LineSet":
    """Return a copy of a LineSet in another CRS."""
    from tracksmith.objects.lineset import LineSet

    source = _require_source(lines)
    if len(lines) == 0:
        return LineSet([], attributes=lines.attributes, crs=crs_label(target_crs))

    stacked = np.vstack(lines.vertices)
    transformed = transform_coordinates(stacked, source, target_crs)
    splits = np.cumsum([len(v) for v in lines.vertices])[:-1]
    vertices = np.split(transformed, splits)
    logger.debug(f"Reprojected {len(lines)} lines to {crs_label(target_crs)}")
    return LineSet(vertices, attributes=lines.attributes, crs=crs_label(target_crs))
