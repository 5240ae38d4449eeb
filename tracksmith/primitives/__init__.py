"""Layer 2: Primitives - Pure operations.

This layer can import numpy, pandas, pyproj and networkx. No file I/O or
plotting.
"""

from tracksmith.primitives.crs import (
    CRSDescription,
    SpatialReference,
    crs_equal,
    crs_label,
    describe_crs,
    detect_crs_format,
    estimate_utm_crs,
    parse_crs,
    proj4_is_lossy,
    reproject_lines,
    reproject_points,
    to_proj4,
    to_wkt,
    transform_coordinates,
)
from tracksmith.primitives.geometry import (
    line_endpoints,
    line_length,
    points_to_line,
    round_coordinates,
    segment_lengths,
    split_into_segments,
)
from tracksmith.primitives.network import (
    PathResult,
    connected_components,
    edge_betweenness,
    largest_component,
    lines_to_network,
    nearest_node,
    node_centrality,
    path_geometry,
    path_to_lineset,
    shortest_path,
    shortest_path_lengths,
    simplify_network,
    subnetwork,
    to_networkx,
)
from tracksmith.primitives.tracks import (
    CATEGORY_LABELS,
    build_track_segments,
    build_tracks,
    observation_times,
    saffir_simpson_category,
    track_summary,
)

__all__ = [
    # CRS
    "CRSDescription",
    "SpatialReference",
    "crs_equal",
    "crs_label",
    "describe_crs",
    "detect_crs_format",
    "estimate_utm_crs",
    "parse_crs",
    "proj4_is_lossy",
    "reproject_lines",
    "reproject_points",
    "to_proj4",
    "to_wkt",
    "transform_coordinates",
    # Geometry
    "line_endpoints",
    "line_length",
    "points_to_line",
    "round_coordinates",
    "segment_lengths",
    "split_into_segments",
    # Network
    "PathResult",
    "connected_components",
    "edge_betweenness",
    "largest_component",
    "lines_to_network",
    "nearest_node",
    "node_centrality",
    "path_geometry",
    "path_to_lineset",
    "shortest_path",
    "shortest_path_lengths",
    "simplify_network",
    "subnetwork",
    "to_networkx",
    # Tracks
    "CATEGORY_LABELS",
    "build_track_segments",
    "build_tracks",
    "observation_times",
    "saffir_simpson_category",
    "track_summary",
]
