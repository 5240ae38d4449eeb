"""TrackSmith: coordinate reference systems, spatial networks and storm tracks.

The package is organized in layers:

- objects: immutable data (PointSet, LineSet, SpatialNetwork)
- primitives: pure operations (CRS handling, line-to-network conversion,
  routing and centrality, storm-track construction)
- tasks: config-driven entry points (RouteTask, TrackTask)
- workflows: file I/O, plotting and YAML/JSON workflow orchestration
"""

from tracksmith.config import ConfigManager, get_config, load_config
from tracksmith.objects import LineSet, PointSet, SpatialNetwork
from tracksmith.primitives import (
    PathResult,
    SpatialReference,
    build_track_segments,
    build_tracks,
    describe_crs,
    lines_to_network,
    node_centrality,
    parse_crs,
    shortest_path,
    to_proj4,
    to_wkt,
    transform_coordinates,
)
from tracksmith.tasks import RouteTask, TrackTask
from tracksmith.utils.errors import TrackSmithError

__version__ = "0.1.0"

__all__ = [
    "ConfigManager",
    "LineSet",
    "PathResult",
    "PointSet",
    "RouteTask",
    "SpatialNetwork",
    "SpatialReference",
    "TrackSmithError",
    "TrackTask",
    "build_track_segments",
    "build_tracks",
    "describe_crs",
    "get_config",
    "lines_to_network",
    "load_config",
    "node_centrality",
    "parse_crs",
    "shortest_path",
    "to_proj4",
    "to_wkt",
    "transform_coordinates",
]
