"""Storm track construction task.

Layer 3: Tasks - User intent translation.
"""

import logging
from typing import Optional

import pandas as pd

from tracksmith.config import ConfigManager, resolve_config
from tracksmith.objects.lineset import LineSet
from tracksmith.primitives.crs import reproject_lines
from tracksmith.primitives.tracks import (
    build_track_segments,
    build_tracks,
    track_summary,
)

logger = logging.getLogger(__name__)


class TrackTask:
    """Turn a table of storm observations into tracks and track segments.

    Column names, key and CRS default to the ``tracks`` section of the
    configuration.
    """

    def __init__(self, config: Optional[ConfigManager] = None, **overrides):
        cfg = resolve_config(config)
        settings = cfg.section("tracks")
        unknown = set(overrides) - set(settings)
        if unknown:
            raise TypeError(f"Unknown TrackTask settings: {sorted(unknown)}")
        settings.update(overrides)
        self.key = settings["key"]
        self.time_col = settings["time_col"]
        self.x = settings["x"]
        self.y = settings["y"]
        self.crs = settings["crs"]
        self.min_points = settings["min_points"]

    def _columns(self) -> dict:
        return {
            "key": self.key,
            "time_col": self.time_col,
            "x": self.x,
            "y": self.y,
            "crs": self.crs,
        }

    def tracks(self, observations: pd.DataFrame) -> LineSet:
        return build_tracks(observations, min_points=self.min_points, **self._columns())

    def segments(self, observations: pd.DataFrame) -> LineSet:
        return build_track_segments(observations, **self._columns())

    def run(
        self, observations: pd.DataFrame, target_crs: Optional[str] = None
    ) -> tuple[LineSet, LineSet]:
        """Build tracks and segments, optionally reprojected.

        Lengths and speeds are computed in the observation CRS before any
        reprojection.

        Returns:
            Tuple of (tracks, segments).
        """
        tracks = self.tracks(observations)
        segments = self.segments(observations)
        if target_crs is not None:
            tracks = reproject_lines(tracks, target_crs)
            segments = reproject_lines(segments, target_crs)
        logger.info(f"TrackTask produced {len(tracks)} tracks, {len(segments)} segments")
        return tracks, segments

    def summary(self, observations: pd.DataFrame) -> pd.DataFrame:
        return track_summary(self.tracks(observations))
