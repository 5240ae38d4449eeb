"""Storm tracks from point observations.

A track is built by grouping observations on a key (for hurricane best-track
tables, storm name and year), ordering each group by time and joining the
positions into a line. Tracks can also be cut into per-observation segments
so that attributes that change along the track (wind speed, category) can
be attached to the piece of line they describe.
"""

import logging
from typing import Any, Optional, Sequence, Union

import numpy as np
import pandas as pd

from tracksmith.objects.lineset import LineSet
from tracksmith.primitives.geometry import line_length, segment_lengths
from tracksmith.utils.errors import ParameterError, raise_validation_error

logger = logging.getLogger(__name__)

# Saffir-Simpson lower bounds in knots; -1 marks a tropical depression and
# 0 a tropical storm
CATEGORY_BOUNDS_KT = (34.0, 64.0, 83.0, 96.0, 113.0, 137.0)
CATEGORY_LABELS = {
    -1: "tropical depression",
    0: "tropical storm",
    1: "hurricane (1)",
    2: "hurricane (2)",
    3: "hurricane (3)",
    4: "hurricane (4)",
    5: "hurricane (5)",
}

KeyLike = Union[str, Sequence[str]]


def saffir_simpson_category(wind_knots: Any) -> pd.Series:
    """Classify sustained wind speeds on the Saffir-Simpson scale.

    Args:
        wind_knots: Scalar or array of maximum sustained winds in knots.

    Returns:
        Nullable integer Series: -1 tropical depression (< 34 kt),
        0 tropical storm (34-63 kt), 1 to 5 hurricane categories.
        Missing winds stay missing.

    Example:
        >>> saffir_simpson_category([30, 50, 120]).tolist()
        [-1, 0, 4]
    """
    wind = np.atleast_1d(np.asarray(wind_knots, dtype=np.float64))
    if np.any(wind[~np.isnan(wind)] < 0):
        raise ParameterError("Wind speeds must be non-negative")
    codes = np.searchsorted(CATEGORY_BOUNDS_KT, wind, side="right") - 1
    result = pd.Series(codes, dtype="Int64", name="category")
    result[np.isnan(wind)] = pd.NA
    return result


def observation_times(
    observations: pd.DataFrame,
    columns: Sequence[str] = ("year", "month", "day", "hour"),
) -> pd.Series:
    """Assemble timestamps from separate date-part columns.

    Args:
        observations: Table holding the date parts.
        columns: Column names for year, month, day and optionally hour.

    Returns:
        Datetime Series aligned with ``observations``.
    """
    if not 3 <= len(columns) <= 4:
        raise ParameterError(
            "columns must name year, month, day and optionally hour",
            details={"columns": list(columns)},
        )
    missing = [c for c in columns if c not in observations.columns]
    if missing:
        raise_validation_error(
            "Cannot build observation times",
            expected=f"columns {list(columns)}",
            received=f"missing {missing}",
        )
    parts = {
        part: observations[col]
        for part, col in zip(("year", "month", "day", "hour"), columns)
    }
    return pd.to_datetime(pd.DataFrame(parts)).rename("time")


def _key_columns(key: KeyLike) -> list[str]:
    return [key] if isinstance(key, str) else list(key)


def _prepare(
    observations: pd.DataFrame,
    key: KeyLike,
    time_col: str,
    x: str,
    y: str,
) -> tuple[pd.DataFrame, list[str]]:
    if not isinstance(observations, pd.DataFrame):
        raise_validation_error(
            "Observations must be a pandas DataFrame",
            received=type(observations).__name__,
        )
    key_cols = _key_columns(key)
    missing = [c for c in key_cols + [x, y] if c not in observations.columns]
    if missing:
        raise_validation_error(
            "Observation table is missing required columns",
            expected=str(key_cols + [x, y]),
            received=f"missing {missing}",
            suggestion=f"Available columns: {list(observations.columns)}",
        )

    df = observations.copy()
    if time_col not in df.columns:
        df[time_col] = observation_times(df)
    else:
        df[time_col] = pd.to_datetime(df[time_col])

    bad = df[[x, y]].isna().any(axis=1)
    if bad.any():
        logger.warning(f"Dropping {int(bad.sum())} observations without a position")
        df = df.loc[~bad]

    df = df.sort_values(key_cols + [time_col], kind="stable").reset_index(drop=True)
    return df, key_cols


def _key_values(key_cols: list[str], values: Any) -> dict[str, Any]:
    if not isinstance(values, tuple):
        values = (values,)
    return dict(zip(key_cols, values))


def build_tracks(
    observations: pd.DataFrame,
    key: KeyLike = ("name", "year"),
    time_col: str = "time",
    x: str = "long",
    y: str = "lat",
    crs: Optional[str] = "EPSG:4326",
    min_points: int = 2,
    wind_col: str = "wind",
    pressure_col: str = "pressure",
    category_col: str = "category",
) -> LineSet:
    """Join time-ordered observations into one line per track.

    Args:
        observations: One row per observation.
        key: Column(s) identifying a track.
        time_col: Timestamp column. Built from year/month/day/hour columns
            when absent.
        x: Longitude (or easting) column.
        y: Latitude (or northing) column.
        crs: CRS of x/y.
        min_points: Groups with fewer observations are dropped.
        wind_col: Optional wind column summarized as ``max_wind``.
        pressure_col: Optional pressure column summarized as ``min_pressure``.
        category_col: Optional category column summarized as
            ``max_category``. Derived from wind when absent.

    Returns:
        LineSet with one line per track, ordered by key.
    """
    if min_points < 2:
        raise ParameterError(
            f"min_points must be at least 2, got {min_points}",
            suggestion="A line needs two positions",
        )
    df, key_cols = _prepare(observations, key, time_col, x, y)

    vertices = []
    rows = []
    dropped = []
    for group_key, group in df.groupby(key_cols, sort=True, dropna=False):
        if len(group) < min_points:
            dropped.append(group_key)
            continue
        coords = group[[x, y]].to_numpy(dtype=np.float64)
        row = _key_values(key_cols, group_key)
        row["start_time"] = group[time_col].iloc[0]
        row["end_time"] = group[time_col].iloc[-1]
        row["n_points"] = len(group)
        if wind_col in group.columns:
            row["max_wind"] = group[wind_col].max()
        if pressure_col in group.columns:
            row["min_pressure"] = group[pressure_col].min()
        if category_col in group.columns:
            row["max_category"] = group[category_col].max()
        elif wind_col in group.columns:
            row["max_category"] = saffir_simpson_category(group[wind_col]).max()
        row["length"] = line_length(coords, crs)
        vertices.append(coords)
        rows.append(row)

    if dropped:
        logger.warning(
            f"Dropped {len(dropped)} tracks with fewer than {min_points} "
            f"observations: {dropped[:5]}{'...' if len(dropped) > 5 else ''}"
        )
    attributes = pd.DataFrame(rows, columns=None if rows else key_cols)
    logger.info(f"Built {len(vertices)} tracks from {len(df)} observations")
    return LineSet(vertices, attributes=attributes, crs=crs)


def build_track_segments(
    observations: pd.DataFrame,
    key: KeyLike = ("name", "year"),
    time_col: str = "time",
    x: str = "long",
    y: str = "lat",
    crs: Optional[str] = "EPSG:4326",
) -> LineSet:
    """Cut every track into segments between consecutive observations.

    Each segment carries the attributes of the observation it starts at,
    plus ``end_time``, ``duration_h``, ``length`` (metres for geographic
    CRSs) and ``speed_kmh``. Segments with zero duration have a missing
    speed.

    Returns:
        LineSet with one two-vertex line per segment.
    """
    df, key_cols = _prepare(observations, key, time_col, x, y)
    stale = [c for c in ("track_index", "segment_index") if c in df.columns]
    if stale:
        logger.warning(f"Observation columns {stale} replaced by segment numbering")
        df = df.drop(columns=stale)

    vertices = []
    frames = []
    for track_index, (_, group) in enumerate(
        df.groupby(key_cols, sort=True, dropna=False)
    ):
        if len(group) < 2:
            continue
        coords = group[[x, y]].to_numpy(dtype=np.float64)
        starts = group.iloc[:-1].reset_index(drop=True)
        times = group[time_col].to_numpy()

        duration_h = (times[1:] - times[:-1]) / np.timedelta64(1, "h")
        lengths = segment_lengths(coords, crs)
        with np.errstate(divide="ignore", invalid="ignore"):
            speed = np.where(duration_h > 0, lengths / 1000.0 / duration_h, np.nan)

        starts.insert(0, "track_index", track_index)
        starts.insert(1, "segment_index", np.arange(len(starts)))
        starts["end_time"] = times[1:]
        starts["duration_h"] = duration_h
        starts["length"] = lengths
        starts["speed_kmh"] = speed
        frames.append(starts)
        vertices.extend(coords[i : i + 2] for i in range(len(coords) - 1))

    attributes = (
        pd.concat(frames, ignore_index=True)
        if frames
        else pd.DataFrame(columns=list(df.columns))
    )
    logger.info(f"Built {len(vertices)} track segments")
    return LineSet(vertices, attributes=attributes, crs=crs)


def track_summary(tracks: LineSet) -> pd.DataFrame:
    """Per-track table with duration and mean forward speed added.

    Args:
        tracks: Output of build_tracks.

    Returns:
        DataFrame with the track attributes plus ``duration_h`` and
        ``mean_speed_kmh``.
    """
    if tracks.attributes is None:
        raise_validation_error("Tracks have no attributes to summarize")
    required = {"start_time", "end_time", "length"}
    missing = required - set(tracks.attributes.columns)
    if missing:
        raise_validation_error(
            "Tracks are missing summary columns",
            expected=str(sorted(required)),
            received=f"missing {sorted(missing)}",
            suggestion="Build tracks with build_tracks()",
        )
    summary = tracks.attributes.copy()
    duration = pd.to_datetime(summary["end_time"]) - pd.to_datetime(
        summary["start_time"]
    )
    summary["duration_h"] = duration.dt.total_seconds() / 3600.0
    hours = summary["duration_h"].where(summary["duration_h"] > 0)
    summary["mean_speed_kmh"] = summary["length"] / 1000.0 / hours
    if "max_category" in summary.columns:
        summary["max_category_label"] = summary["max_category"].map(CATEGORY_LABELS)
    return summary
