"""Tests for storm-track construction."""

import logging

import numpy as np
import pandas as pd
import pytest

from tracksmith.primitives.tracks import (
    build_track_segments,
    build_tracks,
    observation_times,
    saffir_simpson_category,
    track_summary,
)
from tracksmith.utils.errors import DataValidationError, ParameterError


class TestSaffirSimpson:
    """Tests for wind speed classification."""

    def test_boundaries(self):
        winds = [33, 34, 63, 64, 82, 83, 95, 96, 112, 113, 136, 137, 160]
        expected = [-1, 0, 0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5]
        assert saffir_simpson_category(winds).tolist() == expected

    def test_missing_wind_stays_missing(self):
        result = saffir_simpson_category([50, np.nan])
        assert result[0] == 0
        assert pd.isna(result[1])

    def test_negative_wind(self):
        with pytest.raises(ParameterError, match="non-negative"):
            saffir_simpson_category([-5])


class TestObservationTimes:
    """Tests for observation_times."""

    def test_with_hour(self, storm_observations):
        times = observation_times(storm_observations)
        assert times[1] == pd.Timestamp("2020-08-01 06:00")
        assert times.name == "time"

    def test_without_hour(self, storm_observations):
        times = observation_times(storm_observations, ("year", "month", "day"))
        assert times[1] == pd.Timestamp("2020-08-01")

    def test_missing_columns(self, storm_observations):
        with pytest.raises(DataValidationError, match="observation times"):
            observation_times(storm_observations.drop(columns="day"))


class TestBuildTracks:
    """Tests for build_tracks."""

    def test_one_line_per_storm(self, storm_observations, caplog):
        """Test grouping, ordering and dropping of single-point storms."""
        with caplog.at_level(logging.WARNING, logger="tracksmith.primitives.tracks"):
            tracks = build_tracks(storm_observations)
        assert len(tracks) == 2
        assert "Dropped 1 tracks" in caplog.text
        assert tracks.attributes[["name", "year"]].values.tolist() == [
            ["A", 2020],
            ["A", 2021],
        ]
        assert tracks.crs == "EPSG:4326"

    def test_vertices_sorted_by_time(self, storm_observations):
        tracks = build_tracks(storm_observations)
        np.testing.assert_array_equal(
            tracks.vertices[0], [[-80, 25], [-81, 26], [-82, 27]]
        )
        # Rows for 2021 are given in reverse time order
        np.testing.assert_array_equal(tracks.vertices[1], [[-70, 30], [-70, 31]])

    def test_summary_attributes(self, storm_observations):
        attrs = build_tracks(storm_observations).attributes
        first = attrs.iloc[0]
        assert first["n_points"] == 3
        assert first["max_wind"] == 100
        assert first["min_pressure"] == 960
        assert first["max_category"] == 3
        assert first["start_time"] == pd.Timestamp("2020-08-01 00:00")
        assert first["end_time"] == pd.Timestamp("2020-08-01 12:00")
        # One degree of latitude is about 111 km
        assert attrs.iloc[1]["length"] == pytest.approx(110_900, rel=0.01)

    def test_single_key_column(self, storm_observations):
        tracks = build_tracks(storm_observations, key="name", min_points=2)
        assert tracks.attributes["name"].tolist() == ["A"]
        assert tracks.attributes["n_points"].tolist() == [5]

    def test_existing_time_column(self, storm_observations):
        df = storm_observations.assign(
            time=observation_times(storm_observations).astype(str)
        ).drop(columns=["year", "month", "day", "hour"])
        tracks = build_tracks(df, key="name")
        assert len(tracks) == 1

    def test_missing_columns(self, storm_observations):
        with pytest.raises(DataValidationError, match="missing required columns"):
            build_tracks(storm_observations.drop(columns="lat"))

    def test_min_points_validation(self, storm_observations):
        with pytest.raises(ParameterError, match="min_points"):
            build_tracks(storm_observations, min_points=1)

    def test_drops_observations_without_position(self, storm_observations):
        df = storm_observations.copy()
        df.loc[1, "lat"] = np.nan
        tracks = build_tracks(df)
        assert tracks.attributes["n_points"].tolist() == [2, 2]


class TestTrackSegments:
    """Tests for build_track_segments and track_summary."""

    def test_segments(self, storm_observations):
        segments = build_track_segments(storm_observations)
        assert len(segments) == 3
        attrs = segments.attributes
        assert attrs["track_index"].tolist() == [0, 0, 1]
        assert attrs["segment_index"].tolist() == [0, 1, 0]
        assert attrs["wind"].tolist() == [30, 70, 25]
        np.testing.assert_allclose(attrs["duration_h"], [6.0, 6.0, 6.0])
        np.testing.assert_allclose(
            attrs["speed_kmh"], attrs["length"] / 1000.0 / 6.0
        )
        assert all(len(v) == 2 for v in segments.vertices)

    def test_existing_index_columns_replaced(self, storm_observations, caplog):
        """Test that stale numbering columns give way to fresh ones."""
        with caplog.at_level(logging.WARNING):
            segments = build_track_segments(storm_observations.assign(track_index=7))
        assert segments.attributes["track_index"].tolist() == [0, 0, 1]
        assert "replaced by segment numbering" in caplog.text

    def test_zero_duration_speed_is_missing(self):
        df = pd.DataFrame(
            {
                "name": ["X", "X"],
                "time": ["2020-01-01", "2020-01-01"],
                "long": [0.0, 1.0],
                "lat": [0.0, 0.0],
            }
        )
        segments = build_track_segments(df, key="name")
        assert np.isnan(segments.attributes["speed_kmh"][0])

    def test_track_summary(self, storm_observations):
        summary = track_summary(build_tracks(storm_observations))
        assert summary["duration_h"].tolist() == [12.0, 6.0]
        assert (summary["mean_speed_kmh"] > 0).all()
        assert summary["max_category_label"].tolist() == [
            "hurricane (3)",
            "tropical storm",
        ]
