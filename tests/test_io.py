"""Tests for vector and CSV I/O."""

import io

import numpy as np
import pandas as pd
import pytest

gpd = pytest.importorskip("geopandas")
from shapely.geometry import LineString, MultiLineString, Point

from tracksmith.objects import LineSet, PointSet
from tracksmith.primitives.network import lines_to_network
from tracksmith.utils.errors import DataValidationError
from tracksmith.workflows.io import (
    geodataframe_to_lineset,
    lines_to_geodataframe,
    load_csv_from_string,
    network_to_geodataframes,
    read_lines,
    read_points,
    read_storm_observations,
    write_vector,
)


class TestVectorIO:
    """Tests for reading and writing vector layers."""

    def test_lines_round_trip(self, simple_lines, tmp_path):
        """Test writing a LineSet to GeoPackage and reading it back."""
        lines = LineSet(
            simple_lines.vertices, attributes=simple_lines.attributes, crs="EPSG:4326"
        )
        path = write_vector(lines, tmp_path / "out" / "roads.gpkg")
        assert path.exists()
        back = read_lines(path)
        assert len(back) == 4
        assert back.crs == "EPSG:4326"
        assert back.attributes["road"].tolist() == ["a", "b", "c", "d"]
        np.testing.assert_allclose(back.vertices[2], simple_lines.vertices[2])

    def test_points_round_trip(self, tmp_path):
        points = PointSet(
            [[1.0, 2.0], [3.0, 4.0]],
            attributes=pd.DataFrame({"pid": [1, 2]}),
            crs="EPSG:3857",
        )
        path = write_vector(points, tmp_path / "points.geojson")
        back = read_points(path)
        np.testing.assert_allclose(back.coordinates, points.coordinates)
        assert back.attributes["pid"].tolist() == [1, 2]

    def test_multilinestring_is_exploded(self):
        """Test that each part of a MultiLineString becomes its own line."""
        gdf = gpd.GeoDataFrame(
            {"name": ["m", "s"]},
            geometry=[
                MultiLineString([[(0, 0), (1, 0)], [(1, 0), (1, 1)]]),
                LineString([(5, 5), (6, 6)]),
            ],
        )
        lines = geodataframe_to_lineset(gdf)
        assert len(lines) == 3
        assert lines.attributes["name"].tolist() == ["m", "m", "s"]
        assert lines.crs is None

    def test_custom_crs_kept_as_wkt(self):
        """Test that a CRS without an exact EPSG match is stored as WKT."""
        custom = (
            "+proj=tmerc +lat_0=10 +lon_0=7.3 +k=0.9 +x_0=1234 +y_0=0 "
            "+ellps=GRS80 +units=m +no_defs"
        )
        gdf = gpd.GeoDataFrame(geometry=[LineString([(0, 0), (1, 1)])], crs=custom)
        lines = geodataframe_to_lineset(gdf)
        assert lines.crs.startswith("PROJCRS")

    def test_non_line_geometry(self):
        gdf = gpd.GeoDataFrame(geometry=[Point(0, 0)])
        with pytest.raises(DataValidationError, match="only line geometries"):
            geodataframe_to_lineset(gdf)

    def test_unsupported_suffix(self, simple_lines, tmp_path):
        with pytest.raises(ValueError, match="Unsupported vector format"):
            write_vector(simple_lines, tmp_path / "roads.csv")

    def test_lines_to_geodataframe_without_attributes(self):
        gdf = lines_to_geodataframe(LineSet([[[0, 0], [1, 1]]]))
        assert len(gdf) == 1
        assert gdf.crs is None
        assert gdf.geometry.iloc[0].equals(LineString([(0, 0), (1, 1)]))

    def test_network_to_geodataframes(self, simple_lines):
        network = lines_to_network(simple_lines)
        nodes, edges = network_to_geodataframes(network)
        assert nodes["node_id"].tolist() == [0, 1, 2, 3]
        assert nodes.geometry.iloc[3].equals(Point(1, 1))
        assert len(edges) == 4
        assert edges.geometry.iloc[2].length == pytest.approx(2.0)


class TestStormObservations:
    """Tests for reading storm observation tables."""

    CSV = (
        "name,year,month,day,hour,lat,long,wind\n"
        "A,2020,8,1,0,25.0,-80.0,30\n"
        "A,2020,8,1,6,26.0,-81.0,70\n"
    )

    def test_time_from_parts(self):
        df = read_storm_observations(io.StringIO(self.CSV))
        assert df["time"].tolist() == [
            pd.Timestamp("2020-08-01 00:00"),
            pd.Timestamp("2020-08-01 06:00"),
        ]

    def test_existing_time_column(self):
        text = "name,time,lat,long\nA,2020-08-01 06:00,1,2\n"
        df = read_storm_observations(io.StringIO(text))
        assert df["time"][0] == pd.Timestamp("2020-08-01 06:00")

    def test_load_csv_from_string(self):
        df = load_csv_from_string(self.CSV)
        assert len(df) == 2
        assert "time" not in df.columns
