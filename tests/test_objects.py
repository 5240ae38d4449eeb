"""Tests for PointSet, LineSet and SpatialNetwork."""

import numpy as np
import pandas as pd
import pytest

from tracksmith.objects import LineSet, PointSet, SpatialNetwork


class TestPointSet:
    """Tests for PointSet."""

    def test_valid_points(self):
        """Test creating a PointSet with attributes."""
        points = PointSet(
            coordinates=[[0, 0], [1, 2]],
            attributes=pd.DataFrame({"id": [1, 2]}, index=[10, 11]),
            crs="EPSG:4326",
        )
        assert len(points) == 2
        assert points.ndim == 2
        assert points.coordinates.dtype == np.float64
        assert list(points.attributes.index) == [0, 1]
        assert points.bounds() == (0.0, 0.0, 1.0, 2.0)

    def test_invalid_shape(self):
        """Test that 1D coordinates raise an error."""
        with pytest.raises(ValueError, match="2 or 3 columns"):
            PointSet(coordinates=[1.0, 2.0])

    def test_non_finite(self):
        """Test that NaN coordinates raise an error."""
        with pytest.raises(ValueError, match="NaN or infinite"):
            PointSet(coordinates=[[0.0, np.nan]])

    def test_attribute_length_mismatch(self):
        """Test that attribute rows must match point count."""
        with pytest.raises(ValueError, match="rows"):
            PointSet(coordinates=[[0, 0]], attributes=pd.DataFrame({"a": [1, 2]}))


class TestLineSet:
    """Tests for LineSet."""

    def test_endpoints(self, simple_lines):
        """Test start and end points follow line order."""
        np.testing.assert_array_equal(
            simple_lines.start_points(), [[0, 0], [1, 0], [0, 0], [1, 1]]
        )
        np.testing.assert_array_equal(
            simple_lines.end_points(), [[1, 0], [2, 0], [1, 1], [2, 0]]
        )
        assert simple_lines.n_vertices == 9

    def test_single_vertex_line(self):
        """Test that a line needs two vertices."""
        with pytest.raises(ValueError, match="at least 2"):
            LineSet([[[0.0, 0.0]]])

    def test_mixed_dimensions(self):
        """Test that 2D and 3D lines cannot be mixed."""
        with pytest.raises(ValueError, match="same dimension"):
            LineSet([[[0, 0], [1, 1]], [[0, 0, 0], [1, 1, 1]]])

    def test_empty(self):
        """Test an empty LineSet."""
        lines = LineSet([])
        assert len(lines) == 0
        assert lines.start_points().shape == (0, 2)
        with pytest.raises(ValueError, match="empty"):
            lines.bounds()

    def test_bounds(self, simple_lines):
        assert simple_lines.bounds() == (0.0, 0.0, 2.0, 1.0)


class TestSpatialNetwork:
    """Tests for SpatialNetwork."""

    def _network(self, directed=True):
        nodes = pd.DataFrame({"x": [0.0, 1.0, 2.0], "y": [0.0, 0.0, 0.0]})
        edges = pd.DataFrame({"from": [0, 1, 2], "to": [1, 2, 2]})
        return SpatialNetwork(nodes, edges, directed=directed)

    def test_default_geometry(self):
        """Test straight edge geometry is derived from node coordinates."""
        network = self._network()
        assert network.n_nodes == 3
        assert network.n_edges == 3
        np.testing.assert_array_equal(network.geometry[0], [[0, 0], [1, 0]])

    def test_degree(self):
        """Test degree counts, with a self-loop counting twice."""
        network = self._network()
        assert network.degree().tolist() == [1, 2, 3]
        assert network.degree("in").tolist() == [0, 1, 2]
        assert network.degree("out").tolist() == [1, 1, 1]

    def test_degree_undirected_ignores_mode(self):
        network = self._network(directed=False)
        assert network.degree("in").tolist() == [1, 2, 3]

    def test_invalid_edge_reference(self):
        """Test that edges must reference existing nodes."""
        nodes = pd.DataFrame({"x": [0.0], "y": [0.0]})
        edges = pd.DataFrame({"from": [0], "to": [3]})
        with pytest.raises(ValueError, match="node ids"):
            SpatialNetwork(nodes, edges)

    def test_missing_columns(self):
        nodes = pd.DataFrame({"x": [0.0]})
        edges = pd.DataFrame({"from": [], "to": []})
        with pytest.raises(ValueError, match="missing column 'y'"):
            SpatialNetwork(nodes, edges)

    def test_with_columns(self):
        """Test adding node and edge columns returns new networks."""
        network = self._network()
        annotated = network.with_node_column("score", [1, 2, 3]).with_edge_column(
            "kind", "road"
        )
        assert "score" not in network.nodes.columns
        assert annotated.nodes["score"].tolist() == [1, 2, 3]
        assert (annotated.edges["kind"] == "road").all()

    def test_geometry_must_meet_nodes(self):
        """Test that edge geometry has to start and end at its nodes."""
        nodes = pd.DataFrame({"x": [0.0, 1.0], "y": [0.0, 0.0]})
        edges = pd.DataFrame({"from": [0], "to": [1]})
        with pytest.raises(ValueError, match="must start at its 'from' node"):
            SpatialNetwork(nodes, edges, [np.array([[5.0, 5.0], [9.0, 9.0]])])
        with pytest.raises(ValueError, match="must end at its 'to' node"):
            SpatialNetwork(nodes, edges, [np.array([[0.0, 0.0], [1.0, 0.5]])])

    def test_geometry_within_tolerance(self):
        nodes = pd.DataFrame({"x": [0.0, 1.0], "y": [0.0, 0.0]})
        edges = pd.DataFrame({"from": [0], "to": [1]})
        geometry = [np.array([[0.0, 1e-4], [1.0, 0.0]])]
        network = SpatialNetwork(nodes, edges, geometry, tolerance=1e-3)
        assert network.with_edge_column("kind", "road").tolerance == 1e-3
