"""Tests for building networks from lines and querying them."""

import networkx as nx
import numpy as np
import pandas as pd
import pytest

from tracksmith.objects import LineSet
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
from tracksmith.utils.errors import (
    DataValidationError,
    NetworkError,
    NoPathError,
    ParameterError,
)


@pytest.fixture
def lines_with_extras(simple_lines):
    """simple_lines plus a longer parallel edge, a loop and a detached line."""
    extra = [
        [[0.0, 0.0], [0.5, -1.0], [1.0, 0.0]],
        [[2.0, 0.0], [3.0, 0.0], [2.0, 0.0]],
        [[10.0, 10.0], [11.0, 10.0]],
    ]
    attributes = pd.concat(
        [simple_lines.attributes, pd.DataFrame({"road": ["e", "loop", "far"]})],
        ignore_index=True,
    )
    return LineSet(simple_lines.vertices + extra, attributes=attributes)


class TestLinesToNetwork:
    """Tests for lines_to_network."""

    def test_nodes_by_first_appearance(self, simple_lines):
        """Test endpoint deduplication and node numbering."""
        network = lines_to_network(simple_lines)
        assert network.n_nodes == 4
        assert network.nodes[["x", "y"]].values.tolist() == [
            [0.0, 0.0],
            [1.0, 0.0],
            [2.0, 0.0],
            [1.0, 1.0],
        ]
        assert network.edges["from"].tolist() == [0, 1, 0, 3]
        assert network.edges["to"].tolist() == [1, 2, 3, 2]

    def test_edge_attributes_and_length(self, simple_lines):
        network = lines_to_network(simple_lines)
        assert list(network.edges.columns) == ["from", "to", "road", "length"]
        np.testing.assert_allclose(
            network.edges["length"], [1.0, 1.0, 2.0, np.sqrt(2.0)]
        )

    def test_geometry_endpoints_match_nodes(self, simple_lines):
        """Test that edge geometry starts at 'from' and ends at 'to'."""
        network = lines_to_network(simple_lines)
        xy = network.node_coordinates
        for eid, geom in enumerate(network.geometry):
            np.testing.assert_array_equal(geom[0], xy[network.edges["from"][eid]])
            np.testing.assert_array_equal(geom[-1], xy[network.edges["to"][eid]])

    def test_precision_merges_close_endpoints(self):
        """Test that rounding joins endpoints that differ by noise."""
        lines = LineSet([[[0, 0], [1, 1e-7]], [[1, 0], [2, 0]]])
        assert lines_to_network(lines).n_nodes == 4
        snapped = lines_to_network(lines, precision=3)
        assert snapped.n_nodes == 3
        assert snapped.edges["to"][0] == snapped.edges["from"][1]
        assert snapped.tolerance == pytest.approx(1e-3)

    def test_geographic_lengths(self):
        lines = LineSet([[[0.0, 0.0], [1.0, 0.0]]], crs="EPSG:4326")
        network = lines_to_network(lines)
        assert network.crs == "EPSG:4326"
        assert network.edges["length"][0] == pytest.approx(111319.49, rel=1e-5)

    def test_empty_lines(self):
        with pytest.raises(DataValidationError, match="empty LineSet"):
            lines_to_network(LineSet([]))

    def test_to_networkx(self, simple_lines):
        graph = to_networkx(lines_to_network(simple_lines, directed=False))
        assert isinstance(graph, nx.MultiGraph)
        assert graph.number_of_nodes() == 4
        assert graph.number_of_edges() == 4
        assert graph.edges[0, 3, 2]["road"] == "c"
        assert graph.edges[0, 3, 2]["weight"] == pytest.approx(2.0)


class TestShortestPath:
    """Tests for shortest path queries."""

    def test_directed_path(self, simple_lines):
        network = lines_to_network(simple_lines)
        path = shortest_path(network, 0, 2)
        assert path.nodes == [0, 1, 2]
        assert path.edges == [0, 1]
        assert path.length == pytest.approx(2.0)

    def test_directed_no_path(self, simple_lines):
        """Test that edges cannot be traversed backwards when directed."""
        network = lines_to_network(simple_lines)
        with pytest.raises(NoPathError, match="No path"):
            shortest_path(network, 2, 0)

    def test_undirected_reverse_path(self, simple_lines):
        network = lines_to_network(simple_lines, directed=False)
        path = shortest_path(network, 2, 0)
        assert path.nodes == [2, 1, 0]
        assert path.edges == [1, 0]
        np.testing.assert_array_equal(
            path_geometry(network, path), [[2, 0], [1, 0], [0, 0]]
        )

    def test_unweighted_counts_edges(self, simple_lines):
        network = lines_to_network(simple_lines, directed=False)
        path = shortest_path(network, 3, 1, weight=None)
        assert path.length == 2.0

    def test_same_node(self, simple_lines):
        network = lines_to_network(simple_lines)
        path = shortest_path(network, 1, 1)
        assert path.nodes == [1]
        assert path.edges == []
        assert path.length == 0.0

    def test_unknown_node(self, simple_lines):
        network = lines_to_network(simple_lines)
        with pytest.raises(NetworkError, match="not in the network"):
            shortest_path(network, 0, 99)

    def test_parallel_edges_use_cheapest(self, lines_with_extras):
        network = lines_to_network(lines_with_extras)
        path = shortest_path(network, 0, 1)
        assert path.edges == [0]
        assert path.length == pytest.approx(1.0)

    def test_unknown_weight(self, simple_lines):
        network = lines_to_network(simple_lines)
        with pytest.raises(ParameterError, match="weight column"):
            shortest_path(network, 0, 2, weight="travel_time")

    def test_path_lengths(self, simple_lines):
        network = lines_to_network(simple_lines)
        lengths = shortest_path_lengths(network, 0)
        assert lengths.index.tolist() == [0, 1, 2, 3]
        np.testing.assert_allclose(lengths.to_numpy(), [0.0, 1.0, 2.0, 2.0])

    def test_path_to_lineset(self, simple_lines):
        network = lines_to_network(simple_lines)
        path = shortest_path(network, 0, 2)
        lines = path_to_lineset(network, path)
        assert len(lines) == 2
        assert lines.attributes["edge_id"].tolist() == [0, 1]
        assert lines.attributes["road"].tolist() == ["a", "b"]

    def test_path_result_repr(self):
        assert "length=1.500" in repr(PathResult([0, 1], [0], 1.5))


class TestSimplifyAndComponents:
    """Tests for simplification and connectivity."""

    def test_simplify_drops_loops_and_parallels(self, lines_with_extras):
        network = lines_to_network(lines_with_extras)
        assert network.n_edges == 7
        simple = simplify_network(network)
        assert simple.n_edges == 5
        assert simple.n_nodes == network.n_nodes
        assert "loop" not in simple.edges["road"].tolist()
        assert "e" not in simple.edges["road"].tolist()

    def test_simplify_directed_keeps_opposite_edges(self):
        lines = LineSet([[[0, 0], [1, 0]], [[1, 0], [0, 0]]])
        assert simplify_network(lines_to_network(lines, directed=True)).n_edges == 2
        assert simplify_network(lines_to_network(lines, directed=False)).n_edges == 1

    def test_components(self, lines_with_extras):
        network = lines_to_network(lines_with_extras)
        labels = connected_components(network)
        assert labels.tolist() == [0, 0, 0, 0, 1, 1]

    def test_largest_component(self, lines_with_extras):
        network = lines_to_network(lines_with_extras)
        main = largest_component(network)
        assert main.n_nodes == 4
        assert main.n_edges == 6
        assert "far" not in main.edges["road"].tolist()

    def test_subnetwork_renumbers(self, simple_lines):
        network = lines_to_network(simple_lines)
        sub = subnetwork(network, [1, 2])
        assert sub.n_nodes == 2
        assert sub.edges[["from", "to"]].values.tolist() == [[0, 1]]

    def test_nearest_node(self, simple_lines):
        network = lines_to_network(simple_lines)
        assert nearest_node(network, (0.9, 0.1)) == 1
        assert nearest_node(network, (1.2, 1.4)) == 3


class TestCentrality:
    """Tests for centrality measures."""

    @pytest.fixture
    def chain(self):
        lines = LineSet([[[0, 0], [1, 0]], [[1, 0], [2, 0]]])
        return lines_to_network(lines, directed=False)

    def test_node_centrality(self, chain):
        centrality = node_centrality(chain)
        assert list(centrality.columns) == ["degree", "betweenness", "closeness"]
        assert centrality["degree"].tolist() == [1, 2, 1]
        np.testing.assert_allclose(centrality["betweenness"], [0.0, 1.0, 0.0])
        np.testing.assert_allclose(centrality["closeness"], [2 / 3, 1.0, 2 / 3])

    def test_edge_betweenness(self, chain):
        scores = edge_betweenness(chain)
        assert len(scores) == 2
        assert scores[0] == pytest.approx(scores[1])
        assert scores[0] > 0

    def test_edge_betweenness_ignores_loops_and_parallels(self, lines_with_extras):
        network = lines_to_network(lines_with_extras, directed=False)
        scores = edge_betweenness(network)
        assert scores[4] == 0.0
        assert scores[5] == 0.0
        assert scores[0] > 0.0
