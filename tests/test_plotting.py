"""Tests for network and track plotting."""

import pytest

pytest.importorskip("matplotlib")
import matplotlib.pyplot as plt

from tracksmith.primitives.network import lines_to_network, node_centrality, shortest_path
from tracksmith.primitives.tracks import build_track_segments, build_tracks
from tracksmith.workflows.plotting import plot_network, plot_tracks


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


def test_plot_network_with_path(simple_lines):
    network = lines_to_network(simple_lines)
    path = shortest_path(network, 0, 2)
    ax = plot_network(network, path=path)
    assert len(ax.collections) == 2
    assert len(ax.lines) == 1


def test_plot_network_node_values(simple_lines):
    network = lines_to_network(simple_lines, directed=False)
    values = node_centrality(network)["betweenness"]
    ax = plot_network(network, node_values=values)
    assert len(ax.figure.axes) == 2


def test_plot_tracks_by_category(storm_observations):
    tracks = build_tracks(storm_observations)
    ax = plot_tracks(tracks)
    assert ax.get_legend() is not None


def test_plot_segments_by_wind(storm_observations):
    """Test colouring segments by a numeric column."""
    segments = build_track_segments(storm_observations)
    _, ax = plt.subplots()
    result = plot_tracks(segments, color_by="wind", ax=ax)
    assert result is ax
    assert len(ax.figure.axes) == 2


def test_plot_tracks_missing_column(storm_observations):
    ax = plot_tracks(build_tracks(storm_observations), color_by="not_there")
    assert ax.get_legend() is None
