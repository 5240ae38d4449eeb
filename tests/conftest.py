"""Shared fixtures for TrackSmith tests."""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pandas as pd
import pytest

from tracksmith.config import set_config
from tracksmith.objects.lineset import LineSet


@pytest.fixture(autouse=True)
def _reset_global_config():
    """Keep tests independent of each other's config changes."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def simple_lines():
    """Four lines forming two routes from (0, 0) to (2, 0).

    Node ids by first appearance: (0,0)=0, (1,0)=1, (2,0)=2, (1,1)=3.
    Edges: 0: 0->1 (1.0), 1: 1->2 (1.0), 2: 0->3 (2.0), 3: 3->2 (sqrt 2).
    """
    vertices = [
        [[0.0, 0.0], [1.0, 0.0]],
        [[1.0, 0.0], [2.0, 0.0]],
        [[0.0, 0.0], [0.0, 1.0], [1.0, 1.0]],
        [[1.0, 1.0], [2.0, 0.0]],
    ]
    attributes = pd.DataFrame({"road": ["a", "b", "c", "d"]})
    return LineSet(vertices, attributes=attributes)


@pytest.fixture
def storm_observations():
    """Best-track style table: two storms named A, one single-point storm B."""
    return pd.DataFrame(
        {
            "name": ["A", "A", "A", "B", "A", "A"],
            "year": [2020, 2020, 2020, 2020, 2021, 2021],
            "month": [8, 8, 8, 9, 7, 7],
            "day": [1, 1, 1, 3, 10, 10],
            "hour": [0, 6, 12, 0, 6, 0],
            "lat": [25.0, 26.0, 27.0, 15.0, 31.0, 30.0],
            "long": [-80.0, -81.0, -82.0, -50.0, -70.0, -70.0],
            "status": ["tropical depression", "hurricane", "hurricane",
                       "tropical storm", "tropical storm", "tropical depression"],
            "wind": [30, 70, 100, 40, 45, 25],
            "pressure": [1005, 990, 960, 1000, 995, 1008],
        }
    )
