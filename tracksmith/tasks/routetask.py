"""Routing task over a network built from line geometries.

Layer 3: Tasks - User intent translation.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd

from tracksmith.config import ConfigManager, resolve_config
from tracksmith.objects.lineset import LineSet
from tracksmith.objects.network import SpatialNetwork
from tracksmith.primitives.network import (
    PathResult,
    edge_betweenness,
    lines_to_network,
    nearest_node,
    node_centrality,
    path_geometry,
    path_to_lineset,
    shortest_path,
    simplify_network,
)
from tracksmith.utils.errors import NetworkError

logger = logging.getLogger(__name__)


@dataclass
class Route:
    """A routed path between two locations.

    Attributes:
        path: Node and edge ids of the path, with its cost.
        edges: The traversed edges as a LineSet.
        geometry: The whole route as a single polyline.
        origin_node: Node the origin was snapped to.
        destination_node: Node the destination was snapped to.
    """

    path: PathResult
    edges: LineSet
    geometry: np.ndarray
    origin_node: int
    destination_node: int

    @property
    def length(self) -> float:
        return self.path.length


class RouteTask:
    """Build a network from lines and answer routing questions on it.

    Settings not passed explicitly are read from the ``network`` section of
    the configuration.

    Example:
        >>> task = RouteTask(directed=False)
        >>> task.build(lines)
        >>> route = task.route((0.0, 0.0), (2.0, 1.0))
        >>> route.length
    """

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        directed: Optional[bool] = None,
        precision: Optional[int] = None,
        simplify: Optional[bool] = None,
        weight: Optional[str] = None,
    ):
        cfg = resolve_config(config)
        self.directed = cfg.get("network.directed", True) if directed is None else directed
        self.precision = cfg.get("network.precision") if precision is None else precision
        self.simplify = cfg.get("network.simplify", False) if simplify is None else simplify
        self.weight = cfg.get("network.weight", "length") if weight is None else weight
        self.network: Optional[SpatialNetwork] = None

    def build(self, lines: LineSet) -> SpatialNetwork:
        """Convert lines into the network used by later queries."""
        network = lines_to_network(
            lines, directed=self.directed, precision=self.precision
        )
        if self.simplify:
            network = simplify_network(network, weight=self.weight)
        self.network = network
        return network

    def _require_network(self) -> SpatialNetwork:
        if self.network is None:
            raise NetworkError(
                "No network built yet", suggestion="Call RouteTask.build(lines) first"
            )
        return self.network

    def route(
        self, origin: Sequence[float], destination: Sequence[float]
    ) -> Route:
        """Route between two coordinates, snapping each to its nearest node."""
        network = self._require_network()
        source = nearest_node(network, origin)
        target = nearest_node(network, destination)
        logger.debug(f"Snapped origin to node {source}, destination to node {target}")
        return self.route_nodes(source, target)

    def route_nodes(self, source: int, target: int) -> Route:
        """Route between two node ids."""
        network = self._require_network()
        path = shortest_path(network, source, target, weight=self.weight)
        logger.info(
            f"Route {source} -> {target}: {len(path.edges)} edges, "
            f"cost {path.length:.3f}"
        )
        return Route(
            path=path,
            edges=path_to_lineset(network, path),
            geometry=path_geometry(network, path),
            origin_node=source,
            destination_node=target,
        )

    def rank_nodes(self, by: str = "betweenness", top: Optional[int] = None) -> pd.DataFrame:
        """Node centrality table sorted in decreasing order of ``by``."""
        network = self._require_network()
        centrality = node_centrality(network, weight=self.weight)
        if by not in centrality.columns:
            raise NetworkError(
                f"Unknown centrality '{by}'",
                suggestion=f"Use one of {list(centrality.columns)}",
            )
        # Columns left by annotate() are replaced by the fresh values
        nodes = network.nodes.drop(columns=centrality.columns, errors="ignore")
        ranked = pd.concat([nodes, centrality], axis=1).sort_values(
            by, ascending=False, kind="stable"
        )
        return ranked if top is None else ranked.head(top)

    def annotate(self) -> SpatialNetwork:
        """Network with centrality columns attached to nodes and edges."""
        network = self._require_network()
        centrality = node_centrality(network, weight=self.weight)
        for column in centrality.columns:
            network = network.with_node_column(column, centrality[column].to_numpy())
        network = network.with_edge_column(
            "betweenness", edge_betweenness(network, weight=self.weight).to_numpy()
        )
        self.network = network
        return network

    def __repr__(self) -> str:
        state = repr(self.network) if self.network is not None else "not built"
        return f"RouteTask(directed={self.directed}, network={state})"


def route_between(lines: LineSet, origin: Any, destination: Any, **kwargs: Any) -> Route:
    """One-off routing: build a network from ``lines`` and route once."""
    task = RouteTask(**kwargs)
    task.build(lines)
    return task.route(origin, destination)
