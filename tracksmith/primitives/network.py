"""Spatial networks built from line geometries.

Converting lines into a graph takes three steps: collect the start and end
point of every line, deduplicate those endpoints into nodes, and record for
every line the ids of the nodes it starts and ends at. The node and edge
tables that result are held in a SpatialNetwork.

Graph algorithms (Dijkstra shortest paths, betweenness and closeness
centrality, connectivity) are delegated to networkx.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import networkx as nx
import numpy as np
import pandas as pd

from tracksmith.objects.lineset import LineSet
from tracksmith.objects.network import SpatialNetwork
from tracksmith.primitives.geometry import line_length, round_coordinates
from tracksmith.utils.errors import (
    NetworkError,
    NoPathError,
    ParameterError,
    raise_validation_error,
)

logger = logging.getLogger(__name__)


@dataclass
class PathResult:
    """Result of a shortest path query.

    Attributes:
        nodes: Node ids visited, source first.
        edges: Edge ids traversed, one fewer than nodes.
        length: Sum of the edge weights along the path.
    """

    nodes: list = field(default_factory=list)
    edges: list = field(default_factory=list)
    length: float = 0.0

    def __len__(self) -> int:
        return len(self.edges)

    def __repr__(self) -> str:
        return (
            f"PathResult(n_nodes={len(self.nodes)}, n_edges={len(self.edges)}, "
            f"length={self.length:.3f})"
        )


def lines_to_network(
    lines: LineSet,
    directed: bool = True,
    precision: Optional[int] = None,
    length_attr: str = "length",
) -> SpatialNetwork:
    """Build a spatial network whose edges are the given lines.

    Endpoints that coincide (after rounding to ``precision`` decimals) become
    a single node. Nodes are numbered in order of first appearance, visiting
    each line's start point before its end point.

    Args:
        lines: Input lines. Each line becomes one edge, in order.
        directed: Whether edges run only from their first to last vertex.
        precision: Decimal places used to match endpoints. None requires
            exact coordinate equality.
        length_attr: Edge column that receives the line length (geodesic
            metres for geographic CRSs).

    Returns:
        SpatialNetwork with node table (x, y) and edge table (from, to,
        line attributes, length).

    Example:
        >>> lines = LineSet([[[0, 0], [1, 0]], [[1, 0], [1, 1]]])
        >>> net = lines_to_network(lines)
        >>> net.edges[["from", "to"]].values.tolist()
        [[0, 1], [1, 2]]
    """
    n_lines = len(lines)
    if n_lines == 0:
        raise_validation_error(
            "Cannot build a network from an empty LineSet",
            expected="at least one line",
            received="0 lines",
        )

    endpoints = np.empty((2 * n_lines, 2), dtype=np.float64)
    endpoints[0::2] = lines.start_points()[:, :2]
    endpoints[1::2] = lines.end_points()[:, :2]

    keys = round_coordinates(endpoints, precision)
    _, first_index, inverse = np.unique(
        keys, axis=0, return_index=True, return_inverse=True
    )
    # np.unique sorts keys; renumber groups by first appearance instead
    order = np.argsort(first_index, kind="stable")
    rank = np.empty_like(order)
    rank[order] = np.arange(len(order))
    node_ids = rank[np.asarray(inverse).ravel()]

    node_xy = endpoints[first_index[order]]
    nodes = pd.DataFrame({"x": node_xy[:, 0], "y": node_xy[:, 1]})

    if lines.attributes is not None:
        edges = lines.attributes.copy()
    else:
        edges = pd.DataFrame(index=pd.RangeIndex(n_lines))
    for col in ("from", "to"):
        if col in edges.columns:
            edges = edges.drop(columns=col)
            logger.warning(f"Line attribute '{col}' replaced by node index column")
    edges.insert(0, "from", node_ids[0::2].astype(np.int64))
    edges.insert(1, "to", node_ids[1::2].astype(np.int64))
    edges[length_attr] = [line_length(v, lines.crs) for v in lines.vertices]

    network = SpatialNetwork(
        nodes=nodes,
        edges=edges,
        geometry=lines.vertices,
        directed=directed,
        crs=lines.crs,
        # Endpoints sharing a rounded key differ by less than one unit of precision
        tolerance=1e-9 if precision is None else 10.0 ** -precision,
    )
    logger.info(
        f"Built network with {network.n_nodes} nodes and {network.n_edges} edges "
        f"from {n_lines} lines"
    )
    return network


def to_networkx(network: SpatialNetwork, weight: Optional[str] = "length") -> nx.Graph:
    """Convert to a networkx multigraph keyed by edge id.

    Node attributes are copied from the node table and edge attributes from
    the edge table. Each edge also gets a ``weight`` attribute taken from the
    ``weight`` column (1.0 when ``weight`` is None).
    """
    graph = nx.MultiDiGraph() if network.directed else nx.MultiGraph()
    graph.graph["crs"] = network.crs
    graph.add_nodes_from(
        (int(i), row) for i, row in zip(network.nodes.index, network.nodes.to_dict("records"))
    )
    weights = _edge_weights(network, weight)
    for eid, row in enumerate(network.edges.to_dict("records")):
        u, v = int(row.pop("from")), int(row.pop("to"))
        row["weight"] = float(weights[eid])
        graph.add_edge(u, v, key=eid, **row)
    return graph


def _edge_weights(network: SpatialNetwork, weight: Optional[str]) -> np.ndarray:
    if weight is None:
        return np.ones(network.n_edges)
    if weight not in network.edges.columns:
        raise ParameterError(
            f"Edge weight column '{weight}' not found",
            suggestion=f"Use one of {list(network.edges.columns)} or weight=None",
        )
    values = network.edges[weight].to_numpy(dtype=np.float64)
    if np.any(~np.isfinite(values)) or np.any(values < 0):
        raise ParameterError(
            f"Edge weights in '{weight}' must be finite and non-negative"
        )
    return values


def _pair_key(u: int, v: int, directed: bool) -> tuple[int, int]:
    if directed or u <= v:
        return (u, v)
    return (v, u)


def _simple_graph(
    network: SpatialNetwork, weight: Optional[str]
) -> tuple[nx.Graph, dict[tuple[int, int], int]]:
    """Collapse parallel edges to the cheapest one and drop self-loops.

    Returns the simple graph and a map from node pair to the edge id that
    represents it.
    """
    weights = _edge_weights(network, weight)
    from_ids = network.edges["from"].to_numpy()
    to_ids = network.edges["to"].to_numpy()

    best: dict[tuple[int, int], int] = {}
    for eid in range(network.n_edges):
        u, v = int(from_ids[eid]), int(to_ids[eid])
        if u == v:
            continue
        key = _pair_key(u, v, network.directed)
        current = best.get(key)
        if current is None or weights[eid] < weights[current]:
            best[key] = eid

    graph = nx.DiGraph() if network.directed else nx.Graph()
    graph.add_nodes_from(range(network.n_nodes))
    for (u, v), eid in best.items():
        graph.add_edge(u, v, weight=float(weights[eid]), edge_id=eid)
    return graph, best


def _check_node(network: SpatialNetwork, node: Any, label: str) -> int:
    try:
        node_id = int(node)
    except (TypeError, ValueError) as e:
        raise NetworkError(f"{label} node must be an integer id, got {node!r}") from e
    if node_id != node or not 0 <= node_id < network.n_nodes:
        raise NetworkError(
            f"{label} node {node!r} is not in the network",
            suggestion=f"Node ids run from 0 to {network.n_nodes - 1}",
        )
    return node_id


def simplify_network(
    network: SpatialNetwork, weight: Optional[str] = "length"
) -> SpatialNetwork:
    """Remove self-loops and keep only the cheapest of each set of parallel edges.

    In directed networks (u, v) and (v, u) are different pairs. Nodes are
    left untouched; edge ids are renumbered.
    """
    _, best = _simple_graph(network, weight)
    keep = np.sort(np.fromiter(best.values(), dtype=np.int64, count=len(best)))
    removed = network.n_edges - len(keep)
    if removed:
        logger.info(f"Removed {removed} loop or parallel edges")
    return SpatialNetwork(
        nodes=network.nodes,
        edges=network.edges.iloc[keep],
        geometry=[network.geometry[i] for i in keep],
        directed=network.directed,
        crs=network.crs,
        tolerance=network.tolerance,
    )


def shortest_path(
    network: SpatialNetwork,
    source: int,
    target: int,
    weight: Optional[str] = "length",
) -> PathResult:
    """Find the cheapest path between two nodes (Dijkstra).

    Args:
        network: Network to search.
        source: Source node id.
        target: Target node id.
        weight: Edge column used as cost, or None to count edges.

    Returns:
        PathResult with visited node ids, traversed edge ids and total cost.

    Raises:
        NetworkError: If a node id is not in the network.
        NoPathError: If the target cannot be reached from the source.
    """
    source = _check_node(network, source, "Source")
    target = _check_node(network, target, "Target")
    if source == target:
        return PathResult(nodes=[source], edges=[], length=0.0)

    graph, best = _simple_graph(network, weight)
    try:
        length, nodes = nx.single_source_dijkstra(
            graph, source, target, weight="weight"
        )
    except nx.NetworkXNoPath as e:
        raise NoPathError(
            f"No path from node {source} to node {target}",
            suggestion="Check edge directions or use the largest component",
        ) from e

    edges = [
        best[_pair_key(u, v, network.directed)] for u, v in zip(nodes[:-1], nodes[1:])
    ]
    return PathResult(nodes=[int(n) for n in nodes], edges=edges, length=float(length))


def shortest_path_lengths(
    network: SpatialNetwork, source: int, weight: Optional[str] = "length"
) -> pd.Series:
    """Cost of the cheapest path from ``source`` to every reachable node."""
    source = _check_node(network, source, "Source")
    graph, _ = _simple_graph(network, weight)
    lengths = nx.single_source_dijkstra_path_length(graph, source, weight="weight")
    return pd.Series(lengths, name="distance", dtype=np.float64).sort_index()


def node_centrality(
    network: SpatialNetwork,
    weight: Optional[str] = "length",
    normalized: bool = True,
) -> pd.DataFrame:
    """Degree, betweenness and closeness centrality of every node.

    Closeness in directed networks uses incoming distances, as networkx
    defines it.

    Returns:
        DataFrame indexed by node id with columns 'degree', 'betweenness'
        and 'closeness'.
    """
    graph, _ = _simple_graph(network, weight)
    distance = "weight" if weight is not None else None
    betweenness = nx.betweenness_centrality(
        graph, weight=distance, normalized=normalized
    )
    closeness = nx.closeness_centrality(graph, distance=distance)
    index = pd.RangeIndex(network.n_nodes)
    return pd.DataFrame(
        {
            "degree": network.degree().to_numpy(),
            "betweenness": pd.Series(betweenness).reindex(index).to_numpy(),
            "closeness": pd.Series(closeness).reindex(index).to_numpy(),
        },
        index=index,
    )


def edge_betweenness(
    network: SpatialNetwork,
    weight: Optional[str] = "length",
    normalized: bool = True,
) -> pd.Series:
    """Edge betweenness centrality per edge id.

    Self-loops and parallel edges that are not the cheapest of their pair
    carry no shortest paths and score 0.
    """
    graph, best = _simple_graph(network, weight)
    scores = nx.edge_betweenness_centrality(
        graph,
        weight="weight" if weight is not None else None,
        normalized=normalized,
    )
    values = np.zeros(network.n_edges)
    for (u, v), score in scores.items():
        values[best[_pair_key(u, v, network.directed)]] = score
    return pd.Series(values, name="betweenness")


def connected_components(network: SpatialNetwork) -> pd.Series:
    """Label each node with its (weakly) connected component.

    Components are numbered by decreasing size, so label 0 is the largest.
    Ties are broken by the smallest node id in the component.
    """
    graph = nx.Graph()
    graph.add_nodes_from(range(network.n_nodes))
    graph.add_edges_from(
        zip(network.edges["from"].to_numpy(), network.edges["to"].to_numpy())
    )
    components = sorted(
        nx.connected_components(graph), key=lambda c: (-len(c), min(c))
    )
    labels = np.empty(network.n_nodes, dtype=np.int64)
    for label, members in enumerate(components):
        labels[list(members)] = label
    return pd.Series(labels, name="component")


def subnetwork(network: SpatialNetwork, nodes: Sequence[int]) -> SpatialNetwork:
    """Induced sub-network on the given nodes, with node ids renumbered."""
    keep_nodes = np.unique(np.asarray(nodes, dtype=np.int64))
    for node in keep_nodes:
        _check_node(network, node, "Subnetwork")
    remap = np.full(network.n_nodes, -1, dtype=np.int64)
    remap[keep_nodes] = np.arange(len(keep_nodes))

    from_ids = remap[network.edges["from"].to_numpy()]
    to_ids = remap[network.edges["to"].to_numpy()]
    keep_edges = np.flatnonzero((from_ids >= 0) & (to_ids >= 0))

    edges = network.edges.iloc[keep_edges].copy()
    edges["from"] = from_ids[keep_edges]
    edges["to"] = to_ids[keep_edges]
    return SpatialNetwork(
        nodes=network.nodes.iloc[keep_nodes],
        edges=edges,
        geometry=[network.geometry[i] for i in keep_edges],
        directed=network.directed,
        crs=network.crs,
        tolerance=network.tolerance,
    )


def largest_component(network: SpatialNetwork) -> SpatialNetwork:
    """Sub-network of the largest (weakly) connected component."""
    labels = connected_components(network)
    members = np.flatnonzero(labels.to_numpy() == 0)
    logger.debug(
        f"Largest component holds {len(members)} of {network.n_nodes} nodes"
    )
    return subnetwork(network, members)


def nearest_node(network: SpatialNetwork, point: Sequence[float]) -> int:
    """Id of the node closest to ``point`` (planar distance)."""
    if network.n_nodes == 0:
        raise NetworkError("Network has no nodes")
    xy = np.asarray(point, dtype=np.float64)[:2]
    distances = np.hypot(*(network.node_coordinates - xy).T)
    return int(np.argmin(distances))


def path_geometry(network: SpatialNetwork, path: PathResult) -> np.ndarray:
    """Concatenate the edge geometries of a path into one polyline.

    Edges traversed against their stored direction (undirected networks)
    are reversed. Shared vertices at junctions appear once.
    """
    if not path.edges:
        node_xy = network.node_coordinates[path.nodes[:1]]
        return node_xy.copy()

    from_ids = network.edges["from"].to_numpy()
    parts = []
    for i, eid in enumerate(path.edges):
        geom = network.geometry[eid]
        if from_ids[eid] != path.nodes[i]:
            geom = geom[::-1]
        parts.append(geom if i == 0 else geom[1:])
    return np.vstack(parts)


def path_to_lineset(network: SpatialNetwork, path: PathResult) -> LineSet:
    """LineSet holding the edges of a path, with their edge attributes."""
    edges = list(path.edges)
    attributes = network.edges.iloc[edges].copy()
    attributes.insert(0, "edge_id", edges)
    return LineSet(
        [network.geometry[e] for e in edges], attributes=attributes, crs=network.crs
    )
