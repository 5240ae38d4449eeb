"""Spatial network as a pair of node and edge tables.

Mirrors the tidy graph layout: a node table whose row position is the node
id, and an edge table whose ``from``/``to`` columns reference node ids. Each
edge keeps the vertex array of the line it was built from.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class SpatialNetwork:
    """Nodes and edges of a spatial graph.

    Attributes:
        nodes: DataFrame with at least ``x`` and ``y`` columns. Row i is node i.
        edges: DataFrame with at least ``from`` and ``to`` columns.
        geometry: One vertex array per edge, in edge order.
        directed: Whether edges are traversed only from ``from`` to ``to``.
        crs: CRS shared by nodes and edges.
        tolerance: Largest allowed distance between an edge geometry's first
            (last) vertex and its ``from`` (``to``) node.
    """

    nodes: pd.DataFrame
    edges: pd.DataFrame
    geometry: list = field(default_factory=list)
    directed: bool = True
    crs: Optional[str] = None
    tolerance: float = 1e-9

    def __post_init__(self) -> None:
        for col in ("x", "y"):
            if col not in self.nodes.columns:
                raise ValueError(
                    f"Node table is missing column '{col}'. "
                    f"Available columns: {list(self.nodes.columns)}"
                )
        for col in ("from", "to"):
            if col not in self.edges.columns:
                raise ValueError(
                    f"Edge table is missing column '{col}'. "
                    f"Available columns: {list(self.edges.columns)}"
                )

        nodes = self.nodes.reset_index(drop=True)
        edges = self.edges.reset_index(drop=True)
        edges = edges.astype({"from": np.int64, "to": np.int64})
        object.__setattr__(self, "nodes", nodes)
        object.__setattr__(self, "edges", edges)

        n = len(nodes)
        if len(edges) and (
            edges[["from", "to"]].to_numpy().min() < 0
            or edges[["from", "to"]].to_numpy().max() >= n
        ):
            raise ValueError(
                f"Edge endpoints must reference node ids in [0, {n - 1}]"
            )

        geometry = [np.asarray(g, dtype=np.float64) for g in self.geometry]
        if not geometry:
            # Straight edges between node coordinates
            xy = nodes[["x", "y"]].to_numpy(dtype=np.float64)
            geometry = [
                np.vstack([xy[f], xy[t]])
                for f, t in zip(edges["from"].to_numpy(), edges["to"].to_numpy())
            ]
        if len(geometry) != len(edges):
            raise ValueError(
                f"Got {len(geometry)} edge geometries for {len(edges)} edges"
            )
        if geometry:
            self._check_geometry_endpoints(nodes, edges, geometry)
        object.__setattr__(self, "geometry", geometry)

    def _check_geometry_endpoints(
        self, nodes: pd.DataFrame, edges: pd.DataFrame, geometry: list
    ) -> None:
        xy = nodes[["x", "y"]].to_numpy(dtype=np.float64)
        first = np.array([g[0, :2] for g in geometry])
        last = np.array([g[-1, :2] for g in geometry])
        for label, ends, ids in (
            ("start", first, edges["from"].to_numpy()),
            ("end", last, edges["to"].to_numpy()),
        ):
            gap = np.abs(ends - xy[ids]).max(axis=1)
            bad = np.flatnonzero(gap > self.tolerance)
            if bad.size:
                column = "from" if label == "start" else "to"
                raise ValueError(
                    f"Edge geometry must {label} at its '{column}' node; "
                    f"edges {bad[:5].tolist()} are off by up to {gap[bad].max():.3g}"
                )

    @property
    def n_nodes(self) -> int:
        return len(self.nodes)

    @property
    def n_edges(self) -> int:
        return len(self.edges)

    @property
    def node_coordinates(self) -> np.ndarray:
        """Node coordinates as an (n_nodes, 2) array."""
        return self.nodes[["x", "y"]].to_numpy(dtype=np.float64)

    def degree(self, mode: str = "all") -> pd.Series:
        """Count incident edges per node.

        Args:
            mode: 'all', 'in' or 'out'. For undirected networks 'in' and
                'out' equal 'all'. A self-loop counts twice for 'all'.

        Returns:
            Integer Series indexed by node id.
        """
        if mode not in ("all", "in", "out"):
            raise ValueError(f"mode must be 'all', 'in' or 'out', got {mode!r}")
        n = self.n_nodes
        out_deg = np.bincount(self.edges["from"].to_numpy(), minlength=n)
        in_deg = np.bincount(self.edges["to"].to_numpy(), minlength=n)
        if not self.directed or mode == "all":
            values = out_deg + in_deg
        elif mode == "in":
            values = in_deg
        else:
            values = out_deg
        return pd.Series(values.astype(np.int64), name="degree")

    def with_node_column(self, name: str, values: Any) -> "SpatialNetwork":
        """Return a copy of the network with an added or replaced node column."""
        nodes = self.nodes.copy()
        nodes[name] = np.asarray(values) if not np.isscalar(values) else values
        return SpatialNetwork(
            nodes, self.edges, self.geometry, self.directed, self.crs, self.tolerance
        )

    def with_edge_column(self, name: str, values: Any) -> "SpatialNetwork":
        """Return a copy of the network with an added or replaced edge column."""
        edges = self.edges.copy()
        edges[name] = np.asarray(values) if not np.isscalar(values) else values
        return SpatialNetwork(
            self.nodes, edges, self.geometry, self.directed, self.crs, self.tolerance
        )

    def __repr__(self) -> str:
        kind = "directed" if self.directed else "undirected"
        crs_str = f", crs={self.crs!r}" if self.crs is not None else ""
        return (
            f"SpatialNetwork(n_nodes={self.n_nodes}, n_edges={self.n_edges}, "
            f"{kind}{crs_str})"
        )
