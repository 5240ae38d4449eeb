"""Example: Road network routing and centrality.

Builds a network from a small grid of road lines, finds the shortest route
between two addresses and ranks intersections by betweenness centrality.
"""

import numpy as np
import pandas as pd

from tracksmith import LineSet
from tracksmith.config import configure_logging
from tracksmith.primitives.network import (
    connected_components,
    lines_to_network,
    node_centrality,
)
from tracksmith.tasks import RouteTask


def make_grid_roads(n: int = 5, spacing: float = 100.0) -> LineSet:
    """Horizontal and vertical road segments between grid intersections."""
    vertices = []
    names = []
    for i in range(n):
        for j in range(n - 1):
            vertices.append([[j * spacing, i * spacing], [(j + 1) * spacing, i * spacing]])
            names.append(f"street {i}")
            vertices.append([[i * spacing, j * spacing], [i * spacing, (j + 1) * spacing]])
            names.append(f"avenue {i}")
    attributes = pd.DataFrame({"name": names})
    return LineSet(vertices, attributes=attributes, crs="EPSG:32633")


def main():
    """Run routing example."""
    configure_logging("WARNING")

    print("=" * 60)
    print("Road Network Routing Example")
    print("=" * 60)

    print("\n1. Creating a 5 x 5 grid of roads...")
    roads = make_grid_roads()
    print(f"Roads: {roads}")

    print("\n2. Converting lines to a network...")
    network = lines_to_network(roads, directed=False)
    print(f"Network: {network}")
    components = connected_components(network)
    print(f"Connected components: {components.nunique()}")

    print("\n3. Routing between two locations...")
    task = RouteTask(directed=False)
    task.build(roads)
    route = task.route((10.0, 5.0), (390.0, 310.0))
    print(f"Origin snapped to node {route.origin_node}")
    print(f"Destination snapped to node {route.destination_node}")
    print(f"Route length: {route.length:.1f} m over {len(route.path.edges)} edges")
    print(f"Streets used: {route.edges.attributes['name'].unique().tolist()}")

    print("\n4. Ranking intersections by betweenness...")
    centrality = node_centrality(network)
    top = task.rank_nodes(top=3)
    for node_id, row in top.iterrows():
        print(
            f"  Node {node_id} at ({row['x']:.0f}, {row['y']:.0f}): "
            f"betweenness={row['betweenness']:.3f}"
        )

    print("\n" + "=" * 60)
    print("Summary:")
    print(f"  Nodes: {network.n_nodes}, edges: {network.n_edges}")
    print(f"  Mean closeness: {np.mean(centrality['closeness']):.4f}")
    print(f"  Route length: {route.length:.1f} m")
    print("=" * 60)


if __name__ == "__main__":
    main()
