"""Static plots of networks and storm tracks.

Layer 4: Workflows - Public entry points with plotting.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional, Union

import numpy as np
import pandas as pd

from tracksmith.objects.lineset import LineSet
from tracksmith.objects.network import SpatialNetwork
from tracksmith.primitives.network import PathResult, path_geometry
from tracksmith.primitives.tracks import CATEGORY_LABELS
from tracksmith.utils.errors import raise_dependency_error

if TYPE_CHECKING:
    from matplotlib.axes import Axes

logger = logging.getLogger(__name__)

# Optional matplotlib dependency
try:
    import matplotlib.pyplot as plt
    from matplotlib.collections import LineCollection

    MATPLOTLIB_AVAILABLE = True
except ImportError:
    MATPLOTLIB_AVAILABLE = False
    plt = None  # type: ignore
    LineCollection = None  # type: ignore

# Colours per Saffir-Simpson code, depression through category 5
CATEGORY_COLORS = {
    -1: "#5ebaff",
    0: "#00faf4",
    1: "#ffffcc",
    2: "#ffe775",
    3: "#ffc140",
    4: "#ff8f20",
    5: "#ff6060",
}


def _require_matplotlib() -> None:
    if not MATPLOTLIB_AVAILABLE:
        raise_dependency_error("matplotlib", optional_group="viz")


def _get_ax(ax: Optional["Axes"], figsize: tuple[float, float]) -> "Axes":
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    return ax


def plot_network(
    network: SpatialNetwork,
    node_values: Optional[Union[str, np.ndarray, pd.Series]] = None,
    path: Optional[PathResult] = None,
    ax: Optional["Axes"] = None,
    cmap: str = "viridis",
    figsize: tuple[float, float] = (8, 8),
) -> "Axes":
    """Draw edges as lines and nodes as points.

    Args:
        network: Network to draw.
        node_values: Node column name or array used to colour nodes, e.g.
            betweenness centrality.
        path: Optional path to highlight.
        ax: Axes to draw into; a new figure is created when None.
        cmap: Colormap for node values.
        figsize: Figure size when a new figure is created.

    Returns:
        The matplotlib Axes.
    """
    _require_matplotlib()
    ax = _get_ax(ax, figsize)

    segments = [g[:, :2] for g in network.geometry]
    ax.add_collection(LineCollection(segments, colors="0.6", linewidths=1.0, zorder=1))

    xy = network.node_coordinates
    if isinstance(node_values, str):
        node_values = network.nodes[node_values].to_numpy()
    if node_values is not None:
        points = ax.scatter(
            xy[:, 0], xy[:, 1], c=np.asarray(node_values), cmap=cmap, s=20, zorder=2
        )
        ax.figure.colorbar(points, ax=ax, shrink=0.7)
    else:
        ax.scatter(xy[:, 0], xy[:, 1], color="black", s=10, zorder=2)

    if path is not None:
        route = path_geometry(network, path)
        ax.plot(route[:, 0], route[:, 1], color="firebrick", linewidth=3, zorder=3)

    ax.autoscale_view()
    ax.set_aspect("equal", adjustable="datalim")
    return ax


def plot_tracks(
    tracks: LineSet,
    color_by: Optional[str] = "max_category",
    ax: Optional["Axes"] = None,
    figsize: tuple[float, float] = (10, 6),
    **kwargs: Any,
) -> "Axes":
    """Draw storm tracks or track segments.

    Lines are coloured by Saffir-Simpson code when ``color_by`` names a
    category column, by a colormap for other numeric columns, and in a
    single colour when ``color_by`` is None or missing.

    Returns:
        The matplotlib Axes.
    """
    _require_matplotlib()
    ax = _get_ax(ax, figsize)

    segments = [v[:, :2] for v in tracks.vertices]
    attributes = tracks.attributes
    if color_by is None or attributes is None or color_by not in attributes.columns:
        if color_by is not None:
            logger.debug(f"Column '{color_by}' not found; drawing tracks in one colour")
        ax.add_collection(LineCollection(segments, colors="steelblue", **kwargs))
    elif "category" in color_by:
        codes = attributes[color_by]
        colors = [CATEGORY_COLORS.get(c, "0.5") if pd.notna(c) else "0.5" for c in codes]
        ax.add_collection(LineCollection(segments, colors=colors, **kwargs))
        for code, color in CATEGORY_COLORS.items():
            ax.plot([], [], color=color, label=CATEGORY_LABELS[code])
        ax.legend(loc="best", fontsize="small")
    else:
        collection = LineCollection(segments, cmap=kwargs.pop("cmap", "plasma"), **kwargs)
        collection.set_array(attributes[color_by].to_numpy(dtype=np.float64))
        ax.add_collection(collection)
        ax.figure.colorbar(collection, ax=ax, label=color_by, shrink=0.7)

    ax.autoscale_view()
    ax.set_xlabel("x" if tracks.crs is None else "longitude / x")
    ax.set_ylabel("y" if tracks.crs is None else "latitude / y")
    return ax
