"""Layer 4: Workflows - Public entry points.

Workflows provide the public entry points users call. Workflows can import
I/O libraries and plotting libraries. Put file loading and saving here.
Put plotting here.
"""

from tracksmith.workflows.io import (
    geodataframe_to_lineset,
    geodataframe_to_pointset,
    lines_to_geodataframe,
    load_csv_from_string,
    network_to_geodataframes,
    points_to_geodataframe,
    read_lines,
    read_points,
    read_storm_observations,
    write_vector,
)
from tracksmith.workflows.orchestrator import (
    STEP_REGISTRY,
    WorkflowOrchestrator,
    load_workflow,
    register_step,
    run_workflow,
)
from tracksmith.workflows.plotting import (
    MATPLOTLIB_AVAILABLE,
    plot_network,
    plot_tracks,
)

__all__ = [
    "MATPLOTLIB_AVAILABLE",
    "STEP_REGISTRY",
    "WorkflowOrchestrator",
    "geodataframe_to_lineset",
    "geodataframe_to_pointset",
    "lines_to_geodataframe",
    "load_csv_from_string",
    "load_workflow",
    "network_to_geodataframes",
    "plot_network",
    "plot_tracks",
    "points_to_geodataframe",
    "read_lines",
    "read_points",
    "read_storm_observations",
    "register_step",
    "run_workflow",
    "write_vector",
]
