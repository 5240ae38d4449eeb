"""Layer 3: Tasks - User intent translation.

Tasks translate user intent into object creation and primitive calls, with
defaults taken from the configuration. Tasks must not import matplotlib or
geopandas.
"""

from tracksmith.tasks.routetask import Route, RouteTask, route_between
from tracksmith.tasks.tracktask import TrackTask

__all__ = [
    "Route",
    "RouteTask",
    "TrackTask",
    "route_between",
]
