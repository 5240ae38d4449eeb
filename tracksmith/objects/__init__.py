"""Layer 1: Objects - Immutable data representations.

This layer contains only data structures. No pyproj, no networkx, no
geopandas, no matplotlib. Only standard library + numpy + pandas.
"""

from tracksmith.objects.lineset import LineSet
from tracksmith.objects.network import SpatialNetwork
from tracksmith.objects.pointset import PointSet

__all__ = [
    "LineSet",
    "PointSet",
    "SpatialNetwork",
]
