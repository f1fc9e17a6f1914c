"""Placement list model and loader"""

from .models import OperationMode, PlacementItem, PlacementQueue
from .loader import CentroidFile, load_centroid_file

__all__ = [
    "OperationMode",
    "PlacementItem",
    "PlacementQueue",
    "CentroidFile",
    "load_centroid_file",
]
