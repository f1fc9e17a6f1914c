"""Placement list data model."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Sequence

import numpy as np


class OperationMode(str, Enum):
    """Controller operating modes"""

    MANUAL = "manual"
    AUTO = "auto"


@dataclass(frozen=True)
class PlacementItem:
    """One component to place, with its target pose and source feeder"""

    designation: str
    footprint: str
    value: float
    x_target: float
    y_target: float
    theta_target: float
    feeder: int

    def describe(self, index: int) -> str:
        """Multi-line part details block shown to the operator"""
        return (
            f"Part {index} details:\n"
            f"Designation: {self.designation}\n"
            f"Footprint: {self.footprint}\n"
            f"Value: {self.value:.2f}\n"
            f"x: {self.x_target:.2f}\n"
            f"y: {self.y_target:.2f}\n"
            f"theta: {self.theta_target:.2f}\n"
            f"Feeder: {self.feeder}"
        )


class PlacementQueue(Sequence[PlacementItem]):
    """Ordered, read-only list of components to place"""

    def __init__(self, items: Iterable[PlacementItem] = ()):
        self._items = tuple(items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __iter__(self) -> Iterator[PlacementItem]:
        return iter(self._items)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PlacementQueue):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"PlacementQueue({len(self._items)} items)"

    def is_exhausted(self, index: int) -> bool:
        """True once every entry up to ``index`` has been consumed"""
        return index >= len(self._items)

    def sorted_by_feeder(self) -> "PlacementQueue":
        """Return a new queue ordered by feeder index, keeping load order within a feeder"""
        if not self._items:
            return PlacementQueue()
        feeders = np.array([item.feeder for item in self._items])
        order = np.argsort(feeders, kind="stable")
        return PlacementQueue(self._items[i] for i in order)

    def listing(self) -> List[str]:
        """One line per component for the start-of-run report"""
        return [
            f"{index:3d}  {item.designation:<10} {item.footprint:<12} "
            f"value={item.value:.2f} x={item.x_target:.2f} y={item.y_target:.2f} "
            f"theta={item.theta_target:.2f} feeder={item.feeder}"
            for index, item in enumerate(self._items)
        ]
