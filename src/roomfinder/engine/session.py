"""Editing session: a floor plan plus its room detector.

The session is what an editing surface talks to. Edits go through the
operation registry; room queries go through the cached detector.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import networkx as nx

from ..config import DetectionSettings
from ..core.model import Device, FloorPlan, Opening, Point, RoomPolygon, Wall
from ..core.topology import build_room_graph
from .api import apply as apply_operation
from .rooms import RoomDetector


class EditSession:
    """Single-threaded editing session over one floor plan."""

    def __init__(self, plan: Optional[FloorPlan] = None, settings: Optional[DetectionSettings] = None):
        self.plan = plan if plan is not None else FloorPlan()
        self.detector = RoomDetector(self.plan, settings)
        self._selection: Optional[Point] = None

    def apply(self, operation: Dict[str, Any]) -> Any:
        return apply_operation(self.plan, operation)

    # Edits

    def add_wall(self, p1, p2, **params: Any) -> Wall:
        return self.apply({"op": "add_wall", "p1": p1, "p2": p2, **params})

    def move_wall(self, wall: int, dx: float, dy: float) -> Wall:
        return self.apply({"op": "move_wall", "wall": wall, "dx": dx, "dy": dy})

    def move_endpoint(self, wall: int, end: str, to) -> Wall:
        return self.apply({"op": "move_endpoint", "wall": wall, "end": end, "to": to})

    def delete_wall(self, wall: int) -> Wall:
        return self.apply({"op": "delete_wall", "wall": wall})

    def add_opening(self, wall: int, width: float, kind: str = "door", **params: Any) -> Opening:
        return self.apply({"op": "add_opening", "wall": wall, "width": width, "kind": kind, **params})

    def place_opening(self, wall: int, width: float, at, kind: str = "door", **params: Any) -> Opening:
        return self.apply({"op": "place_opening", "wall": wall, "width": width, "at": at, "kind": kind, **params})

    def delete_opening(self, opening: int) -> Opening:
        return self.apply({"op": "delete_opening", "opening": opening})

    def add_device(self, name: str, at, **params: Any) -> Device:
        return self.apply({"op": "add_device", "name": name, "at": at, **params})

    def delete_device(self, device: int) -> Device:
        return self.apply({"op": "delete_device", "device": device})

    # Queries

    def rooms(self) -> List[RoomPolygon]:
        return self.detector.get_rooms()

    def room_at(self, point: Point) -> Optional[RoomPolygon]:
        return self.detector.get_room_containing(point)

    def largest_room(self) -> Optional[RoomPolygon]:
        return self.detector.get_largest_room()

    def room_graph(self) -> nx.Graph:
        return build_room_graph(self.rooms(), self.plan)

    # Selection

    def select(self, point: Optional[Point]) -> Optional[RoomPolygon]:
        """Remember a point inside the room the user picked (None clears)."""
        self._selection = point
        return self.selected_room()

    def selected_room(self) -> Optional[RoomPolygon]:
        """The picked room, re-resolved against the current rooms."""
        if self._selection is None:
            return None
        return self.room_at(self._selection)
