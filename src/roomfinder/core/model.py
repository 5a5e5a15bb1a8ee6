"""Core data models for wall-based floor plans.

This module defines the records an editing session works with (walls,
openings, devices), the mutable plan container that owns them, and the
derived room polygon type produced by room detection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..config import (
    DEFAULT_WALL_HEIGHT,
    DEFAULT_WALL_THICKNESS,
    GRAPH_MERGE_EPSILON,
    MIN_WALL_LENGTH,
)


@dataclass(frozen=True)
class Point:
    """Represents a 2D point in centimetres (Y-up world frame).

    Attributes:
        x: The x-coordinate of the point.
        y: The y-coordinate of the point.
    """

    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Wall:
    """Represents a straight wall segment.

    The endpoint order carries no meaning: two walls between the same points
    are the same wall regardless of which end is ``p1``.

    Attributes:
        id: Unique identifier, assigned monotonically by the plan.
        p1: One endpoint.
        p2: The other endpoint.
        thickness_cm: Wall thickness.
        height_cm: Wall height.
    """

    id: int
    p1: Point
    p2: Point
    thickness_cm: float = DEFAULT_WALL_THICKNESS
    height_cm: float = DEFAULT_WALL_HEIGHT

    def __post_init__(self) -> None:
        if self.thickness_cm <= 0:
            raise ValueError(f"Wall {self.id}: thickness must be positive, got {self.thickness_cm}")
        if self.height_cm <= 0:
            raise ValueError(f"Wall {self.id}: height must be positive, got {self.height_cm}")

    @property
    def length(self) -> float:
        return self.p1.distance_to(self.p2)

    @property
    def is_degenerate(self) -> bool:
        """True for walls too short to contribute an edge."""
        return self.length < MIN_WALL_LENGTH

    def direction(self) -> Point:
        """Unit vector from p1 to p2, or (0, 0) for a zero-length wall."""
        length = self.length
        if length == 0:
            return Point(0.0, 0.0)
        return Point((self.p2.x - self.p1.x) / length, (self.p2.y - self.p1.y) / length)

    def same_segment(self, other: Wall, epsilon: float = GRAPH_MERGE_EPSILON) -> bool:
        """Check whether both walls join the same two points, in either order."""
        forward = self.p1.distance_to(other.p1) < epsilon and self.p2.distance_to(other.p2) < epsilon
        backward = self.p1.distance_to(other.p2) < epsilon and self.p2.distance_to(other.p1) < epsilon
        return forward or backward


class OpeningKind(Enum):
    """Kind of opening cut into a wall."""

    DOOR = "door"
    WINDOW = "window"


@dataclass(frozen=True)
class Opening:
    """Represents a door or window hosted by a wall.

    Attributes:
        id: Unique identifier.
        kind: Door or window.
        wall_id: ID of the host wall (a reference, not ownership).
        offset_cm: Distance from the wall's p1 to the opening's near edge.
        width_cm: Opening width along the wall.
        height_cm: Opening height.
        sill_cm: Height of the bottom edge above the floor (0 for doors).
    """

    id: int
    kind: OpeningKind
    wall_id: int
    offset_cm: float
    width_cm: float
    height_cm: float
    sill_cm: float = 0.0

    def __post_init__(self) -> None:
        if self.width_cm <= 0 or self.height_cm <= 0:
            raise ValueError(f"Opening {self.id}: width and height must be positive")
        if self.sill_cm < 0:
            raise ValueError(f"Opening {self.id}: sill must not be negative")
        if self.kind is OpeningKind.DOOR and self.sill_cm != 0:
            # Doors always start at the floor.
            object.__setattr__(self, "sill_cm", 0.0)

    @property
    def is_door(self) -> bool:
        return self.kind is OpeningKind.DOOR


@dataclass(frozen=True)
class Device:
    """A fixture placed in the plan (socket, switch, light, ...).

    Attributes:
        id: Unique identifier.
        name: Free-form device type.
        position: Plan position.
        elevation_cm: Mounting height above the floor.
        wall_id: Host wall, if the device is wall-mounted.
    """

    id: int
    name: str
    position: Point
    elevation_cm: float = 0.0
    wall_id: Optional[int] = None


@dataclass(frozen=True)
class RoomPolygon:
    """An enclosed region derived from the walls.

    Points are ordered counter-clockwise and the closing point is implicit.
    """

    points: Tuple[Point, ...]

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index: int) -> Point:
        return self.points[index]

    @property
    def signed_area(self) -> float:
        from ..geom.polygon import signed_area

        return signed_area(self.points)

    @property
    def area(self) -> float:
        return abs(self.signed_area)

    @property
    def centroid(self) -> Point:
        from ..geom.polygon import centroid

        return centroid(self.points)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        from ..geom.polygon import polygon_bounds

        return polygon_bounds(self.points)

    def contains(self, point: Point) -> bool:
        from ..geom.polygon import point_in_polygon

        return point_in_polygon(point, self.points)


WallListener = Callable[[], None]


@dataclass
class FloorPlan:
    """Mutable container for the records of one editing session.

    All changes go through the ``insert_*``/``replace_*``/``remove_*`` hooks.
    Wall hooks notify subscribers because they change room topology; opening
    and device hooks do not.

    Attributes:
        walls: Mapping of wall ID to Wall.
        openings: Mapping of opening ID to Opening.
        devices: Mapping of device ID to Device.
    """

    walls: Dict[int, Wall] = field(default_factory=dict)
    openings: Dict[int, Opening] = field(default_factory=dict)
    devices: Dict[int, Device] = field(default_factory=dict)
    _next_id: int = 1
    _listeners: List[WallListener] = field(default_factory=list, repr=False, compare=False)

    def allocate_id(self) -> int:
        """Return a fresh ID, never reused within this plan."""
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def reserve_id(self, used_id: int) -> None:
        """Make sure future IDs stay above an externally supplied one."""
        if used_id >= self._next_id:
            self._next_id = used_id + 1

    def subscribe(self, listener: WallListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: WallListener) -> None:
        """Stop notifying ``listener``; unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _walls_changed(self) -> None:
        for listener in self._listeners:
            listener()

    # Walls

    def insert_wall(self, wall: Wall) -> Wall:
        self.walls[wall.id] = wall
        self.reserve_id(wall.id)
        self._walls_changed()
        return wall

    def replace_wall(self, wall: Wall) -> Wall:
        if wall.id not in self.walls:
            raise KeyError(wall.id)
        self.walls[wall.id] = wall
        self._walls_changed()
        return wall

    def remove_wall(self, wall_id: int) -> Wall:
        wall = self.walls.pop(wall_id)
        self._walls_changed()
        return wall

    # Openings

    def insert_opening(self, opening: Opening) -> Opening:
        self.openings[opening.id] = opening
        self.reserve_id(opening.id)
        return opening

    def replace_opening(self, opening: Opening) -> Opening:
        if opening.id not in self.openings:
            raise KeyError(opening.id)
        self.openings[opening.id] = opening
        return opening

    def remove_opening(self, opening_id: int) -> Opening:
        return self.openings.pop(opening_id)

    # Devices

    def insert_device(self, device: Device) -> Device:
        self.devices[device.id] = device
        self.reserve_id(device.id)
        return device

    def remove_device(self, device_id: int) -> Device:
        return self.devices.pop(device_id)

    # Views

    def wall_list(self) -> List[Wall]:
        return list(self.walls.values())

    @property
    def doors(self) -> List[Opening]:
        return [o for o in self.openings.values() if o.kind is OpeningKind.DOOR]

    @property
    def windows(self) -> List[Opening]:
        return [o for o in self.openings.values() if o.kind is OpeningKind.WINDOW]

    def openings_on(self, wall_id: int) -> List[Opening]:
        return [o for o in self.openings.values() if o.wall_id == wall_id]

    def devices_on(self, wall_id: int) -> List[Device]:
        return [d for d in self.devices.values() if d.wall_id == wall_id]


def moved_wall(wall: Wall, p1: Point, p2: Point) -> Wall:
    """Copy of ``wall`` with new endpoints."""
    return replace(wall, p1=p1, p2=p2)
