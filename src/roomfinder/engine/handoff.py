"""Hand-off of one room to the 3D extrusion step.

The extrusion step receives a single room outline plus the full wall,
opening and device lists, and places box geometry from them. This module
picks the room and precomputes what the extruder would otherwise derive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..core.model import Device, Opening, Point, RoomPolygon, Wall
from ..core.topology import walls_bounding_room
from ..geom.polygon import offset_polygon
from .session import EditSession


@dataclass(frozen=True)
class ExtrusionRequest:
    """Everything the extruder needs for one room.

    Attributes:
        room: Room outline on the wall centre lines (CCW, centimetres).
        floor_outline: Room outline shrunk by half the bounding wall thickness.
        bounding_wall_ids: Walls running along the room outline.
        walls: All walls of the plan.
        doors: All doors.
        windows: All windows.
        devices: All devices.
    """

    room: RoomPolygon
    floor_outline: Tuple[Point, ...]
    bounding_wall_ids: Tuple[int, ...]
    walls: List[Wall] = field(default_factory=list)
    doors: List[Opening] = field(default_factory=list)
    windows: List[Opening] = field(default_factory=list)
    devices: List[Device] = field(default_factory=list)


def opening_span(wall: Wall, opening: Opening) -> Tuple[Point, Point]:
    """Start and end of an opening along its wall, measured from ``p1``."""
    direction = wall.direction()
    start = opening.offset_cm
    end = opening.offset_cm + opening.width_cm
    return (
        Point(wall.p1.x + direction.x * start, wall.p1.y + direction.y * start),
        Point(wall.p1.x + direction.x * end, wall.p1.y + direction.y * end),
    )


def build_extrusion_request(session: EditSession, room: Optional[RoomPolygon] = None) -> Optional[ExtrusionRequest]:
    """Assemble the extrusion input.

    The room is, in order of preference: ``room``, the session's selected
    room, the largest room. Returns None when the plan has no room.
    """
    chosen = room or session.selected_room() or session.largest_room()
    if chosen is None:
        return None

    plan = session.plan
    bounding = walls_bounding_room(chosen, plan.wall_list())
    if bounding:
        half_thickness = sum(w.thickness_cm for w in bounding) / len(bounding) / 2.0
    else:
        half_thickness = 0.0

    return ExtrusionRequest(
        room=chosen,
        floor_outline=tuple(offset_polygon(chosen.points, -half_thickness)),
        bounding_wall_ids=tuple(w.id for w in bounding),
        walls=plan.wall_list(),
        doors=plan.doors,
        windows=plan.windows,
        devices=list(plan.devices.values()),
    )
