"""Room Finder - detect enclosed rooms in wall-based floor plans."""

__version__ = "0.1.0"

from .core.model import Device, FloorPlan, Opening, OpeningKind, Point, RoomPolygon, Wall
from .engine.rooms import RoomDetector
from .engine.session import EditSession

__all__ = [
    "Device",
    "EditSession",
    "FloorPlan",
    "Opening",
    "OpeningKind",
    "Point",
    "RoomDetector",
    "RoomPolygon",
    "Wall",
]
