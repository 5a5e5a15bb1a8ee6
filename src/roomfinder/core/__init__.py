"""Core data models and wall topology."""

from .model import Device, FloorPlan, Opening, OpeningKind, Point, RoomPolygon, Wall
from .topology import VertexPool, WallGraph, build_room_graph, build_wall_graph, walls_bounding_room

__all__ = [
    "Device",
    "FloorPlan",
    "Opening",
    "OpeningKind",
    "Point",
    "RoomPolygon",
    "Wall",
    "VertexPool",
    "WallGraph",
    "build_wall_graph",
    "build_room_graph",
    "walls_bounding_room",
]
