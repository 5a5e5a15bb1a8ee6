"""Planar face enumeration over a wall graph.

Every undirected edge is split into two oriented half-edges. Walking from a
half-edge ``(u, v)`` to ``(v, w)``, where ``w`` is the angular predecessor of
``u`` around ``v``, traces one face; repeating until every half-edge is used
yields all faces of the planar graph.

In the Y-up world frame this rule walks bounded faces counter-clockwise
(positive signed area) and the outer boundary of each connected cluster
clockwise (negative signed area), which is how outer faces are told apart.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..config import DetectionSettings, MIN_ROOM_AREA, WALK_SAFETY_FACTOR
from ..core.model import Point, Wall
from ..core.topology import WallGraph, build_wall_graph, prune_dangling
from .polygon import remove_collinear, signed_area

LOGGER = logging.getLogger(__name__)

HalfEdge = Tuple[int, int]


def _angle(origin: Point, target: Point) -> float:
    angle = math.atan2(target.y - origin.y, target.x - origin.x)
    if angle < 0:
        angle += 2.0 * math.pi
    return angle


def sort_adjacency(graph: WallGraph) -> List[List[int]]:
    """Neighbours of every vertex ordered counter-clockwise.

    Angles are taken in ``[0, 2*pi)``; ties (collinear neighbours) put the
    closer neighbour first. The graph itself is left untouched.
    """
    ordered = []
    for index, neighbours in enumerate(graph.adjacency):
        origin = graph.vertices[index]

        def key(n: int, origin: Point = origin) -> Tuple[float, float]:
            target = graph.vertices[n]
            dx = target.x - origin.x
            dy = target.y - origin.y
            return _angle(origin, target), dx * dx + dy * dy

        ordered.append(sorted(neighbours, key=key))
    return ordered


def _trace(
    start: HalfEdge,
    graph: WallGraph,
    ordered: List[List[int]],
    positions: List[Dict[int, int]],
    visited: Set[HalfEdge],
    limit: int,
) -> Optional[List[Point]]:
    """Walk one face from ``start``; None if the walk does not close."""
    face = []
    u, v = start
    for _ in range(limit):
        visited.add((u, v))
        face.append(graph.vertices[u])

        around = ordered[v]
        w = around[positions[v][u] - 1]
        u, v = v, w

        if (u, v) == start:
            return face
        if (u, v) in visited:
            break
    LOGGER.debug("Face walk from %s did not close", start)
    return None


def trace_faces(graph: WallGraph) -> List[List[Point]]:
    """Trace every closed walk of the graph, each half-edge exactly once.

    Walks are returned with their natural orientation, outer faces included.
    """
    ordered = sort_adjacency(graph)
    positions = [{n: k for k, n in enumerate(around)} for around in ordered]
    half_edges = sum(len(around) for around in ordered)
    limit = max(half_edges * WALK_SAFETY_FACTOR, 1)

    visited: Set[HalfEdge] = set()
    faces = []
    for i, around in enumerate(ordered):
        for j in around:
            if (i, j) in visited:
                continue
            face = _trace((i, j), graph, ordered, positions, visited, limit)
            if face is not None:
                faces.append(face)
    return faces


def enumerate_faces(graph: WallGraph, min_area: float = MIN_ROOM_AREA) -> List[List[Point]]:
    """Return the bounded faces of the graph as counter-clockwise polygons.

    Walks with an absolute area below ``min_area`` are discarded as
    degenerate, and walks with a negative signed area are outer faces. For a
    connected layout that is exactly the largest-area walk.
    """
    rooms = []
    outer = 0
    for face in trace_faces(graph):
        area = signed_area(face)
        if abs(area) < min_area:
            continue
        if area < 0:
            outer += 1
            continue
        polygon = remove_collinear(face)
        if len(polygon) >= 3:
            rooms.append(polygon)
    LOGGER.debug("Planar walk: %d bounded faces, %d outer faces", len(rooms), outer)
    return rooms


def detect_general(walls: Sequence[Wall], settings: Optional[DetectionSettings] = None) -> List[List[Point]]:
    """Detect rooms of an arbitrary (non-orthogonal) wall layout.

    Never raises on degenerate input: no walls, zero-length walls, or open
    polylines simply produce an empty list.
    """
    settings = settings or DetectionSettings()
    graph = build_wall_graph(
        walls,
        epsilon=settings.graph_merge_epsilon,
        min_length=settings.min_wall_length,
        node_intersections=settings.node_intersections,
    )
    if graph.edge_count < 3:
        return []
    return enumerate_faces(prune_dangling(graph), settings.min_room_area)
