"""Topology of a wall layout.

This module turns the flat list of walls into an undirected planar graph
(merged endpoint vertices plus adjacency lists) and relates detected rooms
back to the walls and openings around them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence, Set, Tuple

import networkx as nx
from shapely.geometry import LineString, MultiLineString
from shapely.ops import unary_union
from shapely.strtree import STRtree

from ..config import GRAPH_MERGE_EPSILON, MIN_WALL_LENGTH, WALL_TOUCH_TOLERANCE
from .model import FloorPlan, Point, RoomPolygon, Wall

LOGGER = logging.getLogger(__name__)

Segment = Tuple[Point, Point]


class VertexPool:
    """Resolves points to vertex indices for the duration of one graph build.

    A point within ``epsilon`` of an existing vertex resolves to that vertex;
    otherwise a new vertex is appended.
    """

    def __init__(self, epsilon: float = GRAPH_MERGE_EPSILON):
        self.epsilon = epsilon
        self.points: List[Point] = []

    def resolve_or_insert(self, point: Point) -> int:
        for index, existing in enumerate(self.points):
            if existing.distance_to(point) < self.epsilon:
                return index
        self.points.append(point)
        return len(self.points) - 1

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class WallGraph:
    """Undirected graph of merged wall endpoints.

    Attributes:
        vertices: Merged vertex positions.
        adjacency: For each vertex, the indices of its neighbours in
            insertion order. No parallel edges, no self-loops.
    """

    vertices: List[Point] = field(default_factory=list)
    adjacency: List[List[int]] = field(default_factory=list)

    def add_edge(self, i: int, j: int) -> bool:
        if i == j or j in self.adjacency[i]:
            return False
        self.adjacency[i].append(j)
        self.adjacency[j].append(i)
        return True

    def degree(self, index: int) -> int:
        return len(self.adjacency[index])

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Each undirected edge once, as (low, high)."""
        for i, neighbours in enumerate(self.adjacency):
            for j in neighbours:
                if i < j:
                    yield i, j

    @property
    def edge_count(self) -> int:
        return sum(len(n) for n in self.adjacency) // 2

    def to_networkx(self) -> nx.Graph:
        graph = nx.Graph()
        for index, point in enumerate(self.vertices):
            graph.add_node(index, point=point)
        graph.add_edges_from(self.edges())
        return graph


def node_segments(segments: Sequence[Segment]) -> List[Segment]:
    """Split segments at every crossing and T-junction.

    Overlapping collinear pieces are merged by the union.
    """
    if not segments:
        return []

    lines = [LineString([(a.x, a.y), (b.x, b.y)]) for a, b in segments]
    noded = unary_union(MultiLineString(lines))
    if noded.is_empty:
        return []

    pieces = noded.geoms if hasattr(noded, "geoms") else [noded]
    result = []
    for piece in pieces:
        coords = list(piece.coords)
        for (x1, y1), (x2, y2) in zip(coords, coords[1:]):
            result.append((Point(x1, y1), Point(x2, y2)))
    return result


def build_wall_graph(
    walls: Iterable[Wall],
    epsilon: float = GRAPH_MERGE_EPSILON,
    min_length: float = MIN_WALL_LENGTH,
    node_intersections: bool = True,
) -> WallGraph:
    """Build the planar graph of a wall layout.

    Degenerate walls (shorter than ``min_length``) contribute no edge and
    raise nothing.

    Args:
        walls: Walls of the plan.
        epsilon: Endpoints closer than this resolve to the same vertex.
        min_length: Minimum wall length.
        node_intersections: Split walls where they cross or touch first.

    Returns:
        The WallGraph of the layout.
    """
    segments = []
    for wall in walls:
        if wall.length < min_length:
            LOGGER.debug("Skipping degenerate wall %s (length %.3f)", wall.id, wall.length)
            continue
        segments.append((wall.p1, wall.p2))

    if node_intersections and len(segments) > 1:
        segments = node_segments(segments)

    pool = VertexPool(epsilon)
    graph = WallGraph(vertices=pool.points)
    for a, b in segments:
        i = pool.resolve_or_insert(a)
        j = pool.resolve_or_insert(b)
        while len(graph.adjacency) < len(pool):
            graph.adjacency.append([])
        graph.add_edge(i, j)

    return graph


def prune_dangling(graph: WallGraph) -> WallGraph:
    """Remove dangling chains (vertices of degree 1, repeatedly).

    Only cycles can bound a room, so the 2-core of the graph is kept.
    Vertex indices are renumbered; adjacency order is preserved.
    """
    core = nx.k_core(graph.to_networkx(), 2)
    kept = sorted(core.nodes)
    if len(kept) < len(graph.vertices):
        LOGGER.debug("Pruned %d dangling vertices", len(graph.vertices) - len(kept))
    remap = {old: new for new, old in enumerate(kept)}
    pruned = WallGraph(
        vertices=[graph.vertices[i] for i in kept],
        adjacency=[[remap[j] for j in graph.adjacency[i] if j in remap] for i in kept],
    )
    return pruned


def _wall_index(walls: Sequence[Wall]) -> Tuple[List[Wall], List[LineString], STRtree]:
    candidates = [w for w in walls if not w.is_degenerate]
    geoms = [LineString([(w.p1.x, w.p1.y), (w.p2.x, w.p2.y)]) for w in candidates]
    return candidates, geoms, STRtree(geoms)


def _walls_overlapping(linework, index, tolerance: float) -> Set[int]:
    """IDs of walls running along ``linework`` (not just crossing it)."""
    candidates, geoms, tree = index
    zone = linework.buffer(tolerance, cap_style="flat")
    ids = set()
    for idx in tree.query(zone):
        # A wall crossing the zone overlaps it by about 2 * tolerance at most.
        if geoms[idx].intersection(zone).length > 4 * tolerance:
            ids.add(candidates[int(idx)].id)
    return ids


def _ring(room: RoomPolygon) -> LineString:
    coords = [(p.x, p.y) for p in room]
    return LineString(coords + coords[:1])


def walls_bounding_room(
    room: RoomPolygon, walls: Sequence[Wall], tolerance: float = WALL_TOUCH_TOLERANCE
) -> List[Wall]:
    """Return the walls that run along the boundary of a room.

    A wall counts when a real stretch of it runs along the room outline,
    not when it merely touches a corner or crosses the outline.
    """
    if len(room) < 3 or not any(not w.is_degenerate for w in walls):
        return []
    ids = _walls_overlapping(_ring(room), _wall_index(walls), tolerance)
    return sorted((w for w in walls if w.id in ids), key=lambda w: w.id)


def build_room_graph(
    rooms: Sequence[RoomPolygon], plan: FloorPlan, tolerance: float = WALL_TOUCH_TOLERANCE
) -> nx.Graph:
    """Build a graph representing room adjacency.

    Nodes are room indices (with ``area`` and ``centroid`` attributes); an
    edge joins two rooms whose outlines share a stretch of boundary. Edges
    carry the ``wall_ids`` along that stretch and ``has_door`` when a door
    sits on one of them.

    Args:
        rooms: Detected rooms, indexed by position.
        plan: The plan the rooms were detected from.
        tolerance: Minimum shared boundary length.

    Returns:
        NetworkX Graph with room adjacency.
    """
    G = nx.Graph()
    for index, room in enumerate(rooms):
        G.add_node(index, area=room.area, centroid=room.centroid)

    walls = plan.wall_list()
    if len(rooms) < 2 or not any(not w.is_degenerate for w in walls):
        return G

    index = _wall_index(walls)
    rings = [_ring(room) for room in rooms]
    door_walls = {door.wall_id for door in plan.doors}
    for i in range(len(rooms)):
        for j in range(i + 1, len(rooms)):
            common = rings[i].intersection(rings[j])
            if common.length <= tolerance:
                continue
            shared = _walls_overlapping(common, index, tolerance)
            G.add_edge(
                i,
                j,
                wall_ids=tuple(sorted(shared)),
                has_door=bool(shared & door_walls),
            )
    return G
