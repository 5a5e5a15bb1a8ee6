"""Room detection and queries over a floor plan.

The detector composes two strategies: the orthogonal grid method first
(cheap and robust for axis-aligned plans), then the general planar-graph
walk when the grid method finds nothing. Results are cached and recomputed
lazily after any wall change.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from shapely.geometry import Polygon as ShapelyPolygon

from ..config import DUPLICATE_TOLERANCE, HULL_AREA_TOLERANCE, DetectionSettings
from ..core.model import FloorPlan, Point, RoomPolygon, Wall
from ..geom.faces import detect_general
from ..geom.grid import detect_orthogonal
from ..geom.polygon import normalize_winding, point_in_polygon, remove_collinear, signed_area

LOGGER = logging.getLogger(__name__)

ORTHOGONAL = "orthogonal"
GENERAL = "general"


def detect_candidates(walls: Sequence[Wall], settings: DetectionSettings) -> Tuple[List[List[Point]], str]:
    """Run the strategy pair and return (polygons, strategy name)."""
    if settings.prefer_orthogonal:
        rooms = detect_orthogonal(walls, settings)
        if rooms:
            return rooms, ORTHOGONAL
    return detect_general(walls, settings), GENERAL


def _is_duplicate(a: RoomPolygon, b: RoomPolygon) -> bool:
    if abs(a.area - b.area) > DUPLICATE_TOLERANCE:
        return False
    return a.centroid.distance_to(b.centroid) <= DUPLICATE_TOLERANCE


def _repair(polygon: Sequence[Point]) -> Optional[List[Point]]:
    """Return a simple version of the outline, or None if nothing is left.

    Self-touching walks (a slit around a box hanging off a wall) are fixed
    with a zero-width buffer, keeping the largest piece.
    """
    shape = ShapelyPolygon([(p.x, p.y) for p in polygon])
    if shape.is_valid:
        return list(polygon)
    fixed = shape.buffer(0)
    if fixed.is_empty:
        return None
    if fixed.geom_type == "MultiPolygon":
        fixed = max(fixed.geoms, key=lambda g: g.area)
    return remove_collinear([Point(x, y) for x, y in list(fixed.exterior.coords)[:-1]])


def remove_outer_hull(rooms: List[RoomPolygon]) -> List[RoomPolygon]:
    """Drop the largest candidate when it is only the union of the others.

    The largest room is removed when it contains the centroid of at least one
    other room and its area matches the summed area of those rooms (within
    ``HULL_AREA_TOLERANCE``). A room that merely surrounds a smaller closed
    box keeps its place.
    """
    if len(rooms) < 2:
        return rooms
    largest = max(rooms, key=lambda r: r.area)
    inside = [r for r in rooms if r is not largest and largest.contains(r.centroid)]
    if not inside:
        return rooms
    covered = sum(r.area for r in inside)
    if abs(largest.area - covered) <= HULL_AREA_TOLERANCE * largest.area:
        LOGGER.debug("Removing outer hull of area %.2f", largest.area)
        return [r for r in rooms if r is not largest]
    return rooms


def clean_candidates(polygons: Sequence[Sequence[Point]], min_area: float) -> List[RoomPolygon]:
    """Normalise, filter and order raw candidate polygons.

    Candidates are wound counter-clockwise. Self-touching outlines are
    repaired, degenerate and duplicate ones dropped, then the outer hull rule
    applies. The result is ordered by the bottom-left corner of each room's
    bounds.
    """
    rooms: List[RoomPolygon] = []
    for polygon in polygons:
        if len(polygon) < 3 or abs(signed_area(polygon)) < min_area:
            continue
        repaired = _repair(polygon)
        if repaired is None or len(repaired) < 3:
            LOGGER.debug("Dropping invalid candidate with %d vertices", len(polygon))
            continue
        polygon = repaired
        room = RoomPolygon(tuple(normalize_winding(polygon)))
        if any(_is_duplicate(room, existing) for existing in rooms):
            continue
        rooms.append(room)

    rooms = remove_outer_hull(rooms)
    rooms.sort(key=lambda r: (r.bounds[1], r.bounds[0], -r.area))
    return rooms


class RoomDetector:
    """Cached room detection bound to one floor plan.

    The detector subscribes to the plan's wall hooks; any wall insert,
    update or removal marks the cache dirty, and the next read recomputes it.
    """

    def __init__(self, plan: FloorPlan, settings: Optional[DetectionSettings] = None):
        self.plan = plan
        self.settings = settings or DetectionSettings()
        self._dirty = True
        self._cached: List[RoomPolygon] = []
        self.last_strategy: Optional[str] = None
        plan.subscribe(self.invalidate)

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def invalidate(self) -> None:
        self._dirty = True

    def detach(self) -> None:
        """Stop following wall changes of the plan."""
        self.plan.unsubscribe(self.invalidate)

    def get_rooms(self) -> List[RoomPolygon]:
        """All rooms of the plan; never raises, possibly empty."""
        if self._dirty:
            walls = self.plan.wall_list()
            polygons, strategy = detect_candidates(walls, self.settings)
            self._cached = clean_candidates(polygons, self.settings.min_room_area)
            self.last_strategy = strategy
            self._dirty = False
            LOGGER.debug("Detected %d rooms with the %s method", len(self._cached), strategy)
        return list(self._cached)

    def get_room_containing(self, point: Point) -> Optional[RoomPolygon]:
        """Smallest room whose outline contains ``point`` (edges count as inside).

        Room outlines include any closed box they surround, so a point inside
        a column box lies in both; the box wins. Ties keep the sorted order.
        """
        containing = [room for room in self.get_rooms() if point_in_polygon(point, room.points)]
        if not containing:
            return None
        return min(containing, key=lambda r: r.area)

    def get_largest_room(self) -> Optional[RoomPolygon]:
        rooms = self.get_rooms()
        if not rooms:
            return None
        return max(rooms, key=lambda r: r.area)
