"""Polygon geometry primitives.

Pure functions over sequences of points, shared by room detection, opening
placement and the extrusion hand-off. The world frame is Y-up: a polygon
listed counter-clockwise has a positive signed area.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from ..config import BOUNDARY_EPSILON, DETERMINANT_EPSILON
from ..core.model import Point

Polygon = Sequence[Point]


def distance(p1: Point, p2: Point) -> float:
    """Calculate Euclidean distance between two points."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def _cross(o: Point, a: Point, b: Point) -> float:
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def signed_area(polygon: Polygon) -> float:
    """Shoelace area; positive for counter-clockwise polygons (Y-up)."""
    n = len(polygon)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        total += a.x * b.y - b.x * a.y
    return total / 2.0


def centroid(polygon: Polygon) -> Point:
    """Area-weighted centroid.

    Degenerate polygons (area close to zero) fall back to their first vertex.
    """
    if not polygon:
        return Point(0.0, 0.0)
    area = signed_area(polygon)
    if abs(area) < 1e-12:
        return polygon[0]

    n = len(polygon)
    cx = cy = 0.0
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        cross = a.x * b.y - b.x * a.y
        cx += (a.x + b.x) * cross
        cy += (a.y + b.y) * cross
    factor = 1.0 / (6.0 * area)
    return Point(cx * factor, cy * factor)


def closest_point_on_segment(point: Point, a: Point, b: Point) -> Point:
    """Project ``point`` onto segment ``ab``, clamped to its endpoints."""
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return a
    t = ((point.x - a.x) * dx + (point.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return Point(a.x + t * dx, a.y + t * dy)


def point_on_segment(point: Point, a: Point, b: Point, tolerance: float = BOUNDARY_EPSILON) -> bool:
    return distance(point, closest_point_on_segment(point, a, b)) <= tolerance


def point_in_polygon(point: Point, polygon: Polygon) -> bool:
    """Ray-crossing containment test.

    Points lying on an edge (within ``BOUNDARY_EPSILON``) count as inside.
    """
    n = len(polygon)
    if n < 3:
        return False

    for i in range(n):
        if point_on_segment(point, polygon[i], polygon[(i + 1) % n]):
            return True

    inside = False
    j = n - 1
    for i in range(n):
        pi = polygon[i]
        pj = polygon[j]
        if (pi.y > point.y) != (pj.y > point.y):
            x_cross = (pj.x - pi.x) * (point.y - pi.y) / (pj.y - pi.y) + pi.x
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside


def line_line_intersection(p1: Point, d1: Point, p2: Point, d2: Point) -> Optional[Point]:
    """Intersect the lines ``p1 + t*d1`` and ``p2 + s*d2``.

    Returns None when the directions are parallel (determinant below
    ``DETERMINANT_EPSILON``).
    """
    det = d1.x * d2.y - d1.y * d2.x
    if abs(det) < DETERMINANT_EPSILON:
        return None
    t = ((p2.x - p1.x) * d2.y - (p2.y - p1.y) * d2.x) / det
    return Point(p1.x + t * d1.x, p1.y + t * d1.y)


def normalize_winding(polygon: Polygon, counter_clockwise: bool = True) -> List[Point]:
    """Return the polygon with the requested orientation."""
    points = list(polygon)
    area = signed_area(points)
    if (counter_clockwise and area < 0) or (not counter_clockwise and area > 0):
        points.reverse()
    return points


def outward_normal(a: Point, b: Point, interior: Point) -> Point:
    """Unit normal of segment ``ab`` pointing away from ``interior``.

    Zero-length segments yield (0, 0).
    """
    dx = b.x - a.x
    dy = b.y - a.y
    length = math.hypot(dx, dy)
    if length == 0:
        return Point(0.0, 0.0)
    nx, ny = -dy / length, dx / length
    mid_x = (a.x + b.x) / 2.0
    mid_y = (a.y + b.y) / 2.0
    if nx * (interior.x - mid_x) + ny * (interior.y - mid_y) > 0:
        nx, ny = -nx, -ny
    return Point(nx, ny)


def _edge_normal(a: Point, b: Point, orientation: float) -> Point:
    # Right-hand normal of a CCW edge points outward.
    dx = b.x - a.x
    dy = b.y - a.y
    length = math.hypot(dx, dy)
    if length == 0:
        return Point(0.0, 0.0)
    return Point(orientation * dy / length, -orientation * dx / length)


def offset_polygon(polygon: Polygon, offset: float) -> List[Point]:
    """Offset every edge by ``offset`` and rebuild the corners.

    Positive offsets grow the polygon, negative ones shrink it, whatever the
    input winding. Each corner is the intersection of its two adjacent offset
    edges; parallel or unstable corners use the averaged edge normals instead.
    """
    n = len(polygon)
    if n < 3:
        return list(polygon)

    orientation = 1.0 if signed_area(polygon) >= 0 else -1.0
    result = []
    for i in range(n):
        prev_pt = polygon[i - 1]
        cur = polygon[i]
        next_pt = polygon[(i + 1) % n]

        n_prev = _edge_normal(prev_pt, cur, orientation)
        n_next = _edge_normal(cur, next_pt, orientation)

        line_a = Point(prev_pt.x + n_prev.x * offset, prev_pt.y + n_prev.y * offset)
        line_b = Point(cur.x + n_next.x * offset, cur.y + n_next.y * offset)
        d_prev = Point(cur.x - prev_pt.x, cur.y - prev_pt.y)
        d_next = Point(next_pt.x - cur.x, next_pt.y - cur.y)

        corner = line_line_intersection(line_a, d_prev, line_b, d_next)
        if corner is None:
            avg_x = n_prev.x + n_next.x
            avg_y = n_prev.y + n_next.y
            length = math.hypot(avg_x, avg_y)
            if length < DETERMINANT_EPSILON:
                avg_x, avg_y, length = n_next.x, n_next.y, 1.0
            corner = Point(cur.x + avg_x / length * offset, cur.y + avg_y / length * offset)
        result.append(corner)
    return result


def remove_collinear(polygon: Polygon, tolerance: float = 1e-9) -> List[Point]:
    """Drop repeated vertices and vertices lying on a straight run."""
    points: List[Point] = []
    for p in polygon:
        if not points or distance(points[-1], p) > tolerance:
            points.append(p)
    while len(points) > 1 and distance(points[0], points[-1]) <= tolerance:
        points.pop()

    changed = True
    while changed and len(points) > 3:
        changed = False
        for i in range(len(points)):
            a = points[i - 1]
            b = points[i]
            c = points[(i + 1) % len(points)]
            scale = max(distance(a, b) * distance(b, c), 1.0)
            if abs(_cross(a, b, c)) <= tolerance * scale:
                dot = (b.x - a.x) * (c.x - b.x) + (b.y - a.y) * (c.y - b.y)
                # Only straight runs; keep spikes that double back.
                if dot > 0:
                    del points[i]
                    changed = True
                    break
    return points


def polygon_bounds(polygon: Polygon) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y)."""
    xs = [p.x for p in polygon]
    ys = [p.y for p in polygon]
    return min(xs), min(ys), max(xs), max(ys)
