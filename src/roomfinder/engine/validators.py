"""Validation helpers for plan edits.

Edit operations call these before touching the plan; failures surface as
``InvalidOperation``. Room detection never goes through here: geometry
problems are filtered, not raised.
"""

from __future__ import annotations

from ..config import MIN_WALL_LENGTH
from ..core.model import FloorPlan, Opening, Point, Wall


class InvalidOperation(Exception):
    """Raised when an edit would violate plan invariants."""

    pass


def require_wall(plan: FloorPlan, wall_id: int) -> Wall:
    """Return the wall or raise InvalidOperation if it does not exist."""
    try:
        return plan.walls[wall_id]
    except KeyError:
        raise InvalidOperation(f"Wall {wall_id} does not exist") from None


def require_opening(plan: FloorPlan, opening_id: int) -> Opening:
    try:
        return plan.openings[opening_id]
    except KeyError:
        raise InvalidOperation(f"Opening {opening_id} does not exist") from None


def validate_wall_length(p1: Point, p2: Point) -> None:
    """Reject walls shorter than ``MIN_WALL_LENGTH`` at insertion."""
    if p1.distance_to(p2) < MIN_WALL_LENGTH:
        raise InvalidOperation(
            f"Wall from ({p1.x}, {p1.y}) to ({p2.x}, {p2.y}) is shorter than {MIN_WALL_LENGTH} cm"
        )


def clamp_offset(wall: Wall, offset: float, width: float) -> float:
    """Clamp an opening offset to ``[0, wall length - width]``.

    On a wall shorter than the opening the result is 0.
    """
    upper = max(wall.length - width, 0.0)
    return min(max(offset, 0.0), upper)


def validate_opening_fits(wall: Wall, width: float) -> None:
    if width > wall.length:
        raise InvalidOperation(
            f"Opening of width {width} cm does not fit on wall {wall.id} ({wall.length:.1f} cm)"
        )


def validate_plan(plan: FloorPlan) -> bool:
    """Check reference integrity of a whole plan.

    Every opening must reference an existing wall and lie within it; every
    wall-mounted device must reference an existing wall.

    Raises:
        InvalidOperation: On the first violation found.
    """
    for opening in plan.openings.values():
        wall = plan.walls.get(opening.wall_id)
        if wall is None:
            raise InvalidOperation(f"Opening {opening.id} references missing wall {opening.wall_id}")
        if opening.offset_cm < 0 or opening.offset_cm + opening.width_cm > wall.length + 1e-6:
            raise InvalidOperation(f"Opening {opening.id} extends past the ends of wall {wall.id}")

    for device in plan.devices.values():
        if device.wall_id is not None and device.wall_id not in plan.walls:
            raise InvalidOperation(f"Device {device.id} references missing wall {device.wall_id}")

    return True
