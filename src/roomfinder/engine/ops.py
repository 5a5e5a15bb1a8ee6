"""Edit operations on a floor plan.

Each operation validates its parameters in ``precheck`` and mutates the plan
in ``apply`` through the plan's hooks, so room caches subscribed to the plan
are invalidated on every wall change. Operations are looked up by name in a
small registry.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, Optional, Protocol, Sequence, Union

from ..config import DEFAULT_DOOR_HEIGHT, DEFAULT_WALL_HEIGHT, DEFAULT_WALL_THICKNESS, DEFAULT_WINDOW_HEIGHT, DEFAULT_WINDOW_SILL
from ..core.model import Device, FloorPlan, Opening, OpeningKind, Point, Wall, moved_wall
from ..geom.polygon import closest_point_on_segment, distance
from .validators import (
    InvalidOperation,
    clamp_offset,
    require_opening,
    require_wall,
    validate_opening_fits,
    validate_wall_length,
)

PointLike = Union[Point, Sequence[float]]


def as_point(value: PointLike) -> Point:
    """Accept a Point or an ``(x, y)`` pair."""
    if isinstance(value, Point):
        return value
    try:
        x, y = value
        return Point(float(x), float(y))
    except (TypeError, ValueError) as e:
        raise InvalidOperation(f"Expected an (x, y) pair, got {value!r}") from e


def as_kind(value: Union[str, OpeningKind]) -> OpeningKind:
    if isinstance(value, OpeningKind):
        return value
    try:
        return OpeningKind(str(value).lower())
    except ValueError as e:
        raise InvalidOperation(f"Unknown opening kind: {value!r}") from e


class Operation(Protocol):
    """Protocol for plan edit operations.

    All operations must implement this interface to be compatible
    with the operation registry.
    """

    def precheck(self, plan: FloorPlan, **kwargs: Any) -> bool:
        """Validate that the operation can be applied to the plan.

        Raises:
            InvalidOperation: If validation fails with a specific reason.
        """
        ...

    def apply(self, plan: FloorPlan, **kwargs: Any) -> Any:
        """Apply the operation, mutating the plan, and return the affected record."""
        ...


def _reclamp_openings(plan: FloorPlan, wall: Wall) -> None:
    for opening in plan.openings_on(wall.id):
        offset = clamp_offset(wall, opening.offset_cm, opening.width_cm)
        if offset != opening.offset_cm:
            plan.replace_opening(replace(opening, offset_cm=offset))


class AddWallOp:
    """Append a new wall. Walls shorter than 1 cm are rejected."""

    def precheck(self, plan: FloorPlan, p1: PointLike, p2: PointLike, **kwargs: Any) -> bool:
        validate_wall_length(as_point(p1), as_point(p2))
        return True

    def apply(
        self,
        plan: FloorPlan,
        p1: PointLike,
        p2: PointLike,
        thickness: float = DEFAULT_WALL_THICKNESS,
        height: float = DEFAULT_WALL_HEIGHT,
        **kwargs: Any,
    ) -> Wall:
        try:
            wall = Wall(plan.allocate_id(), as_point(p1), as_point(p2), float(thickness), float(height))
        except ValueError as e:
            raise InvalidOperation(str(e)) from e
        return plan.insert_wall(wall)


class MoveWallOp:
    """Translate a wall by ``(dx, dy)``; hosted openings keep their offsets."""

    def precheck(self, plan: FloorPlan, wall: int, **kwargs: Any) -> bool:
        require_wall(plan, wall)
        return True

    def apply(self, plan: FloorPlan, wall: int, dx: float = 0.0, dy: float = 0.0, **kwargs: Any) -> Wall:
        wall_obj = require_wall(plan, wall)
        new_wall = moved_wall(
            wall_obj,
            Point(wall_obj.p1.x + dx, wall_obj.p1.y + dy),
            Point(wall_obj.p2.x + dx, wall_obj.p2.y + dy),
        )
        return plan.replace_wall(new_wall)


class MoveEndpointOp:
    """Move one end of a wall (resize).

    The wall may become degenerate while being dragged; room detection
    ignores it until it is long enough again. A resize that would leave a
    hosted opening wider than the wall is rejected.
    """

    def precheck(self, plan: FloorPlan, wall: int, end: str, to: PointLike, **kwargs: Any) -> bool:
        wall_obj = require_wall(plan, wall)
        if end not in ("p1", "p2"):
            raise InvalidOperation(f"Endpoint must be 'p1' or 'p2', got {end!r}")
        target = as_point(to)
        fixed = wall_obj.p2 if end == "p1" else wall_obj.p1
        new_length = distance(target, fixed)
        for opening in plan.openings_on(wall_obj.id):
            if opening.width_cm > new_length:
                raise InvalidOperation(
                    f"Opening {opening.id} ({opening.width_cm} cm) would not fit on wall {wall_obj.id} "
                    f"shortened to {new_length:.1f} cm"
                )
        return True

    def apply(self, plan: FloorPlan, wall: int, end: str, to: PointLike, **kwargs: Any) -> Wall:
        wall_obj = require_wall(plan, wall)
        target = as_point(to)
        if end == "p1":
            new_wall = moved_wall(wall_obj, target, wall_obj.p2)
        else:
            new_wall = moved_wall(wall_obj, wall_obj.p1, target)
        plan.replace_wall(new_wall)
        _reclamp_openings(plan, new_wall)
        return new_wall


class DeleteWallOp:
    """Remove a wall together with its openings and wall-mounted devices."""

    def precheck(self, plan: FloorPlan, wall: int, **kwargs: Any) -> bool:
        require_wall(plan, wall)
        return True

    def apply(self, plan: FloorPlan, wall: int, **kwargs: Any) -> Wall:
        require_wall(plan, wall)
        for opening in plan.openings_on(wall):
            plan.remove_opening(opening.id)
        for device in plan.devices_on(wall):
            plan.remove_device(device.id)
        return plan.remove_wall(wall)


def _default_height(kind: OpeningKind) -> float:
    return DEFAULT_DOOR_HEIGHT if kind is OpeningKind.DOOR else DEFAULT_WINDOW_HEIGHT


def _default_sill(kind: OpeningKind) -> float:
    return 0.0 if kind is OpeningKind.DOOR else DEFAULT_WINDOW_SILL


class AddOpeningOp:
    """Add a door or window; the offset is clamped to fit on the wall."""

    def precheck(self, plan: FloorPlan, wall: int, width: float, kind: str = "door", **kwargs: Any) -> bool:
        as_kind(kind)
        validate_opening_fits(require_wall(plan, wall), float(width))
        return True

    def apply(
        self,
        plan: FloorPlan,
        wall: int,
        width: float,
        kind: str = "door",
        offset: float = 0.0,
        height: Optional[float] = None,
        sill: Optional[float] = None,
        **kwargs: Any,
    ) -> Opening:
        wall_obj = require_wall(plan, wall)
        opening_kind = as_kind(kind)
        width = float(width)
        try:
            opening = Opening(
                id=plan.allocate_id(),
                kind=opening_kind,
                wall_id=wall_obj.id,
                offset_cm=clamp_offset(wall_obj, float(offset), width),
                width_cm=width,
                height_cm=float(height) if height is not None else _default_height(opening_kind),
                sill_cm=float(sill) if sill is not None else _default_sill(opening_kind),
            )
        except ValueError as e:
            raise InvalidOperation(str(e)) from e
        return plan.insert_opening(opening)


def offset_under_pointer(wall: Wall, pointer: Point, width: float) -> float:
    """Offset that centres an opening of ``width`` on the pointer's projection."""
    projected = closest_point_on_segment(pointer, wall.p1, wall.p2)
    return clamp_offset(wall, distance(wall.p1, projected) - width / 2.0, width)


class PlaceOpeningOp(AddOpeningOp):
    """Add an opening centred under a pointer position."""

    def apply(self, plan: FloorPlan, wall: int, width: float, at: PointLike = (0.0, 0.0), **kwargs: Any) -> Opening:
        wall_obj = require_wall(plan, wall)
        kwargs.pop("offset", None)
        offset = offset_under_pointer(wall_obj, as_point(at), float(width))
        return super().apply(plan, wall=wall, width=width, offset=offset, **kwargs)


class DeleteOpeningOp:
    def precheck(self, plan: FloorPlan, opening: int, **kwargs: Any) -> bool:
        require_opening(plan, opening)
        return True

    def apply(self, plan: FloorPlan, opening: int, **kwargs: Any) -> Opening:
        require_opening(plan, opening)
        return plan.remove_opening(opening)


class AddDeviceOp:
    def precheck(self, plan: FloorPlan, name: str, wall: Optional[int] = None, **kwargs: Any) -> bool:
        if not name:
            raise InvalidOperation("Device name must not be empty")
        if wall is not None:
            require_wall(plan, wall)
        return True

    def apply(
        self,
        plan: FloorPlan,
        name: str,
        at: PointLike,
        elevation: float = 0.0,
        wall: Optional[int] = None,
        **kwargs: Any,
    ) -> Device:
        device = Device(plan.allocate_id(), name, as_point(at), float(elevation), wall)
        return plan.insert_device(device)


class DeleteDeviceOp:
    def precheck(self, plan: FloorPlan, device: int, **kwargs: Any) -> bool:
        if device not in plan.devices:
            raise InvalidOperation(f"Device {device} does not exist")
        return True

    def apply(self, plan: FloorPlan, device: int, **kwargs: Any) -> Device:
        return plan.remove_device(device)


# Registry of available operations
_OPERATIONS: Dict[str, Operation] = {
    "add_wall": AddWallOp(),
    "move_wall": MoveWallOp(),
    "move_endpoint": MoveEndpointOp(),
    "delete_wall": DeleteWallOp(),
    "add_opening": AddOpeningOp(),
    "place_opening": PlaceOpeningOp(),
    "delete_opening": DeleteOpeningOp(),
    "add_device": AddDeviceOp(),
    "delete_device": DeleteDeviceOp(),
}


def register_operation(name: str, operation: Operation) -> None:
    """Register a new operation in the registry.

    Args:
        name: Name of the operation.
        operation: Operation instance to register.
    """
    _OPERATIONS[name] = operation


def get_operation(name: str) -> Operation:
    """Get an operation by name.

    Raises:
        KeyError: If the operation is not registered.
    """
    if name not in _OPERATIONS:
        raise KeyError(f"Operation '{name}' is not registered")
    return _OPERATIONS[name]


def list_operations() -> list[str]:
    """List all registered operations."""
    return list(_OPERATIONS.keys())


def nearest_wall(walls: Iterable[Wall], point: Point, max_distance: float) -> Optional[Wall]:
    """Closest wall to ``point`` within ``max_distance``, for pointer picking."""
    best = None
    best_distance = max_distance
    for wall in walls:
        d = distance(point, closest_point_on_segment(point, wall.p1, wall.p2))
        if d <= best_distance:
            best, best_distance = wall, d
    return best
