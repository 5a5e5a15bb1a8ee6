"""Reader and writer for floor plan JSON files.

The file holds the records verbatim::

    {
      "walls":   [{"id": 1, "p1": [0, 0], "p2": [500, 0], "thickness_cm": 10, "height_cm": 270}],
      "doors":   [{"id": 5, "wall_id": 1, "offset_cm": 50, "width_cm": 90, "height_cm": 210}],
      "windows": [{"id": 6, "wall_id": 2, "offset_cm": 80, "width_cm": 120, "height_cm": 120, "sill_cm": 90}],
      "devices": [{"id": 7, "name": "socket", "position": [20, 0], "elevation_cm": 30, "wall_id": 1}]
    }

Room polygons are derived data and never stored.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from ..config import DEFAULT_WALL_HEIGHT, DEFAULT_WALL_THICKNESS
from ..core.model import Device, FloorPlan, Opening, OpeningKind, Point, Wall


def _parse_point(value: Any) -> Point:
    """Parse ``[x, y]`` or ``{"x": .., "y": ..}``.

    Raises:
        ValueError: If the value is not a 2D point.
    """
    if isinstance(value, dict):
        return Point(float(value["x"]), float(value["y"]))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return Point(float(value[0]), float(value[1]))
    raise ValueError(f"Invalid point: {value!r}")


def _parse_opening(data: Dict[str, Any], kind: OpeningKind, walls: Dict[int, Wall]) -> Opening:
    wall_id = int(data["wall_id"])
    if wall_id not in walls:
        raise ValueError(f"references nonexistent wall {wall_id}")
    return Opening(
        id=int(data["id"]),
        kind=kind,
        wall_id=wall_id,
        offset_cm=float(data.get("offset_cm", 0.0)),
        width_cm=float(data["width_cm"]),
        height_cm=float(data["height_cm"]),
        sill_cm=float(data.get("sill_cm", 0.0)),
    )


def plan_from_dict(data: Dict[str, Any]) -> FloorPlan:
    """Build a FloorPlan from its JSON mapping.

    Raises:
        ValueError: If a record is missing fields or references a missing wall.
    """
    plan = FloorPlan()

    for wall_data in data.get("walls", []):
        try:
            wall = Wall(
                id=int(wall_data["id"]),
                p1=_parse_point(wall_data["p1"]),
                p2=_parse_point(wall_data["p2"]),
                thickness_cm=float(wall_data.get("thickness_cm", DEFAULT_WALL_THICKNESS)),
                height_cm=float(wall_data.get("height_cm", DEFAULT_WALL_HEIGHT)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid wall data for {wall_data.get('id')}: {e}") from e
        plan.insert_wall(wall)

    for key, kind in (("doors", OpeningKind.DOOR), ("windows", OpeningKind.WINDOW)):
        for opening_data in data.get(key, []):
            try:
                opening = _parse_opening(opening_data, kind, plan.walls)
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Invalid {kind.value} data for {opening_data.get('id')}: {e}") from e
            plan.insert_opening(opening)

    for device_data in data.get("devices", []):
        try:
            wall_id = device_data.get("wall_id")
            device = Device(
                id=int(device_data["id"]),
                name=str(device_data["name"]),
                position=_parse_point(device_data["position"]),
                elevation_cm=float(device_data.get("elevation_cm", 0.0)),
                wall_id=int(wall_id) if wall_id is not None else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid device data for {device_data.get('id')}: {e}") from e
        plan.insert_device(device)

    return plan


def plan_to_dict(plan: FloorPlan) -> Dict[str, Any]:
    def opening_dict(o: Opening) -> Dict[str, Any]:
        return {
            "id": o.id,
            "wall_id": o.wall_id,
            "offset_cm": o.offset_cm,
            "width_cm": o.width_cm,
            "height_cm": o.height_cm,
            "sill_cm": o.sill_cm,
        }

    return {
        "walls": [
            {
                "id": w.id,
                "p1": [w.p1.x, w.p1.y],
                "p2": [w.p2.x, w.p2.y],
                "thickness_cm": w.thickness_cm,
                "height_cm": w.height_cm,
            }
            for w in plan.walls.values()
        ],
        "doors": [opening_dict(o) for o in plan.doors],
        "windows": [opening_dict(o) for o in plan.windows],
        "devices": [
            {
                "id": d.id,
                "name": d.name,
                "position": [d.position.x, d.position.y],
                "elevation_cm": d.elevation_cm,
                "wall_id": d.wall_id,
            }
            for d in plan.devices.values()
        ],
    }


def load_plan(path: Union[str, Path]) -> FloorPlan:
    """Load a floor plan from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the JSON data is invalid or malformed.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at the top level of {path}")
    return plan_from_dict(data)


def save_plan(plan: FloorPlan, output_path: Union[str, Path]) -> None:
    """Save a floor plan to a JSON file, creating parent directories."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(plan_to_dict(plan), f, indent=2)
