"""Image generation for floor plan inspection.

Renders walls (with their thickness), openings and detected rooms to a PNG
in the Y-up world frame.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from matplotlib.figure import Figure

from ..core.model import FloorPlan, RoomPolygon
from ..engine.handoff import opening_span

LOGGER = logging.getLogger(__name__)

# Drawing parameters
ROOM_COLORS = ["#8dd3c7", "#ffffb3", "#bebada", "#fb8072", "#80b1d3", "#fdb462", "#b3de69", "#fccde5"]
WALL_COLOR = "#000000"
DOOR_COLOR = "#FF0000"
WINDOW_COLOR = "#1E90FF"
HIGHLIGHT_COLOR = "#FF1493"
POINTS_PER_CM = 0.25  # Line width scale for wall thickness


def generate_plan_image(
    plan: FloorPlan,
    rooms: Sequence[RoomPolygon],
    output_path: Path,
    highlight: Optional[RoomPolygon] = None,
    label_areas: bool = True,
) -> bool:
    """Generate a PNG image of a floor plan and its rooms.

    Args:
        plan: The plan whose walls and openings are drawn.
        rooms: Rooms to fill, usually the detector's current result.
        output_path: Path where to save the PNG image.
        highlight: Optional room outlined in the highlight colour.
        label_areas: Write each room's area (m²) at its centroid.

    Returns:
        True if the image was generated successfully, False otherwise.
    """
    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        fig = Figure(figsize=(10, 10))
        ax = fig.subplots()

        for index, room in enumerate(rooms):
            xs = [p.x for p in room] + [room[0].x]
            ys = [p.y for p in room] + [room[0].y]
            ax.fill(xs, ys, color=ROOM_COLORS[index % len(ROOM_COLORS)], alpha=0.7, linewidth=0)
            if label_areas:
                c = room.centroid
                ax.text(c.x, c.y, f"{room.area / 10000.0:.2f} m²", ha="center", va="center", fontsize=9)

        if highlight is not None:
            xs = [p.x for p in highlight] + [highlight[0].x]
            ys = [p.y for p in highlight] + [highlight[0].y]
            ax.plot(xs, ys, color=HIGHLIGHT_COLOR, linewidth=3)

        for wall in plan.walls.values():
            ax.plot(
                [wall.p1.x, wall.p2.x],
                [wall.p1.y, wall.p2.y],
                color=WALL_COLOR,
                linewidth=max(wall.thickness_cm * POINTS_PER_CM, 1.0),
                solid_capstyle="butt",
            )

        for opening in plan.openings.values():
            wall = plan.walls.get(opening.wall_id)
            if wall is None:
                continue
            start, end = opening_span(wall, opening)
            ax.plot(
                [start.x, end.x],
                [start.y, end.y],
                color=DOOR_COLOR if opening.is_door else WINDOW_COLOR,
                linewidth=max(wall.thickness_cm * POINTS_PER_CM, 1.0) + 1.0,
                solid_capstyle="butt",
            )

        ax.set_aspect("equal", adjustable="box")
        ax.axis("off")
        fig.tight_layout()
        fig.savefig(output_path, dpi=140)
        return True

    except (OSError, ValueError) as e:
        LOGGER.error("Error in image generation: %s", e)
        return False
