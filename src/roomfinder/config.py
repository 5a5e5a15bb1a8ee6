"""
Configuration for room detection and plan editing.

All lengths are centimetres, all areas square centimetres. The world frame is
Y-up: counter-clockwise polygons have positive signed area.
"""

from __future__ import annotations

from dataclasses import dataclass

# Vertex merging
GRAPH_MERGE_EPSILON = 0.5  # Endpoints closer than this share a graph vertex
GRID_MERGE_EPSILON = 1.0  # Axis tolerance when rasterizing walls

# Degenerate geometry
MIN_WALL_LENGTH = 1.0  # Shorter walls contribute no edge
MIN_ROOM_AREA = 1e-2  # Faces below this area are discarded
DETERMINANT_EPSILON = 1e-8  # Parallel-line threshold for offsetting
BOUNDARY_EPSILON = 1e-6  # Points this close to an edge count as inside

# Grid fallback
GRID_STEP = 1.0  # Rasterization step, independent from the editor snap grid

# Face walk
WALK_SAFETY_FACTOR = 4  # Max steps per walk = half-edge count * factor

# Room selector
WALL_TOUCH_TOLERANCE = 0.5  # Wall-on-room-boundary tolerance
HULL_AREA_TOLERANCE = 0.01  # Relative tolerance for the outer-hull rule
DUPLICATE_TOLERANCE = 1.0  # Area/centroid tolerance for duplicate rooms

# Record defaults
DEFAULT_WALL_THICKNESS = 10.0
DEFAULT_WALL_HEIGHT = 270.0
DEFAULT_DOOR_HEIGHT = 210.0
DEFAULT_WINDOW_HEIGHT = 120.0
DEFAULT_WINDOW_SILL = 90.0


@dataclass(frozen=True)
class DetectionSettings:
    """Tunable parameters for one room detector.

    Attributes:
        graph_merge_epsilon: Merge distance for the planar-graph method.
        grid_merge_epsilon: Axis tolerance for classifying orthogonal walls.
        grid_step: Snap step of the grid fallback.
        min_wall_length: Walls shorter than this are ignored.
        min_room_area: Faces smaller than this are ignored.
        node_intersections: Split crossing walls before building the graph.
        prefer_orthogonal: Try the grid fallback before the planar walk.
    """

    graph_merge_epsilon: float = GRAPH_MERGE_EPSILON
    grid_merge_epsilon: float = GRID_MERGE_EPSILON
    grid_step: float = GRID_STEP
    min_wall_length: float = MIN_WALL_LENGTH
    min_room_area: float = MIN_ROOM_AREA
    node_intersections: bool = True
    prefer_orthogonal: bool = True
