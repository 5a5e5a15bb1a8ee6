"""Geometry for room detection.

This module provides the polygon primitives and the two room detection
strategies: the planar-graph face walk and the orthogonal grid fallback.
"""

from .faces import detect_general, enumerate_faces
from .grid import detect_orthogonal
from .polygon import (
    centroid,
    closest_point_on_segment,
    normalize_winding,
    offset_polygon,
    outward_normal,
    point_in_polygon,
    signed_area,
)

__all__ = [
    "signed_area",
    "centroid",
    "point_in_polygon",
    "closest_point_on_segment",
    "normalize_winding",
    "outward_normal",
    "offset_polygon",
    "enumerate_faces",
    "detect_general",
    "detect_orthogonal",
]
