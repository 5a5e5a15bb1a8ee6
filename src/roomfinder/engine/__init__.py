"""Engine module for plan editing and room queries.

This module provides the edit operation API, the cached room detector,
the editing session and the hand-off to 3D extrusion.
"""

from .api import apply, apply_operations
from .handoff import ExtrusionRequest, build_extrusion_request
from .rooms import RoomDetector
from .session import EditSession

__all__ = ["apply", "apply_operations", "RoomDetector", "EditSession", "ExtrusionRequest", "build_extrusion_request"]
