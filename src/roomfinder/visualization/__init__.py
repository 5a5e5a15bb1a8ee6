"""Visualization module for floor plans.

This module provides functionality to render floor plans and their
detected rooms to PNG images.
"""

from .generator import generate_plan_image

__all__ = ["generate_plan_image"]
