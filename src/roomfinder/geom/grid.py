"""Orthogonal grid fallback for room detection.

Axis-aligned walls are rasterized onto a cell grid: each wall blocks the
cell-to-cell moves across it. A flood fill from the grid origin marks the
exterior, every remaining connected set of cells is a room, and its outline
is recovered from the edges that belong to exactly one of its cells.

Wall endpoints snap to ``grid_step``. The lattice only keeps the distinct
snapped coordinates (plus a one-cell margin), so each cell is the rectangle
between two consecutive lattice lines. This has the same connectivity as the
dense grid at ``grid_step`` while staying small for large plans.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..config import DetectionSettings
from ..core.model import Point, Wall
from .polygon import normalize_winding, remove_collinear, signed_area

LOGGER = logging.getLogger(__name__)

HORIZONTAL = "horizontal"
VERTICAL = "vertical"

Cell = Tuple[int, int]
LatticePoint = Tuple[int, int]


def classify_wall(wall: Wall, tolerance: float) -> Optional[str]:
    """Return ``"horizontal"``, ``"vertical"`` or None for a diagonal wall."""
    dx = abs(wall.p2.x - wall.p1.x)
    dy = abs(wall.p2.y - wall.p1.y)
    if dy <= tolerance and dx > dy:
        return HORIZONTAL
    if dx <= tolerance and dy > dx:
        return VERTICAL
    return None


class WallRaster:
    """Blocked cell adjacencies of an orthogonal wall layout.

    Attributes:
        xs: Lattice x coordinates in grid units, ascending.
        ys: Lattice y coordinates in grid units, ascending.
        block_h: ``block_h[k, c]`` blocks the move between cell rows
            ``k - 1`` and ``k`` in column ``c`` (lattice row ``k``).
        block_v: ``block_v[r, k]`` blocks the move between cell columns
            ``k - 1`` and ``k`` in row ``r`` (lattice column ``k``).
    """

    def __init__(self, xs: List[int], ys: List[int]):
        self.xs = xs
        self.ys = ys
        self._x_index = {x: i for i, x in enumerate(xs)}
        self._y_index = {y: i for i, y in enumerate(ys)}
        self.block_h = np.zeros((len(ys), len(xs) - 1), dtype=bool)
        self.block_v = np.zeros((len(ys) - 1, len(xs)), dtype=bool)

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.ys) - 1, len(self.xs) - 1

    def block_horizontal(self, y: int, x0: int, x1: int) -> None:
        k = self._y_index[y]
        self.block_h[k, self._x_index[x0]:self._x_index[x1]] = True

    def block_vertical(self, x: int, y0: int, y1: int) -> None:
        k = self._x_index[x]
        self.block_v[self._y_index[y0]:self._y_index[y1], k] = True

    def neighbours(self, cell: Cell):
        r, c = cell
        rows, cols = self.shape
        if r + 1 < rows and not self.block_h[r + 1, c]:
            yield r + 1, c
        if r > 0 and not self.block_h[r, c]:
            yield r - 1, c
        if c + 1 < cols and not self.block_v[r, c + 1]:
            yield r, c + 1
        if c > 0 and not self.block_v[r, c]:
            yield r, c - 1

    def flood(self, seed: Cell, visited: np.ndarray) -> np.ndarray:
        """Mark and return the cells reachable from ``seed``."""
        region = np.zeros(self.shape, dtype=bool)
        queue = deque([seed])
        visited[seed] = True
        region[seed] = True
        while queue:
            cell = queue.popleft()
            for nxt in self.neighbours(cell):
                if not visited[nxt]:
                    visited[nxt] = True
                    region[nxt] = True
                    queue.append(nxt)
        return region


def rasterize(walls: Sequence[Wall], settings: DetectionSettings) -> Optional[WallRaster]:
    """Snap orthogonal walls to the grid; None if any wall is diagonal."""
    step = settings.grid_step
    spans = []
    for wall in walls:
        if wall.length < settings.min_wall_length:
            continue
        kind = classify_wall(wall, settings.grid_merge_epsilon)
        if kind is None:
            LOGGER.debug("Wall %s is not axis-aligned, grid method not applicable", wall.id)
            return None
        if kind == HORIZONTAL:
            y = round((wall.p1.y + wall.p2.y) / 2.0 / step)
            x0, x1 = sorted((round(wall.p1.x / step), round(wall.p2.x / step)))
            if x0 != x1:
                spans.append((kind, y, x0, x1))
        else:
            x = round((wall.p1.x + wall.p2.x) / 2.0 / step)
            y0, y1 = sorted((round(wall.p1.y / step), round(wall.p2.y / step)))
            if y0 != y1:
                spans.append((kind, x, y0, y1))

    if not spans:
        return None

    xs = set()
    ys = set()
    for kind, fixed, lo, hi in spans:
        if kind == HORIZONTAL:
            ys.add(fixed)
            xs.update((lo, hi))
        else:
            xs.add(fixed)
            ys.update((lo, hi))
    # One-cell margin so the origin cell is always outside.
    xs.update((min(xs) - 1, max(xs) + 1))
    ys.update((min(ys) - 1, max(ys) + 1))

    raster = WallRaster(sorted(xs), sorted(ys))
    for kind, fixed, lo, hi in spans:
        if kind == HORIZONTAL:
            raster.block_horizontal(fixed, lo, hi)
        else:
            raster.block_vertical(fixed, lo, hi)
    return raster


def boundary_edges(region: np.ndarray) -> List[Tuple[LatticePoint, LatticePoint]]:
    """Edges belonging to exactly one cell of the region.

    Each cell contributes its four edges; edges shared by two region cells
    cancel out (XOR), leaving the outline. Lattice points are (column, row).
    """
    padded = np.pad(region, 1)
    horizontal = padded[:-1, 1:-1] ^ padded[1:, 1:-1]
    vertical = padded[1:-1, :-1] ^ padded[1:-1, 1:]

    edges = []
    for k, c in zip(*np.nonzero(horizontal)):
        edges.append(((int(c), int(k)), (int(c) + 1, int(k))))
    for r, k in zip(*np.nonzero(vertical)):
        edges.append(((int(k), int(r)), (int(k), int(r) + 1)))
    return edges


def chain_loops(edges: List[Tuple[LatticePoint, LatticePoint]]) -> Optional[List[List[LatticePoint]]]:
    """Join boundary edges into closed loops.

    Returns None when a lattice point does not have exactly two boundary
    edges (a pinch where the region touches itself at a corner).
    """
    links: Dict[LatticePoint, List[LatticePoint]] = defaultdict(list)
    for a, b in edges:
        links[a].append(b)
        links[b].append(a)
    if any(len(n) != 2 for n in links.values()):
        return None

    loops = []
    unused = set(links)
    while unused:
        start = unused.pop()
        loop = [start]
        prev, cur = start, links[start][0]
        while cur != start:
            if cur not in unused:
                return None
            unused.discard(cur)
            loop.append(cur)
            a, b = links[cur]
            prev, cur = cur, (b if a == prev else a)
        loops.append(loop)
    return loops


def detect_orthogonal(walls: Sequence[Wall], settings: Optional[DetectionSettings] = None) -> Optional[List[List[Point]]]:
    """Detect rooms of an axis-aligned layout.

    Returns None when the method does not apply (a diagonal wall, no usable
    walls, a region whose outline pinches at a corner) or finds no enclosed
    region, so the caller can fall back to the planar-graph walk.
    """
    settings = settings or DetectionSettings()
    raster = rasterize(walls, settings)
    if raster is None:
        return None

    visited = np.zeros(raster.shape, dtype=bool)
    raster.flood((0, 0), visited)

    step = settings.grid_step
    rooms = []
    for cell in zip(*np.nonzero(~visited)):
        cell = (int(cell[0]), int(cell[1]))
        if visited[cell]:
            continue
        region = raster.flood(cell, visited)
        loops = chain_loops(boundary_edges(region))
        if not loops:
            # All regions or none: the planar walk takes over.
            LOGGER.debug("Region at cell %s does not chain, grid method not applicable", cell)
            return None

        polygons = [[Point(raster.xs[c] * step, raster.ys[r] * step) for c, r in loop] for loop in loops]
        # Holes are ignored; the outline is the loop enclosing the most area.
        outline = max(polygons, key=lambda p: abs(signed_area(p)))
        outline = normalize_winding(remove_collinear(outline))
        if len(outline) >= 3 and signed_area(outline) >= settings.min_room_area:
            rooms.append(outline)

    LOGGER.debug("Grid method: %d regions", len(rooms))
    return rooms or None
