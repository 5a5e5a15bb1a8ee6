import numpy as np
import pytest

from roomfinder.config import DetectionSettings
from roomfinder.core.model import Point, Wall
from roomfinder.geom.grid import (
    HORIZONTAL,
    VERTICAL,
    boundary_edges,
    chain_loops,
    classify_wall,
    detect_orthogonal,
    rasterize,
)
from roomfinder.geom.polygon import signed_area

L_ROOM = [
    ((0, 0), (400, 0)),
    ((400, 0), (400, 200)),
    ((400, 200), (200, 200)),
    ((200, 200), (200, 400)),
    ((200, 400), (0, 400)),
    ((0, 400), (0, 0)),
]


def test_classify_wall():
    assert classify_wall(Wall(1, Point(0, 0), Point(100, 0.5)), 1.0) == HORIZONTAL
    assert classify_wall(Wall(2, Point(0, 0), Point(0.5, 100)), 1.0) == VERTICAL
    assert classify_wall(Wall(3, Point(0, 0), Point(100, 100)), 1.0) is None


def test_rasterize_compresses_lattice(rectangle_walls):
    raster = rasterize(rectangle_walls, DetectionSettings())
    assert raster.xs == [-1, 0, 500, 501]
    assert raster.ys == [-1, 0, 400, 401]
    assert raster.shape == (3, 3)
    assert raster.block_h.shape == (4, 3)
    assert raster.block_v.shape == (3, 4)


def test_rectangle(rectangle_walls):
    rooms = detect_orthogonal(rectangle_walls)
    assert len(rooms) == 1
    assert len(rooms[0]) == 4
    assert signed_area(rooms[0]) == pytest.approx(200000.0)


def test_partition(partition_walls):
    rooms = detect_orthogonal(partition_walls)
    assert sorted(signed_area(r) for r in rooms) == pytest.approx([100000.0, 100000.0])


def test_partition_with_near_miss_endpoints(rectangle_walls):
    walls = rectangle_walls + [Wall(9, Point(250, 0.4), Point(250, 399.7))]
    rooms = detect_orthogonal(walls)
    assert len(rooms) == 2


def test_l_shaped_room(walls_from):
    rooms = detect_orthogonal(walls_from(L_ROOM))
    assert len(rooms) == 1
    assert len(rooms[0]) == 6
    assert signed_area(rooms[0]) == pytest.approx(120000.0)


def test_closed_box_inside_room_is_its_own_region(rectangle_walls, walls_from):
    box = walls_from(
        [((200, 150), (300, 150)), ((300, 150), (300, 250)), ((300, 250), (200, 250)), ((200, 250), (200, 150))],
        start_id=10,
    )
    rooms = detect_orthogonal(rectangle_walls + box)
    assert sorted(signed_area(r) for r in rooms) == pytest.approx([10000.0, 200000.0])


def test_open_layout_returns_none(u_walls):
    assert detect_orthogonal(u_walls) is None


def test_diagonal_wall_returns_none(rectangle_walls):
    walls = rectangle_walls + [Wall(9, Point(0, 0), Point(100, 100))]
    assert detect_orthogonal(walls) is None


def test_no_walls_returns_none():
    assert detect_orthogonal([]) is None


def test_boundary_of_single_cell():
    edges = boundary_edges(np.array([[True]]))
    assert len(edges) == 4
    loops = chain_loops(edges)
    assert len(loops) == 1
    assert sorted(loops[0]) == [(0, 0), (0, 1), (1, 0), (1, 1)]


def test_region_touching_itself_at_a_corner_does_not_chain():
    region = np.array([[True, False], [False, True]])
    assert chain_loops(boundary_edges(region)) is None


def test_region_pinched_at_a_corner_defers_to_the_planar_walk(rectangle_walls, walls_from):
    boxes = walls_from(
        [
            ((100, 100), (200, 100)), ((200, 100), (200, 200)), ((200, 200), (100, 200)), ((100, 200), (100, 100)),
            ((200, 200), (300, 200)), ((300, 200), (300, 300)), ((300, 300), (200, 300)), ((200, 300), (200, 200)),
        ],
        start_id=10,
    )
    assert detect_orthogonal(rectangle_walls + boxes) is None
