"""Shared fixtures: small wall layouts in centimetres (Y-up)."""

import pytest

from roomfinder.core.model import FloorPlan, Point, Wall
from roomfinder.engine.session import EditSession

RECTANGLE = [
    ((0, 0), (500, 0)),
    ((500, 0), (500, 400)),
    ((500, 400), (0, 400)),
    ((0, 400), (0, 0)),
]
PARTITION = RECTANGLE + [((250, 0), (250, 400))]
U_SHAPE = [
    ((0, 0), (500, 0)),
    ((500, 0), (500, 400)),
    ((0, 400), (0, 0)),
]


def make_walls(segments, start_id=1):
    return [Wall(i, Point(*a), Point(*b)) for i, (a, b) in enumerate(segments, start_id)]


def make_plan(segments):
    plan = FloorPlan()
    for wall in make_walls(segments):
        plan.insert_wall(wall)
    return plan


@pytest.fixture
def walls_from():
    return make_walls


@pytest.fixture
def rectangle_walls():
    return make_walls(RECTANGLE)


@pytest.fixture
def partition_walls():
    return make_walls(PARTITION)


@pytest.fixture
def u_walls():
    return make_walls(U_SHAPE)


@pytest.fixture
def session():
    return EditSession()


@pytest.fixture
def rectangle_session():
    return EditSession(make_plan(RECTANGLE))


@pytest.fixture
def partition_session():
    return EditSession(make_plan(PARTITION))
