import math

import pytest

import roomfinder.engine.rooms as rooms_module
from roomfinder.config import DetectionSettings
from roomfinder.core.model import FloorPlan, Point, RoomPolygon, Wall
from roomfinder.engine.rooms import RoomDetector, clean_candidates, remove_outer_hull
from roomfinder.engine.session import EditSession


def pts(*coords):
    return [Point(float(x), float(y)) for x, y in coords]


def room(*coords):
    return RoomPolygon(tuple(pts(*coords)))


def plan_of(walls):
    plan = FloorPlan()
    for wall in walls:
        plan.insert_wall(wall)
    return plan


def corner_angles(polygon):
    angles = []
    n = len(polygon)
    for i in range(n):
        a, b, c = polygon[i - 1], polygon[i], polygon[(i + 1) % n]
        v1 = (a.x - b.x, a.y - b.y)
        v2 = (c.x - b.x, c.y - b.y)
        cos = (v1[0] * v2[0] + v1[1] * v2[1]) / (math.hypot(*v1) * math.hypot(*v2))
        angles.append(math.degrees(math.acos(max(-1.0, min(1.0, cos)))))
    return angles


class TestDetection:
    def test_single_rectangle(self, rectangle_session):
        rooms = rectangle_session.rooms()
        assert len(rooms) == 1
        assert rooms[0].area == pytest.approx(200000.0)
        assert len(rooms[0]) == 4
        assert rooms[0].signed_area > 0
        assert corner_angles(rooms[0]) == pytest.approx([90.0] * 4)

    def test_partition_splits_rectangle(self, partition_session):
        rooms = partition_session.rooms()
        assert len(rooms) == 2
        assert [r.area for r in rooms] == pytest.approx([100000.0, 100000.0])
        # The enclosing rectangle is not reported as a room.
        assert all(r.bounds[2] - r.bounds[0] < 500 for r in rooms)

    def test_open_layout_has_no_rooms(self, u_walls):
        assert RoomDetector(plan_of(u_walls)).get_rooms() == []

    def test_empty_plan(self, session):
        assert session.rooms() == []
        assert session.largest_room() is None
        assert session.room_at(Point(0, 0)) is None

    def test_degenerate_walls_only(self):
        plan = plan_of([Wall(1, Point(0, 0), Point(0, 0)), Wall(2, Point(5, 5), Point(5.5, 5))])
        assert RoomDetector(plan).get_rooms() == []

    def test_diagonal_layout_uses_general_method(self, walls_from):
        walls = walls_from([((0, 0), (400, 0)), ((400, 0), (0, 300)), ((0, 300), (0, 0))])
        detector = RoomDetector(plan_of(walls))
        rooms = detector.get_rooms()
        assert len(rooms) == 1
        assert rooms[0].area == pytest.approx(60000.0)
        assert detector.last_strategy == "general"

    def test_orthogonal_layout_uses_grid_method(self, partition_walls):
        detector = RoomDetector(plan_of(partition_walls))
        detector.get_rooms()
        assert detector.last_strategy == "orthogonal"

    def test_general_method_agrees_on_partition(self, partition_walls):
        detector = RoomDetector(plan_of(partition_walls), DetectionSettings(prefer_orthogonal=False))
        assert [r.area for r in detector.get_rooms()] == pytest.approx([100000.0, 100000.0])
        assert detector.last_strategy == "general"

    def test_rooms_are_ordered_left_to_right(self, partition_session):
        left, right = partition_session.rooms()
        assert left.bounds[0] == pytest.approx(0.0)
        assert right.bounds[0] == pytest.approx(250.0)

    def test_box_inside_room_is_kept(self, rectangle_walls, walls_from):
        box = walls_from(
            [((200, 150), (300, 150)), ((300, 150), (300, 250)), ((300, 250), (200, 250)), ((200, 250), (200, 150))],
            start_id=10,
        )
        rooms = RoomDetector(plan_of(rectangle_walls + box)).get_rooms()
        assert sorted(r.area for r in rooms) == pytest.approx([10000.0, 200000.0])


class TestCache:
    def test_reads_are_idempotent(self, partition_session):
        first = partition_session.rooms()
        assert not partition_session.detector.is_dirty
        assert partition_session.rooms() == first

    def test_returned_list_is_a_copy(self, rectangle_session):
        rectangle_session.rooms().clear()
        assert len(rectangle_session.rooms()) == 1

    def test_detection_runs_once_until_walls_change(self, rectangle_session, monkeypatch):
        calls = []
        original = rooms_module.detect_candidates

        def counting(walls, settings):
            calls.append(len(walls))
            return original(walls, settings)

        monkeypatch.setattr(rooms_module, "detect_candidates", counting)
        rectangle_session.rooms()
        rectangle_session.rooms()
        assert len(calls) == 1

        rectangle_session.move_wall(2, dx=100, dy=0)
        assert rectangle_session.detector.is_dirty
        rooms = rectangle_session.rooms()
        assert len(calls) == 2
        assert rooms == []

    def test_wall_edits_mark_dirty(self, session):
        session.rooms()
        session.add_wall((0, 0), (100, 0))
        assert session.detector.is_dirty

    def test_opening_edits_do_not_mark_dirty(self, rectangle_session):
        rectangle_session.rooms()
        door = rectangle_session.add_opening(1, width=90, offset=50)
        rectangle_session.add_device("socket", (20, 0), wall=1)
        rectangle_session.delete_opening(door.id)
        assert not rectangle_session.detector.is_dirty

    def test_deleting_a_wall_opens_the_room(self, rectangle_session):
        assert len(rectangle_session.rooms()) == 1
        rectangle_session.delete_wall(3)
        assert rectangle_session.rooms() == []

    def test_building_a_room_wall_by_wall(self, session):
        session.add_wall((0, 0), (300, 0))
        session.add_wall((300, 0), (300, 300))
        session.add_wall((300, 300), (0, 300))
        assert session.rooms() == []
        session.add_wall((0, 300), (0, 0))
        assert [r.area for r in session.rooms()] == pytest.approx([90000.0])


class TestQueries:
    def test_room_containing_point(self, partition_session):
        left = partition_session.room_at(Point(100, 200))
        right = partition_session.room_at(Point(400, 200))
        assert left.bounds[0] == pytest.approx(0.0)
        assert right.bounds[0] == pytest.approx(250.0)
        assert partition_session.room_at(Point(600, 600)) is None

    def test_point_on_shared_wall_resolves_to_first_room(self, partition_session):
        room_on_wall = partition_session.room_at(Point(250, 200))
        assert room_on_wall == partition_session.rooms()[0]

    def test_largest_room(self, rectangle_walls):
        plan = plan_of(rectangle_walls + [Wall(9, Point(100, 0), Point(100, 400))])
        largest = RoomDetector(plan).get_largest_room()
        assert largest.area == pytest.approx(160000.0)

    def test_selection_follows_edits(self, partition_session):
        selected = partition_session.select(Point(400, 200))
        assert selected.bounds[0] == pytest.approx(250.0)
        partition_session.delete_wall(5)
        assert partition_session.selected_room().area == pytest.approx(200000.0)
        assert partition_session.select(None) is None

    def test_room_graph(self, partition_session):
        graph = partition_session.room_graph()
        assert graph.number_of_nodes() == 2
        assert graph.edges[0, 1]["wall_ids"] == (5,)


class TestCleaning:
    def test_outer_hull_is_removed(self):
        hull = room((0, 0), (500, 0), (500, 400), (0, 400))
        left = room((0, 0), (250, 0), (250, 400), (0, 400))
        right = room((250, 0), (500, 0), (500, 400), (250, 400))
        assert remove_outer_hull([hull, left, right]) == [left, right]

    def test_room_around_a_small_box_is_kept(self):
        big = room((0, 0), (500, 0), (500, 400), (0, 400))
        box = room((200, 150), (300, 150), (300, 250), (200, 250))
        assert remove_outer_hull([big, box]) == [big, box]

    def test_duplicates_are_dropped(self):
        square = pts((0, 0), (100, 0), (100, 100), (0, 100))
        rooms = clean_candidates([square, list(reversed(square))], min_area=1e-2)
        assert len(rooms) == 1
        assert rooms[0].signed_area > 0

    def test_tiny_and_short_candidates_are_dropped(self):
        sliver = pts((0, 0), (100, 0), (100, 0.00001))
        assert clean_candidates([sliver, pts((0, 0), (1, 1))], min_area=1e-2) == []

    def test_self_touching_outline_is_repaired(self):
        spiked = pts((0, 0), (100, 0), (100, 50), (150, 50), (100, 50), (100, 100), (0, 100))
        rooms = clean_candidates([spiked], min_area=1e-2)
        assert len(rooms) == 1
        assert rooms[0].area == pytest.approx(10000.0)
        assert len(rooms[0]) == 4


def test_session_accepts_settings(partition_walls):
    session = EditSession(plan_of(partition_walls), DetectionSettings(prefer_orthogonal=False))
    assert len(session.rooms()) == 2


class TestEnclosedBoxes:
    @pytest.fixture
    def touching_boxes(self, rectangle_walls, walls_from):
        boxes = walls_from(
            [
                ((100, 100), (200, 100)), ((200, 100), (200, 200)), ((200, 200), (100, 200)), ((100, 200), (100, 100)),
                ((200, 200), (300, 200)), ((300, 200), (300, 300)), ((300, 300), (200, 300)), ((200, 300), (200, 200)),
            ],
            start_id=10,
        )
        return plan_of(rectangle_walls + boxes)

    def test_room_around_boxes_touching_at_a_corner_is_kept(self, touching_boxes):
        detector = RoomDetector(touching_boxes)
        rooms = detector.get_rooms()
        assert sorted(r.area for r in rooms) == pytest.approx([10000.0, 10000.0, 200000.0])
        assert detector.last_strategy == "general"

    def test_point_in_box_resolves_to_the_box(self, rectangle_walls, walls_from):
        box = walls_from(
            [((200, 150), (300, 150)), ((300, 150), (300, 250)), ((300, 250), (200, 250)), ((200, 250), (200, 150))],
            start_id=10,
        )
        detector = RoomDetector(plan_of(rectangle_walls + box))
        assert detector.get_room_containing(Point(250, 200)).area == pytest.approx(10000.0)
        assert detector.get_room_containing(Point(50, 50)).area == pytest.approx(200000.0)

    def test_point_in_corner_touching_box(self, touching_boxes):
        detector = RoomDetector(touching_boxes)
        assert detector.get_room_containing(Point(150, 150)).area == pytest.approx(10000.0)
        assert detector.get_room_containing(Point(400, 50)).area == pytest.approx(200000.0)


def test_detached_detector_stops_following_the_plan(rectangle_walls):
    plan = plan_of(rectangle_walls)
    kept = RoomDetector(plan)
    dropped = RoomDetector(plan)
    kept.get_rooms()
    dropped.get_rooms()

    dropped.detach()
    dropped.detach()
    plan.remove_wall(3)

    assert kept.is_dirty
    assert not dropped.is_dirty
    assert plan._listeners == [kept.invalidate]
