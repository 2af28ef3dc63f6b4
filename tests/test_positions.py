import pytest

from routeconv.errors import PositionIndexError
from routeconv.formats.gpx import Gpx11Format, GpxPosition
from routeconv.positions import (
    NumberPattern,
    center,
    complement_speeds,
    format_numbered_position,
    insert_center_position,
    is_position_comment,
    needs_comment,
    needs_elevation,
    needs_speed,
)
from routeconv.position import Wgs84Position
from routeconv.route import RouteCharacteristics
from routeconv.transfer import CompactCalendar


def make_route(positions):
    return Gpx11Format().create_route(
        RouteCharacteristics.TRACK, "Ride", None, positions
    )


class TestNumberedPositions:
    @pytest.mark.parametrize(
        "pattern,expected",
        [
            (NumberPattern.DESCRIPTION_ONLY, "Position"),
            (NumberPattern.NUMBER_ONLY, "5"),
            (NumberPattern.NUMBER_DIRECTLY_FOLLOWED_BY_DESCRIPTION, "5Position"),
            (NumberPattern.NUMBER_SPACE_THEN_DESCRIPTION, "5 Position"),
            (NumberPattern.DESCRIPTION_SPACE_THEN_NUMBER, "Position 5"),
        ],
    )
    def test_format(self, pattern, expected):
        assert format_numbered_position(5, pattern=pattern) == expected

    def test_is_position_comment(self):
        assert is_position_comment("Position 12")
        assert is_position_comment(" Position 3 ")
        assert not is_position_comment("Position")
        assert not is_position_comment("Home")
        assert not is_position_comment(None)


class TestPredicates:
    def test_needs_elevation(self):
        assert needs_elevation(Wgs84Position())
        assert needs_elevation(Wgs84Position(elevation=0.0))
        assert not needs_elevation(Wgs84Position(elevation=12.0))

    def test_needs_speed(self):
        assert needs_speed(Wgs84Position(speed=0.0))
        assert not needs_speed(Wgs84Position(speed=3.0))

    def test_needs_comment(self):
        assert needs_comment(Wgs84Position())
        assert needs_comment(Wgs84Position(comment="  "))
        assert needs_comment(Wgs84Position(comment="Position 7"))
        assert not needs_comment(Wgs84Position(comment="Brandenburger Tor"))


class TestCenter:
    def test_bounding_box_center(self):
        middle = center(
            [
                Wgs84Position(longitude=10.0, latitude=50.0),
                Wgs84Position(elevation=5.0),
                Wgs84Position(longitude=12.0, latitude=54.0),
                Wgs84Position(longitude=11.0, latitude=51.0),
            ]
        )
        assert (middle.longitude, middle.latitude) == (11.0, 52.0)

    def test_no_coordinates(self):
        assert center([]) is None
        assert center([Wgs84Position(elevation=1.0)]) is None


class TestComplementSpeeds:
    def test_fills_missing_speeds_only(self):
        positions = [
            GpxPosition(
                longitude=0.0, latitude=0.0, time=CompactCalendar.from_millis(0)
            ),
            GpxPosition(
                longitude=0.0,
                latitude=1.0,
                time=CompactCalendar.from_millis(3600 * 1000),
            ),
            GpxPosition(
                longitude=0.0,
                latitude=2.0,
                speed=42.0,
                time=CompactCalendar.from_millis(7200 * 1000),
            ),
            GpxPosition(
                longitude=0.0,
                latitude=3.0,
                time=CompactCalendar.from_millis(7200 * 1000),
            ),
        ]
        route = make_route(positions)
        result = complement_speeds(route)

        assert result is not route
        assert result.positions[0].speed is None
        assert result.positions[1].speed == pytest.approx(110.574, rel=1e-3)
        assert result.positions[2].speed == 42.0
        # Same time as its predecessor
        assert result.positions[3].speed is None
        assert route.positions == positions
        assert route.positions[1].speed is None


class TestInsertCenterPosition:
    def test_inserts_numbered_center(self):
        route = make_route(
            [
                GpxPosition(longitude=10.0, latitude=50.0),
                GpxPosition(longitude=12.0, latitude=52.0),
                GpxPosition(longitude=14.0, latitude=54.0),
            ]
        )
        result = insert_center_position(route, 0)

        assert len(result) == 4
        assert len(route) == 3
        inserted = result.get_position(1)
        assert isinstance(inserted, GpxPosition)
        assert (inserted.longitude, inserted.latitude) == (11.0, 51.0)
        assert inserted.comment == "Position 4"
        assert result.get_position(2) == route.get_position(1)

    def test_last_position_has_no_successor(self):
        route = make_route([GpxPosition(longitude=10.0, latitude=50.0)] * 2)
        with pytest.raises(PositionIndexError):
            insert_center_position(route, 1)

    def test_neighbours_need_coordinates(self):
        route = make_route([GpxPosition(longitude=10.0, latitude=50.0), GpxPosition()])
        with pytest.raises(ValueError):
            insert_center_position(route, 0)
