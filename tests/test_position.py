import pytest
from datetime import datetime, timezone

from routeconv.formats.bcr import BcrPosition
from routeconv.formats.gpx import GpxPosition
from routeconv.formats.kml import KmlPosition
from routeconv.formats.nmea import NmeaPosition
from routeconv.formats.tomtom import TomTomPosition
from routeconv.position import Wgs84Position
from routeconv.transfer import CompactCalendar


def at(hour, minute, second):
    return CompactCalendar.from_datetime(
        datetime(2009, 5, 31, hour, minute, second, tzinfo=timezone.utc)
    )


@pytest.fixture
def full_position():
    return Wgs84Position(
        longitude=13.3115464,
        latitude=52.4135141,
        elevation=40.8,
        speed=12.5,
        time=at(7, 5, 58),
        comment="Home",
    )


class TestCoordinates:
    def test_has_coordinates(self):
        assert Wgs84Position(longitude=1.0, latitude=2.0).has_coordinates()
        assert not Wgs84Position(longitude=1.0).has_coordinates()
        assert not Wgs84Position(latitude=2.0).has_coordinates()

    def test_zero_is_a_coordinate(self):
        assert Wgs84Position(longitude=0.0, latitude=0.0).has_coordinates()

    def test_datetime_time_becomes_calendar(self):
        position = Wgs84Position(time=datetime(2009, 5, 31, 7, 5, 58))
        assert position.time == at(7, 5, 58)


class TestGeometry:
    def test_distance_along_meridian(self):
        a = Wgs84Position(longitude=0.0, latitude=0.0)
        b = Wgs84Position(longitude=0.0, latitude=1.0)
        assert a.calculate_distance(b) == pytest.approx(110574, rel=1e-3)

    def test_distance_without_coordinates(self):
        a = Wgs84Position(longitude=0.0, latitude=0.0)
        assert a.calculate_distance(Wgs84Position()) is None
        assert a.calculate_angle(Wgs84Position()) is None

    def test_angle_north_and_east(self):
        origin = Wgs84Position(longitude=10.0, latitude=50.0)
        north = Wgs84Position(longitude=10.0, latitude=51.0)
        east = Wgs84Position(longitude=11.0, latitude=50.0)
        assert origin.calculate_angle(north) == pytest.approx(0.0, abs=1e-6)
        assert origin.calculate_angle(east) == pytest.approx(90.0, abs=1.0)

    def test_elevation_and_time_delta(self):
        a = Wgs84Position(elevation=10.0, time=at(7, 0, 0))
        b = Wgs84Position(elevation=25.0, time=at(7, 0, 10))
        assert a.calculate_elevation_delta(b) == 15.0
        assert a.calculate_time_delta(b) == 10000
        assert a.calculate_elevation_delta(Wgs84Position()) is None


class TestCalculateSpeed:
    def test_speed_in_kilometers_per_hour(self):
        predecessor = Wgs84Position(longitude=0.0, latitude=0.0, time=at(7, 0, 0))
        position = Wgs84Position(longitude=0.0, latitude=1.0, time=at(8, 0, 0))
        speed = position.calculate_speed(predecessor)
        assert speed == pytest.approx(110.574, rel=1e-3)

    def test_same_time_yields_no_speed(self):
        """Two positions sharing a timestamp have no derivable speed."""
        predecessor = Wgs84Position(longitude=0.0, latitude=0.0, time=at(7, 0, 0))
        position = Wgs84Position(longitude=0.0, latitude=1.0, time=at(7, 0, 0))
        assert position.calculate_speed(predecessor) is None

    def test_missing_time_yields_no_speed(self):
        predecessor = Wgs84Position(longitude=0.0, latitude=0.0)
        position = Wgs84Position(longitude=0.0, latitude=1.0, time=at(8, 0, 0))
        assert position.calculate_speed(predecessor) is None

    def test_missing_coordinates_yield_no_speed(self):
        predecessor = Wgs84Position(time=at(7, 0, 0))
        position = Wgs84Position(longitude=0.0, latitude=1.0, time=at(8, 0, 0))
        assert position.calculate_speed(predecessor) is None


class TestReplacement:
    def test_with_methods_copy(self, full_position):
        changed = full_position.with_elevation(99.0).with_comment("Away")
        assert changed.elevation == 99.0
        assert changed.comment == "Away"
        assert full_position.elevation == 40.8
        assert full_position.comment == "Home"

    def test_positions_are_immutable(self, full_position):
        with pytest.raises(AttributeError):
            full_position.elevation = 1.0


class TestProjections:
    def test_wgs84_keeps_everything(self, full_position):
        projected = full_position.as_wgs84_position()
        assert projected == full_position
        assert projected is not full_position

    def test_nmea_drops_comment(self, full_position):
        projected = full_position.as_nmea_position()
        assert isinstance(projected, NmeaPosition)
        assert projected.comment is None
        assert projected.elevation == 40.8
        assert projected.speed == 12.5

    def test_tomtom_keeps_coordinates_and_comment(self, full_position):
        projected = full_position.as_tomtom_position()
        assert isinstance(projected, TomTomPosition)
        assert projected.comment == "Home"
        assert projected.elevation is None
        assert projected.time is None

    def test_bcr_computes_mercator(self, full_position):
        projected = full_position.as_bcr_position()
        assert isinstance(projected, BcrPosition)
        assert isinstance(projected.x, int)
        back = BcrPosition.from_mercator(projected.x, projected.y)
        assert back.longitude == pytest.approx(13.3115464, abs=1e-5)
        assert back.latitude == pytest.approx(52.4135141, abs=1e-5)
        assert projected.comment == "Home"

    def test_kml_drops_speed(self, full_position):
        projected = full_position.as_kml_position()
        assert isinstance(projected, KmlPosition)
        assert projected.speed is None
        assert projected.time == full_position.time

    def test_extras_travel_between_nmea_and_gpx(self):
        nmea = NmeaPosition(
            longitude=1.0, latitude=2.0, heading=90.0, satellites=7, hdop=1.2
        )
        gpx = nmea.as_gpx_position()
        assert isinstance(gpx, GpxPosition)
        assert (gpx.heading, gpx.satellites, gpx.hdop) == (90.0, 7, 1.2)
        back = gpx.as_nmea_position()
        assert (back.heading, back.satellites, back.hdop) == (90.0, 7, 1.2)
