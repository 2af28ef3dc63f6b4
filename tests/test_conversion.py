import copy
import logging

import pytest

from routeconv.conversion import convert, convert_position, target_characteristics
from routeconv.errors import UnsupportedConversion
from routeconv.formats import FORMATS, PositionFamily
from routeconv.formats.bcr import BcrFormat, BcrRoute
from routeconv.formats.gpx import Gpx10Format, Gpx11Format, GpxPosition
from routeconv.formats.ikt import MagicMapsIktFormat
from routeconv.formats.kml import Kml22Format
from routeconv.formats.magicmaps import MagicMaps2GoFormat
from routeconv.formats.nmea import NmeaFormat
from routeconv.formats.ozi import OziExplorerWaypointFormat
from routeconv.formats.tomtom import TomTomRoute, TomTomRouteFormat
from routeconv.position import Wgs84Position
from routeconv.route import RouteCharacteristics
from routeconv.transfer import CompactCalendar


def make_track():
    positions = [
        GpxPosition(
            longitude=13.3115464 + i * 0.001,
            latitude=52.4135141 + i * 0.001,
            elevation=40.8 + i,
            speed=10.0 + i,
            time=CompactCalendar.from_millis(1243753558000 + i * 5000),
            comment=f"Point {i}",
            heading=90.0,
        )
        for i in range(3)
    ]
    return Gpx11Format().create_route(
        RouteCharacteristics.TRACK, "Ride", ["line"], positions
    )


class TestCharacteristics:
    def test_track_to_route_only_format_becomes_route(self):
        """A track written where only routes exist becomes a route, not waypoints."""
        converted = make_track().as_tomtom_route_format()
        assert isinstance(converted, TomTomRoute)
        assert converted.characteristics == RouteCharacteristics.ROUTE

    def test_track_to_waypoint_only_format(self):
        converted = make_track().as_ozi_explorer_waypoint_format()
        assert converted.characteristics == RouteCharacteristics.WAYPOINTS

    def test_waypoints_to_track_only_format(self):
        waypoints = Gpx11Format().create_route(
            RouteCharacteristics.WAYPOINTS,
            positions=[Wgs84Position(longitude=1.0, latitude=2.0)],
        )
        converted = waypoints.as_magic_maps_2go_format()
        assert converted.characteristics == RouteCharacteristics.TRACK

    def test_kept_when_supported(self):
        for characteristics in RouteCharacteristics:
            assert (
                target_characteristics(characteristics, Kml22Format())
                == characteristics
            )

    def test_change_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="routeconv.conversion"):
            make_track().as_bcr_format()
        assert "converting to Route" in caplog.text


class TestProjection:
    def test_every_family_has_a_projection(self):
        position = Wgs84Position(longitude=1.0, latitude=2.0)
        for family in PositionFamily:
            assert convert_position(position, family) is not position

    def test_route_types_and_fields(self):
        track = make_track()
        tomtom = track.as_tomtom_route_format()
        assert all(position.elevation is None for position in tomtom)
        assert [position.comment for position in tomtom] == [
            "Point 0",
            "Point 1",
            "Point 2",
        ]
        nmea = track.as_nmea_format()
        assert all(position.comment is None for position in nmea)
        assert [position.heading for position in nmea] == [90.0] * 3
        kml = track.as_kml_22_format()
        assert all(position.speed is None for position in kml)
        assert isinstance(track.as_bcr_format(), BcrRoute)

    def test_metadata_is_copied(self):
        converted = make_track().as_gpx_10_format()
        assert converted.name == "Ride"
        assert converted.description == ["line"]
        assert converted.format == Gpx10Format()

    def test_every_route_projection(self):
        track = make_track()
        projections = {
            "as_magic_maps_2go_format": MagicMaps2GoFormat(),
            "as_magic_maps_ikt_format": MagicMapsIktFormat(),
            "as_nmea_format": NmeaFormat(),
            "as_tomtom_route_format": TomTomRouteFormat(),
            "as_ozi_explorer_waypoint_format": OziExplorerWaypointFormat(),
            "as_bcr_format": BcrFormat(),
            "as_gpx_10_format": Gpx10Format(),
            "as_gpx_11_format": Gpx11Format(),
            "as_kml_22_format": Kml22Format(),
        }
        for method, navigation_format in projections.items():
            converted = getattr(track, method)()
            assert converted.format == navigation_format
            assert len(converted) == len(track)
        assert track.as_ozi_explorer_track_format().format.extension == ".plt"


class TestNonMutation:
    @pytest.mark.parametrize("target", FORMATS, ids=lambda f: type(f).__name__)
    def test_source_untouched(self, target):
        track = make_track()
        before = copy.deepcopy(track.positions)
        positions = track.positions
        converted = convert(track, target)
        assert track.positions is positions
        assert track.positions == before
        assert track.name == "Ride"
        assert track.description == ["line"]
        assert converted is not track
        assert converted.positions is not track.positions
        if converted.description is not None:
            assert converted.description is not track.description

    def test_unwritable_target(self):
        class ReadOnly(MagicMaps2GoFormat):
            supports_writing = False

        with pytest.raises(UnsupportedConversion):
            convert(make_track(), ReadOnly())

    def test_no_characteristics(self):
        class Nothing(MagicMaps2GoFormat):
            supported_characteristics = ()

        with pytest.raises(UnsupportedConversion):
            convert(make_track(), Nothing())
