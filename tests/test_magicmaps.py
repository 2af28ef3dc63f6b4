import logging
import re

import pytest
from hypothesis import given, strategies as st

from routeconv.errors import GrammarMismatch, InvalidArgument
from routeconv.formats.magicmaps import MagicMaps2GoFormat, TIME_SENTINEL
from routeconv.position import Wgs84Position
from routeconv.route import RouteCharacteristics
from routeconv.transfer import CompactCalendar

LINE = "52.4135141 13.3115464 40.8000000 31.05.09 07:05:58"

# Documented grammar, written independently of the implementation
DOCUMENTED = re.compile(
    r"\s*[-+]?\d+\.\d+ [-+]?\d+\.\d+ [-+]?\d+\.\d+ \d\d\.\d\d\.\d\d \d\d:\d\d:\d\d\s*"
)

FORMAT = MagicMaps2GoFormat()


class TestWorkedExample:
    def test_parse_line(self):
        position = FORMAT.parse_position(LINE)
        assert position.longitude == 13.3115464
        assert position.latitude == 52.4135141
        assert position.elevation == 40.8
        assert position.time == CompactCalendar.parse(
            "2009-05-31T07:05:58", "%Y-%m-%dT%H:%M:%S"
        )
        assert position.comment is None

    def test_write_back_identical(self):
        route = FORMAT.read(LINE.encode("ascii"))[0]
        assert FORMAT.to_bytes(route) == (LINE + "\r\n").encode("ascii")

    def test_missing_time_writes_sentinel(self):
        route = FORMAT.create_route(
            RouteCharacteristics.TRACK,
            positions=[Wgs84Position(longitude=1.0, latitude=2.0, elevation=3.0)],
        )
        text = FORMAT.to_bytes(route).decode("ascii")
        assert text == f"2.0000000 1.0000000 3.0000000 {TIME_SENTINEL}\r\n"

    def test_sentinel_reads_back_as_absent(self, caplog):
        line = f"2.0000000 1.0000000 3.0000000 {TIME_SENTINEL}"
        with caplog.at_level(logging.ERROR):
            position = FORMAT.parse_position(line)
        assert position.time is None
        assert position.longitude == 1.0
        assert "00.00.00 00:00:00" in caplog.text

    def test_route_is_track(self):
        routes = FORMAT.read(f"{LINE}\n{LINE}\n".encode("ascii"))
        assert len(routes) == 1
        assert routes[0].characteristics == RouteCharacteristics.TRACK
        assert len(routes[0]) == 2


class TestGrammar:
    @pytest.mark.parametrize(
        "line",
        [
            LINE,
            "  " + LINE + "  ",
            "-52.4135141 -13.3115464 -40.8000000 31.05.09 07:05:58",
            "+1.0 +2.0 +3.0 01.01.70 00:00:00",
        ],
    )
    def test_matching_lines(self, line):
        assert FORMAT.is_position(line)

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "52 13.3115464 40.8000000 31.05.09 07:05:58",
            "52.4135141  13.3115464 40.8000000 31.05.09 07:05:58",
            "52.4135141,13.3115464,40.8000000,31.05.09,07:05:58",
            "52.4135141 13.3115464 40.8000000 31.05.2009 07:05:58",
            "52.4135141 13.3115464 40.8000000 31.05.09 07:05",
            LINE + " extra",
            "x" + LINE,
        ],
    )
    def test_non_matching_lines(self, line):
        assert not FORMAT.is_position(line)

    def test_parse_non_matching_line_raises(self):
        with pytest.raises(InvalidArgument):
            FORMAT.parse_position("not a position")

    def test_read_rejects_foreign_lines(self):
        with pytest.raises(GrammarMismatch):
            FORMAT.read(f"{LINE}\nsomething else\n".encode("ascii"))

    def test_read_rejects_empty_file(self):
        with pytest.raises(GrammarMismatch):
            FORMAT.read(b"\r\n\r\n")

    @given(st.text(alphabet="0123456789.:+- \tx", max_size=60))
    def test_is_position_iff_documented_pattern(self, line):
        """Recognition is a whole-line match and nothing else."""
        assert FORMAT.is_position(line) == (DOCUMENTED.fullmatch(line) is not None)

    @given(
        st.floats(-90, 90, allow_nan=False),
        st.floats(-180, 180, allow_nan=False),
        st.floats(-500, 9000, allow_nan=False),
    )
    def test_written_lines_match(self, latitude, longitude, elevation):
        route = FORMAT.create_route(
            RouteCharacteristics.TRACK,
            positions=[
                Wgs84Position(
                    longitude=longitude, latitude=latitude, elevation=elevation
                )
            ],
        )
        line = FORMAT.to_bytes(route).decode("ascii").rstrip("\r\n")
        assert FORMAT.is_position(line)
