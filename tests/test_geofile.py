import math
import xml.etree.ElementTree as ET

import pytest

from marmot.geofile import FileFormatError, GeoFile
from marmot.track import GeoCoordinate

GPX = "{http://www.topografix.com/GPX/1/1}"

SAMPLE_GPX = """<?xml version="1.0" encoding="UTF-8"?>
<gpx xmlns="http://www.topografix.com/GPX/1/1" version="1.1" creator="test">
  <metadata><name>Outing</name><time>2020-05-01T09:00:00Z</time></metadata>
  <wpt lat="45.5" lon="6.25"><ele>1500</ele><name>Hut</name><desc>Refuge</desc></wpt>
  <rte><wpt lat="1" lon="1"><name>Skipped</name></wpt></rte>
  <trk><name>Morning</name><desc>Loop</desc><trkseg>
    <trkpt lat="45.0" lon="6.0"><ele>100</ele><time>2020-05-01T10:00:00Z</time></trkpt>
    <trkpt lat="45.001" lon="6.0"><ele>110</ele><time>2020-05-01T10:01:00Z</time></trkpt>
    <trkpt lat="45.002" lon="6.0"><ele>130</ele><time>2020-05-01T10:02:00Z</time></trkpt>
  </trkseg></trk>
</gpx>
"""

SAMPLE_KML = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2"><Document>
<Placemark><name>Summit</name><description>Top</description>
<Point><coordinates>6.5,45.25,1200</coordinates></Point></Placemark>
<Placemark><name>Path</name>
<LineString><coordinates>6.0,45.0,100 6.0,45.01,150 6.0,45.02,120</coordinates></LineString>
</Placemark>
</Document></kml>
"""

TWO_TRACKS = """<gpx>
  <trk><name>A</name><trkseg>
    <trkpt lat="10.0" lon="20.0"><ele>50</ele></trkpt>
    <trkpt lat="10.01" lon="20.0"><ele>80</ele></trkpt>
  </trkseg></trk>
  <trk><name>B</name><trkseg>
    <trkpt lat="11.0" lon="21.0"><ele>20</ele></trkpt>
    <trkpt lat="11.0" lon="21.02"><ele>300</ele></trkpt>
  </trkseg></trk>
</gpx>"""


@pytest.fixture
def gpx_file(tmp_path):
    path = tmp_path / "walk.gpx"
    path.write_text(SAMPLE_GPX, encoding="utf-8")
    return path


@pytest.fixture
def opened_gpx(gpx_file):
    geo = GeoFile()
    geo.open(str(gpx_file))
    return geo


def test_open_gpx_reads_waypoint(opened_gpx):
    assert opened_gpx.name == "walk.gpx"
    assert len(opened_gpx.pois) == 1
    poi = opened_gpx.pois[0]
    assert poi.name == "Hut"
    assert poi.description == "Refuge"
    assert poi.coordinate == GeoCoordinate(45.5, 6.25, 1500.0)


def test_open_gpx_reads_track(opened_gpx):
    assert len(opened_gpx.tracks) == 1
    track = opened_gpx.tracks[0]
    assert track.name == "Morning"
    assert track.description == "Loop"
    assert len(track) == 3
    assert [p.latitude for p in track.path] == [45.0, 45.001, 45.002]
    assert [p.altitude for p in track.path] == [100.0, 110.0, 130.0]
    assert track.timestamps == ("", "2020-05-01T10:01:00Z", "2020-05-01T10:02:00Z")
    assert track.duration == "00:02:00"


def test_file_statistics_follow_tracks(opened_gpx):
    track = opened_gpx.tracks[0]
    assert opened_gpx.climb == track.climb
    assert opened_gpx.distance_2d == track.distance_2d
    assert opened_gpx.distance_3d == track.distance_3d
    assert opened_gpx.altitude_max == 130.0
    assert opened_gpx.altitude_min == 100.0
    assert opened_gpx.bounding_box == track.bounding_box
    assert opened_gpx.bounding_box.is_valid()


def test_open_accepts_file_url(gpx_file):
    geo = GeoFile()
    geo.open(gpx_file.as_uri())
    assert geo.name == "walk.gpx"
    assert len(geo.tracks) == 1


def test_open_kml(tmp_path):
    path = tmp_path / "hike.kml"
    path.write_text(SAMPLE_KML, encoding="utf-8")
    geo = GeoFile()
    geo.open(str(path))
    assert geo.name == "hike.kml"
    assert len(geo.pois) == 1
    poi = geo.pois[0]
    assert (poi.name, poi.description) == ("Summit", "Top")
    assert poi.coordinate == GeoCoordinate(45.25, 6.5, 1200.0)
    assert len(geo.tracks) == 1
    track = geo.tracks[0]
    assert track.name == "Path"
    assert track.description == "Top"
    assert [p.latitude for p in track.path] == [45.0, 45.01, 45.02]
    assert track.altitude_max == 150.0
    assert track.altitude_min == 100.0


def test_kml_bad_point_stops_parsing():
    source = """<kml><Document>
    <Placemark><name>Bad</name><Point><coordinates>6.5,45.25</coordinates></Point></Placemark>
    <Placemark><name>Good</name><Point><coordinates>1,2,3</coordinates></Point></Placemark>
    </Document></kml>"""
    geo = GeoFile()
    geo.parse_kml(source)
    assert geo.pois == ()


def test_kml_indented_line_string_yields_no_points():
    source = """<kml><Placemark><name>L</name><LineString><coordinates>
      6.0,45.0,100 6.0,45.01,150
    </coordinates></LineString></Placemark></kml>"""
    geo = GeoFile()
    geo.parse_kml(source)
    assert len(geo.tracks) == 1
    assert len(geo.tracks[0]) == 0


def test_unknown_root_is_rejected(tmp_path):
    path = tmp_path / "notes.xml"
    path.write_text("<notes><note/></notes>", encoding="utf-8")
    with pytest.raises(FileFormatError):
        GeoFile().open(str(path))


def test_malformed_xml_is_rejected(tmp_path):
    path = tmp_path / "broken.gpx"
    path.write_text("<gpx><trk></gpx>", encoding="utf-8")
    with pytest.raises(FileFormatError):
        GeoFile().open(str(path))


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        GeoFile().open(str(tmp_path / "absent.gpx"))


def test_add_and_remove_poi():
    geo = GeoFile()
    geo.add_poi(GeoCoordinate(1.0, 2.0), "one")
    geo.add_poi(GeoCoordinate(3.0, 4.0), "two", "second")
    assert [p.name for p in geo.pois] == ["one", "two"]
    geo.remove_poi(0)
    assert [p.name for p in geo.pois] == ["two"]
    assert geo.pois[0].description == "second"
    with pytest.raises(IndexError):
        geo.remove_poi(5)
    with pytest.raises(IndexError):
        geo.remove_poi(-1)


def test_add_track_appends_empty_track():
    geo = GeoFile()
    track = geo.add_track()
    assert geo.tracks == (track,)
    assert len(track) == 0
    assert not geo.bounding_box.is_valid()


def _build_file():
    geo = GeoFile()
    geo.add_poi(GeoCoordinate(45.5, 6.25, 1500.0), "Hut")
    track = geo.add_track()
    track.name = "Morning"
    track.add_point(GeoCoordinate(45.0, 6.0, 100.0))
    track.add_point(GeoCoordinate(45.001, 6.0, 110.0))
    return geo, track


def test_export_round_trip(tmp_path):
    geo, track = _build_file()
    out = tmp_path / "out.gpx"
    geo.export_to_gpx(str(out))
    again = GeoFile()
    again.open(str(out))
    assert again.pois[0].name == "Hut"
    assert again.pois[0].coordinate == GeoCoordinate(45.5, 6.25, 1500.0)
    assert again.tracks[0].path == track.path
    assert again.tracks[0].name == "out"


def test_export_header(tmp_path):
    geo, _ = _build_file()
    out = tmp_path / "out.gpx"
    geo.export_to_gpx(str(out))
    root = ET.parse(out).getroot()
    assert root.tag == f"{GPX}gpx"
    assert root.get("version") == "1.1"
    assert root.get("creator") == "Marmot"
    schema = root.get("{http://www.w3.org/2001/XMLSchema-instance}schemaLocation")
    assert schema.startswith("http://www.topografix.com/GPX/1/1 ")
    assert root.find(f"{GPX}metadata/{GPX}name").text == "out"
    assert root.find(f"{GPX}metadata/{GPX}time").text.endswith("Z")


def test_export_numbers_and_missing_altitude(tmp_path):
    geo = GeoFile()
    geo.add_poi(GeoCoordinate(1e-05, 45.0), "Tiny")
    unnamed = geo.add_track()
    unnamed.add_point(GeoCoordinate(2.5, 3.0, 100.0), "2020-05-01T10:00:00Z")
    out = tmp_path / "numbers.gpx"
    geo.export_to_gpx(str(out), creator="tester")
    root = ET.parse(out).getroot()
    assert root.get("creator") == "tester"
    waypoint = root.find(f"{GPX}wpt")
    assert waypoint.get("lat") == "0.00001"
    assert waypoint.get("lon") == "45"
    assert waypoint.find(f"{GPX}ele") is None
    trk = root.find(f"{GPX}trk")
    assert trk.find(f"{GPX}name") is None
    point = trk.find(f"{GPX}trkseg/{GPX}trkpt")
    assert point.get("lat") == "2.5"
    assert point.find(f"{GPX}ele").text == "100"
    assert point.find(f"{GPX}time").text == "2020-05-01T10:00:00Z"
    assert math.isnan(geo.pois[0].coordinate.altitude)