"""Reading, editing and writing GPX and KML files of tracks and waypoints."""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path, PurePosixPath
from typing import Callable, Union
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from marmot.poi import Poi
from marmot.track import GeoCoordinate, GeoRectangle, Track, _seconds_between

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
GPX_SCHEMA_LOCATION = f"{GPX_NAMESPACE} {GPX_NAMESPACE}/gpx.xsd"
DEFAULT_CREATOR = "Marmot"

XmlSource = Union[str, bytes, ET.Element]


class FileFormatError(ValueError):
    """Raised when a file is not well-formed XML or is neither GPX nor KML."""


class _StopParsing(Exception):
    """Ends a parse early, keeping what was read so far."""


def _resolve(file_name: str) -> tuple[Path, str]:
    """Local path and displayed file name for a path or a file URL."""
    parsed = urlparse(file_name)
    if len(parsed.scheme) > 1:
        path = Path(url2pathname(parsed.path))
    else:
        path = Path(file_name)
    return path, PurePosixPath(unquote(parsed.path)).name


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _text(element: ET.Element) -> str:
    return "".join(element.itertext())


def _to_double(text: str | None) -> float:
    """Parse a number leniently: surrounding blanks are ignored, garbage gives 0."""
    if not text:
        return 0.0
    text = text.strip()
    if "_" in text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def _format_number(value: float) -> str:
    """Shortest exact decimal form of a float, never in exponent notation."""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return format(Decimal(repr(value)).normalize(), "f")


def _root(source: XmlSource) -> ET.Element:
    if isinstance(source, ET.Element):
        return source
    try:
        return ET.fromstring(source)
    except ET.ParseError as exc:
        raise FileFormatError(str(exc)) from exc


def _walk(
    element: ET.Element,
    start: Callable[[ET.Element], bool],
    end: Callable[[ET.Element], None],
) -> None:
    """Visit the descendants of element in document order.

    When start returns False the element's content has been consumed: its
    children are not visited and end is not called for it.
    """
    for child in element:
        if start(child):
            _walk(child, start, end)
            end(child)


def _kml_coordinate(parts: list[str]) -> GeoCoordinate:
    return GeoCoordinate(_to_double(parts[1]), _to_double(parts[0]), _to_double(parts[2]))


class _KmlReader:
    def __init__(self, target: GeoFile) -> None:
        self.target = target
        self.name = ""
        self.description = ""
        self.in_placemark = False
        self.in_point = False
        self.in_line = False

    def start(self, element: ET.Element) -> bool:
        tag = _local(element.tag)
        if tag == "Placemark":
            self.in_placemark = True
        elif self.in_placemark and tag == "name":
            self.name = _text(element)
            return False
        elif self.in_placemark and tag == "description":
            self.description = _text(element)
            return False
        elif tag == "Point":
            self.in_point = True
        elif tag == "LineString":
            self.in_line = True
        elif tag == "coordinates":
            if self.in_point:
                self._add_point(_text(element))
                return False
            if self.in_line:
                self._add_line(_text(element))
                return False
        return True

    def end(self, element: ET.Element) -> None:
        tag = _local(element.tag)
        if tag == "Placemark":
            self.in_placemark = False
        elif tag == "Point":
            self.in_point = False
        elif tag == "LineString":
            self.in_line = False

    def _add_point(self, text: str) -> None:
        parts = text.split(",")
        if len(parts) != 3:
            raise _StopParsing
        self.target.add_poi(_kml_coordinate(parts), self.name, self.description)

    def _add_line(self, text: str) -> None:
        track = Track(self.name, self.description)
        for item in text.split(" "):
            parts = item.split(",")
            if len(parts) != 3:
                break
            track.add_point(_kml_coordinate(parts))
        track.compute_statistics()
        track.update_bounding_box()
        self.target._tracks.append(track)


class _GpxReader:
    def __init__(self, target: GeoFile) -> None:
        self.target = target
        self.name = ""
        self.description = ""
        self.in_track = False
        self.in_track_point = False
        self.in_waypoint = False
        self.latitude = 0.0
        self.longitude = 0.0
        self.elevation = 0.0
        self.has_time = False
        self.first_time = ""
        self.last_time = ""
        self.track: Track | None = None

    def _read_position(self, element: ET.Element) -> None:
        self.latitude = _to_double(element.get("lat"))
        self.longitude = _to_double(element.get("lon"))

    def start(self, element: ET.Element) -> bool:
        tag = _local(element.tag)
        if tag in ("extension", "rte"):
            return False
        if tag == "wpt":
            self.in_waypoint = True
            self._read_position(element)
        elif self.in_waypoint and tag == "ele":
            self.elevation = _to_double(_text(element))
            return False
        elif self.in_waypoint and tag == "name":
            self.name = _text(element)
            return False
        elif self.in_waypoint and tag == "desc":
            self.description = _text(element)
            return False
        elif tag == "trk":
            self.in_track = True
            self.track = Track()
        elif self.in_track and not self.in_track_point and tag == "name":
            self.name = _text(element)
            return False
        elif self.in_track and tag == "desc":
            self.description = _text(element)
            return False
        elif self.in_track and tag == "trkpt":
            self.in_track_point = True
            self._read_position(element)
        elif self.in_track_point and tag == "ele":
            self.elevation = _to_double(_text(element))
            return False
        elif self.in_track_point and tag == "time":
            self.has_time = True
            if not self.first_time:
                self.first_time = _text(element)
            else:
                self.last_time = _text(element)
            return False
        return True

    def end(self, element: ET.Element) -> None:
        tag = _local(element.tag)
        if tag == "wpt":
            self.target.add_poi(
                GeoCoordinate(self.latitude, self.longitude, self.elevation),
                self.name,
                self.description,
            )
            self.elevation = 0.0
            self.in_waypoint = False
        elif tag == "trkpt":
            if self.track is None:
                raise FileFormatError("track point outside of a track")
            self.track.add_point(
                GeoCoordinate(self.latitude, self.longitude, self.elevation),
                self.last_time,
            )
            self.elevation = 0.0
            self.in_track_point = False
        elif tag == "trk" and self.track is not None:
            track = self.track
            track.name = self.name
            track.description = self.description
            if self.has_time:
                track.set_duration(_seconds_between(self.first_time, self.last_time))
                self.has_time = False
                self.first_time = ""
                self.last_time = ""
            track.compute_statistics()
            track.update_bounding_box()
            self.target._tracks.append(track)
            self.name = ""
            self.description = ""
            self.in_track = False


class GeoFile:
    """The waypoints and tracks of one GPX or KML document."""

    def __init__(self) -> None:
        self.name = ""
        self._pois: list[Poi] = []
        self._tracks: list[Track] = []
        self._bbox = GeoRectangle()

    @property
    def pois(self) -> tuple[Poi, ...]:
        return tuple(self._pois)

    @property
    def tracks(self) -> tuple[Track, ...]:
        return tuple(self._tracks)

    @property
    def bounding_box(self) -> GeoRectangle:
        return self._bbox

    @property
    def climb(self) -> float:
        return sum((track.climb for track in self._tracks), 0.0)

    @property
    def altitude_max(self) -> float:
        result = 0.0
        for track in self._tracks:
            if result < track.altitude_max:
                result = track.altitude_max
        return result

    @property
    def altitude_min(self) -> float:
        if not self._tracks:
            return 0.0
        result = self._tracks[0].altitude_min
        for track in self._tracks[1:]:
            if track.altitude_min < result:
                result = track.altitude_min
        return result

    @property
    def distance_2d(self) -> float:
        return sum((track.distance_2d for track in self._tracks), 0.0)

    @property
    def distance_3d(self) -> float:
        return sum((track.distance_3d for track in self._tracks), 0.0)

    def open(self, file_name: str) -> None:
        """Read a GPX or KML file given as a path or a file URL."""
        path, name = _resolve(file_name)
        data = path.read_bytes()
        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            raise FileFormatError(f"{file_name}: {exc}") from exc
        kind = _local(root.tag)
        if kind == "kml":
            self.parse_kml(root)
        elif kind == "gpx":
            self.parse_gpx(root)
        else:
            raise FileFormatError(f"unknown file type: {kind}")
        self.name = name

    def parse_kml(self, source: XmlSource) -> None:
        """Add the placemarks of a KML document; a malformed point ends the parse."""
        reader = _KmlReader(self)
        try:
            _walk(_root(source), reader.start, reader.end)
        except _StopParsing:
            return
        self._update_bounding_box()

    def parse_gpx(self, source: XmlSource) -> None:
        """Add the waypoints and tracks of a GPX document."""
        reader = _GpxReader(self)
        _walk(_root(source), reader.start, reader.end)
        self._update_bounding_box()

    def add_poi(self, coordinate: GeoCoordinate, name: str, description: str = "") -> Poi:
        poi = Poi(name=name, description=description, coordinate=coordinate)
        self._pois.append(poi)
        return poi

    def remove_poi(self, index: int) -> None:
        if not 0 <= index < len(self._pois):
            raise IndexError(f"point of interest index {index} out of range")
        del self._pois[index]

    def add_track(self) -> Track:
        """Append an empty track and return it."""
        track = Track()
        self._tracks.append(track)
        self._update_bounding_box()
        return track

    def export_to_gpx(self, file_name: str, creator: str = DEFAULT_CREATOR) -> None:
        """Write the waypoints and tracks as a GPX 1.1 document."""
        path, _ = _resolve(file_name)
        root = ET.Element(
            "gpx",
            {
                "xmlns": GPX_NAMESPACE,
                "creator": creator,
                "version": "1.1",
                "xmlns:xsi": XSI_NAMESPACE,
                "xsi:schemaLocation": GPX_SCHEMA_LOCATION,
            },
        )
        metadata = ET.SubElement(root, "metadata")
        ET.SubElement(metadata, "name").text = path.stem
        ET.SubElement(metadata, "time").text = datetime.now(timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )
        for poi in self._pois:
            coordinate = poi.coordinate
            waypoint = ET.SubElement(
                root,
                "wpt",
                {
                    "lat": _format_number(coordinate.latitude),
                    "lon": _format_number(coordinate.longitude),
                },
            )
            if not math.isnan(coordinate.altitude):
                ET.SubElement(waypoint, "ele").text = _format_number(coordinate.altitude)
            ET.SubElement(waypoint, "name").text = poi.name
        for track in self._tracks:
            trk = ET.SubElement(root, "trk")
            if track.name:
                ET.SubElement(trk, "name").text = path.name[:-4]
            segment = ET.SubElement(trk, "trkseg")
            for point, stamp in zip(track.path, track.timestamps):
                trkpt = ET.SubElement(
                    segment,
                    "trkpt",
                    {
                        "lat": _format_number(point.latitude),
                        "lon": _format_number(point.longitude),
                    },
                )
                ET.SubElement(trkpt, "ele").text = _format_number(point.altitude)
                if stamp:
                    ET.SubElement(trkpt, "time").text = stamp
        ET.indent(root, space="  ")
        ET.ElementTree(root).write(path, encoding="UTF-8", xml_declaration=True)

    def _update_bounding_box(self) -> None:
        bbox = GeoRectangle()
        for track in self._tracks:
            bbox = bbox.united(track.bounding_box)
        self._bbox = bbox