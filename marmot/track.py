"""Geographic coordinates, bounding rectangles and tracks with statistics."""

from __future__ import annotations

import math
from bisect import bisect_left
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from itertools import pairwise
from typing import Iterable, Sequence

EARTH_MEAN_RADIUS = 6_371_007.2  # metres


def _is_valid(coordinate: GeoCoordinate) -> bool:
    return -90.0 <= coordinate.latitude <= 90.0 and -180.0 <= coordinate.longitude <= 180.0


def _qmax(a: float, b: float) -> float:
    return b if a < b else a


def _qmin(a: float, b: float) -> float:
    return a if a < b else b


@dataclass(frozen=True)
class GeoCoordinate:
    """A position in degrees with an optional altitude in metres."""

    latitude: float
    longitude: float
    altitude: float = math.nan

    def distance_to(self, other: GeoCoordinate) -> float:
        """Great-circle distance in metres; 0 if either coordinate is invalid."""
        if not (_is_valid(self) and _is_valid(other)):
            return 0.0
        dlat = math.radians(other.latitude - self.latitude)
        dlon = math.radians(other.longitude - self.longitude)
        hav_lat = math.sin(dlat / 2.0) ** 2
        hav_lon = math.sin(dlon / 2.0) ** 2
        y = hav_lat + (
            math.cos(math.radians(self.latitude))
            * math.cos(math.radians(other.latitude))
            * hav_lon
        )
        return 2.0 * math.asin(math.sqrt(y)) * EARTH_MEAN_RADIUS


@dataclass(frozen=True)
class GeoRectangle:
    """An axis-aligned latitude/longitude box; empty when no corners are set."""

    top_left: GeoCoordinate | None = None
    bottom_right: GeoCoordinate | None = None

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[GeoCoordinate]) -> GeoRectangle:
        """Smallest rectangle holding every valid coordinate."""
        valid = [c for c in coordinates if _is_valid(c)]
        if not valid:
            return cls()
        latitudes = [c.latitude for c in valid]
        longitudes = [c.longitude for c in valid]
        return cls(
            GeoCoordinate(max(latitudes), min(longitudes)),
            GeoCoordinate(min(latitudes), max(longitudes)),
        )

    def is_valid(self) -> bool:
        """True when both corners are valid and the top lies north of the bottom."""
        if self.top_left is None or self.bottom_right is None:
            return False
        return (
            _is_valid(self.top_left)
            and _is_valid(self.bottom_right)
            and self.top_left.latitude >= self.bottom_right.latitude
        )

    def united(self, other: GeoRectangle) -> GeoRectangle:
        """Smallest rectangle holding both rectangles."""
        if not self.is_valid():
            return other
        if not other.is_valid():
            return self
        return GeoRectangle(
            GeoCoordinate(
                max(self.top_left.latitude, other.top_left.latitude),
                min(self.top_left.longitude, other.top_left.longitude),
            ),
            GeoCoordinate(
                min(self.bottom_right.latitude, other.bottom_right.latitude),
                max(self.bottom_right.longitude, other.bottom_right.longitude),
            ),
        )


def _trunc_divmod(value: int, divisor: int) -> tuple[int, int]:
    quotient = abs(value) // divisor
    if value < 0:
        quotient = -quotient
    return quotient, value - quotient * divisor


def format_duration(seconds: int) -> str:
    """Format a number of seconds as HH:MM:SS; whole days are dropped."""
    total, secs = _trunc_divmod(int(seconds), 60)
    total, minutes = _trunc_divmod(total, 60)
    _, hours = _trunc_divmod(total, 24)
    return ":".join(str(part).rjust(2, "0") for part in (hours, minutes, secs))


def _parse_iso(text: str) -> datetime | None:
    text = text.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _seconds_between(first: str, last: str) -> int:
    start, end = _parse_iso(first), _parse_iso(last)
    if start is None or end is None:
        return 0
    if (start.tzinfo is None) != (end.tzinfo is None):
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        else:
            end = end.replace(tzinfo=timezone.utc)
    return int((end - start).total_seconds())


def _segment(a: GeoCoordinate, b: GeoCoordinate) -> tuple[float, float]:
    """Horizontal and slope distance between two points."""
    flat = a.distance_to(b)
    rise = a.altitude - b.altitude
    return flat, math.sqrt(flat * flat + rise * rise)


class Track:
    """A sequence of coordinates with distances, elevation and climb statistics."""

    def __init__(self, name: str = "", description: str = "") -> None:
        self.name = name
        self.description = description
        self.color: str | None = None
        self.object_name = ""
        self._duration = ""
        self._bbox = GeoRectangle()
        self._climb = 0.0
        self._descent = 0.0
        self._clear_path()

    def _clear_path(self) -> None:
        self._path: list[GeoCoordinate] = []
        self._averaged_altitudes: list[float] = []
        self._distances_2d: list[float] = []
        self._timestamps: list[str] = []
        self._altitude_max = 0.0
        self._altitude_min = 0.0
        self._distance_2d = 0.0
        self._distance_3d = 0.0

    def _rebuild(self, points: Sequence[GeoCoordinate], timestamps: Sequence[str]) -> None:
        self._clear_path()
        for point, stamp in zip(points, timestamps):
            self.add_point(point, stamp)

    def __len__(self) -> int:
        return len(self._path)

    @property
    def path(self) -> tuple[GeoCoordinate, ...]:
        return tuple(self._path)

    @property
    def timestamps(self) -> tuple[str, ...]:
        return tuple(self._timestamps)

    @property
    def distances_2d(self) -> tuple[float, ...]:
        """Cumulative horizontal distance at each point."""
        return tuple(self._distances_2d)

    @property
    def averaged_altitudes(self) -> tuple[float, ...]:
        return tuple(self._averaged_altitudes)

    @property
    def duration(self) -> str:
        return self._duration

    @property
    def bounding_box(self) -> GeoRectangle:
        return self._bbox

    @property
    def climb(self) -> float:
        return self._climb

    @property
    def descent(self) -> float:
        return self._descent

    @property
    def altitude_max(self) -> float:
        return self._altitude_max

    @property
    def altitude_min(self) -> float:
        return self._altitude_min

    @property
    def distance_2d(self) -> float:
        return self._distance_2d

    @property
    def distance_3d(self) -> float:
        return self._distance_3d

    def add_point(self, point: GeoCoordinate, timestamp: str = "") -> None:
        """Append a point and update extrema and distances."""
        if not self._path:
            self._altitude_max = point.altitude
            self._altitude_min = point.altitude
        else:
            self._altitude_max = _qmax(self._altitude_max, point.altitude)
            self._altitude_min = _qmin(self._altitude_min, point.altitude)
            flat, slope = _segment(point, self._path[-1])
            self._distance_2d += flat
            self._distance_3d += slope
        self._path.append(point)
        self._averaged_altitudes.append(point.altitude)
        self._distances_2d.append(self._distance_2d)
        self._timestamps.append(timestamp)

    def move_point(self, index: int, point: GeoCoordinate) -> None:
        """Move a point horizontally, keeping its altitude."""
        if not 0 <= index < len(self._path):
            raise IndexError(f"point index {index} out of range")
        before = self._distance_2d
        neighbours = [i for i in (index - 1, index + 1) if 0 <= i < len(self._path)]
        for neighbour in neighbours:
            flat, slope = _segment(self._path[index], self._path[neighbour])
            self._distance_2d -= flat
            self._distance_3d -= slope
        self._path[index] = replace(
            self._path[index], latitude=point.latitude, longitude=point.longitude
        )
        for neighbour in neighbours:
            flat, slope = _segment(self._path[index], self._path[neighbour])
            self._distance_2d += flat
            self._distance_3d += slope
        delta = self._distance_2d - before
        start = max(index, 1)
        self._distances_2d[start:] = [d + delta for d in self._distances_2d[start:]]

    def remove_point(self, index: int) -> None:
        """Remove a point and recompute distances, extrema and statistics."""
        if not 0 <= index < len(self._path):
            raise IndexError(f"point index {index} out of range")
        points = self._path[:index] + self._path[index + 1:]
        stamps = self._timestamps[:index] + self._timestamps[index + 1:]
        self._rebuild(points, stamps)
        self.compute_statistics()
        if self._timestamps and (index == 0 or index == len(self._timestamps)):
            self.set_duration(_seconds_between(self._timestamps[0], self._timestamps[-1]))

    def set_path(self, path: Iterable[GeoCoordinate]) -> None:
        """Replace the whole path; timestamps and duration are cleared."""
        points = list(path)
        self._duration = ""
        self._rebuild(points, [""] * len(points))
        self.compute_statistics(1, 0.0)

    def compute_statistics(self, n_average: int = 3, threshold: float = 3.0) -> None:
        """Smooth altitudes with a moving average and compute climb and descent."""
        self._average_altitudes(n_average)
        self._compute_climb(threshold)

    def _average_altitudes(self, n: int) -> None:
        if n < 0:
            return
        if n % 2 == 0:
            raise ValueError("the averaging window must be an odd number")
        altitudes = [p.altitude for p in self._path]
        count = len(altitudes)
        half = (n - 1) // 2
        self._averaged_altitudes = [
            sum(altitudes[i - half:i + half + 1]) / n if n - 1 < i < count - n + 1 else altitude
            for i, altitude in enumerate(altitudes)
        ]

    def _compute_climb(self, threshold: float) -> None:
        climb = descent = diff = 0.0
        for previous, current in pairwise(self._averaged_altitudes):
            diff += current - previous
            if diff > 0.0 and diff > threshold:
                climb += diff
                diff = 0.0
            elif diff < 0.0 and diff < threshold:
                descent -= diff
                diff = 0.0
        self._climb = climb
        self._descent = descent

    def index_from_distance(self, distance: float) -> int:
        """Index of the first point whose cumulative distance is not below distance."""
        return bisect_left(self._distances_2d, distance)

    def coordinate_from_distance(self, distance: float) -> GeoCoordinate:
        """Point reached at the given cumulative horizontal distance."""
        return self._path[self.index_from_distance(distance)]

    def update_bounding_box(self) -> None:
        self._bbox = GeoRectangle.from_coordinates(self._path)

    def set_duration(self, seconds: int) -> None:
        self._duration = format_duration(seconds)

    def statistics_html(self, font_size: float = 10.0) -> str:
        """Summary table of the track as rich text."""
        rows = [
            ("Distance: ", f"{self._distance_3d / 1000.0:.2f} km"),
            ("Climb: ", f"{self._climb:.0f} m"),
        ]
        if self._duration:
            rows.append(("Duration: ", self._duration))
        rows += [
            ("Max. elevation: ", f"{self._altitude_max:.0f} m"),
            ("Min. elevation: ", f"{self._altitude_min:.0f} m"),
            ("Elevation diff.: ", f"{self._altitude_max - self._altitude_min:.0f} m"),
        ]
        body = "".join(
            f"<tr><td><b>{label}</b></td><td>{value}</td></tr>" for label, value in rows
        )
        return f'<table style="font-size: {int(font_size * 0.90)}pt">{body}</table>'