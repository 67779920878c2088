"""Elevation profile of tracks: altitude against horizontal distance."""

from __future__ import annotations

from dataclasses import dataclass, field

from marmot.track import Track

DEFAULT_X_MAX = 1000.0
DEFAULT_Y_MAX = 10.0


@dataclass
class Polyline:
    """A track's profile in chart pixel coordinates."""

    color: str | None
    points: list[tuple[float, float]] = field(default_factory=list)


class Chart:
    """Keeps the axis ranges of a set of tracks and maps them to a drawing area."""

    def __init__(self, width: float = 0.0, height: float = 0.0) -> None:
        self.width = width
        self.height = height
        self.x_min = 0.0
        self.x_max = DEFAULT_X_MAX
        self.y_min = 0.0
        self.y_max = DEFAULT_Y_MAX
        self._tracks: list[Track] = []

    @property
    def count(self) -> int:
        return len(self._tracks)

    @property
    def tracks(self) -> tuple[Track, ...]:
        return tuple(self._tracks)

    def create_series(self, track: Track) -> None:
        """Add a track to the chart."""
        self._tracks.append(track)
        self.update_extrema()

    def remove_series(self, track: Track) -> None:
        """Remove a track from the chart."""
        self._tracks.remove(track)
        self.update_extrema()

    def update_extrema(self) -> None:
        """Recompute the axis ranges from the tracks, with padding and minimum extents."""
        x_max = y_min = y_max = 0.0
        for position, track in enumerate(self._tracks):
            if position == 0:
                x_max = track.distance_2d
                y_min = track.altitude_min
                y_max = track.altitude_max
            else:
                x_max = max(x_max, track.distance_2d)
                y_min = min(y_min, track.altitude_min)
                y_max = max(y_max, track.altitude_max)
        y_min *= 0.95
        y_max *= 1.05
        self.x_max = max(x_max, DEFAULT_X_MAX)
        self.y_max = max(y_max, DEFAULT_Y_MAX)
        self.y_min = y_min

    def map_to_distance(self, x: float) -> float:
        """Distance along the x axis at pixel column x."""
        return self.x_min + (self.x_max - self.x_min) * x / self.width

    def map_to_position(self, x: float, y: float) -> tuple[int, int]:
        """Pixel position of a (distance, altitude) point."""
        px = int(self.width * (x - self.x_min) / (self.x_max - self.x_min))
        py = int(self.height - self.height * (y - self.y_min) / (self.y_max - self.y_min))
        return px, py

    def polylines(self) -> list[Polyline]:
        """Profiles to draw, in order; drawing stops at the first empty track."""
        x_ratio = self.width / (self.x_max - self.x_min)
        y_ratio = -self.height / (self.y_max - self.y_min)
        result = []
        for track in self._tracks:
            if len(track) == 0:
                break
            points = [
                ((distance - self.x_min) * x_ratio, (point.altitude - self.y_max) * y_ratio)
                for distance, point in zip(track.distances_2d, track.path)
            ]
            result.append(Polyline(track.color, points))
        return result