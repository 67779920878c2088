"""The list of opened files, with naming and colouring of their content."""

from __future__ import annotations

from typing import Callable, Iterator

from marmot.geofile import GeoFile

TRACK_COLORS = ("#209fdf", "#99ca53", "#f6a625", "#6d5fd5", "#bf593e")


def create_unique_key(keys) -> int:
    """Smallest key obtained by counting up from 0 through the sorted keys."""
    key = 0
    for existing in sorted(keys):
        if existing != key:
            break
        key += 1
    return key


class FilesModel:
    """Ordered collection of files; gives every track and point of interest a unique name."""

    def __init__(self, track_colors=TRACK_COLORS) -> None:
        self.track_colors = tuple(track_colors)
        self._files: list[GeoFile] = []
        # Keyed by object identity; the object is kept alive alongside its key.
        self._track_keys: dict[int, tuple[object, int]] = {}
        self._poi_keys: dict[int, tuple[object, int]] = {}
        self.on_appended: list[Callable[[GeoFile], None]] = []
        self.on_removed: list[Callable[[GeoFile], None]] = []

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[GeoFile]:
        return iter(self._files)

    @property
    def files(self) -> tuple[GeoFile, ...]:
        return tuple(self._files)

    def get(self, index: int) -> GeoFile | None:
        """The file at index, or None when index is out of range."""
        if not 0 <= index < len(self._files):
            return None
        return self._files[index]

    def append(self, file: GeoFile | None) -> None:
        """Add a file, naming and colouring its tracks and naming its points of interest."""
        if file is None:
            return
        for track in file.tracks:
            key = create_unique_key(k for _, k in self._track_keys.values())
            track.object_name = f"track_{key}"
            track.color = self.track_colors[key % len(self.track_colors)]
            self._track_keys[id(track)] = (track, key)
        for poi in file.pois:
            key = create_unique_key(k for _, k in self._poi_keys.values())
            poi.object_name = f"poi_{key}"
            self._poi_keys[id(poi)] = (poi, key)
        self._files.append(file)
        for callback in self.on_appended:
            callback(file)

    def remove(self, index: int) -> None:
        """Remove the file at index and free the keys of its tracks."""
        if not 0 <= index < len(self._files):
            raise IndexError(f"file index {index} out of range")
        file = self._files.pop(index)
        for track in file.tracks:
            self._track_keys.pop(id(track), None)
        for callback in self.on_removed:
            callback(file)