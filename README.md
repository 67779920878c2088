# marmot

A small library for GPS tracks and points of interest stored in GPX and KML
files. It reads the files, computes per-track statistics (2D and 3D distance,
climb and descent, elevation extremes, duration), lets you edit tracks point
by point, and writes the result out as GPX 1.1. It has no dependencies beyond
the standard library.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Reading a file

```python
from marmot.geofile import GeoFile, FileFormatError

geo = GeoFile()
try:
    geo.open("walk.gpx")
except FileFormatError as err:
    print("could not read file:", err)

for track in geo.tracks:
    print(track.name, track.distance_2d, track.climb, track.duration)

for poi in geo.pois:
    print(poi.name, poi.coordinate)

print(geo.distance_2d, geo.altitude_max, geo.bounding_box)
```

`GeoFile.open` accepts a plain path or a `file://` URL. It raises
`FileFormatError` when the document is not well-formed XML or its root is
neither `kml` nor `gpx`; a missing file raises the usual `OSError`.

- In KML, each `Placemark` gives its `name` and `description`; a `Point`
  becomes a point of interest and a `LineString` becomes a track.
  Coordinates are read as `longitude,latitude,altitude`. A `Point` whose
  coordinates do not have exactly three parts ends the parse.
- In GPX, waypoints (`wpt`) become points of interest and tracks (`trk`)
  become tracks. `rte` and `extension` elements are skipped. When track points
  carry `time` elements, the track's duration is the time between the first
  and the last one.

`parse_kml` and `parse_gpx` can also be called directly with XML text, bytes
or an `xml.etree.ElementTree.Element`. The file-level `climb`, `distance_2d`,
`distance_3d`, `altitude_min` and `altitude_max` are combined from its tracks.

Points of interest are `marmot.poi.Poi` dataclasses with `name`,
`description`, `coordinate` and `object_name`; `move_to` places one at a new
coordinate. `GeoFile.add_poi`, `remove_poi` and `add_track` edit the file's
contents; `remove_poi` raises `IndexError` for an index out of range.

## Tracks

```python
from marmot.track import GeoCoordinate, Track

track = Track()
track.add_point(GeoCoordinate(45.0, 6.0, 1200.0))
track.add_point(GeoCoordinate(45.01, 6.0, 1260.0))
track.compute_statistics(3, 3.0)

track.move_point(1, GeoCoordinate(45.02, 6.0))
index = track.index_from_distance(500.0)
where = track.coordinate_from_distance(500.0)
track.remove_point(0)
```

- `GeoCoordinate(latitude, longitude, altitude)` is immutable; the altitude
  defaults to NaN. `distance_to` gives the great-circle distance in metres,
  or 0 when either coordinate is out of range.
- `GeoRectangle.from_coordinates`, `united` and `is_valid` handle bounding
  boxes; `Track.update_bounding_box` refreshes `track.bounding_box`.
- `move_point` changes only latitude and longitude; the elevation is kept.
  `move_point` and `remove_point` raise `IndexError` for an index out of range.
- `compute_statistics(n_average, threshold)` smooths the elevations with a
  moving average over an odd window (an even window raises `ValueError`) and
  then adds up rises into `climb` and falls into `descent`; elevation changes
  are accumulated until they exceed the threshold.
- `set_path` replaces all points and clears timestamps and duration.
- `set_duration(seconds)` stores the duration as `HH:MM:SS` using
  `format_duration`, which drops whole days.
- `statistics_html(font_size)` returns a small HTML table summarising the track.

## Exporting

```python
geo.export_to_gpx("out.gpx", "marmot")
```

The file gets a `metadata` block with the file's base name and the current UTC
time, one `wpt` per point of interest and one `trk` with a single `trkseg` per
track. A track that has a name is written with the output file's name, less
its last four characters, as its `name`.

## Other pieces

- `marmot.filesmodel.FilesModel` keeps the list of open files (`get`,
  `append`, `remove`, `len()`). On `append` every track gets an
  `object_name` of the form `track_<key>` and a colour from `track_colors`,
  and every point of interest a `poi_<key>` name, using the smallest free key
  (`create_unique_key`). Callbacks in `on_appended` and `on_removed` are called
  with the file. `get` returns `None` for an index out of range; `remove`
  raises `IndexError`.
- `marmot.chart.Chart` holds elevation profiles: `create_series` and
  `remove_series` add and remove tracks, `update_extrema` recomputes the axis
  ranges (with padding and minimum extents of 1000 m and 10 m), and
  `map_to_distance`, `map_to_position` and `polylines` convert between the
  data and a drawing area of the given `width` and `height`.
- `marmot.settings.Settings` is a key/value store kept as a JSON file, by
  default under `$XDG_CONFIG_HOME/marmot/settings.json`. `set_value` writes
  the file at once.
- `marmot.proxy.SortFilterProxyModel` filters rows with a case-insensitive
  regular expression on each row's `name`, optionally sorts them, and maps
  proxy rows back to source rows with `source_index`.
- `marmot.utils` offers `pretty_url` and `location`, which returns a `file://`
  URL for a `StandardLocation` folder.

## What it does not do

marmot is a library only. It has no map view, no graphical interface and no
command-line program; `Chart` computes the coordinates of elevation profiles
but does not draw them.

## Running the tests

```
pytest
```