"""Read, edit and export GPS tracks and points of interest from GPX and KML files."""

__version__ = "1.0.0"
__all__ = ["chart", "filesmodel", "geofile", "poi", "proxy", "settings", "track", "utils"]