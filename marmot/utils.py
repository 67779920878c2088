"""Helpers for displaying URLs and finding the user's standard folders."""

from __future__ import annotations

import os
import tempfile
from enum import IntEnum
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

APPLICATION_NAME = "Marmot"


class StandardLocation(IntEnum):
    """Kinds of standard folders, numbered as the map front-end expects."""

    DESKTOP = 0
    DOCUMENTS = 1
    FONTS = 2
    APPLICATIONS = 3
    MUSIC = 4
    MOVIES = 5
    PICTURES = 6
    TEMP = 7
    HOME = 8
    APP_LOCAL_DATA = 9
    CACHE = 10
    GENERIC_DATA = 11
    RUNTIME = 12
    CONFIG = 13
    DOWNLOAD = 14
    GENERIC_CACHE = 15
    GENERIC_CONFIG = 16
    APP_DATA = 17
    APP_CONFIG = 18


def _xdg(variable: str, fallback: Path) -> Path:
    value = os.environ.get(variable)
    return Path(value) if value else fallback


def _writable_location(kind: StandardLocation) -> Path:
    home = Path.home()
    data = _xdg("XDG_DATA_HOME", home / ".local" / "share")
    config = _xdg("XDG_CONFIG_HOME", home / ".config")
    cache = _xdg("XDG_CACHE_HOME", home / ".cache")
    locations = {
        StandardLocation.DESKTOP: home / "Desktop",
        StandardLocation.DOCUMENTS: home / "Documents",
        StandardLocation.FONTS: data / "fonts",
        StandardLocation.APPLICATIONS: data / "applications",
        StandardLocation.MUSIC: home / "Music",
        StandardLocation.MOVIES: home / "Videos",
        StandardLocation.PICTURES: home / "Pictures",
        StandardLocation.TEMP: Path(tempfile.gettempdir()),
        StandardLocation.HOME: home,
        StandardLocation.APP_LOCAL_DATA: data / APPLICATION_NAME,
        StandardLocation.CACHE: cache / APPLICATION_NAME,
        StandardLocation.GENERIC_DATA: data,
        StandardLocation.RUNTIME: _xdg(
            "XDG_RUNTIME_DIR",
            Path(tempfile.gettempdir()) / f"runtime-{os.environ.get('USER', 'user')}",
        ),
        StandardLocation.CONFIG: config,
        StandardLocation.DOWNLOAD: home / "Downloads",
        StandardLocation.GENERIC_CACHE: cache,
        StandardLocation.GENERIC_CONFIG: config,
        StandardLocation.APP_DATA: data / APPLICATION_NAME,
        StandardLocation.APP_CONFIG: config / APPLICATION_NAME,
    }
    return locations[kind]


def pretty_url(url: str) -> str:
    """A local path for file URLs, the URL itself otherwise."""
    parsed = urlparse(url)
    if parsed.scheme.lower() != "file":
        return url
    path = url2pathname(parsed.path)
    if parsed.netloc and parsed.netloc.lower() != "localhost":
        return f"//{parsed.netloc}{path}"
    return path


def location(kind: StandardLocation | int) -> str:
    """File URL of the writable folder of the given kind."""
    return _writable_location(StandardLocation(kind)).absolute().as_uri()