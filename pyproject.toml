[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "marmot"
version = "1.0.0"
description = "Read, edit and export GPX and KML tracks and points of interest, with elevation statistics"
requires-python = ">=3.10"
dependencies = []
keywords = ["gpx", "kml", "gps", "track", "elevation", "hiking", "waypoint"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
    "Topic :: File Formats",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["marmot"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
