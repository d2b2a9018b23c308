"""Content Pipeline Dashboard - observe and trigger the video automation pipeline."""

__version__ = "0.1.0"
