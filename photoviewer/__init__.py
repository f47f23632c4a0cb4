"""PhotoViewer: console client for a photo-sharing backend."""

__version__ = "0.1.0"
