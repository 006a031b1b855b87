"""Playcaster - turn any video playlist into a podcast feed."""

__version__ = "0.4.0"
