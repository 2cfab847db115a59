"""Run adjudicated matches between two UCI chess engines."""

__version__ = "0.1.0"
