"""ATF — widget-level automated testing framework."""

__version__ = "0.1.0"
