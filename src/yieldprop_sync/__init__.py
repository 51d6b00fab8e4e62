"""Contract event sync and holder auto-registration daemon for YieldProp properties."""

__version__ = "0.1.0"
