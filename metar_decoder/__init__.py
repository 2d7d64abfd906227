"""METAR/SPECI report decoder."""

__version__ = "0.1.0"
