"""Seeded multi-octave gradient-noise heightfield generator."""

__version__ = "0.1.0"
