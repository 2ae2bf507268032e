"""Exceptions raised by heightfield generation."""


class ConfigurationError(ValueError):
    """Raised when a generation request is rejected before any work is done.

    Covers bad grid sizes, empty or non-finite octave lists, negative
    damping factors and unknown modes or presets.
    """
