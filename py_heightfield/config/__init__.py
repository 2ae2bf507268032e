"""
Configuration modules for heightfield generation.
"""

from .octave_presets import get_preset, list_presets, PRESETS
from .config import Settings, settings
from .setup_logging import configure_logging

__all__ = ['get_preset', 'list_presets', 'PRESETS', 'Settings', 'settings', 'configure_logging']
