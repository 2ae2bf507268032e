"""
Named octave layer presets.

Each preset is an ordered tuple of ``(frequency, weight)`` layers, where
frequency counts noise features across the whole grid. Weights of the
multi-octave presets sum to 1 so the accumulated field stays near [0, 1].
"""

from typing import Dict, List, Tuple

Layers = Tuple[Tuple[float, float], ...]

PRESETS: Dict[str, Layers] = {
    # Five octaves, decreasing weight
    "default": (
        (4.0, 0.4),
        (8.0, 0.25),
        (16.0, 0.15),
        (32.0, 0.12),
        (64.0, 0.08),
    ),
    # Broad hills, little fine detail
    "rolling": (
        (2.0, 0.5),
        (5.0, 0.3),
        (11.0, 0.2),
    ),
    # Many octaves with a long high-frequency tail
    "rugged": (
        (6.0, 0.3),
        (12.0, 0.2),
        (24.0, 0.2),
        (48.0, 0.15),
        (96.0, 0.1),
        (192.0, 0.05),
    ),
    # One octave, mostly useful for inspecting the raw noise
    "single": (
        (8.0, 1.0),
    ),
}


def get_preset(name: str) -> Layers:
    """
    Get octave layers by name.

    Raises:
        KeyError: If the preset does not exist
    """
    if name not in PRESETS:
        raise KeyError(f"Unknown octave preset {name!r}, available: {', '.join(list_presets())}")
    return PRESETS[name]


def list_presets() -> List[str]:
    return sorted(PRESETS)
