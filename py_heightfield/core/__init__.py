"""
Core heightfield generation functionality.
"""

from .errors import ConfigurationError
from .permutation import PermutationTable
from .simplex_noise import GradientNoise2D, GradientNoise3D, SlicedNoise3D
from .octaves import OctaveSpec, OffsetMode, build_octaves
from .accumulator import HeightFieldAccumulator
from .normalizer import NormalizeMode, normalize
from .heightfield_generator import Basis, HeightfieldConfig, HeightfieldGenerator, generate_heightfield

__all__ = ['ConfigurationError', 'PermutationTable',
           'GradientNoise2D', 'GradientNoise3D', 'SlicedNoise3D',
           'OctaveSpec', 'OffsetMode', 'build_octaves',
           'HeightFieldAccumulator', 'NormalizeMode', 'normalize',
           'Basis', 'HeightfieldConfig', 'HeightfieldGenerator', 'generate_heightfield']
