"""
Consolidated constants for oclimg.

This module defines the Feature tags, the kernel entry points each Feature's
program exposes, and the pixel layouts the marshaler understands.
"""

from enum import Enum
from typing import Dict, FrozenSet


class Feature(Enum):
    """Capability groups; each one is compiled into exactly one program."""
    CONTRAST = "contrast"
    GEOMETRIC_TRANSFORM = "geometric_trans"

    @property
    def index(self) -> int:
        """Dense position of this feature, used by the program registry."""
        return _FEATURE_ORDER.index(self)


# Fixed ordering for dense lookups
_FEATURE_ORDER = tuple(Feature)

FEATURE_SOURCE_FILES: Dict[Feature, str] = {
    Feature.CONTRAST: "contrast.cl",
    Feature.GEOMETRIC_TRANSFORM: "geometric_trans.cl",
}


class ContrastKernel(Enum):
    THRESHOLD = "threshold"
    THRESHOLD_MUT = "threshold_mut"
    ADAPTIVE_THRESHOLD = "adaptive_threshold"
    STRETCH_CONTRAST = "stretch_contrast"


class GeometricKernel(Enum):
    FLIP_HORIZONTAL = "flip_horizontal"
    FLIP_VERTICAL = "flip_vertical"
    ROTATE_180 = "rotate180"
    TRANSLATE = "translate"


# Pixel layout constants
BIT_DEPTH_8 = 8
BIT_DEPTH_16 = 16
SUPPORTED_BIT_DEPTHS: FrozenSet[int] = frozenset({BIT_DEPTH_8, BIT_DEPTH_16})
SUPPORTED_CHANNEL_COUNTS: FrozenSet[int] = frozenset({1, 2, 3, 4})

MAX_INTENSITY_U8 = 255
