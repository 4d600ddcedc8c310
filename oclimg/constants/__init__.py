"""Constants for oclimg."""

from oclimg.constants.constants import (
    BIT_DEPTH_8,
    BIT_DEPTH_16,
    FEATURE_SOURCE_FILES,
    MAX_INTENSITY_U8,
    SUPPORTED_BIT_DEPTHS,
    SUPPORTED_CHANNEL_COUNTS,
    ContrastKernel,
    Feature,
    GeometricKernel,
)

__all__ = [
    "BIT_DEPTH_8",
    "BIT_DEPTH_16",
    "FEATURE_SOURCE_FILES",
    "MAX_INTENSITY_U8",
    "SUPPORTED_BIT_DEPTHS",
    "SUPPORTED_CHANNEL_COUNTS",
    "ContrastKernel",
    "Feature",
    "GeometricKernel",
]
