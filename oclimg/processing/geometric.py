"""
Geometric transformations.

These work on any pixel layout the marshaler supports; the output has the
same shape and dtype as the input.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from oclimg.constants import Feature, GeometricKernel
from oclimg.core.exceptions import InvalidParameterError
from oclimg.core.image import HostImage

if TYPE_CHECKING:
    from oclimg.core.executor import Executor


def flip_horizontal(executor: Executor, image: np.ndarray) -> np.ndarray:
    """Mirror the image left to right."""
    return executor.apply(Feature.GEOMETRIC_TRANSFORM, GeometricKernel.FLIP_HORIZONTAL.value, image)


def flip_vertical(executor: Executor, image: np.ndarray) -> np.ndarray:
    """Mirror the image top to bottom."""
    return executor.apply(Feature.GEOMETRIC_TRANSFORM, GeometricKernel.FLIP_VERTICAL.value, image)


def rotate180(executor: Executor, image: np.ndarray) -> np.ndarray:
    return executor.apply(Feature.GEOMETRIC_TRANSFORM, GeometricKernel.ROTATE_180.value, image)


def translate(executor: Executor, image: np.ndarray, dx: int, dy: int) -> np.ndarray:
    """
    Shift the image by (dx, dy) pixels.

    Pixels shifted in from outside the image are zero in every channel.
    translate(image, 0, 0) returns an identical copy.
    """
    for name, value in (("dx", dx), ("dy", dy)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidParameterError(f"{name} must be an integer, got {value!r}")

    # A shift of a full image dimension or more already blanks the image
    width, height = HostImage.from_array(image).dimensions
    dx = max(-width, min(int(dx), width))
    dy = max(-height, min(int(dy), height))

    return executor.apply(Feature.GEOMETRIC_TRANSFORM, GeometricKernel.TRANSLATE.value, image,
                          np.int32(dx), np.int32(dy))
