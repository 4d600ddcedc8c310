"""
Thresholding and contrast stretching on 8-bit grayscale images.

Inputs are 2D uint8 arrays; anything else is rejected rather than converted.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from oclimg.constants import MAX_INTENSITY_U8, ContrastKernel, Feature
from oclimg.core.exceptions import InvalidParameterError, UnsupportedPixelFormatError

if TYPE_CHECKING:
    from oclimg.core.executor import Executor

logger = logging.getLogger(__name__)


def _validate_gray8(image) -> None:
    """
    Validate that the input is a 2D uint8 NumPy array.

    Raises:
        UnsupportedPixelFormatError: If it is not
    """
    if not isinstance(image, np.ndarray):
        raise UnsupportedPixelFormatError(f"image must be a NumPy array, got {type(image)}")
    if image.ndim != 2 or image.dtype != np.uint8:
        raise UnsupportedPixelFormatError(
            f"Expected a 2D uint8 grayscale image, got {image.ndim}D {image.dtype}"
        )


def _validate_intensity(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= MAX_INTENSITY_U8:
        raise InvalidParameterError(f"{name} must be within 0..{MAX_INTENSITY_U8}, got {value}")
    return int(value)


def threshold(executor: Executor, image: np.ndarray, threshold: int) -> np.ndarray:
    """
    Binarize an image: 255 where a pixel is strictly above threshold, else 0.

    Args:
        executor: Executor with the contrast feature enabled
        image: 2D uint8 array
        threshold: Intensity in 0..255

    Returns:
        New 2D uint8 array with the same dimensions
    """
    _validate_gray8(image)
    threshold = _validate_intensity("threshold", threshold)
    return executor.apply(Feature.CONTRAST, ContrastKernel.THRESHOLD.value, image,
                          np.uint32(threshold))


def threshold_mut(executor: Executor, image: np.ndarray, threshold: int) -> None:
    """Same as threshold(), but overwrites image in place."""
    _validate_gray8(image)
    threshold = _validate_intensity("threshold", threshold)
    executor.apply_in_place(Feature.CONTRAST, ContrastKernel.THRESHOLD_MUT.value, image,
                            np.uint32(threshold))


def adaptive_threshold(executor: Executor, image: np.ndarray, block_radius: int) -> np.ndarray:
    """
    Binarize each pixel against the mean of its neighbourhood.

    The neighbourhood is the square of half-width block_radius around the
    pixel, cut off at the image borders. A pixel becomes 255 when it is at
    least the (integer) local mean, so constant regions come out white.

    Args:
        executor: Executor with the contrast feature enabled
        image: 2D uint8 array
        block_radius: Half-width of the window, must be > 0

    Returns:
        New 2D uint8 array with the same dimensions
    """
    _validate_gray8(image)
    if isinstance(block_radius, bool) or not isinstance(block_radius, (int, np.integer)):
        raise InvalidParameterError(f"block_radius must be an integer, got {block_radius!r}")
    if block_radius <= 0:
        raise InvalidParameterError(f"block_radius must be > 0, got {block_radius}")

    # Any window wider than the image covers all of it; keeps the kernel's int
    # window bounds from overflowing
    block_radius = min(int(block_radius), max(image.shape))

    return executor.apply(Feature.CONTRAST, ContrastKernel.ADAPTIVE_THRESHOLD.value, image,
                          np.int32(block_radius))


def stretch_contrast(executor: Executor, image: np.ndarray, lower: int, upper: int) -> np.ndarray:
    """
    Linearly map intensities in (lower, upper) onto (0, 255).

    Pixels at or below lower become 0, pixels at or above upper become 255.
    """
    _validate_gray8(image)
    lower = _validate_intensity("lower", lower)
    upper = _validate_intensity("upper", upper)
    if upper <= lower:
        raise InvalidParameterError(
            f"upper must be strictly greater than lower, got lower={lower}, upper={upper}"
        )

    return executor.apply(Feature.CONTRAST, ContrastKernel.STRETCH_CONTRAST.value, image,
                          np.uint32(lower), np.uint32(upper))
