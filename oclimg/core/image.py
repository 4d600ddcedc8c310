"""
Host <-> device image marshaling.

Host images are C-contiguous numpy arrays laid out row-major as
(height, width) or (height, width, channels). Device images are OpenCL 2D
images whose channel order and data type are looked up from a fixed table
keyed by (channels, bit depth). A layout missing from the table is an error;
nothing is coerced.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, NamedTuple, Tuple

import numpy as np
import pyopencl as cl

from oclimg.constants import BIT_DEPTH_8, BIT_DEPTH_16
from oclimg.core.context import DeviceContext
from oclimg.core.exceptions import TransferError, UnsupportedPixelFormatError

logger = logging.getLogger(__name__)

# Access flag presets for the allocate -> dispatch -> read-back protocol
SOURCE_FLAGS = cl.mem_flags.READ_ONLY | cl.mem_flags.HOST_WRITE_ONLY
DEST_FLAGS = cl.mem_flags.WRITE_ONLY | cl.mem_flags.HOST_READ_ONLY
READ_WRITE_FLAGS = cl.mem_flags.READ_WRITE

_BIT_DEPTH_DTYPES = {
    BIT_DEPTH_8: np.dtype(np.uint8),
    BIT_DEPTH_16: np.dtype(np.uint16),
}


class DeviceFormat(NamedTuple):
    """OpenCL channel order / channel data type pair."""
    channel_order: int
    channel_type: int

    @property
    def image_format(self) -> cl.ImageFormat:
        return cl.ImageFormat(self.channel_order, self.channel_type)


# (channels, bit depth) -> device format. CL_INTENSITY and CL_LUMINANCE only
# accept normalized or float channel types, so integer single-channel layouts
# map to CL_R. CL_LUMINANCE is single channel, so the two-channel
# luminance+alpha layout maps to CL_RA.
FORMAT_TABLE: Dict[Tuple[int, int], DeviceFormat] = {
    (1, BIT_DEPTH_8): DeviceFormat(cl.channel_order.R, cl.channel_type.UNSIGNED_INT8),
    (2, BIT_DEPTH_8): DeviceFormat(cl.channel_order.RA, cl.channel_type.UNSIGNED_INT8),
    (3, BIT_DEPTH_8): DeviceFormat(cl.channel_order.RGB, cl.channel_type.UNSIGNED_INT8),
    (4, BIT_DEPTH_8): DeviceFormat(cl.channel_order.RGBA, cl.channel_type.UNSIGNED_INT8),
    (1, BIT_DEPTH_16): DeviceFormat(cl.channel_order.R, cl.channel_type.UNSIGNED_INT16),
    (2, BIT_DEPTH_16): DeviceFormat(cl.channel_order.RA, cl.channel_type.UNSIGNED_INT16),
    (3, BIT_DEPTH_16): DeviceFormat(cl.channel_order.RGB, cl.channel_type.UNSIGNED_INT16),
    (4, BIT_DEPTH_16): DeviceFormat(cl.channel_order.RGBA, cl.channel_type.UNSIGNED_INT16),
}


def device_format(channels: int, bit_depth: int) -> DeviceFormat:
    """
    Map a host pixel layout to its device channel order and data type.

    Args:
        channels: Number of interleaved channels per pixel
        bit_depth: Bits per channel

    Returns:
        The matching DeviceFormat

    Raises:
        UnsupportedPixelFormatError: If the layout has no device analogue
    """
    try:
        return FORMAT_TABLE[(channels, bit_depth)]
    except KeyError:
        raise UnsupportedPixelFormatError(
            f"No device image format for {channels} channel(s) at {bit_depth} bits"
        ) from None


@dataclass(frozen=True)
class HostImage:
    """A caller-owned pixel buffer viewed as width x height x channels x bit depth."""
    array: np.ndarray

    @classmethod
    def from_array(cls, array) -> "HostImage":
        """
        Wrap a numpy array, validating that its layout can be marshaled.

        Raises:
            UnsupportedPixelFormatError: If the dtype, rank or channel count has
                no device analogue
        """
        array = np.asarray(array)
        if array.ndim not in (2, 3):
            raise UnsupportedPixelFormatError(
                f"Expected a (height, width) or (height, width, channels) array, got {array.ndim}D"
            )
        if array.dtype not in _BIT_DEPTH_DTYPES.values():
            raise UnsupportedPixelFormatError(f"Unsupported pixel dtype {array.dtype}")

        image = cls(array)
        device_format(image.channels, image.bit_depth)
        return image

    @property
    def height(self) -> int:
        return self.array.shape[0]

    @property
    def width(self) -> int:
        return self.array.shape[1]

    @property
    def channels(self) -> int:
        return 1 if self.array.ndim == 2 else self.array.shape[2]

    @property
    def bit_depth(self) -> int:
        return self.array.dtype.itemsize * 8

    @property
    def dimensions(self) -> Tuple[int, int]:
        """(width, height), the order OpenCL uses for image shapes and work sizes."""
        return self.width, self.height


class DeviceImage:
    """
    Device-resident mirror of a HostImage.

    Only created through host_to_device(), which releases it when the
    enclosing call finishes.
    """

    def __init__(self, image: cl.Image, host_shape: Tuple[int, ...], dtype: np.dtype,
                 fmt: DeviceFormat):
        self.image = image
        self.host_shape = host_shape
        self.dtype = dtype
        self.format = fmt
        self._released = False

    @property
    def dimensions(self) -> Tuple[int, int]:
        return self.host_shape[1], self.host_shape[0]

    def empty_host_buffer(self) -> np.ndarray:
        """Allocate a host array that device_to_host() can fill."""
        return np.empty(self.host_shape, dtype=self.dtype)

    def release(self) -> None:
        if not self._released:
            self.image.release()
            self._released = True

    def __repr__(self):
        return (f"DeviceImage(dimensions={self.dimensions}, dtype={self.dtype}, "
                f"released={self._released})")


@contextmanager
def host_to_device(device_context: DeviceContext, image, access_flags: int,
                   copy_host: bool = True) -> Iterator[DeviceImage]:
    """
    Allocate a device image matching a host image, scoped to a with block.

    Args:
        device_context: Context the image is allocated in
        image: HostImage or numpy array
        access_flags: pyopencl mem_flags for the device image
        copy_host: Copy the host pixels into the new image

    Yields:
        DeviceImage with the same dimensions and format as the host image

    Raises:
        UnsupportedPixelFormatError: If the layout has no device analogue, or
            the device does not support it
        TransferError: If allocation or the initial copy fails
    """
    host = image if isinstance(image, HostImage) else HostImage.from_array(image)
    fmt = device_format(host.channels, host.bit_depth)

    if not device_context.supports_format(access_flags, fmt.image_format):
        raise UnsupportedPixelFormatError(
            f"Device {device_context.device.name.strip()} does not support "
            f"{cl.channel_order.to_string(fmt.channel_order)}/"
            f"{cl.channel_type.to_string(fmt.channel_type)} images"
        )

    flags = access_flags
    hostbuf = None
    if copy_host:
        flags |= cl.mem_flags.COPY_HOST_PTR
        hostbuf = np.ascontiguousarray(host.array)

    try:
        cl_image = cl.create_image(device_context.context, flags, fmt.image_format,
                                   shape=host.dimensions, hostbuf=hostbuf)
    except cl.Error as e:
        logger.error("Could not allocate %sx%s image on device: %s", host.width, host.height, e)
        raise TransferError(f"Could not allocate image on device: {e}") from e

    device_image = DeviceImage(cl_image, host.array.shape, host.array.dtype, fmt)
    logger.debug("Allocated %r", device_image)
    try:
        yield device_image
    finally:
        device_image.release()


def device_to_host(device_context: DeviceContext, device_image: DeviceImage,
                   host_buffer: np.ndarray) -> np.ndarray:
    """
    Blocking read of a device image into a host buffer.

    The buffer must have exactly the device image's host shape and dtype; it
    is neither resized nor converted. Returns once the data is host-resident.

    Raises:
        TransferError: If the buffer does not match or the copy fails
    """
    if host_buffer.shape != device_image.host_shape or host_buffer.dtype != device_image.dtype:
        raise TransferError(
            f"Host buffer {host_buffer.shape}/{host_buffer.dtype} does not match device image "
            f"{device_image.host_shape}/{device_image.dtype}"
        )
    if not host_buffer.flags.c_contiguous or not host_buffer.flags.writeable:
        raise TransferError("Host buffer must be writable and C-contiguous")

    width, height = device_image.dimensions
    try:
        cl.enqueue_copy(device_context.queue, host_buffer, device_image.image,
                        origin=(0, 0), region=(width, height), is_blocking=True)
    except cl.Error as e:
        logger.error("Error while copying device mem to host: %s", e)
        raise TransferError(f"Error while copying device mem to host: {e}") from e

    logger.debug("Read back %sx%s image", width, height)
    return host_buffer
