"""
OpenCL platform/device selection and the per-executor command queue.

A DeviceContext is built once per Executor and never changes afterwards.
Failing to find a platform or device is a configuration error reported here,
at construction; nothing is retried.
"""

import logging
from typing import Optional

import pyopencl as cl

from oclimg.core.exceptions import DeviceNotFoundError

logger = logging.getLogger(__name__)


def select_device(platform_index: int = 0, device_index: int = 0) -> cl.Device:
    """
    Pick a device by platform and device index.

    Args:
        platform_index: Index into the list of OpenCL platforms
        device_index: Index into that platform's device list

    Returns:
        The selected pyopencl Device

    Raises:
        DeviceNotFoundError: If the platform or device does not exist
    """
    try:
        platforms = cl.get_platforms()
    except cl.Error as e:
        # Some ICD loaders report "no platforms" as an error instead of []
        raise DeviceNotFoundError(f"There are no available platforms: {e}") from e

    if not platforms:
        raise DeviceNotFoundError("There are no available platforms!")
    if platform_index >= len(platforms):
        raise DeviceNotFoundError(
            f"Platform index {platform_index} not available. Available platforms: {len(platforms)}"
        )

    platform = platforms[platform_index]
    try:
        devices = platform.get_devices()
    except cl.Error as e:
        raise DeviceNotFoundError(f"There are no devices for platform {platform.name}: {e}") from e

    if not devices:
        raise DeviceNotFoundError(f"There are no devices for platform {platform.name}!")
    if device_index >= len(devices):
        raise DeviceNotFoundError(
            f"Device index {device_index} not available on {platform.name}. "
            f"Available devices: {len(devices)}"
        )

    return devices[device_index]


class DeviceContext:
    """
    Owns the OpenCL context and the single in-order queue for one device.

    Every DeviceImage and kernel invocation is built against this object and
    must not outlive it.
    """

    def __init__(self, device: Optional[cl.Device] = None,
                 platform_index: int = 0, device_index: int = 0):
        if device is None:
            device = select_device(platform_index, device_index)

        self._device = device
        self._context = cl.Context(devices=[device])
        # No OUT_OF_ORDER_EXEC_MODE property: commands run in submission order
        self._queue = cl.CommandQueue(self._context, device)

        logger.info("Using %s - %s", device.platform.name.strip(), device.name.strip())

    @property
    def device(self) -> cl.Device:
        return self._device

    @property
    def context(self) -> cl.Context:
        return self._context

    @property
    def queue(self) -> cl.CommandQueue:
        return self._queue

    def supports_format(self, flags: int, image_format: cl.ImageFormat) -> bool:
        """Check whether the device lists image_format for 2D images with these flags."""
        supported = cl.get_supported_image_formats(
            self._context, flags, cl.mem_object_type.IMAGE2D
        )
        return any(
            fmt.channel_order == image_format.channel_order
            and fmt.channel_data_type == image_format.channel_data_type
            for fmt in supported
        )

    def finish(self) -> None:
        """Block until every command submitted to the queue has completed."""
        self._queue.finish()

    def __repr__(self):
        return f"DeviceContext(device={self._device.name.strip()!r})"
