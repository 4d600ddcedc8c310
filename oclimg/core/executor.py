"""
The Executor: one device context, its compiled programs, and the uniform
allocate -> dispatch -> read-back protocol every operation goes through.

An Executor is meant to be used from a single thread. Operations issued
through it run in submission order on its one in-order queue, and each
returns only after its result has been read back to the host.
"""

import logging
from typing import Any, Optional

import numpy as np
import pyopencl as cl

from oclimg.constants import Feature
from oclimg.core.config import ExecutorConfig
from oclimg.core.context import DeviceContext
from oclimg.core.dispatch import KernelInvocation
from oclimg.core.exceptions import (ExecutorClosedError, FeatureNotEnabledError,
                                    InvalidParameterError)
from oclimg.core.image import (DEST_FLAGS, READ_WRITE_FLAGS, SOURCE_FLAGS, HostImage,
                               device_to_host, host_to_device)
from oclimg.core.programs import ProgramRegistry
from oclimg.processing import contrast, geometric

logger = logging.getLogger(__name__)


class Executor:
    """
    Dispatches pixel-wise image operations onto one OpenCL device.

    Args:
        config: Enabled features, device selection and build options
        device: Use this device instead of selecting one from config
    """

    def __init__(self, config: Optional[ExecutorConfig] = None,
                 device: Optional[cl.Device] = None):
        config = config or ExecutorConfig()

        # Validate before touching the device so a mismatch is cheap to report
        missing = config.missing_features
        if missing:
            raise FeatureNotEnabledError(min(missing, key=lambda f: f.index))

        self.config = config
        self._device_context: Optional[DeviceContext] = DeviceContext(
            device, config.platform_index, config.device_index
        )
        self._programs: Optional[ProgramRegistry] = ProgramRegistry(
            self._device_context,
            config.features,
            program_dir=config.program_dir,
            build_options=config.build_options,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._device_context is None

    @property
    def device_context(self) -> DeviceContext:
        if self._device_context is None:
            raise ExecutorClosedError("This executor has been closed")
        return self._device_context

    @property
    def programs(self) -> ProgramRegistry:
        if self._programs is None:
            raise ExecutorClosedError("This executor has been closed")
        return self._programs

    def close(self) -> None:
        """Wait for outstanding work, then drop the programs, queue and context."""
        if self._device_context is None:
            return
        self._device_context.finish()
        self._programs = None
        self._device_context = None
        logger.debug("Executor closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_program(self, feature: Feature) -> cl.Program:
        return self.programs.get(feature)

    # ------------------------------------------------------------------
    # Dispatch protocol
    # ------------------------------------------------------------------

    def apply(self, feature: Feature, entry_name: str, image, *scalars: Any) -> np.ndarray:
        """
        Run a source -> destination kernel and return the result as a new array.

        The kernel receives (src, dest, *scalars) and is launched with one work
        item per pixel.
        """
        ctx = self.device_context
        program = self.get_program(feature)
        host = HostImage.from_array(image)

        with host_to_device(ctx, host, SOURCE_FLAGS) as src, \
                host_to_device(ctx, host, DEST_FLAGS, copy_host=False) as dest:
            KernelInvocation(program, entry_name, ctx.queue, host.dimensions,
                             (src, dest) + scalars).enqueue()
            return device_to_host(ctx, dest, dest.empty_host_buffer())

    def apply_in_place(self, feature: Feature, entry_name: str, image: np.ndarray,
                       *scalars: Any) -> None:
        """
        Run a kernel on a single read-write image and write the result back
        into the caller's array.
        """
        ctx = self.device_context
        program = self.get_program(feature)
        host = HostImage.from_array(image)
        if host.array is not image or not image.flags.writeable or not image.flags.c_contiguous:
            raise InvalidParameterError("In-place operations need a writable, C-contiguous numpy array")

        with host_to_device(ctx, host, READ_WRITE_FLAGS) as buffer:
            KernelInvocation(program, entry_name, ctx.queue, host.dimensions,
                             (buffer,) + scalars).enqueue()
            device_to_host(ctx, buffer, image)

    # ------------------------------------------------------------------
    # Contrast
    # ------------------------------------------------------------------

    def threshold(self, image: np.ndarray, threshold: int) -> np.ndarray:
        return contrast.threshold(self, image, threshold)

    def threshold_mut(self, image: np.ndarray, threshold: int) -> None:
        contrast.threshold_mut(self, image, threshold)

    def adaptive_threshold(self, image: np.ndarray, block_radius: int) -> np.ndarray:
        return contrast.adaptive_threshold(self, image, block_radius)

    def stretch_contrast(self, image: np.ndarray, lower: int, upper: int) -> np.ndarray:
        return contrast.stretch_contrast(self, image, lower, upper)

    # ------------------------------------------------------------------
    # Geometric transformations
    # ------------------------------------------------------------------

    def flip_horizontal(self, image: np.ndarray) -> np.ndarray:
        return geometric.flip_horizontal(self, image)

    def flip_vertical(self, image: np.ndarray) -> np.ndarray:
        return geometric.flip_vertical(self, image)

    def rotate180(self, image: np.ndarray) -> np.ndarray:
        return geometric.rotate180(self, image)

    def translate(self, image: np.ndarray, dx: int, dy: int) -> np.ndarray:
        return geometric.translate(self, image, dx, dy)

    def __repr__(self):
        if self.closed:
            return "Executor(closed)"
        features = ", ".join(f.value for f in self.programs.enabled_features)
        return f"Executor({self.device_context!r}, features=[{features}])"
