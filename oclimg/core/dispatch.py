"""
Kernel invocation building and enqueueing.

An invocation is built and enqueued once per operation call. Build problems
(unknown entry point, wrong argument count or type) are programming errors
and are raised immediately; nothing is retried.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

import pyopencl as cl

from oclimg.core.exceptions import KernelBuildError, KernelDispatchError
from oclimg.core.image import DeviceImage

logger = logging.getLogger(__name__)


def _unwrap(arg: Any) -> Any:
    """DeviceImages are passed to OpenCL as their underlying cl.Image."""
    return arg.image if isinstance(arg, DeviceImage) else arg


@dataclass
class KernelInvocation:
    """
    One kernel launch: program, entry point, queue, work size and arguments.

    global_size is the image's (width, height) so each work item maps to one
    pixel. Scalars must be explicitly typed numpy scalars (np.uint32, np.int32)
    matching the kernel signature.
    """
    program: cl.Program
    entry_name: str
    queue: cl.CommandQueue
    global_size: Tuple[int, ...]
    args: Sequence[Any] = ()

    def build(self) -> cl.Kernel:
        """
        Create the kernel and bind the arguments.

        Raises:
            KernelBuildError: If the entry point does not exist or the arguments
                do not match its signature
        """
        try:
            kernel = cl.Kernel(self.program, self.entry_name)
        except cl.Error as e:
            raise KernelBuildError(f"{self.entry_name} kernel could not be loaded: {e}") from e

        expected = kernel.get_info(cl.kernel_info.NUM_ARGS)
        if expected != len(self.args):
            raise KernelBuildError(
                f"{self.entry_name} kernel takes {expected} arguments, got {len(self.args)}"
            )

        try:
            kernel.set_args(*(_unwrap(arg) for arg in self.args))
        except (cl.Error, TypeError) as e:
            raise KernelBuildError(f"Invalid arguments for {self.entry_name} kernel: {e}") from e

        return kernel

    def enqueue(self, kernel: Optional[cl.Kernel] = None) -> cl.Event:
        """
        Submit the kernel over global_size. Asynchronous with respect to the device.

        Raises:
            KernelBuildError: If the kernel cannot be built
            KernelDispatchError: If the launch cannot be enqueued
        """
        if kernel is None:
            kernel = self.build()

        try:
            event = cl.enqueue_nd_range_kernel(self.queue, kernel, self.global_size, None)
        except cl.Error as e:
            logger.error("Error while enqueueing the %s kernel: %s", self.entry_name, e)
            raise KernelDispatchError(f"Error while enqueueing the {self.entry_name} kernel: {e}") from e

        logger.debug("Enqueued %s over %s", self.entry_name, self.global_size)
        return event
