"""Tests for KernelInvocation build/enqueue, with the OpenCL runtime mocked out."""
from unittest.mock import Mock, patch

import numpy as np
import pytest

from oclimg.core.dispatch import KernelInvocation
from oclimg.core.exceptions import KernelBuildError, KernelDispatchError
from oclimg.core.image import DeviceImage, device_format


class FakeClError(Exception):
    """Stands in for pyopencl.Error while the runtime is mocked."""


@pytest.fixture
def fake_cl():
    with patch("oclimg.core.dispatch.cl") as cl_mock:
        cl_mock.Error = FakeClError
        cl_mock.Kernel.return_value.get_info.return_value = 3
        yield cl_mock


def make_device_image(shape=(4, 6)):
    return DeviceImage(Mock(), shape, np.dtype(np.uint8), device_format(1, 8))


def make_invocation(args, entry_name="threshold"):
    return KernelInvocation(
        program=Mock(),
        entry_name=entry_name,
        queue=Mock(),
        global_size=(6, 4),
        args=args,
    )


def test_device_images_are_unwrapped(fake_cl):
    src, dest = make_device_image(), make_device_image()
    invocation = make_invocation((src, dest, np.uint32(125)))

    kernel = invocation.build()

    fake_cl.Kernel.assert_called_once_with(invocation.program, "threshold")
    kernel.set_args.assert_called_once_with(src.image, dest.image, np.uint32(125))


def test_unknown_entry_name(fake_cl):
    fake_cl.Kernel.side_effect = FakeClError("INVALID_KERNEL_NAME")

    with pytest.raises(KernelBuildError, match="does_not_exist"):
        make_invocation((), entry_name="does_not_exist").build()


def test_argument_count_mismatch(fake_cl):
    invocation = make_invocation((make_device_image(), make_device_image()))

    with pytest.raises(KernelBuildError, match="takes 3 arguments, got 2"):
        invocation.build()

    fake_cl.Kernel.return_value.set_args.assert_not_called()


def test_argument_type_mismatch(fake_cl):
    fake_cl.Kernel.return_value.set_args.side_effect = FakeClError("INVALID_ARG_SIZE")

    with pytest.raises(KernelBuildError) as exc_info:
        make_invocation((make_device_image(), make_device_image(), 1.5)).build()

    assert isinstance(exc_info.value.__cause__, FakeClError)


def test_enqueue_launches_one_work_item_per_pixel(fake_cl):
    invocation = make_invocation((make_device_image(), make_device_image(), np.uint32(1)))

    event = invocation.enqueue()

    fake_cl.enqueue_nd_range_kernel.assert_called_once_with(
        invocation.queue, fake_cl.Kernel.return_value, (6, 4), None
    )
    assert event is fake_cl.enqueue_nd_range_kernel.return_value


def test_enqueue_failure(fake_cl):
    fake_cl.enqueue_nd_range_kernel.side_effect = FakeClError("OUT_OF_RESOURCES")
    invocation = make_invocation((make_device_image(), make_device_image(), np.uint32(1)))

    with pytest.raises(KernelDispatchError, match="OUT_OF_RESOURCES"):
        invocation.enqueue()
