"""Tests for the host pixel layout -> device image format table."""
import numpy as np
import pyopencl as cl
import pytest

from oclimg.core.exceptions import OclImgError, UnsupportedPixelFormatError
from oclimg.core.image import FORMAT_TABLE, HostImage, device_format


@pytest.mark.parametrize("channels, order", [
    (1, cl.channel_order.R),
    (2, cl.channel_order.RA),
    (3, cl.channel_order.RGB),
    (4, cl.channel_order.RGBA),
])
@pytest.mark.parametrize("bit_depth, channel_type", [
    (8, cl.channel_type.UNSIGNED_INT8),
    (16, cl.channel_type.UNSIGNED_INT16),
])
def test_device_format_table(channels, order, bit_depth, channel_type):
    fmt = device_format(channels, bit_depth)

    assert fmt.channel_order == order
    assert fmt.channel_type == channel_type
    assert fmt.image_format.channel_order == order
    assert fmt.image_format.channel_data_type == channel_type


def test_table_covers_exactly_the_supported_layouts():
    assert set(FORMAT_TABLE) == {(c, d) for c in (1, 2, 3, 4) for d in (8, 16)}


def test_integer_layouts_avoid_normalized_only_orders():
    # CL_INTENSITY and CL_LUMINANCE reject unsigned integer channel types
    normalized_only = {cl.channel_order.INTENSITY, cl.channel_order.LUMINANCE}
    for fmt in FORMAT_TABLE.values():
        assert fmt.channel_order not in normalized_only


@pytest.mark.parametrize("channels, bit_depth", [(5, 8), (0, 8), (1, 32), (3, 12), (4, 64)])
def test_unmapped_layouts_fail_loudly(channels, bit_depth):
    with pytest.raises(UnsupportedPixelFormatError) as exc_info:
        device_format(channels, bit_depth)

    assert isinstance(exc_info.value, OclImgError)
    assert isinstance(exc_info.value, ValueError)


class TestHostImage:

    def test_grayscale_array(self):
        host = HostImage.from_array(np.zeros((3, 7), dtype=np.uint8))

        assert host.width == 7
        assert host.height == 3
        assert host.channels == 1
        assert host.bit_depth == 8
        assert host.dimensions == (7, 3)

    def test_color_array(self):
        host = HostImage.from_array(np.zeros((5, 2, 3), dtype=np.uint16))

        assert host.dimensions == (2, 5)
        assert host.channels == 3
        assert host.bit_depth == 16

    def test_wraps_without_copying(self):
        array = np.zeros((2, 2), dtype=np.uint8)
        assert HostImage.from_array(array).array is array

    @pytest.mark.parametrize("array", [
        np.zeros((4, 4), dtype=np.float32),
        np.zeros((4, 4), dtype=np.int8),
        np.zeros((4, 4), dtype=np.uint32),
        np.zeros((4, 4, 5), dtype=np.uint8),
        np.zeros((2, 4, 4, 1), dtype=np.uint8),
        np.zeros(16, dtype=np.uint8),
    ])
    def test_rejects_layouts_without_device_analogue(self, array):
        with pytest.raises(UnsupportedPixelFormatError):
            HostImage.from_array(array)
