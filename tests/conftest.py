"""Global pytest configuration for oclimg tests."""
import os

import pytest

from oclimg import Executor, ExecutorConfig
from oclimg.core.exceptions import DeviceNotFoundError
from oclimg.core.image import DEST_FLAGS, FORMAT_TABLE, SOURCE_FLAGS


def pytest_addoption(parser):
    """Add command-line options for device selection."""

    # Helper function to get default from environment variable
    def env_default(env_var, default_value):
        return os.getenv(env_var, default_value)

    parser.addoption(
        "--ocl-platform",
        action="store",
        default=env_default("OCLIMG_PLATFORM", "0"),
        help="Index of the OpenCL platform used by device tests (default: 0)."
    )

    parser.addoption(
        "--ocl-device",
        action="store",
        default=env_default("OCLIMG_DEVICE", "0"),
        help="Index of the device on that platform used by device tests (default: 0)."
    )


def pytest_configure(config):
    """Validate configuration options."""
    for option_name in ("--ocl-platform", "--ocl-device"):
        option_value = config.getoption(option_name)
        if not str(option_value).isdigit():
            raise pytest.UsageError(
                f"Invalid value for {option_name}: '{option_value}'. Expected a non-negative integer."
            )


@pytest.fixture(scope="session")
def executor_config(pytestconfig):
    """Config selecting the device requested on the command line, all features enabled."""
    return ExecutorConfig(
        platform_index=int(pytestconfig.getoption("--ocl-platform")),
        device_index=int(pytestconfig.getoption("--ocl-device")),
    )


@pytest.fixture(scope="session")
def executor(executor_config):
    """Shared executor; device tests are skipped when no OpenCL device exists."""
    try:
        executor = Executor(executor_config)
    except DeviceNotFoundError as e:
        pytest.skip(f"No OpenCL device available: {e}")
    yield executor
    executor.close()


def require_format(executor, channels, bit_depth):
    """Skip the calling test if the device cannot hold this pixel layout."""
    image_format = FORMAT_TABLE[(channels, bit_depth)].image_format
    for flags in (SOURCE_FLAGS, DEST_FLAGS):
        if not executor.device_context.supports_format(flags, image_format):
            pytest.skip(
                f"Device does not support {channels} channel(s) at {bit_depth} bits"
            )


@pytest.fixture
def gray_executor(executor):
    """
    Executor whose device supports 8-bit single channel images.

    CL_R with an unsigned integer type is in the minimum format list of every
    OpenCL 2.0+ device, so a device that lacks it fails the test.
    """
    image_format = FORMAT_TABLE[(1, 8)].image_format
    for flags in (SOURCE_FLAGS, DEST_FLAGS):
        if not executor.device_context.supports_format(flags, image_format):
            pytest.fail(f"Device does not support 8-bit single channel images (flags {flags})")
    return executor


@pytest.fixture
def format_guard(executor):
    """Callable that skips the test when the device lacks a pixel layout."""
    return lambda channels, bit_depth: require_format(executor, channels, bit_depth)
