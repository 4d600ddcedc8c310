"""
Feature -> compiled program registry.

One program is compiled per enabled feature when the registry is built, so a
malformed kernel source or an unsupported device extension surfaces before any
operation can run. The registry is closed: it is a dense tuple indexed by
Feature, not a dynamic mapping.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import pyopencl as cl

from oclimg.constants import FEATURE_SOURCE_FILES, Feature
from oclimg.core.context import DeviceContext
from oclimg.core.exceptions import FeatureNotEnabledError, ProgramBuildError

logger = logging.getLogger(__name__)

PACKAGED_PROGRAM_DIR = Path(__file__).resolve().parent.parent / "programs"


def load_program_source(feature: Feature, program_dir: Optional[Path] = None) -> str:
    """
    Read the OpenCL C source for a feature.

    Args:
        feature: Feature whose source to load
        program_dir: Directory holding the .cl files (packaged sources if None)

    Returns:
        The kernel source text

    Raises:
        ProgramBuildError: If the source file cannot be read
    """
    source_path = Path(program_dir or PACKAGED_PROGRAM_DIR) / FEATURE_SOURCE_FILES[feature]
    try:
        return source_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProgramBuildError(feature, f"cannot read {source_path}: {e}") from e


def language_options(device: cl.Device) -> List[str]:
    """
    Pick the newest OpenCL C standard the device accepts.

    Read-write images (used by in-place kernels) need OpenCL C 2.0, or 3.0
    with the __opencl_c_read_write_images feature; 1.x devices build without
    them.
    """
    match = re.search(r"OpenCL (\d+)\.(\d+)", device.version)
    if match is None:
        return []
    version = (int(match.group(1)), int(match.group(2)))
    if version >= (3, 0):
        return ["-cl-std=CL3.0"]
    if version >= (2, 0):
        return ["-cl-std=CL2.0"]
    return []


def build_program(device_context: DeviceContext, feature: Feature, source: str,
                  options: Sequence[str] = ()) -> cl.Program:
    """Compile source for the context's device, failing loudly on compiler errors."""
    options = language_options(device_context.device) + list(options)
    try:
        program = cl.Program(device_context.context, source)
        return program.build(options=options, devices=[device_context.device])
    except cl.Error as e:
        logger.error("Compilation of the %s program failed: %s", feature.value, e)
        raise ProgramBuildError(feature, str(e)) from e


class ProgramRegistry:
    """Compiled programs for the enabled features of one device context."""

    def __init__(self, device_context: DeviceContext, features: Iterable[Feature],
                 program_dir: Optional[Path] = None, build_options: Sequence[str] = ()):
        programs = [None] * len(Feature)

        # Compile in enum order so build logs are stable
        for feature in Feature:
            if feature not in features:
                continue
            source = load_program_source(feature, program_dir)
            programs[feature.index] = build_program(device_context, feature, source, build_options)
            logger.info("Added %s feature", feature.value)

        self._programs: Tuple[Optional[cl.Program], ...] = tuple(programs)

    def get(self, feature: Feature) -> cl.Program:
        """
        Get the program compiled for a feature.

        Raises:
            FeatureNotEnabledError: If the feature was not compiled in
        """
        program = self._programs[feature.index]
        if program is None:
            raise FeatureNotEnabledError(feature)
        return program

    def has_kernel(self, feature: Feature, entry_name: str) -> bool:
        """Whether the feature's program defines entry_name (some are version-gated)."""
        names = self.get(feature).get_info(cl.program_info.KERNEL_NAMES)
        return entry_name in names.split(";")

    def is_enabled(self, feature: Feature) -> bool:
        return self._programs[feature.index] is not None

    @property
    def enabled_features(self) -> Tuple[Feature, ...]:
        return tuple(f for f in Feature if self.is_enabled(f))

    def __contains__(self, feature: Feature) -> bool:
        return self.is_enabled(feature)
