"""
Configuration dataclasses for oclimg.

Configuration is intended to be immutable and provided as Python objects.
The enabled feature set is decided here, at construction time, rather than
resolved per call.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional, Tuple

import numpy as np

from oclimg.constants import Feature
from oclimg.core.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutorConfig:
    """Configuration for an Executor and the device resources it owns."""

    features: FrozenSet[Feature] = field(default_factory=lambda: frozenset(Feature))
    """Features whose programs are compiled at construction."""

    required_features: FrozenSet[Feature] = field(default_factory=frozenset)
    """Features the caller will use; construction fails if any is not enabled."""

    platform_index: int = 0
    """Index into the list of OpenCL platforms (ignored when a device is passed in)."""

    device_index: int = 0
    """Index into the selected platform's device list."""

    build_options: Tuple[str, ...] = ()
    """Extra options handed to the OpenCL compiler for every program."""

    program_dir: Optional[Path] = None
    """Directory holding the .cl sources; the packaged sources are used when None."""

    def __post_init__(self):
        # Accept any iterable of features but store frozensets
        object.__setattr__(self, "features", frozenset(self.features))
        object.__setattr__(self, "required_features", frozenset(self.required_features))
        object.__setattr__(self, "build_options", tuple(self.build_options))
        if self.program_dir is not None:
            object.__setattr__(self, "program_dir", Path(self.program_dir))

        for feature in self.features | self.required_features:
            if not isinstance(feature, Feature):
                raise InvalidParameterError(f"Expected a Feature, got {feature!r}")

        for name in ("platform_index", "device_index"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidParameterError(f"{name} must be an integer, got {value!r}")

        if self.platform_index < 0 or self.device_index < 0:
            raise InvalidParameterError(
                f"Platform and device indices must be non-negative, got "
                f"platform_index={self.platform_index}, device_index={self.device_index}"
            )

    @property
    def missing_features(self) -> FrozenSet[Feature]:
        """Required features that are not part of the enabled set."""
        return self.required_features - self.features
