"""
oclimg: pixel-wise image transforms dispatched onto OpenCL devices.

This module provides the public API for oclimg. It re-exports the Executor,
its configuration and the Feature tags, and does NOT touch the OpenCL
runtime on import.
"""

import logging

__version__ = "0.1.0"

# Set up basic logging configuration if none exists
# This ensures device selection is visible when used from a plain script
def _ensure_basic_logging():
    """Ensure basic logging is configured if no configuration exists."""
    root_logger = logging.getLogger()

    # Only configure if no handlers exist and level is too high
    if not root_logger.handlers and root_logger.level > logging.INFO:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

_ensure_basic_logging()

from oclimg.constants import Feature
from oclimg.core.config import ExecutorConfig
from oclimg.core.executor import Executor

__all__ = [
    "Executor",
    "ExecutorConfig",
    "Feature",
]
