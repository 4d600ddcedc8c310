"""
Image operations for oclimg.

Each function takes the Executor that owns the device resources, validates
its inputs, and runs one kernel through Executor.apply / apply_in_place.
"""

from oclimg.processing import contrast, geometric

__all__ = ["contrast", "geometric"]
