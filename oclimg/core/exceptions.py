"""
Custom exceptions for the oclimg core system.

Every failure in this layer surfaces as one of these; nothing is retried or
recovered internally. Each class also derives from the closest builtin so
callers can catch either.
"""


class OclImgError(Exception):
    """Base class for all oclimg custom exceptions."""
    pass


class ConfigurationError(OclImgError, RuntimeError):
    """Raised when the executor cannot be set up as configured."""
    pass


class DeviceNotFoundError(ConfigurationError):
    """Raised when no OpenCL platform or device can be selected."""
    pass


class ProgramBuildError(ConfigurationError):
    """Raised when a feature's kernel source fails to load or compile."""

    def __init__(self, feature, reason: str):
        self.feature = feature
        self.reason = reason
        super().__init__(f"Could not build the {feature.value} program: {reason}")


class FeatureNotEnabledError(ConfigurationError, KeyError):
    """Raised when a program is requested for a feature that was not compiled in."""

    def __init__(self, feature):
        self.feature = feature
        super().__init__(f"Feature '{feature.value}' is not enabled/initialized")

    def __str__(self):
        # KeyError quotes its argument; keep the message readable
        return self.args[0]


class UnsupportedPixelFormatError(OclImgError, ValueError):
    """Raised when a host pixel layout has no device image analogue."""
    pass


class InvalidParameterError(OclImgError, ValueError):
    """Raised when an operation's parameters violate its preconditions."""
    pass


class KernelBuildError(OclImgError, RuntimeError):
    """Raised when a kernel invocation cannot be built (bad name or arguments)."""
    pass


class KernelDispatchError(OclImgError, RuntimeError):
    """Raised when a built kernel cannot be enqueued."""
    pass


class TransferError(OclImgError, RuntimeError):
    """Raised when memory cannot be moved between host and device."""
    pass


class ExecutorClosedError(OclImgError, RuntimeError):
    """Raised when an operation is issued on a closed executor."""
    pass
