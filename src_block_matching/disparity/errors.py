"""
Exception types raised by the block matching kernel.

All of them derive from the built-in exception a caller would otherwise
expect (``ValueError`` for bad input, ``MemoryError`` for allocation
failures), so existing ``except ValueError`` handlers keep working.
"""


class DisparityConfigurationError(ValueError):
    """Invalid disparity range, window radius or policy options."""


class StereoPairMismatchError(ValueError):
    """Left/right planes (or an output buffer) do not fit together."""


class BufferAllocationError(MemoryError):
    """A score or disparity buffer could not be (re)allocated."""
