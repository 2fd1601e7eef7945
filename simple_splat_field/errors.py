"""
Exception hierarchy for the splat field publisher.

Resource errors are fatal for one (re)creation attempt, consistency errors
signal a broken contract between producer arrays and buffers, and state errors
signal an illegal lifecycle transition.
"""


class SplatFieldError(Exception):
    """Base class for all splat field errors."""


class BufferAllocationError(SplatFieldError, RuntimeError):
    """Raised when a buffer quartet cannot be allocated as a whole."""


class BufferConsistencyError(SplatFieldError, ValueError):
    """Raised when array shapes disagree with the buffers they are uploaded to."""


class PublisherStateError(SplatFieldError, RuntimeError):
    """Raised on an illegal publisher or component lifecycle transition."""


__all__ = [
    "SplatFieldError",
    "BufferAllocationError",
    "BufferConsistencyError",
    "PublisherStateError",
]
