"""
Error types raised by Pixelargon.

Every failure in the editing core is locally recoverable: callers catch
these, report them, and keep the editing session usable.
"""


class PixelargonError(Exception):
    """Base class for all Pixelargon errors."""


class ImageDecodeError(PixelargonError, OSError):
    """An image file could not be opened or decoded."""


class ProcessingError(PixelargonError, RuntimeError):
    """An apply or export round trip failed."""


class RequestInFlightError(PixelargonError, RuntimeError):
    """An apply/export request was issued while another one is outstanding."""


class NoPendingEditsError(PixelargonError, ValueError):
    """Apply was requested but there is nothing to bake."""
