"""
Error taxonomy for orientation correction.

Per-image errors are stored on the batch result instead of being raised;
only configuration and archive errors reach the caller.
"""


class OrientationError(Exception):
    """Base class for all orientkit errors."""


class UnsupportedInput(OrientationError):
    """File is not a recognized image format."""


class MalformedMetadata(OrientationError):
    """EXIF segment present but unparseable. Raised by the strict parser; lenient reads fall back to orientation 1."""


class DecodeFailure(OrientationError):
    """Pixel data could not be decoded."""


class EncodeFailure(OrientationError):
    """Re-encoding failed after a successful transform."""


class TagNotFound(OrientationError):
    """Orientation tag could not be located for an in-place rewrite."""


class Cancelled(OrientationError):
    """Image was not processed because the batch was cancelled."""


class ArchiveError(OrientationError):
    """Archive is unreadable or holds no usable images."""


class ConfigurationError(OrientationError, ValueError):
    """Invalid configuration. Raised before any image is processed."""
