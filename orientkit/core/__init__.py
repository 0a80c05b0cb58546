"""
Core module - Interfaces, data types, and errors for orientkit.
"""
from .interfaces import (
    # Constants
    NORMAL_ORIENTATION,
    ORIENTATION_TAG,

    # Enums
    Strategy,

    # Data classes
    Transform,
    RawImage,
    CorrectedImage,
    ItemResult,
    BatchResult,
    CorrectorConfig,

    # Abstract interfaces
    INormalizer,
    IOrientationReader,
    IBatchCorrector,
    IArchiver,
)
from .errors import (
    OrientationError,
    UnsupportedInput,
    MalformedMetadata,
    DecodeFailure,
    EncodeFailure,
    TagNotFound,
    Cancelled,
    ArchiveError,
    ConfigurationError,
)

__all__ = [
    # Constants
    "NORMAL_ORIENTATION",
    "ORIENTATION_TAG",

    # Enums
    "Strategy",

    # Data classes
    "Transform",
    "RawImage",
    "CorrectedImage",
    "ItemResult",
    "BatchResult",
    "CorrectorConfig",

    # Abstract interfaces
    "INormalizer",
    "IOrientationReader",
    "IBatchCorrector",
    "IArchiver",

    # Errors
    "OrientationError",
    "UnsupportedInput",
    "MalformedMetadata",
    "DecodeFailure",
    "EncodeFailure",
    "TagNotFound",
    "Cancelled",
    "ArchiveError",
    "ConfigurationError",
]
