"""
orientkit - EXIF orientation normalization for photo batches.

Reads the EXIF orientation tag of each JPEG in a batch and brings the
image to canonical orientation (1) with one of two strategies:
- metadata: rewrite the tag in place, pixels untouched (instant)
- pixel: physically rotate/mirror and re-encode (upright in every viewer)

Batches come in as (filename, bytes) pairs, a ZIP archive or a folder,
and go out in the same order.

Example usage:
    from orientkit import BatchCorrector, CorrectorConfig

    corrector = BatchCorrector(CorrectorConfig(strategy="pixel"))

    # Correct a ZIP archive
    result, archive = corrector.correct_archive(Path("photos.zip").read_bytes())
    print(result.summary())
    Path("fixed_images.zip").write_bytes(archive)

    # Inspect single images
    from orientkit import read_orientation, transform_for

    code = read_orientation(data)
    print(transform_for(code))
"""

from .batch import BatchCorrector, CancelToken, correct_image, correct_images
from .core.interfaces import (
    NORMAL_ORIENTATION,
    ORIENTATION_TAG,
    Strategy,
    Transform,
    RawImage,
    CorrectedImage,
    ItemResult,
    BatchResult,
    CorrectorConfig,
)
from .core.errors import (
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
from .image import (
    OrientationTagReader,
    OrientationTransform,
    MetadataNormalizer,
    PixelNormalizer,
    create_normalizer,
    read_orientation,
    locate_orientation,
    transform_for,
    apply_transform,
)
from .archive import (
    ZipArchiver,
    DEFAULT_ARCHIVE_NAME,
    extract_images,
    package_images,
    load_folder,
)
from .core.extensions import (
    IMAGE_EXTENSIONS,
    JPEG_EXTENSIONS,
    is_image,
    is_jpeg,
    guess_mime_type,
)

__version__ = "1.0.0"

__all__ = [
    # Main facade
    "BatchCorrector",
    "CancelToken",
    "correct_image",
    "correct_images",

    # Core types
    "NORMAL_ORIENTATION",
    "ORIENTATION_TAG",
    "Strategy",
    "Transform",
    "RawImage",
    "CorrectedImage",
    "ItemResult",
    "BatchResult",
    "CorrectorConfig",

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

    # Orientation engine
    "OrientationTagReader",
    "OrientationTransform",
    "MetadataNormalizer",
    "PixelNormalizer",
    "create_normalizer",
    "read_orientation",
    "locate_orientation",
    "transform_for",
    "apply_transform",

    # Archiving
    "ZipArchiver",
    "DEFAULT_ARCHIVE_NAME",
    "extract_images",
    "package_images",
    "load_folder",

    # Extensions
    "IMAGE_EXTENSIONS",
    "JPEG_EXTENSIONS",
    "is_image",
    "is_jpeg",
    "guess_mime_type",
]
