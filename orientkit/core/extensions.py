"""
Supported image extensions and MIME types.
"""
from pathlib import PurePosixPath
from typing import Optional

JPEG_EXTENSIONS = {'.jpg', '.jpeg'}

PNG_EXTENSIONS = {'.png'}

IMAGE_EXTENSIONS = JPEG_EXTENSIONS | PNG_EXTENSIONS

MIME_TYPES = {
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
}


def _suffix(name) -> str:
    return PurePosixPath(str(name).replace('\\', '/')).suffix.lower()


def is_image(name) -> bool:
    """Check if name has a supported image extension."""
    return _suffix(name) in IMAGE_EXTENSIONS


def is_jpeg(name) -> bool:
    """Check if name has a JPEG extension."""
    return _suffix(name) in JPEG_EXTENSIONS


def guess_mime_type(name) -> Optional[str]:
    """Get MIME type from the extension, None when unsupported."""
    return MIME_TYPES.get(_suffix(name))
