"""
Archive extraction and packaging module.
"""
from .zipped import (
    ZipArchiver,
    DEFAULT_ARCHIVE_NAME,
    extract_images,
    package_images,
    load_folder,
)

__all__ = ['ZipArchiver', 'DEFAULT_ARCHIVE_NAME', 'extract_images', 'package_images', 'load_folder']
