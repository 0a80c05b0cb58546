"""
Image orientation module for orientkit.
"""
from .exif import OrientationTagReader, TagLocation, read_orientation, locate_orientation
from .orientation import (
    OrientationTransform,
    ORIENTATION_TRANSFORMS,
    transform_for,
    apply_transform,
)
from .normalizers import MetadataNormalizer, PixelNormalizer, create_normalizer

__all__ = [
    'OrientationTagReader',
    'TagLocation',
    'read_orientation',
    'locate_orientation',
    'OrientationTransform',
    'ORIENTATION_TRANSFORMS',
    'transform_for',
    'apply_transform',
    'MetadataNormalizer',
    'PixelNormalizer',
    'create_normalizer',
]
