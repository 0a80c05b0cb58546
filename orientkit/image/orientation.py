"""
Mapping from EXIF orientation codes to geometric transforms.
Follows Single Responsibility Principle - only handles orientation geometry.
"""
from typing import Dict
from PIL import Image
import logging

from ..core.interfaces import Transform, NORMAL_ORIENTATION

logger = logging.getLogger(__name__)

IDENTITY = Transform(0, False)

# Clockwise rotation needed to display the stored pixels upright, and
# whether a horizontal flip follows it.
ORIENTATION_TRANSFORMS: Dict[int, Transform] = {
    1: IDENTITY,
    2: Transform(0, True),
    3: Transform(180, False),
    4: Transform(180, True),
    5: Transform(90, True),
    6: Transform(90, False),
    7: Transform(270, True),
    8: Transform(270, False),
}

# Pillow's ROTATE_* members turn counter-clockwise.
_CLOCKWISE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


class OrientationTransform:
    """Resolves orientation codes and applies the resulting transform."""

    @staticmethod
    def for_code(code: int) -> Transform:
        """Transform for an orientation code. Unknown codes are a no-op."""
        transform = ORIENTATION_TRANSFORMS.get(code)
        if transform is None:
            logger.debug(f"Unknown orientation {code}, treating as {NORMAL_ORIENTATION}")
            return IDENTITY
        return transform

    @staticmethod
    def apply(img: Image.Image, transform: Transform) -> Image.Image:
        """
        Apply a transform to a PIL Image.

        Rotates clockwise first, then mirrors left-right. Right-angle
        rotations are exact transposes, so the canvas is resized to the
        swapped dimensions without resampling.

        Args:
            img: Decoded image
            transform: Rotation and mirror to apply

        Returns:
            A new image, or the input itself for the identity transform
        """
        if transform.rotation not in (0, 90, 180, 270):
            raise ValueError(f"Unsupported rotation: {transform.rotation}")

        result = img
        if transform.rotation:
            result = result.transpose(_CLOCKWISE[transform.rotation])
        if transform.mirrored:
            result = result.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
        return result


def transform_for(code: int) -> Transform:
    """Transform for an orientation code (identity outside 1..8)."""
    return OrientationTransform.for_code(code)


def apply_transform(img: Image.Image, transform: Transform) -> Image.Image:
    """Rotate then mirror a PIL Image."""
    return OrientationTransform.apply(img, transform)
