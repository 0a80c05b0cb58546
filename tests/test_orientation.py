"""
Tests for the orientation-to-transform mapping.
"""
import pytest
import numpy as np
from PIL import Image

from orientkit.core.interfaces import Transform
from orientkit.image import OrientationTransform, ORIENTATION_TRANSFORMS, transform_for, apply_transform

# Pillow's own reading of each EXIF orientation, used as an independent reference
EXIF_TRANSPOSE = {
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}


def _gradient(size=(6, 4)):
    w, h = size
    arr = np.arange(w * h, dtype=np.uint8).reshape(h, w)
    return Image.fromarray(arr)


class TestTransformTable:
    """Tests for the fixed orientation table."""

    @pytest.mark.parametrize("code,rotation,mirrored", [
        (1, 0, False),
        (2, 0, True),
        (3, 180, False),
        (4, 180, True),
        (5, 90, True),
        (6, 90, False),
        (7, 270, True),
        (8, 270, False),
    ])
    def test_table(self, code, rotation, mirrored):
        assert transform_for(code) == Transform(rotation, mirrored)

    def test_deterministic(self):
        for code in range(1, 9):
            assert transform_for(code) == transform_for(code)

    def test_every_transform_distinct(self):
        transforms = {transform_for(code) for code in range(1, 9)}
        assert len(transforms) == 8
        assert {t.rotation for t in transforms} == {0, 90, 180, 270}

    def test_table_covers_codes(self):
        assert sorted(ORIENTATION_TRANSFORMS) == list(range(1, 9))

    @pytest.mark.parametrize("code", [0, 9, -1, 274])
    def test_unknown_code_is_identity(self, code):
        assert transform_for(code).is_identity


class TestApplyTransform:
    """Tests for applying transforms to PIL images."""

    @pytest.mark.parametrize("code", range(2, 9))
    def test_matches_exif_definition(self, code):
        img = _gradient()

        result = apply_transform(img, transform_for(code))
        expected = img.transpose(EXIF_TRANSPOSE[code])

        assert np.array_equal(np.asarray(result), np.asarray(expected))

    def test_identity_returns_same_image(self):
        img = _gradient()
        assert apply_transform(img, Transform()) is img

    @pytest.mark.parametrize("rotation", [90, 270])
    def test_swaps_dimensions(self, rotation):
        img = Image.new("RGB", (100, 200))
        result = OrientationTransform.apply(img, Transform(rotation))
        assert result.size == (200, 100)

    @pytest.mark.parametrize("rotation", [0, 180])
    def test_keeps_dimensions(self, rotation):
        img = Image.new("RGB", (100, 200))
        result = OrientationTransform.apply(img, Transform(rotation, mirrored=True))
        assert result.size == (100, 200)

    def test_rotation_90_is_clockwise(self):
        arr = np.array([[0, 1, 2], [3, 4, 5]], dtype=np.uint8)
        result = apply_transform(Image.fromarray(arr), Transform(90))
        assert np.array_equal(np.asarray(result), np.array([[3, 0], [4, 1], [5, 2]], dtype=np.uint8))

    def test_arbitrary_angle_rejected(self):
        with pytest.raises(ValueError, match="Unsupported rotation"):
            apply_transform(Image.new("L", (4, 4)), Transform(45))
