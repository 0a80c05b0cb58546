"""
Orientation normalization strategies.
Follows Strategy Pattern - metadata rewrite and pixel re-rendering share
one interface and are selected by configuration.
"""
from typing import Callable, Optional, Union
from PIL import Image
import io
import logging

from .exif import OrientationTagReader
from .orientation import OrientationTransform
from ..core.errors import Cancelled, DecodeFailure, EncodeFailure, TagNotFound
from ..core.interfaces import (
    INormalizer,
    Strategy,
    Transform,
    RawImage,
    CorrectedImage,
    NORMAL_ORIENTATION,
    ORIENTATION_TAG,
)

logger = logging.getLogger(__name__)

Image.MAX_IMAGE_PIXELS = 1_000_000_000


class MetadataNormalizer(INormalizer):
    """
    Rewrites the orientation value to 1 in place.

    Only the two bytes of the tag value change; pixel data and buffer
    length are untouched. Viewers that ignore EXIF will still show the
    stored (unrotated) pixels.
    """

    strategy = Strategy.METADATA

    def __init__(self):
        self.reader = OrientationTagReader()

    def rewrite(self, data: bytes) -> bytes:
        """
        Return a copy of data with the orientation value set to 1.

        Raises:
            TagNotFound: if IFD0 holds no orientation entry
        """
        location = self.reader.locate(data)
        if location is None:
            raise TagNotFound("Orientation tag not found in EXIF IFD0")

        patched = bytearray(data)
        patched[location.offset:location.offset + 2] = location.encode(NORMAL_ORIENTATION)
        return bytes(patched)

    def normalize(
        self,
        image: RawImage,
        orientation: int,
        transform: Transform,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> CorrectedImage:
        """Patch the orientation tag. Missing tags leave the bytes unchanged."""
        warning = None
        try:
            data = self.rewrite(image.data)
        except TagNotFound as e:
            warning = f"{e}; {image.filename} left unchanged"
            logger.warning(warning)
            data = image.data

        return CorrectedImage(
            filename=image.filename,
            data=data,
            orientation=NORMAL_ORIENTATION,
            source_orientation=orientation,
            strategy=self.strategy,
            warning=warning,
        )


class PixelNormalizer(INormalizer):
    """
    Physically rotates and mirrors pixels, then re-encodes as JPEG.

    The result looks upright in every viewer. Re-encoding is lossy even at
    maximum quality.
    """

    strategy = Strategy.PIXEL

    def __init__(self, quality: int = 100, keep_exif: bool = True):
        self.quality = quality
        self.keep_exif = keep_exif

    def normalize(
        self,
        image: RawImage,
        orientation: int,
        transform: Transform,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> CorrectedImage:
        """
        Decode, transform and re-encode an image.

        Args:
            image: Source image
            orientation: Orientation code read from the source
            transform: Transform derived from the orientation
            should_cancel: Checked between decode, transform and encode

        Returns:
            CorrectedImage holding the new JPEG bytes

        Raises:
            DecodeFailure: if the source cannot be decoded
            EncodeFailure: if the result cannot be encoded
            Cancelled: if should_cancel returns True between phases
        """
        self._check_cancelled(should_cancel, image, "decode")
        img = self._decode(image)
        try:
            self._check_cancelled(should_cancel, image, "transform")
            fixed = OrientationTransform.apply(img, transform)

            self._check_cancelled(should_cancel, image, "encode")
            exif = self._exif_bytes(img, image.filename)
            data = self._encode(fixed, exif, image.filename)
        finally:
            img.close()

        logger.debug(
            f"{image.filename}: orientation {orientation} -> rotated {transform.rotation}"
            f"{' + mirrored' if transform.mirrored else ''} ({img.size} -> {fixed.size})"
        )

        return CorrectedImage(
            filename=image.filename,
            data=data,
            orientation=NORMAL_ORIENTATION,
            source_orientation=orientation,
            strategy=self.strategy,
        )

    @staticmethod
    def _check_cancelled(should_cancel, image: RawImage, phase: str) -> None:
        if should_cancel is not None and should_cancel():
            raise Cancelled(f"Cancelled before {phase} of {image.filename}")

    @staticmethod
    def _decode(image: RawImage) -> Image.Image:
        """Open and fully load the image so corrupt data fails here."""
        try:
            img = Image.open(io.BytesIO(image.data))
            img.load()
            return img
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeFailure(f"Cannot decode {image.filename}: {e}") from e

    def _exif_bytes(self, img: Image.Image, filename: str) -> bytes:
        """Original EXIF with orientation reset to 1, or empty when dropped."""
        if not self.keep_exif:
            return b''

        try:
            exif = img.getexif()
            if not exif:
                return b''
            exif[ORIENTATION_TAG] = NORMAL_ORIENTATION
            return exif.tobytes()
        except Exception as e:
            logger.warning(f"Dropping unreadable EXIF of {filename}: {e}")
            return b''

    @staticmethod
    def _prepare_for_jpeg(img: Image.Image) -> Image.Image:
        """Convert image to RGB mode for JPEG saving."""
        if img.mode in ("RGBA", "LA"):
            background = Image.new("RGB", img.size, (255, 255, 255))
            alpha = img.split()[-1]
            background.paste(img.convert("RGB"), mask=alpha)
            return background
        if img.mode not in ("RGB", "L"):
            return img.convert("RGB")
        return img

    def _encode(self, img: Image.Image, exif: bytes, filename: str) -> bytes:
        """Save as baseline JPEG at the configured quality."""
        buffer = io.BytesIO()
        try:
            self._prepare_for_jpeg(img).save(
                buffer,
                format="JPEG",
                quality=self.quality,
                subsampling=0,
                progressive=False,
                exif=exif,
            )
        except (OSError, ValueError) as e:
            raise EncodeFailure(f"Cannot encode {filename}: {e}") from e
        return buffer.getvalue()


def create_normalizer(
    strategy: Union[Strategy, str],
    quality: int = 100,
    keep_exif: bool = True
) -> INormalizer:
    """Build the normalizer for a strategy."""
    strategy = Strategy.parse(strategy)
    if strategy is Strategy.METADATA:
        return MetadataNormalizer()
    return PixelNormalizer(quality=quality, keep_exif=keep_exif)
