"""
EXIF orientation tag lookup on raw JPEG bytes.

Walks the JPEG marker segments to the APP1/Exif block, parses the TIFF
header and IFD0, and reports where the orientation entry's value lives.
No image decoding is involved, so this works on any buffer size.
"""
from dataclasses import dataclass
from typing import Optional
import struct
import logging

from ..core.errors import MalformedMetadata
from ..core.interfaces import IOrientationReader, NORMAL_ORIENTATION, ORIENTATION_TAG

logger = logging.getLogger(__name__)

SOI = b'\xff\xd8'
EXIF_HEADER = b'Exif\x00\x00'

APP1 = 0xE1
SOS = 0xDA
EOI = 0xD9
TEM = 0x01

TIFF_MAGIC = 42
SHORT = 3
IFD_ENTRY_SIZE = 12

BYTE_ORDERS = {b'II': '<', b'MM': '>'}


@dataclass(frozen=True)
class TagLocation:
    """Absolute position of the orientation value inside a JPEG buffer."""
    offset: int
    byte_order: str
    value: int

    def encode(self, value: int) -> bytes:
        return struct.pack(f'{self.byte_order}H', value)


def _is_standalone(marker: int) -> bool:
    return marker == TEM or 0xD0 <= marker <= 0xD8


class OrientationTagReader(IOrientationReader):
    """Reads the EXIF orientation code from JPEG bytes."""

    def read(self, data: bytes) -> int:
        """
        Return the orientation code of a JPEG buffer.

        Missing, malformed or out-of-range metadata all yield 1: absent
        metadata means the image is already upright.
        """
        location = self.locate(data)
        if location is None:
            return NORMAL_ORIENTATION
        if not 1 <= location.value <= 8:
            logger.debug(f"Orientation value {location.value} out of range, using {NORMAL_ORIENTATION}")
            return NORMAL_ORIENTATION
        return location.value

    def locate(self, data: bytes) -> Optional[TagLocation]:
        """Find the orientation entry inside IFD0, None when it cannot be found."""
        try:
            return self.parse(data)
        except MalformedMetadata as e:
            logger.debug(f"Ignoring malformed EXIF: {e}")
            return None

    def parse(self, data: bytes) -> Optional[TagLocation]:
        """
        Strict variant of locate.

        Returns None when the buffer is not a JPEG or carries no orientation
        entry.

        Raises:
            MalformedMetadata: if segments or the TIFF block are corrupt
        """
        segment = self._find_exif_segment(data)
        if segment is None:
            return None
        start, end = segment
        return self._parse_tiff(data, start, end)

    @staticmethod
    def _find_exif_segment(data: bytes) -> Optional[tuple]:
        """Return (tiff_start, segment_end) of the first APP1/Exif segment."""
        if data[:2] != SOI:
            return None

        pos = 2
        size = len(data)
        while pos + 4 <= size:
            if data[pos] != 0xFF:
                raise MalformedMetadata(f"Expected marker at offset {pos}, found 0x{data[pos]:02X}")

            marker = data[pos + 1]
            if marker == 0xFF:
                pos += 1
                continue
            if _is_standalone(marker):
                pos += 2
                continue
            if marker in (SOS, EOI):
                return None

            length, = struct.unpack('>H', data[pos + 2:pos + 4])
            if length < 2:
                raise MalformedMetadata(f"Invalid segment length {length} at offset {pos}")

            payload = pos + 4
            end = pos + 2 + length
            if end > size:
                raise MalformedMetadata(f"Segment 0x{marker:02X} at offset {pos} is truncated")

            if marker == APP1 and data[payload:payload + len(EXIF_HEADER)] == EXIF_HEADER:
                return payload + len(EXIF_HEADER), end

            pos = end

        return None

    @staticmethod
    def _parse_tiff(data: bytes, start: int, end: int) -> Optional[TagLocation]:
        """Walk IFD0 of the TIFF block in data[start:end]."""
        if start + 8 > end:
            raise MalformedMetadata("TIFF header truncated")

        byte_order = BYTE_ORDERS.get(bytes(data[start:start + 2]))
        if byte_order is None:
            raise MalformedMetadata(f"Unknown TIFF byte order {bytes(data[start:start + 2])!r}")

        magic, ifd_offset = struct.unpack(f'{byte_order}HI', data[start + 2:start + 8])
        if magic != TIFF_MAGIC:
            raise MalformedMetadata(f"Bad TIFF magic {magic}")

        ifd = start + ifd_offset
        if ifd_offset < 8 or ifd + 2 > end:
            raise MalformedMetadata(f"IFD0 offset {ifd_offset} outside EXIF segment")

        count, = struct.unpack(f'{byte_order}H', data[ifd:ifd + 2])
        entries = ifd + 2
        if entries + count * IFD_ENTRY_SIZE > end:
            raise MalformedMetadata(f"IFD0 declares {count} entries but segment is truncated")

        for i in range(count):
            entry = entries + i * IFD_ENTRY_SIZE
            tag, field_type, components = struct.unpack(f'{byte_order}HHI', data[entry:entry + 8])
            if tag != ORIENTATION_TAG:
                continue
            if field_type != SHORT or components != 1:
                raise MalformedMetadata(f"Orientation entry has type {field_type} x{components}, expected SHORT x1")
            value, = struct.unpack(f'{byte_order}H', data[entry + 8:entry + 10])
            return TagLocation(offset=entry + 8, byte_order=byte_order, value=value)

        return None


_reader = OrientationTagReader()


def read_orientation(data: bytes) -> int:
    """Return the EXIF orientation code of JPEG bytes (1 when absent)."""
    return _reader.read(data)


def locate_orientation(data: bytes) -> Optional[TagLocation]:
    """Return where the orientation value is stored, None when absent."""
    return _reader.locate(data)
