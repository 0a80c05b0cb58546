"""
Pytest configuration and fixtures for orientkit tests.
"""
import io
import struct
import zipfile
import pytest
import tempfile
import shutil
from pathlib import Path
from PIL import Image


def build_exif_segment(orientation, byte_order="MM", with_make=True, orientation_type=3):
    """
    Build an APP1/Exif segment whose IFD0 holds the orientation tag.

    With with_make, an ASCII Make entry (value stored out of line) comes
    first so the IFD walk has to skip an entry.
    """
    fmt = ">" if byte_order == "MM" else "<"
    entries = []
    extra = b""
    entry_count = 2 if with_make else 1
    data_offset = 8 + 2 + entry_count * 12 + 4

    if with_make:
        make = b"TestCam\x00"
        entries.append(struct.pack(f"{fmt}HHII", 0x010F, 2, len(make), data_offset))
        extra += make

    entries.append(
        struct.pack(f"{fmt}HHI", 0x0112, orientation_type, 1)
        + struct.pack(f"{fmt}HH", orientation, 0)
    )

    tiff = byte_order.encode() + struct.pack(f"{fmt}HI", 42, 8)
    tiff += struct.pack(f"{fmt}H", entry_count) + b"".join(entries) + struct.pack(f"{fmt}I", 0)
    tiff += extra

    payload = b"Exif\x00\x00" + tiff
    return b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload


def insert_segment(jpeg_bytes, segment):
    """Insert a marker segment right after SOI."""
    assert jpeg_bytes[:2] == b"\xff\xd8"
    return jpeg_bytes[:2] + segment + jpeg_bytes[2:]


def draw_marker_image(size=(60, 40)):
    """White image with a red block in the top-left corner (wider than tall)."""
    img = Image.new("RGB", size, color="white")
    w, h = size
    img.paste((255, 0, 0), (0, 0, w // 2, h // 4))
    return img


def encode_jpeg(img, quality=95):
    buffer = io.BytesIO()
    img.save(buffer, "JPEG", quality=quality)
    return buffer.getvalue()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="orientkit_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def exif_segment():
    """Factory for APP1/Exif segments."""
    return build_exif_segment


@pytest.fixture
def make_jpeg():
    """
    Factory for JPEG bytes with an optional EXIF orientation.

    make_jpeg(size=(100, 200), orientation=6, byte_order="II")
    """
    def _make(size=(60, 40), orientation=None, byte_order="MM", with_make=True, marker=True):
        img = draw_marker_image(size) if marker else Image.new("RGB", size, color="blue")
        data = encode_jpeg(img)
        if orientation is None:
            return data
        return insert_segment(data, build_exif_segment(orientation, byte_order, with_make))
    return _make


@pytest.fixture
def sample_jpeg(make_jpeg) -> bytes:
    """JPEG tagged with orientation 6."""
    return make_jpeg(size=(100, 200), orientation=6)


@pytest.fixture
def plain_jpeg(make_jpeg) -> bytes:
    """JPEG without any EXIF segment."""
    return make_jpeg(size=(100, 200))


@pytest.fixture
def png_bytes() -> bytes:
    """PNG image with transparency (never carries orientation)."""
    buffer = io.BytesIO()
    Image.new("RGBA", (40, 30), color=(255, 0, 0, 128)).save(buffer, "PNG")
    return buffer.getvalue()


@pytest.fixture
def corrupt_jpeg(exif_segment) -> bytes:
    """Tagged JPEG header followed by garbage instead of image data."""
    return b"\xff\xd8" + exif_segment(6) + b"\x00" * 64


@pytest.fixture
def sample_batch(make_jpeg):
    """Batch of (filename, bytes) pairs covering every orientation."""
    return [(f"photo_{code:02d}.jpg", make_jpeg(orientation=code)) for code in range(1, 9)]


@pytest.fixture
def sample_archive(make_jpeg, png_bytes) -> bytes:
    """ZIP archive with images, a text file, a folder and a resource fork."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("album/", b"")
        zf.writestr("album/b_rotated.jpg", make_jpeg(orientation=6))
        zf.writestr("readme.txt", b"not an image")
        zf.writestr("a_upright.JPEG", make_jpeg(orientation=1))
        zf.writestr("__MACOSX/album/._b_rotated.jpg", b"\x00\x05\x16\x07")
        zf.writestr("c_icon.png", png_bytes)
    return buffer.getvalue()


@pytest.fixture
def image_folder(temp_dir, make_jpeg) -> Path:
    """Folder with naturally numbered images and a stray text file."""
    folder = temp_dir / "photos"
    folder.mkdir()
    for i, code in zip((10, 2, 1), (6, 3, 1)):
        (folder / f"img{i}.jpg").write_bytes(make_jpeg(orientation=code))
    (folder / "notes.txt").write_text("skip me")
    return folder


@pytest.fixture
def empty_dir(temp_dir) -> Path:
    """Create an empty directory."""
    empty = temp_dir / "empty"
    empty.mkdir()
    return empty
