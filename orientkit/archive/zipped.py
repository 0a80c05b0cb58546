"""
ZIP archive extraction and packaging.
Thin glue around the batch corrector; all data stays in memory.
"""
from pathlib import Path
from typing import Iterable, List, Tuple
import io
import logging
import zipfile

from natsort import natsorted

from ..core.errors import ArchiveError
from ..core.extensions import is_image
from ..core.interfaces import IArchiver, RawImage

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME = "fixed_images.zip"

IGNORED_PREFIXES = ("__MACOSX/",)


class ZipArchiver(IArchiver):
    """Reads images out of ZIP archives and bundles corrected ones back."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def extract(self, archive: bytes) -> List[RawImage]:
        """
        Read supported images from a ZIP archive.

        Args:
            archive: ZIP file contents

        Returns:
            Images in archive order; directories, resource forks and
            files with unsupported extensions are left out

        Raises:
            ArchiveError: if the archive is unreadable or has no images
        """
        try:
            with zipfile.ZipFile(io.BytesIO(archive)) as zf:
                images = []
                for info in zf.infolist():
                    if info.is_dir() or info.filename.startswith(IGNORED_PREFIXES):
                        continue
                    if not is_image(info.filename):
                        logger.debug(f"Ignoring non-image entry: {info.filename}")
                        continue
                    images.append(RawImage.from_bytes(info.filename, zf.read(info)))
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Not a valid ZIP archive: {e}") from e

        if not images:
            raise ArchiveError("No valid images found in ZIP file")

        logger.info(f"Loaded {len(images)} images from archive")
        return images

    def package(self, files: Iterable[Tuple[str, bytes]]) -> bytes:
        """Bundle (filename, bytes) pairs into a new ZIP, keeping their order."""
        buffer = io.BytesIO()
        written = set()
        with zipfile.ZipFile(buffer, "w", compression=self.compression) as zf:
            for filename, data in files:
                if filename in written:
                    logger.warning(f"Duplicate filename in archive: {filename}")
                zf.writestr(filename, data)
                written.add(filename)
        return buffer.getvalue()


def load_folder(folder: Path) -> List[RawImage]:
    """Load supported images of a folder in natural sort order."""
    folder = Path(folder)
    if not folder.is_dir():
        raise ArchiveError(f"Folder not found: {folder}")

    paths = natsorted(f for f in folder.iterdir() if f.is_file() and is_image(f.name))
    return [RawImage.from_bytes(path.name, path.read_bytes()) for path in paths]


def extract_images(archive: bytes) -> List[RawImage]:
    """Read supported images from ZIP bytes."""
    return ZipArchiver().extract(archive)


def package_images(files: Iterable[Tuple[str, bytes]]) -> bytes:
    """Bundle (filename, bytes) pairs into ZIP bytes."""
    return ZipArchiver().package(files)
