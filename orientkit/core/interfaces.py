"""
Abstract interfaces and data types for orientation correction.
Defines contracts for all orientkit components.
"""
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from .errors import ConfigurationError, OrientationError, UnsupportedInput
from .extensions import guess_mime_type

NORMAL_ORIENTATION = 1
ORIENTATION_TAG = 0x0112

ProgressCallback = Callable[[int, int], None]


class Strategy(Enum):
    """How an image is brought to canonical orientation."""
    METADATA = "metadata"
    PIXEL = "pixel"

    @classmethod
    def parse(cls, value: Union["Strategy", str]) -> "Strategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ConfigurationError(f"Unknown strategy {value!r} (expected one of: {choices})") from None


@dataclass(frozen=True)
class Transform:
    """Clockwise rotation plus optional horizontal mirror."""
    rotation: int = 0
    mirrored: bool = False

    @property
    def swaps_dimensions(self) -> bool:
        return self.rotation in (90, 270)

    @property
    def is_identity(self) -> bool:
        return self.rotation == 0 and not self.mirrored


@dataclass(frozen=True)
class RawImage:
    """An image buffer as delivered by the caller. Never mutated."""
    filename: str
    data: bytes
    mime_type: Optional[str] = None

    @classmethod
    def from_bytes(cls, filename: str, data: bytes) -> "RawImage":
        return cls(filename, bytes(data), guess_mime_type(filename))

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class CorrectedImage:
    """Image in canonical orientation."""
    filename: str
    data: bytes
    orientation: int = NORMAL_ORIENTATION
    source_orientation: int = NORMAL_ORIENTATION
    strategy: Optional[Strategy] = None
    warning: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.source_orientation != NORMAL_ORIENTATION


@dataclass
class ItemResult:
    """Outcome of correcting one image of a batch."""
    index: int
    filename: str
    image: Optional[CorrectedImage] = None
    error: Optional[OrientationError] = None

    @property
    def ok(self) -> bool:
        return self.image is not None and self.error is None

    @property
    def skipped(self) -> bool:
        return isinstance(self.error, UnsupportedInput)

    @property
    def warning(self) -> Optional[str]:
        return self.image.warning if self.image else None


@dataclass
class BatchResult:
    """Per-image outcomes aligned with input order."""
    items: List[ItemResult] = field(default_factory=list)
    cancelled: bool = False

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    @property
    def corrected(self) -> List[CorrectedImage]:
        return [item.image for item in self.items if item.ok]

    @property
    def errors(self) -> List[ItemResult]:
        """Items that failed, excluding skipped unsupported files."""
        return [item for item in self.items if item.error is not None and not item.skipped]

    @property
    def skipped(self) -> List[ItemResult]:
        return [item for item in self.items if item.skipped]

    @property
    def warnings(self) -> List[ItemResult]:
        return [item for item in self.items if item.warning]

    def export(self) -> List[Tuple[str, bytes]]:
        """Successful images as (filename, bytes) pairs, in input order."""
        return [(image.filename, image.data) for image in self.corrected]

    def summary(self) -> str:
        """
        Short human-readable summary.

        Returns:
            String like "12 corrected - 3 rotated - 1 failed - 1 skipped"
        """
        corrected = self.corrected
        rotated = sum(1 for image in corrected if image.changed)
        parts = [f"{len(corrected)} corrected", f"{rotated} rotated"]
        if self.errors:
            parts.append(f"{len(self.errors)} failed")
        if self.skipped:
            parts.append(f"{len(self.skipped)} skipped")
        if self.cancelled:
            parts.append("cancelled")
        return " - ".join(parts)


@dataclass
class CorrectorConfig:
    """Configuration for batch correction."""
    strategy: Union[Strategy, str] = Strategy.PIXEL
    max_workers: Optional[int] = None
    quality: int = 100
    keep_exif: bool = True

    def __post_init__(self):
        self.strategy = Strategy.parse(self.strategy)
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")
        if not 1 <= self.quality <= 100:
            raise ConfigurationError(f"quality must be within 1..100, got {self.quality}")


class INormalizer(ABC):
    """Interface for orientation normalization strategies."""

    strategy: Strategy

    @abstractmethod
    def normalize(
        self,
        image: RawImage,
        orientation: int,
        transform: Transform,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> CorrectedImage:
        """Bring an image to canonical orientation."""
        pass


class IOrientationReader(ABC):
    """Interface for reading the orientation of an encoded image."""

    @abstractmethod
    def read(self, data: bytes) -> int:
        """Return the orientation code, 1 when unknown."""
        pass


class IBatchCorrector(ABC):
    """Interface for batch correction."""

    @abstractmethod
    def correct(
        self,
        images: Iterable[Union[RawImage, Tuple[str, bytes]]],
        strategy: Optional[Union[Strategy, str]] = None,
        progress: Optional[ProgressCallback] = None,
        cancel=None
    ) -> BatchResult:
        """Correct every image, preserving input order."""
        pass


class IArchiver(ABC):
    """Interface for archive extraction and packaging."""

    @abstractmethod
    def extract(self, archive: bytes) -> List[RawImage]:
        """Read supported images from an archive, in archive order."""
        pass

    @abstractmethod
    def package(self, files: Iterable[Tuple[str, bytes]]) -> bytes:
        """Bundle files into a new archive."""
        pass
