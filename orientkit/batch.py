"""
BatchCorrector - Main facade for correcting image batches.
Orchestrates tag reading, transform lookup and the configured normalizer
across a bounded process pool, keeping results in input order.
"""
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union
from concurrent.futures import ProcessPoolExecutor, wait, FIRST_COMPLETED
from multiprocessing import cpu_count
import threading
import time
import logging

from .core.errors import Cancelled, OrientationError, UnsupportedInput
from .core.extensions import is_image
from .core.interfaces import (
    IBatchCorrector,
    INormalizer,
    Strategy,
    RawImage,
    CorrectedImage,
    ItemResult,
    BatchResult,
    CorrectorConfig,
    ProgressCallback,
    NORMAL_ORIENTATION,
)
from .image.exif import read_orientation
from .image.orientation import transform_for
from .image.normalizers import create_normalizer
from .archive.zipped import ZipArchiver, load_folder

logger = logging.getLogger(__name__)

ImageInput = Union[RawImage, Tuple[str, bytes]]


class CancelToken:
    """Cooperative cancellation flag shared between caller and batch."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()


def correct_image(
    index: int,
    image: RawImage,
    normalizer: INormalizer,
    should_cancel: Optional[Callable[[], bool]] = None
) -> ItemResult:
    """Correct one image. Errors are returned on the item, never raised."""
    orientation = read_orientation(image.data)

    if orientation == NORMAL_ORIENTATION:
        passthrough = CorrectedImage(
            filename=image.filename,
            data=image.data,
            source_orientation=NORMAL_ORIENTATION,
            strategy=normalizer.strategy,
        )
        return ItemResult(index, image.filename, image=passthrough)

    transform = transform_for(orientation)
    try:
        corrected = normalizer.normalize(image, orientation, transform, should_cancel)
    except OrientationError as e:
        return ItemResult(index, image.filename, error=e)
    except Exception as e:
        error = OrientationError(f"Unexpected {type(e).__name__} in {image.filename}: {e}")
        error.__cause__ = e
        return ItemResult(index, image.filename, error=error)

    return ItemResult(index, image.filename, image=corrected)


def _correct_single_image(args: Tuple[int, RawImage, INormalizer]) -> ItemResult:
    """Worker function for parallel processing (must be top-level for pickling)."""
    index, image, normalizer = args
    return correct_image(index, image, normalizer)


class _ProgressTracker:
    """Reports completed/total after each finished image."""

    def __init__(self, total: int, callback: Optional[ProgressCallback] = None):
        self.total = total
        self.completed = 0
        self.callback = callback

    def advance(self) -> None:
        self.completed += 1
        if self.callback is not None:
            self.callback(self.completed, self.total)
        if self.completed % 100 == 0 or self.completed == self.total:
            logger.info(f"Progress: {self.completed}/{self.total} ({self.completed / self.total * 100:.1f}%)")


class BatchCorrector(IBatchCorrector):
    """
    Main facade for correcting image orientation in batches.

    Example:
        corrector = BatchCorrector(CorrectorConfig(strategy="metadata"))

        result = corrector.correct([("a.jpg", data_a), ("b.jpg", data_b)])
        for filename, data in result.export():
            ...

        # Archives in, archive out
        result, archive = corrector.correct_archive(zip_bytes)
    """

    def __init__(self, config: Optional[CorrectorConfig] = None):
        self.config = config or CorrectorConfig()
        self.normalizer = self._build_normalizer(self.config.strategy)
        self.archiver = ZipArchiver()

    def _build_normalizer(self, strategy: Union[Strategy, str]) -> INormalizer:
        return create_normalizer(strategy, quality=self.config.quality, keep_exif=self.config.keep_exif)

    def correct(
        self,
        images: Iterable[ImageInput],
        strategy: Optional[Union[Strategy, str]] = None,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None
    ) -> BatchResult:
        """
        Correct every image of a batch.

        Args:
            images: RawImage objects or (filename, bytes) pairs
            strategy: Overrides the configured strategy for this call
            progress: Called with (completed, total) as images finish
            cancel: Token checked before each image is started

        Returns:
            BatchResult with one item per input, in input order

        Raises:
            ConfigurationError: if strategy is unknown (before any work)
        """
        normalizer = self.normalizer if strategy is None else self._build_normalizer(strategy)
        batch = [self._as_raw_image(image) for image in images]

        total = len(batch)
        slots: List[Optional[ItemResult]] = [None] * total
        tracker = _ProgressTracker(total, progress)
        start_time = time.time()

        logger.info(f"Correcting {total} images ({normalizer.strategy.value} strategy)")

        pending = []
        for index, image in enumerate(batch):
            if is_image(image.filename):
                pending.append(index)
                continue
            logger.warning(f"Skipping unsupported file: {image.filename}")
            slots[index] = ItemResult(index, image.filename, error=UnsupportedInput(f"Unsupported file type: {image.filename}"))
            tracker.advance()

        workers = self._worker_count(len(pending))
        if workers <= 1:
            self._run_inline(batch, pending, normalizer, slots, tracker, cancel)
        else:
            self._run_parallel(batch, pending, normalizer, slots, tracker, cancel, workers)

        for index, item in enumerate(slots):
            if item is None:
                slots[index] = ItemResult(index, batch[index].filename, error=Cancelled(f"Not processed: {batch[index].filename}"))

        result = BatchResult(
            items=slots,
            cancelled=any(isinstance(item.error, Cancelled) for item in slots),
        )

        elapsed = time.time() - start_time
        logger.info(f"Batch finished in {elapsed:.2f}s: {result.summary()}")
        return result

    def correct_archive(
        self,
        archive: bytes,
        strategy: Optional[Union[Strategy, str]] = None,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None
    ) -> Tuple[BatchResult, bytes]:
        """
        Correct all images inside a ZIP archive.

        Returns:
            (BatchResult, bytes of a new ZIP holding the corrected images)

        Raises:
            ArchiveError: if the archive is unreadable or has no images
        """
        images = self.archiver.extract(archive)
        result = self.correct(images, strategy, progress, cancel)
        return result, self.archiver.package(result.export())

    def correct_folder(
        self,
        folder: Path,
        output_folder: Path,
        strategy: Optional[Union[Strategy, str]] = None,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None
    ) -> BatchResult:
        """Correct images of a folder and write them to output_folder."""
        folder = Path(folder)
        output_folder = Path(output_folder)

        images = load_folder(folder)
        if not images:
            raise ValueError(f"No images found in {folder}")

        result = self.correct(images, strategy, progress, cancel)

        output_folder.mkdir(parents=True, exist_ok=True)
        for filename, data in result.export():
            (output_folder / filename).write_bytes(data)

        return result

    def _worker_count(self, total: int) -> int:
        max_workers = self.config.max_workers or max(1, cpu_count() - 1)
        return max(1, min(max_workers, total))

    @staticmethod
    def _as_raw_image(image: ImageInput) -> RawImage:
        if isinstance(image, RawImage):
            return image
        filename, data = image
        return RawImage.from_bytes(filename, data)

    def _record(self, item: ItemResult, slots: List[Optional[ItemResult]], tracker: _ProgressTracker) -> None:
        if item.error is not None:
            logger.error(f"ERROR:{item.filename}:{item.error}")
        elif item.warning:
            logger.warning(f"WARNING:{item.filename}:{item.warning}")
        slots[item.index] = item
        tracker.advance()

    def _run_inline(
        self,
        batch: List[RawImage],
        pending: List[int],
        normalizer: INormalizer,
        slots: List[Optional[ItemResult]],
        tracker: _ProgressTracker,
        cancel: Optional[CancelToken]
    ) -> None:
        """Process images one by one in the calling process."""
        should_cancel = cancel.is_cancelled if cancel is not None else None

        for index in pending:
            if cancel is not None and cancel.is_cancelled():
                logger.warning("Batch cancelled")
                return
            self._record(correct_image(index, batch[index], normalizer, should_cancel), slots, tracker)

    def _run_parallel(
        self,
        batch: List[RawImage],
        pending: List[int],
        normalizer: INormalizer,
        slots: List[Optional[ItemResult]],
        tracker: _ProgressTracker,
        cancel: Optional[CancelToken],
        workers: int
    ) -> None:
        """
        Process images on a process pool with a bounded submission window.

        The token lives in this process, so cancellation only stops new
        submissions. Images already handed to a worker run to completion.
        """
        queue = iter(pending)
        in_flight = {}

        with ProcessPoolExecutor(max_workers=workers) as executor:

            def submit_next() -> bool:
                if cancel is not None and cancel.is_cancelled():
                    return False
                index = next(queue, None)
                if index is None:
                    return False
                future = executor.submit(_correct_single_image, (index, batch[index], normalizer))
                in_flight[future] = index
                return True

            for _ in range(workers * 2):
                if not submit_next():
                    break

            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    index = in_flight.pop(future)
                    try:
                        item = future.result()
                    except Exception as e:
                        item = ItemResult(index, batch[index].filename, error=OrientationError(f"Worker failed: {e}"))
                    self._record(item, slots, tracker)
                    submit_next()

        if cancel is not None and cancel.is_cancelled():
            logger.warning("Batch cancelled")


def correct_images(
    images: Iterable[ImageInput],
    strategy: Union[Strategy, str] = Strategy.PIXEL,
    max_workers: Optional[int] = None,
    progress: Optional[ProgressCallback] = None
) -> BatchResult:
    """Correct a batch with a one-off BatchCorrector."""
    corrector = BatchCorrector(CorrectorConfig(strategy=strategy, max_workers=max_workers))
    return corrector.correct(images, progress=progress)
