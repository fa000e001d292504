"""
Photo ingestion for grouping.

Turns image files into PhotoRecords, one at a time, with progress reporting.

Pipeline per photo:
1. Read the file and open it with Pillow
2. Read the capture time from EXIF
3. Center-crop and resize to a square thumbnail
4. Detect a face (a failed detection counts as "no face")
"""
import io
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from PIL import Image, ImageOps

import grouping_config
from exif_timestamps import read_timestamp
from face_detector import FaceDetector, detect_safely
from photo_grouping.models import PhotoRecord

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".tif", ".tiff", ".bmp"}


@dataclass
class FailedPhoto:
    """A file that could not be turned into a PhotoRecord."""
    path: str
    error: str


@dataclass
class IngestProgress:
    """Progress snapshot, reported after every photo."""
    processed: int
    total: int
    elapsed_seconds: float
    eta_seconds: Optional[float] = None  # Known once two photos are done

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return self.processed / self.total * 100


@dataclass
class IngestResult:
    """Photos ingested in one batch."""
    photos: list[PhotoRecord] = field(default_factory=list)
    failed: list[FailedPhoto] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.photos) + len(self.failed)


def format_duration(seconds: float) -> str:
    """Human readable duration, e.g. "2 minutes 5 seconds"."""
    if seconds < 60:
        return f"{round(seconds)} seconds"
    minutes = int(seconds // 60)
    remaining = round(seconds % 60)
    return (
        f"{minutes} minute{'s' if minutes != 1 else ''} "
        f"{remaining} second{'s' if remaining != 1 else ''}"
    )


def prepare_image(image: Image.Image, size: int = grouping_config.THUMBNAIL_SIZE) -> Image.Image:
    """Center-crop to a square and resize to size x size RGB."""
    return ImageOps.fit(image.convert("RGB"), (size, size), method=Image.Resampling.LANCZOS)


def find_photos(paths: Iterable[Path], recursive: bool = False) -> list[Path]:
    """Expand files and directories into image files, in a stable order."""
    found = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            pattern = "**/*" if recursive else "*"
            found.extend(sorted(
                p for p in path.glob(pattern)
                if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
            ))
        else:
            found.append(path)
    return found


class PhotoIngester:
    """
    Builds PhotoRecords from image files.

    Usage:
        ingester = PhotoIngester(InsightFaceDetector())
        result = ingester.ingest(find_photos([Path("photos")]))
    """

    def __init__(
        self,
        detector: FaceDetector,
        thumbnail_size: int = grouping_config.THUMBNAIL_SIZE,
        on_progress: Optional[Callable[[IngestProgress], None]] = None,
    ):
        self.detector = detector
        self.thumbnail_size = thumbnail_size
        self.on_progress = on_progress

    def process_bytes(self, data: bytes, path: str) -> PhotoRecord:
        """Build a record from raw image data. Raises if the image is unreadable."""
        image = Image.open(io.BytesIO(data))
        image.load()

        record = PhotoRecord(path=path, timestamp=read_timestamp(image))
        if record.timestamp is None:
            logger.debug(f"No capture time for {path}")

        thumbnail = prepare_image(image, self.thumbnail_size)
        record.apply_detection(detect_safely(self.detector, thumbnail, label=path))
        return record

    def ingest(self, paths: Iterable[Path], base_dir: Optional[Path] = None) -> IngestResult:
        """
        Process photos sequentially.

        Args:
            paths: Image files in ingestion order
            base_dir: If set, record paths are stored relative to it

        Returns:
            IngestResult with records and the files that could not be read
        """
        paths = list(paths)
        result = IngestResult()
        start = time.monotonic()

        for index, path in enumerate(paths, start=1):
            label = self._label(Path(path), base_dir)
            try:
                data = Path(path).read_bytes()
                result.photos.append(self.process_bytes(data, label))
            except Exception as e:
                logger.warning(f"Failed to process {label}: {e}")
                result.failed.append(FailedPhoto(path=label, error=str(e)))

            self._report(index, len(paths), start)

        logger.info(
            f"Ingested {len(result.photos)} photos "
            f"({sum(1 for p in result.photos if p.has_face)} with faces), "
            f"{len(result.failed)} failed"
        )
        return result

    def _label(self, path: Path, base_dir: Optional[Path]) -> str:
        if base_dir is not None:
            try:
                return path.relative_to(base_dir).as_posix()
            except ValueError:
                pass
        return path.name if base_dir is None else path.as_posix()

    def _report(self, processed: int, total: int, start: float):
        if self.on_progress is None:
            return
        elapsed = time.monotonic() - start
        eta = None
        if processed > 1:
            eta = elapsed / processed * (total - processed)
        self.on_progress(IngestProgress(
            processed=processed,
            total=total,
            elapsed_seconds=elapsed,
            eta_seconds=eta,
        ))
