"""Read capture timestamps from image EXIF metadata."""
import logging
from datetime import datetime
from typing import Optional

from PIL import ExifTags, Image

logger = logging.getLogger(__name__)

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"

# Checked in order; the first tag present wins
TIMESTAMP_TAGS = (
    ExifTags.Base.DateTimeOriginal,
    ExifTags.Base.DateTime,
    ExifTags.Base.DateTimeDigitized,
)


def parse_exif_datetime(value) -> Optional[datetime]:
    """Parse an EXIF date string ("YYYY:MM:DD HH:MM:SS") into a datetime."""
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None

    value = value.strip().rstrip("\x00")
    try:
        return datetime.strptime(value, EXIF_DATETIME_FORMAT)
    except ValueError:
        return None


def read_timestamp(image: Image.Image) -> Optional[datetime]:
    """
    Get the capture time of an image from its EXIF tags.

    Tags may live in the main IFD or the Exif sub-IFD depending on the
    camera, so both are searched.

    Returns:
        The capture time, or None if no usable tag is present
    """
    try:
        exif = image.getexif()
    except Exception as e:
        logger.debug(f"Failed to read EXIF data: {e}")
        return None

    tags = dict(exif)
    try:
        tags.update(exif.get_ifd(ExifTags.IFD.Exif))
    except Exception as e:
        logger.debug(f"Failed to read Exif IFD: {e}")

    for tag in TIMESTAMP_TAGS:
        raw = tags.get(tag)
        if raw is None:
            continue
        timestamp = parse_exif_datetime(raw)
        if timestamp is not None:
            return timestamp
        logger.debug(f"Unparseable EXIF {tag.name}: {raw!r}")

    return None
