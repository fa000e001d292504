"""Shared fixtures for photo tests."""
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest
from PIL import ExifTags, Image

from exif_timestamps import EXIF_DATETIME_FORMAT


def write_jpeg(path: Path, timestamp: Optional[datetime] = None,
               size=(64, 48), color=(200, 120, 40)) -> Path:
    """Save a small JPEG, with DateTime set in IFD0 when a timestamp is given."""
    image = Image.new("RGB", size, color)
    path.parent.mkdir(parents=True, exist_ok=True)
    if timestamp is None:
        image.save(path, "JPEG")
    else:
        exif = Image.Exif()
        exif[ExifTags.Base.DateTime] = timestamp.strftime(EXIF_DATETIME_FORMAT)
        image.save(path, "JPEG", exif=exif)
    return path


@pytest.fixture
def make_jpeg(tmp_path):
    """Factory for JPEG files under tmp_path."""
    def _make(name: str, timestamp: Optional[datetime] = None, **kwargs) -> Path:
        return write_jpeg(tmp_path / name, timestamp, **kwargs)
    return _make
