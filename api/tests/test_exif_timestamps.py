"""Tests for EXIF capture time extraction."""
from datetime import datetime
from types import SimpleNamespace

from PIL import ExifTags, Image

from exif_timestamps import parse_exif_datetime, read_timestamp


class FakeExif(dict):
    """Minimal stand-in for PIL.Image.Exif with a nested Exif IFD."""

    def __init__(self, base=None, exif_ifd=None):
        super().__init__(base or {})
        self._exif_ifd = exif_ifd or {}

    def get_ifd(self, tag):
        if tag == ExifTags.IFD.Exif:
            return self._exif_ifd
        return {}


def _image_with(exif) -> SimpleNamespace:
    return SimpleNamespace(getexif=lambda: exif)


class TestParseExifDatetime:
    """Tests for parse_exif_datetime."""

    def test_standard_format(self):
        assert parse_exif_datetime("2023:07:14 18:30:05") == datetime(2023, 7, 14, 18, 30, 5)

    def test_bytes_with_trailing_nul(self):
        assert parse_exif_datetime(b"2023:07:14 18:30:05\x00") == datetime(2023, 7, 14, 18, 30, 5)

    def test_invalid_values(self):
        assert parse_exif_datetime("0000:00:00 00:00:00") is None
        assert parse_exif_datetime("yesterday") is None
        assert parse_exif_datetime(None) is None
        assert parse_exif_datetime(12345) is None


class TestReadTimestamp:
    """Tests for read_timestamp."""

    def test_original_in_exif_ifd_preferred(self):
        exif = FakeExif(
            base={ExifTags.Base.DateTime: "2023:01:02 00:00:00"},
            exif_ifd={ExifTags.Base.DateTimeOriginal: "2023:01:01 09:15:00"},
        )

        assert read_timestamp(_image_with(exif)) == datetime(2023, 1, 1, 9, 15)

    def test_falls_back_to_modification_time(self):
        exif = FakeExif(base={ExifTags.Base.DateTime: "2023:01:02 00:00:00"})

        assert read_timestamp(_image_with(exif)) == datetime(2023, 1, 2)

    def test_digitized_used_last(self):
        exif = FakeExif(exif_ifd={ExifTags.Base.DateTimeDigitized: "2020:02:29 23:59:59"})

        assert read_timestamp(_image_with(exif)) == datetime(2020, 2, 29, 23, 59, 59)

    def test_unparseable_tag_skipped(self):
        exif = FakeExif(
            base={ExifTags.Base.DateTime: "2023:01:02 00:00:00"},
            exif_ifd={ExifTags.Base.DateTimeOriginal: "    :  :     :  :  "},
        )

        assert read_timestamp(_image_with(exif)) == datetime(2023, 1, 2)

    def test_no_tags(self):
        assert read_timestamp(_image_with(FakeExif())) is None

    def test_jpeg_without_exif(self):
        assert read_timestamp(Image.new("RGB", (8, 8))) is None

    def test_jpeg_round_trip(self, make_jpeg):
        path = make_jpeg("dated.jpg", datetime(2022, 12, 24, 19, 45, 0))

        with Image.open(path) as image:
            assert read_timestamp(image) == datetime(2022, 12, 24, 19, 45, 0)
