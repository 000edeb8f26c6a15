"""Unit tests for the photo watermark."""

import io
from datetime import datetime

from PIL import Image

from src.client.watermark import format_location, watermark_lines, watermark_photo


def _png(width: int = 400, height: int = 300, color=(255, 255, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_lines_use_us_date_and_twelve_hour_time():
    lines = watermark_lines(datetime(2026, 3, 7, 15, 4, 5))

    assert lines == ["Date: 03/07/2026", "Time: 03:04:05 PM"]


def test_location_is_truncated_to_fifty_characters():
    address = "A" * 60

    assert format_location(address) == "A" * 50 + "..."
    assert format_location("Gate 3") == "Gate 3"


def test_coordinates_used_when_no_address():
    assert format_location(None, (51.5, -0.12)) == "Lat: 51.500000, Lng: -0.120000"
    assert format_location() is None


def test_watermark_outputs_jpeg_of_same_size_with_dark_band():
    stamped = watermark_photo(_png(), datetime(2026, 10, 19, 9, 30), address="Plot 14")

    with Image.open(io.BytesIO(stamped)) as image:
        assert image.format == "JPEG"
        assert image.size == (400, 300)
        rgb = image.convert("RGB")
        band_pixel = rgb.getpixel((390, 300 - 15))
        top_pixel = rgb.getpixel((200, 20))

    assert sum(band_pixel) < sum(top_pixel)
    assert sum(top_pixel) > 700


def test_watermark_handles_images_smaller_than_band():
    stamped = watermark_photo(_png(60, 40), datetime(2026, 1, 1))

    with Image.open(io.BytesIO(stamped)) as image:
        assert image.size == (60, 40)
