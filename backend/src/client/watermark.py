"""Date/time watermark for photos captured on site."""

from __future__ import annotations

import io
from datetime import datetime

from PIL import Image, ImageDraw, ImageFont

BAND_HEIGHT = 90
BAND_MARGIN = 10
BAND_COLOR = (0, 0, 0, 191)
TEXT_COLOR = (255, 255, 255, 255)
MAX_LOCATION_LENGTH = 50
JPEG_QUALITY = 90


def format_location(
    address: str | None = None,
    coordinates: tuple[float, float] | None = None,
) -> str | None:
    """Location line for the band: the address if known, else lat/lng."""
    if address:
        if len(address) > MAX_LOCATION_LENGTH:
            return f"{address[:MAX_LOCATION_LENGTH]}..."
        return address
    if coordinates:
        latitude, longitude = coordinates
        return f"Lat: {latitude:.6f}, Lng: {longitude:.6f}"
    return None


def watermark_lines(captured_at: datetime, location: str | None = None) -> list[str]:
    lines = [
        f"Date: {captured_at.strftime('%m/%d/%Y')}",
        f"Time: {captured_at.strftime('%I:%M:%S %p')}",
    ]
    if location:
        lines.append(location)
    return lines


def watermark_photo(
    data: bytes,
    captured_at: datetime,
    address: str | None = None,
    coordinates: tuple[float, float] | None = None,
) -> bytes:
    """Stamp a translucent band with capture date, time and place.

    Args:
        data: Encoded source image (any format Pillow reads)
        captured_at: Capture timestamp shown on the band
        address: Human-readable location, truncated to 50 characters
        coordinates: (latitude, longitude) used when no address is known

    Returns:
        The stamped image re-encoded as JPEG
    """
    with Image.open(io.BytesIO(data)) as source:
        image = source.convert("RGBA")

    overlay = Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    top = max(image.height - BAND_HEIGHT - BAND_MARGIN, 0)
    right = max(image.width - BAND_MARGIN, BAND_MARGIN)
    draw.rectangle(
        [(BAND_MARGIN, top), (right, min(top + BAND_HEIGHT, image.height))],
        fill=BAND_COLOR,
    )

    title_font = ImageFont.load_default(size=18)
    detail_font = ImageFont.load_default(size=14)
    lines = watermark_lines(captured_at, format_location(address, coordinates))
    for index, line in enumerate(lines):
        font = title_font if index < 2 else detail_font
        draw.text((BAND_MARGIN + 10, top + 8 + index * 25), line, fill=TEXT_COLOR, font=font)

    stamped = Image.alpha_composite(image, overlay).convert("RGB")
    buffer = io.BytesIO()
    stamped.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    return buffer.getvalue()
