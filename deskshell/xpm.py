"""Decoding of XPM icon images into Pillow images."""

from __future__ import annotations

import io
import re
from typing import Dict, Optional, Tuple, Union

from PIL import Image

Color = Tuple[int, int, int, int]

TRANSPARENT: Color = (0, 0, 0, 0)

_HEX_BYTE = re.compile(r"[0-9a-fA-F]{1,2}")


def strip_quotes(data: str) -> str:
    """Return the text inside the leading pair of double quotes."""
    if not data or data[0] != '"':
        return data
    end = data.find('"', 1)
    if end == -1:
        return data[1:]
    return data[1:end]


def parse_dimensions(data: str) -> Tuple[int, int, int, int]:
    """Parse the ``width height colours chars-per-pixel`` header row."""
    parts = data.split(" ")
    if len(parts) != 4:
        raise ValueError(f"invalid XPM dimensions: {data!r}")
    width, height, colours, char_size = (int(part) for part in parts)
    return width, height, colours, char_size


def string_to_color(data: str) -> Color:
    """Convert an XPM colour value; names other than ``None`` are unsupported."""
    if data.lower() == "none" or not data.startswith("#"):
        return TRANSPARENT
    channels = [0, 0, 0]
    pos = 1
    for index in range(3):
        match = _HEX_BYTE.match(data, pos)
        if match is None:
            break
        channels[index] = int(match.group(), 16)
        pos = match.end()
    return channels[0], channels[1], channels[2], 0xFF


def parse_color(data: str, char_size: int) -> Optional[Tuple[str, Color]]:
    """Parse a colour definition row into its pixel id and colour."""
    if not data:
        return None
    parts = data.split()
    if len(parts) == 2 and parts[0] == "c":
        parts = [" ", "c", parts[1]]
    elif len(parts) != 3 or parts[1] != "c":
        return None
    return data[:char_size], string_to_color(parts[2])


def _parse_pixels(image: Image.Image, y: int, row: str, char_size: int,
                  colors: Dict[str, Color]) -> None:
    if y >= image.height:
        raise ValueError("XPM has more pixel rows than its header declares")
    for x in range(image.width):
        pixel_id = row[x * char_size:(x + 1) * char_size]
        image.putpixel((x, y), colors.get(pixel_id, TRANSPARENT))


def parse_xpm(data: Union[bytes, str]) -> Image.Image:
    """Decode XPM source text into an RGBA image."""
    text = data.decode("latin-1") if isinstance(data, (bytes, bytearray)) else data
    image: Optional[Image.Image] = None
    colors: Dict[str, Color] = {}
    colour_count = char_size = 0
    row_num = 0

    for line in text.split("\n"):
        if not line.startswith('"'):
            continue
        row = strip_quotes(line)
        if row_num == 0:
            width, height, colour_count, char_size = parse_dimensions(row)
            image = Image.new("RGBA", (width, height), TRANSPARENT)
        elif row_num <= colour_count:
            parsed = parse_color(row, char_size)
            if parsed is not None:
                pixel_id, colour = parsed
                colors[pixel_id] = colour
        else:
            assert image is not None
            _parse_pixels(image, row_num - colour_count - 1, row, char_size, colors)
        row_num += 1

    if image is None:
        raise ValueError("XPM data has no header row")
    return image


def xpm_to_png(data: Union[bytes, str]) -> bytes:
    """Decode XPM data and re-encode it as PNG bytes."""
    buffer = io.BytesIO()
    parse_xpm(data).save(buffer, format="PNG")
    return buffer.getvalue()