"""
Tile dimensions read from fixed image headers.
"""

import struct

from ..exceptions import TileSizeError
from .core import TileFormat

# Signature (8), IHDR length (4), chunk type (4), width (4), height (4).
PNG_CHUNK_TYPE = b"IHDR"
PNG_CHUNK_TYPE_OFFSET = 12
PNG_HEADER_LENGTH = 24


def detect_tile_size(tile_format: TileFormat, data: bytes) -> int:
    """
    Return the edge length in pixels of a square tile, or 0 where the format
    does not carry its dimensions at a fixed offset.
    """
    if tile_format is TileFormat.PNG:
        return _png_tile_size(data)
    elif tile_format in (
        TileFormat.UNKNOWN,
        TileFormat.JPG,
        TileFormat.WEBP,
        TileFormat.PBF,
        TileFormat.GZIP,
    ):
        return 0
    else:
        raise ValueError(f"Unhandled tile format {tile_format!r}")


def _png_tile_size(data: bytes) -> int:
    if len(data) < PNG_HEADER_LENGTH:
        raise TileSizeError(
            f"PNG header is truncated: {len(data)} of {PNG_HEADER_LENGTH} bytes"
        )

    chunk_type = bytes(data[PNG_CHUNK_TYPE_OFFSET : PNG_CHUNK_TYPE_OFFSET + 4])
    if chunk_type != PNG_CHUNK_TYPE:
        raise TileSizeError(f"Could not read PNG header, found chunk {chunk_type!r}")

    width, height = struct.unpack(">II", data[16:24])

    if width != height:
        raise TileSizeError(f"Tile width ({width}) and height ({height}) do not match")

    return width
