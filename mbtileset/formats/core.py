"""
Classification of raw tile bytes by their signature.
"""

from enum import Enum

from ..exceptions import TileFormatError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPG_SIGNATURE = b"\xff\xd8\xff"
GZIP_SIGNATURE = b"\x1f\x8b"
RIFF_SIGNATURE = b"RIFF"
WEBP_SIGNATURE = b"WEBP"


class TileFormat(Enum):
    """
    The closed set of tile encodings. ``GZIP`` only exists between sniffing
    and ``fold_compressed``; handles never report it.
    """

    UNKNOWN = ""
    PNG = "png"
    JPG = "jpg"
    WEBP = "webp"
    PBF = "pbf"
    GZIP = "gzip"

    def __str__(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self]


CONTENT_TYPES = {
    TileFormat.UNKNOWN: "",
    TileFormat.PNG: "image/png",
    TileFormat.JPG: "image/jpeg",
    TileFormat.WEBP: "image/webp",
    TileFormat.PBF: "application/x-protobuf",
    TileFormat.GZIP: "application/x-protobuf",
}


def detect_tile_format(data: bytes) -> TileFormat:
    """
    Identify the encoding of ``data`` from its leading bytes.

    Empty data (a tileset without tiles) is ``UNKNOWN``. Non-empty data with
    no known signature raises ``TileFormatError``.
    """
    if not data:
        return TileFormat.UNKNOWN

    if data.startswith(PNG_SIGNATURE):
        return TileFormat.PNG

    if data.startswith(JPG_SIGNATURE):
        return TileFormat.JPG

    # RIFF container, 4 byte length, then the WEBP form type.
    if data.startswith(RIFF_SIGNATURE) and data[8:12] == WEBP_SIGNATURE:
        return TileFormat.WEBP

    if data.startswith(GZIP_SIGNATURE):
        return TileFormat.GZIP

    raise TileFormatError(f"Could not detect tile format from {bytes(data[:8])!r}")


def fold_compressed(tile_format: TileFormat) -> TileFormat:
    """
    Gzip only ever wraps vector tiles in a tileset, so report it as ``PBF``.
    """
    if tile_format is TileFormat.GZIP:
        return TileFormat.PBF

    return tile_format
