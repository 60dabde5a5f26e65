"""
Read-only access to MBTiles tilesets.
"""

from .database import SQLiteEngine
from .exceptions import (
    CancelledError,
    CapabilityError,
    ClosedHandleError,
    FormatError,
    IncompleteTilesetError,
    MBTilesError,
    MetadataParseError,
    PathError,
    SchemaError,
    TileFormatError,
    TileSizeError,
)
from .files import find_mbtiles
from .formats import TileFormat
from .handle import MBtiles, TileCoordinate
from .pool import Cancellation

__all__ = (
    "MBtiles",
    "TileCoordinate",
    "TileFormat",
    "SQLiteEngine",
    "Cancellation",
    "find_mbtiles",
    "MBTilesError",
    "PathError",
    "IncompleteTilesetError",
    "SchemaError",
    "FormatError",
    "TileFormatError",
    "TileSizeError",
    "CapabilityError",
    "MetadataParseError",
    "ClosedHandleError",
    "CancelledError",
)
