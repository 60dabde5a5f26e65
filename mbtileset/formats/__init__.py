"""
Tile format detection.
"""

from .core import TileFormat, detect_tile_format, fold_compressed
from .size import detect_tile_size

__all__ = ("TileFormat", "detect_tile_format", "fold_compressed", "detect_tile_size")
