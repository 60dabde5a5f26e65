"""
ORM mappings for the tileset relations.
"""

from .tiles import MetadataRow, TileRow

__all__ = ("TileRow", "MetadataRow")
