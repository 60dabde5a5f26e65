"""
Mappings for the two relations of a tileset.

Tilesets are only ever read, so these are never used to create tables. Either
relation may be a view in the file; that makes no difference to the reads.
"""

from sqlmodel import Field, SQLModel


class TileRow(SQLModel, table=True):
    __tablename__ = "tiles"

    # Rows follow the TMS scheme: tile_row 0 is the southernmost row.
    zoom_level: int = Field(primary_key=True, description="The zoom level of this tile.")
    tile_column: int = Field(primary_key=True, description="The column of this tile.")
    tile_row: int = Field(primary_key=True, description="The row of this tile.")

    tile_data: bytes | None = Field(
        default=None, description="The encoded tile, in whatever format the tileset uses."
    )


class MetadataRow(SQLModel, table=True):
    __tablename__ = "metadata"

    # The relation has no key of its own; name is unique by convention.
    name: str = Field(primary_key=True)
    value: str | None = Field(default=None)
