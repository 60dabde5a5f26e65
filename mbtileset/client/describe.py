"""
Printing tileset details to the console.
"""

from pathlib import Path

from rich.console import Console
from rich.table import Table

from mbtileset.files import find_mbtiles
from mbtileset.handle import MBtiles


def print_info(path: Path, console: Console, in_memory: bool = False):
    """
    Print the detected format and the normalized metadata of a tileset.
    """
    opener = MBtiles.open_in_memory if in_memory else MBtiles.open

    with opener(path) as tileset:
        metadata = tileset.read_metadata()

        console.print(
            {
                "filename": tileset.filename,
                "format": str(tileset.tile_format) or "unknown",
                "content_type": tileset.tile_format.content_type,
                "tile_size": tileset.tile_size,
                "timestamp": tileset.timestamp.isoformat(),
                "in_memory": tileset.in_memory,
            }
        )

    table = Table(title="Metadata")
    table.add_column("name")
    table.add_column("value")

    for name, value in metadata.items():
        table.add_row(name, str(value))

    console.print(table)


def write_tile(
    path: Path, zoom: int, column: int, row: int, output: Path | None, console: Console
) -> bool:
    """
    Write a single tile to ``output``. Returns False if there is no tile at
    that coordinate.
    """
    with MBtiles.open(path) as tileset:
        data = tileset.read_tile(zoom, column, row)
        extension = str(tileset.tile_format) or "bin"

    if data is None:
        console.print(f"No tile at {zoom}/{column}/{row} in {path}.")
        return False

    output = output or Path(f"{zoom}-{column}-{row}.{extension}")
    output.write_bytes(data)

    console.print(f"Wrote {len(data)} bytes to {output}.")

    return True


def print_found(root: Path, console: Console):
    """
    Print every complete tileset below ``root``.
    """
    found = find_mbtiles(root)

    console.print(f"Found {len(found)} tilesets:")

    for path in found:
        console.print(str(path))
