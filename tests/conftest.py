"""
Fixtures building small tilesets on disk.
"""

import gzip
import sqlite3
import struct
from pathlib import Path

import pytest


def png_tile(width: int = 256, height: int | None = None, chunk_type: bytes = b"IHDR") -> bytes:
    height = width if height is None else height
    return (
        b"\x89PNG\r\n\x1a\n"
        + struct.pack(">I", 13)
        + chunk_type
        + struct.pack(">II", width, height)
        + b"\x08\x06\x00\x00\x00"
        + b"\x1f\x15\xc4\x89"
    )


JPG_TILE = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00"
WEBP_TILE = b"RIFF\x24\x00\x00\x00WEBPVP8 \x18\x00\x00\x00"
PBF_TILE = gzip.compress(b"\x1a\x0b\x0a\x05water\x28\x80\x20")


def make_mbtiles(
    path: Path,
    tiles: dict[tuple[int, int, int], bytes] | None = None,
    metadata: list[tuple[str, str | None]] | None = None,
    relations: tuple[str, ...] = ("tiles", "metadata"),
) -> Path:
    connection = sqlite3.connect(path)

    with connection:
        if "tiles" in relations:
            connection.execute(
                "CREATE TABLE tiles (zoom_level integer, tile_column integer, tile_row integer, tile_data blob)"
            )
            connection.execute(
                "CREATE UNIQUE INDEX tile_index ON tiles (zoom_level, tile_column, tile_row)"
            )
            connection.executemany(
                "INSERT INTO tiles VALUES (?, ?, ?, ?)",
                [(z, x, y, data) for (z, x, y), data in (tiles or {}).items()],
            )

        if "metadata" in relations:
            connection.execute("CREATE TABLE metadata (name text, value text)")
            connection.executemany(
                "INSERT INTO metadata VALUES (?, ?)", metadata or []
            )

    connection.close()

    return path


def pyramid(tile: bytes, minzoom: int, maxzoom: int) -> dict[tuple[int, int, int], bytes]:
    """
    One tile per zoom level, with bytes that differ per coordinate.
    """
    return {(z, z, z + 1): tile + bytes([z]) for z in range(minzoom, maxzoom + 1)}


@pytest.fixture
def png_path(tmp_path: Path) -> Path:
    return make_mbtiles(
        tmp_path / "raster.mbtiles",
        tiles=pyramid(png_tile(512), 3, 12),
        metadata=[
            ("name", "Raster"),
            ("format", "png"),
            ("bounds", "-180.0,-85,180,85"),
            ("center", "0, 0, 3"),
            ("description", ""),
        ],
    )


@pytest.fixture
def pbf_path(tmp_path: Path) -> Path:
    return make_mbtiles(
        tmp_path / "vector.mbtiles",
        tiles={(0, 0, 0): PBF_TILE, (1, 0, 1): PBF_TILE},
        metadata=[
            ("name", "Vector"),
            ("minzoom", "0"),
            ("maxzoom", "14"),
            ("json", '{"vector_layers": [{"id": "water"}]}'),
        ],
    )
