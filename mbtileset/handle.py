"""
The handle through which an open tileset is read.
"""

from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict
from sqlmodel import func, select
from structlog.types import FilteringBoundLogger

from .database import SQLiteEngine
from .exceptions import ClosedHandleError
from .formats import TileFormat, detect_tile_format, detect_tile_size, fold_compressed
from .files import get_mod_time
from .metadata import normalize_metadata
from .orm import MetadataRow, TileRow
from .pool import Cancellation, SessionPool
from .schema import validate_required_tables
from .settings import Settings
from .settings import settings as default_settings
from .snapshot import clone_to_memory


class TileCoordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    zoom: int
    column: int
    row: int

    @property
    def hash(self) -> str:
        return f"{self.zoom}-{self.column}-{self.row}"


def sample_tile_format(
    pool: SessionPool, cancel: Cancellation | None = None
) -> tuple[TileFormat, int]:
    """
    Detect the format of the tileset, and its tile size if the format carries
    one, from whichever tile the database returns first.
    """
    rows = pool.query(select(TileRow.tile_data).limit(1), cancel=cancel)
    data = (rows[0][0] if rows else None) or b""

    tile_format = fold_compressed(detect_tile_format(data))
    tile_size = detect_tile_size(tile_format, data)

    return tile_format, tile_size


class MBtiles:
    """
    A read-only handle on a tileset. Build one with ``MBtiles.open`` or
    ``MBtiles.open_in_memory``; reads are safe from many threads at once.
    """

    logger: FilteringBoundLogger

    def __init__(
        self,
        filename: str,
        pool: SessionPool | None,
        tile_format: TileFormat = TileFormat.UNKNOWN,
        tile_size: int = 0,
        timestamp: datetime | None = None,
        in_memory: bool = False,
    ):
        self._filename = filename
        self._tile_format = tile_format
        self._tile_size = tile_size
        self._timestamp = timestamp
        self._in_memory = in_memory
        self.logger = structlog.get_logger().bind(filename=filename)

        self._pool = pool

    @classmethod
    def open(
        cls,
        path: str | Path,
        engine: SQLiteEngine | None = None,
        settings: Settings | None = None,
        cancel: Cancellation | None = None,
    ) -> "MBtiles":
        """
        Open the tileset at ``path`` for reading and validate its structure.
        """
        settings = settings or default_settings
        engine = engine or settings.create_engine()

        timestamp = get_mod_time(path)
        pool = engine.create_pool(engine.file_uri(path), capacity=settings.pool_size)

        return cls._from_pool(
            str(path), pool, timestamp, in_memory=False, cancel=cancel
        )

    @classmethod
    def open_in_memory(
        cls,
        path: str | Path,
        engine: SQLiteEngine | None = None,
        settings: Settings | None = None,
        cancel: Cancellation | None = None,
    ) -> "MBtiles":
        """
        Copy the tileset at ``path`` into memory and open the copy. The
        returned handle does not touch the file again, so the whole tileset
        must fit in memory.
        """
        settings = settings or default_settings
        engine = engine or settings.create_engine()

        timestamp = get_mod_time(path)
        uri, anchor = clone_to_memory(
            engine, path, pages=settings.backup_pages, cancel=cancel
        )

        try:
            pool = engine.create_pool(
                uri, capacity=settings.pool_size, anchor=anchor, query_only=True
            )
        except Exception:
            anchor.close()
            raise

        return cls._from_pool(
            str(path), pool, timestamp, in_memory=True, cancel=cancel
        )

    @classmethod
    def _from_pool(
        cls,
        filename: str,
        pool: SessionPool,
        timestamp: datetime,
        in_memory: bool,
        cancel: Cancellation | None = None,
    ) -> "MBtiles":
        log = structlog.get_logger()
        log = log.bind(filename=filename, in_memory=in_memory)

        try:
            validate_required_tables(pool, cancel=cancel)
            tile_format, tile_size = sample_tile_format(pool, cancel=cancel)
        except Exception:
            pool.close()
            log.warning("mbtiles.open_failed")
            raise

        log = log.bind(tile_format=str(tile_format), tile_size=tile_size)
        log.info("mbtiles.opened")

        return cls(
            filename=filename,
            pool=pool,
            tile_format=tile_format,
            tile_size=tile_size,
            timestamp=timestamp,
            in_memory=in_memory,
        )

    @property
    def filename(self) -> str:
        """The path the tileset was opened from, also for in-memory copies."""
        return self._filename

    @property
    def tile_format(self) -> TileFormat:
        return self._tile_format

    @property
    def tile_size(self) -> int:
        """Edge length of the tiles in pixels; 0 when it could not be detected."""
        return self._tile_size

    @property
    def timestamp(self) -> datetime | None:
        return self._timestamp

    @property
    def in_memory(self) -> bool:
        return self._in_memory

    @property
    def closed(self) -> bool:
        return self._pool is None or self._pool.closed

    def _checked_pool(self, operation: str) -> SessionPool:
        if self.closed:
            raise ClosedHandleError(f"cannot {operation} from closed mbtiles database")

        return self._pool

    def read_tile(
        self, zoom: int, column: int, row: int, cancel: Cancellation | None = None
    ) -> bytes | None:
        """
        Read the tile at the given coordinate. Returns ``None`` if the tileset
        has no tile there.
        """
        pool = self._checked_pool("read tile")
        coordinate = TileCoordinate(zoom=zoom, column=column, row=row)

        statement = select(TileRow.tile_data).where(
            TileRow.zoom_level == coordinate.zoom,
            TileRow.tile_column == coordinate.column,
            TileRow.tile_row == coordinate.row,
        )
        rows = pool.query(statement, cancel=cancel)

        if not rows:
            self.logger.debug("mbtiles.tile_missing", tile=coordinate.hash)
            return None

        return rows[0][0]

    def read_metadata(self, cancel: Cancellation | None = None) -> dict[str, Any]:
        """
        Read the metadata relation into a typed document. See
        ``normalize_metadata`` for how values are converted.
        """
        pool = self._checked_pool("read metadata")

        rows = pool.query(select(MetadataRow.name, MetadataRow.value), cancel=cancel)

        def zoom_range() -> tuple[int | None, int | None]:
            (result,) = pool.query(
                select(func.min(TileRow.zoom_level), func.max(TileRow.zoom_level)),
                cancel=cancel,
            )
            return result[0], result[1]

        return normalize_metadata(rows, zoom_range=zoom_range)

    def close(self):
        """
        Close the tileset and release its sessions. Reads must not be in
        flight while closing.
        """
        if self._pool is not None and not self._pool.closed:
            self._pool.close()
            self.logger.info("mbtiles.closed")

    def __enter__(self) -> "MBtiles":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self) -> str:
        return (
            f"MBtiles(filename={self.filename!r}, tile_format={self.tile_format}, "
            f"tile_size={self.tile_size}, in_memory={self.in_memory})"
        )
