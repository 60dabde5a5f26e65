"""
Errors raised while opening and reading tilesets.

Errors from the SQLite engine itself (``sqlalchemy.exc.DBAPIError`` and
``sqlite3.Error``) are not wrapped and propagate as they are.
"""


class MBTilesError(Exception):
    pass


class PathError(MBTilesError):
    """The tileset path is missing or cannot be used."""

    pass


class IncompleteTilesetError(PathError):
    """A ``-journal`` file sits next to the tileset; it is still being written."""

    pass


class SchemaError(MBTilesError):
    pass


class FormatError(MBTilesError):
    pass


class TileFormatError(FormatError):
    """The tile bytes do not start with any known signature."""

    pass


class TileSizeError(FormatError):
    """A fixed image header is truncated, corrupt, or not square."""

    pass


class CapabilityError(MBTilesError):
    """The engine session does not offer the backup primitive. Not retryable."""

    pass


class MetadataParseError(MBTilesError):
    pass


class ClosedHandleError(MBTilesError):
    pass


class CancelledError(MBTilesError):
    pass
