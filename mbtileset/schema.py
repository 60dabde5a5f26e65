"""
Check that a database carries the relations of a tileset.
"""

from sqlalchemy import text

from .exceptions import SchemaError
from .pool import Cancellation, SessionPool

REQUIRED_RELATIONS = ("tiles", "metadata")

REQUIRED_RELATIONS_QUERY = text(
    "SELECT name FROM sqlite_master WHERE name IN (:tiles, :metadata)"
).bindparams(tiles="tiles", metadata="metadata")


def validate_required_tables(pool: SessionPool, cancel: Cancellation | None = None):
    """
    Raise ``SchemaError`` unless both ``tiles`` and ``metadata`` exist, as
    tables or views. Columns are not inspected.
    """
    found = {name for (name,) in pool.query(REQUIRED_RELATIONS_QUERY, cancel=cancel)}

    if len(found) < len(REQUIRED_RELATIONS):
        missing = [x for x in REQUIRED_RELATIONS if x not in found]
        raise SchemaError(
            f"missing one or more required tables: {', '.join(missing)}"
        )
