"""
Normalization of the schema-less ``metadata`` relation into a typed document.
"""

import json
from typing import Any, Callable, Iterable

import structlog

from ..exceptions import MetadataParseError

INTEGER_KEYS = ("minzoom", "maxzoom")
FLOAT_LIST_KEYS = ("bounds", "center")
JSON_KEY = "json"


def parse_floats(value: str) -> list[float]:
    """
    Convert a comma-delimited string into a list of floats, in order.

    >>> parse_floats("-1.0, 2.5,3")
    [-1.0, 2.5, 3.0]

    Any component that is not a number fails the whole string with a
    ``ValueError``.
    """
    try:
        return [float(component.strip()) for component in value.split(",")]
    except ValueError as e:
        raise ValueError(f"could not parse {value!r} to floats: {e}") from e


def parse_json(value: str) -> dict[str, Any]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise MetadataParseError(f"unable to parse JSON metadata item: {e}") from e

    if not isinstance(parsed, dict):
        raise MetadataParseError(
            f"JSON metadata item must be an object, not {type(parsed).__name__}"
        )

    return parsed


def normalize_metadata(
    rows: Iterable[tuple[str, Any]],
    zoom_range: Callable[[], tuple[int | None, int | None]],
) -> dict[str, Any]:
    """
    Build the metadata document from ``(name, value)`` rows.

    Parameters
    ----------
    rows : Iterable[tuple[str, Any]]
        Rows of the metadata relation, in storage order. Rows with an empty
        value are skipped.
    zoom_range : Callable
        Returns the lowest and highest zoom level among the stored tiles. Only
        called when ``minzoom`` and ``maxzoom`` are not both present, in which
        case both are overwritten with what it returns.

    Returns
    -------
    dict[str, Any]
        ``minzoom``/``maxzoom`` as integers, ``bounds``/``center`` as lists of
        floats, the members of a ``json`` row merged in at the top level, and
        everything else as a string.
    """
    log = structlog.get_logger()
    metadata: dict[str, Any] = {}

    for name, value in rows:
        if value is None or value == "":
            continue

        if name in INTEGER_KEYS:
            try:
                metadata[name] = int(value)
            except ValueError as e:
                raise MetadataParseError(
                    f"cannot read metadata item {name}: {e}"
                ) from e
        elif name in FLOAT_LIST_KEYS:
            try:
                metadata[name] = parse_floats(str(value))
            except ValueError as e:
                raise MetadataParseError(
                    f"cannot read metadata item {name}: {e}"
                ) from e
        elif name == JSON_KEY:
            metadata.update(parse_json(value))
        else:
            metadata[name] = value

    # Both are overwritten even if one of them was given.
    if not ("minzoom" in metadata and "maxzoom" in metadata):
        minzoom, maxzoom = zoom_range()
        metadata["minzoom"] = minzoom or 0
        metadata["maxzoom"] = maxzoom or 0
        log.debug("metadata.zoom_inferred", minzoom=minzoom, maxzoom=maxzoom)
    elif (
        isinstance(metadata["minzoom"], int)
        and isinstance(metadata["maxzoom"], int)
        and metadata["minzoom"] > metadata["maxzoom"]
    ):
        raise MetadataParseError(
            f"minzoom ({metadata['minzoom']}) is greater than maxzoom ({metadata['maxzoom']})"
        )

    return metadata
