from .core import normalize_metadata, parse_floats

__all__ = ("normalize_metadata", "parse_floats")
