"""Exceptions raised by hike_map."""

from __future__ import annotations


class HikeMapError(Exception):
    """Base class for all hike_map errors."""


class RetrievalError(HikeMapError):
    """The feed could not be fetched (network error or non-200 status)."""


class SourceFormatError(HikeMapError):
    """The feed bytes are not a readable document for the selected source."""


class EmptyInputError(HikeMapError):
    """No waypoints left to process. Not a crash: there is simply nothing to write."""


class DegenerateBoundsError(HikeMapError, ValueError):
    """Bounds were requested for zero coordinates (a caller bug)."""


class PersistenceError(HikeMapError):
    """Writing an output file failed."""
