"""Exception types shared across folio."""

from __future__ import annotations


class FolioError(Exception):
    """Base class for folio errors."""


class PersistenceError(FolioError):
    """Raised when plans or settings could not be written to storage.

    The in-memory state that triggered the write is kept; only the save failed.
    """
