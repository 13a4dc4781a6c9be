# ==================================================
# vector_library/errors.py
# ==================================================
from __future__ import annotations


class VectorLibraryError(ValueError):
    """Base class for everything this package raises on bad data."""


class CorpusHeaderError(VectorLibraryError):
    """First line of the corpus is not ``totalWords vectorSize``."""


class MalformedLineError(VectorLibraryError):
    """A corpus record has the wrong field count or a non-numeric component."""

    def __init__(self, message: str, line_no: int | None = None):
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no


class CorruptShardError(VectorLibraryError):
    """A shard file does not decode into whole word/scale/vector frame groups."""


class LibraryFormatError(VectorLibraryError):
    """info.json is missing, unreadable, or from an unsupported format version."""


class BuildSettingsError(VectorLibraryError):
    """shard_bits, resolution_bits, max_entries or workers out of range."""
