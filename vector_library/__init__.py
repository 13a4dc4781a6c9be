from .build import build, publish
from .builder import ShardBuilder
from .errors import (BuildSettingsError, CorpusHeaderError, CorruptShardError, LibraryFormatError,
                     MalformedLineError, VectorLibraryError)
from .frames import Entry
from .info import LibraryInfo
from .quantize import dequantize, quantize
from .sharding import bucket_of, normalize_word
from .store import VectorLibrary, find_entry, lookup

__all__ = [
    "build", "publish", "lookup", "find_entry",
    "ShardBuilder", "VectorLibrary", "LibraryInfo", "Entry",
    "normalize_word", "bucket_of", "quantize", "dequantize",
    "VectorLibraryError", "BuildSettingsError", "CorpusHeaderError", "MalformedLineError",
    "CorruptShardError", "LibraryFormatError",
]
