# ==================================================
# vector_library/store.py
# ==================================================
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import numpy as np

from .const import FORMAT_VERSION, HASH_NAME, INFO_FILE, RESOLUTION_BITS, SHARD_SUFFIX
from .errors import LibraryFormatError
from .frames import Entry, iter_entries
from .info import LibraryInfo
from .sharding import bucket_of, normalize_word

logger = logging.getLogger(__name__)


def shard_path(root: str | os.PathLike, bucket: int) -> Path:
    return Path(root) / f"{bucket}{SHARD_SUFFIX}"


def find_entry(data_root: str | os.PathLike, word: str, shard_bits: int,
               resolution_bits: int = RESOLUTION_BITS,
               vector_size: int | None = None,
               keep_single_caps: bool = True) -> Optional[Entry]:
    """Scan the shard ``word`` hashes to and return its entry, or None.

    A bucket that never received a word has no file; that is a miss, not an
    error. Damaged shards raise CorruptShardError.
    """
    key = normalize_word(word, keep_single_caps)
    path = shard_path(data_root, bucket_of(key, shard_bits))
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        return None
    with f:
        for entry in iter_entries(f, resolution_bits, vector_size):
            if entry.word == key:
                return entry
    return None


class VectorLibrary:
    """Read-only view over a built library directory."""
    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self.info = LibraryInfo.read(self.path / INFO_FILE)
        if self.info.format_version != FORMAT_VERSION:
            raise LibraryFormatError(
                f"unsupported library version {self.info.format_version} "
                f"(expected {FORMAT_VERSION})")
        if self.info.hash_name != HASH_NAME:
            raise LibraryFormatError(f"unsupported bucket hash {self.info.hash_name!r}")
        logger.debug(f"opened {self.path}: {self.info.entry_count} entries, "
                     f"shard_bits={self.info.shard_bits}")

    # ------------------------------------------------------------------
    def normalize(self, word: str) -> str:
        return normalize_word(word, self.info.keep_single_caps)

    def bucket_of(self, word: str) -> int:
        return bucket_of(self.normalize(word), self.info.shard_bits)

    # ------------------------------------------------------------------
    def get(self, word: str) -> Optional[Entry]:
        return find_entry(self.path, word, self.info.shard_bits,
                          resolution_bits=self.info.resolution_bits,
                          vector_size=self.info.vector_size,
                          keep_single_caps=self.info.keep_single_caps)

    def vector(self, word: str) -> Optional[np.ndarray]:
        entry = self.get(word)
        if entry is None:
            return None
        return entry.vector(self.info.resolution_bits)

    def __contains__(self, word: str) -> bool:
        return self.get(word) is not None

    def __len__(self) -> int:
        return self.info.entry_count


def lookup(output_dir: str | os.PathLike, word: str) -> Optional[np.ndarray]:
    """Reconstructed vector for ``word`` in the library at ``output_dir``."""
    return VectorLibrary(output_dir).vector(word)
