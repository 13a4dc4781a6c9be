# ==================================================
# vector_library/builder.py
# ==================================================
from __future__ import annotations

import logging
from typing import Sequence

from .const import MAX_ENTRIES, MAX_RESOLUTION, MAX_SHARD_BITS, RESOLUTION_BITS, SHARD_BITS
from .errors import BuildSettingsError, MalformedLineError
from .frames import encode_entry
from .info import LibraryInfo
from .quantize import quantize
from .sharding import bucket_of, normalize_word

logger = logging.getLogger(__name__)


def check_settings(shard_bits: int, max_entries: int, resolution_bits: int, workers: int = 1):
    if not 1 <= shard_bits <= MAX_SHARD_BITS:
        raise BuildSettingsError(f"shard_bits must be in [1, {MAX_SHARD_BITS}], got {shard_bits}")
    if max_entries < 0:
        raise BuildSettingsError(f"max_entries must be non-negative, got {max_entries}")
    if not 1 <= resolution_bits <= MAX_RESOLUTION:
        raise BuildSettingsError(
            f"resolution_bits must be in [1, {MAX_RESOLUTION}], got {resolution_bits}")
    if workers < 1:
        raise BuildSettingsError(f"workers must be at least 1, got {workers}")


class ShardBuilder:
    """In-memory shard buffers for a single build pass.

    Lifecycle is ``ShardBuilder(...)`` -> ``ingest()`` per corpus record ->
    ``finish()`` once. Every accepted word is encoded straight into its bucket's
    buffer, so memory grows with ``max_entries`` times the entry size.
    """

    def __init__(self, vector_size: int,
                 shard_bits: int = SHARD_BITS,
                 max_entries: int = MAX_ENTRIES,
                 resolution_bits: int = RESOLUTION_BITS,
                 keep_single_caps: bool = True,
                 info: LibraryInfo | None = None):
        if vector_size <= 0:
            raise BuildSettingsError("vector_size must be positive")
        check_settings(shard_bits, max_entries, resolution_bits)
        self.vector_size      = vector_size
        self.shard_bits       = shard_bits
        self.max_entries      = max_entries
        self.resolution_bits  = resolution_bits
        self.keep_single_caps = keep_single_caps
        self.info = info or LibraryInfo(
            vector_size=vector_size, shard_bits=shard_bits,
            resolution_bits=resolution_bits, keep_single_caps=keep_single_caps)

        self.seen: set[str] = set()
        self._buffers: dict[int, bytearray] = {}
        self._finished = False

    # ------------------------------------------------------------------
    @property
    def count(self) -> int:
        return len(self.seen)

    @property
    def full(self) -> bool:
        return self.count >= self.max_entries

    # ------------------------------------------------------------------
    def ingest(self, word: str, components: Sequence[float]) -> bool:
        """
        Add one corpus record.
        • returns False when the word was already seen or the cap is reached
        • raises MalformedLineError when the component count is wrong
        """
        if self._finished:
            raise RuntimeError("builder already finished")
        if self.full:
            return False
        if len(components) != self.vector_size:
            raise MalformedLineError(
                f"expected {self.vector_size} components, got {len(components)}")

        key = normalize_word(word, self.keep_single_caps)
        if key in self.seen:
            return False

        scale, codes = quantize(components, self.resolution_bits)
        data = encode_entry(key, scale, codes, self.resolution_bits)
        bucket = bucket_of(key, self.shard_bits)
        self._buffers.setdefault(bucket, bytearray()).extend(data)
        self.seen.add(key)
        return True

    # ------------------------------------------------------------------
    def finish(self) -> dict[int, bytes]:
        """Hand over every non-empty bucket buffer; can only be called once."""
        if self._finished:
            raise RuntimeError("builder already finished")
        self._finished = True
        shards = {bucket: bytes(buf) for bucket, buf in self._buffers.items() if buf}
        self._buffers.clear()
        self.info.entry_count = self.count
        logger.debug(f"builder finished: {self.count} entries in {len(shards)} shards")
        return shards
