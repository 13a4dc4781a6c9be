# ==================================================
# vector_library/sharding.py
# ==================================================
import hashlib
import re

from .const import HASH_NAME, MAX_SHARD_BITS

_SINGLE_CAP = re.compile(r"[A-Z0-9]")


def normalize_word(raw: str, keep_single_caps: bool = True) -> str:
    """Canonical lookup key for a corpus token.

    Surrounding whitespace is dropped and the token is lowercased, except that a
    lone ``A``-``Z`` / ``0``-``9`` character is kept verbatim when
    ``keep_single_caps`` is set (so "A" and "a" stay distinct entries).
    Libraries built with ``keep_single_caps=False`` always lowercase.
    """
    word = raw.strip()
    if keep_single_caps and _SINGLE_CAP.fullmatch(word):
        return word
    return word.lower()


def bucket_of(word: str, shard_bits: int) -> int:
    """Leading ``shard_bits`` bits of sha256(word) as an unsigned int."""
    if not 1 <= shard_bits <= MAX_SHARD_BITS:
        raise ValueError(f"shard_bits must be in [1, {MAX_SHARD_BITS}], got {shard_bits}")
    digest = hashlib.new(HASH_NAME, word.encode("utf-8")).digest()
    n_bytes = (shard_bits + 7) // 8
    prefix = int.from_bytes(digest[:n_bytes], "big")
    return prefix >> (n_bytes * 8 - shard_bits)
