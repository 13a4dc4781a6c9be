# ==================================================
# vector_library/frames.py
# ==================================================
"""
Length-prefixed frames: ``[unsigned LEB128 length][payload]``.

One entry is three consecutive frames: the UTF-8 word, the big-endian float32
scale and the packed quantized codes. Shard files are plain concatenations of
entries, so they can be decoded from the start without any index.
"""
from __future__ import annotations

import io
import struct
from dataclasses import dataclass
from typing import BinaryIO, Iterator

import numpy as np

from .const import FRAMES_PER_ENTRY, MAX_VARINT_LEN, RESOLUTION_BITS, SCALE_FMT, SCALE_SIZE
from .errors import CorruptShardError
from .quantize import dequantize, pack_codes, packed_size, unpack_codes

_SCALE = struct.Struct(SCALE_FMT)


# -------- varint helpers ----------------------------------------------------

def encode_varint(n: int) -> bytes:
    if n < 0:
        raise ValueError("varint must be non-negative")
    out = bytearray()
    while True:
        byte = n & 0x7F
        n >>= 7
        if n:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            break
    return bytes(out)


def decode_varint(stream: BinaryIO) -> int | None:
    """Read one varint; None on a clean EOF before its first byte."""
    result = shift = 0
    for i in range(MAX_VARINT_LEN):
        b = stream.read(1)
        if not b:
            if i == 0:
                return None
            raise CorruptShardError("truncated length prefix")
        result |= (b[0] & 0x7F) << shift
        if not b[0] & 0x80:
            return result
        shift += 7
    raise CorruptShardError(f"length prefix longer than {MAX_VARINT_LEN} bytes")


# -------- frames ------------------------------------------------------------

def encode_frame(payload: bytes) -> bytes:
    return encode_varint(len(payload)) + bytes(payload)


def _as_stream(source) -> BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(source)
    return source


def iter_frames(source) -> Iterator[bytes]:
    """Yield payloads from ``source`` until it is exhausted.

    ``source`` is a bytes-like object or a binary file; reading starts at the
    file's current position.
    """
    stream = _as_stream(source)
    while True:
        length = decode_varint(stream)
        if length is None:
            return
        payload = stream.read(length)
        if len(payload) != length:
            raise CorruptShardError(
                f"truncated frame: expected {length} bytes, got {len(payload)}")
        yield payload


# -------- entries -----------------------------------------------------------

@dataclass(frozen=True)
class Entry:
    word: str
    scale: float
    codes: np.ndarray

    def vector(self, bits: int = RESOLUTION_BITS) -> np.ndarray:
        return dequantize(self.codes, self.scale, bits)


def encode_entry(word: str, scale: float, codes, bits: int = RESOLUTION_BITS) -> bytes:
    return (encode_frame(word.encode("utf-8"))
            + encode_frame(_SCALE.pack(scale))
            + encode_frame(pack_codes(codes, bits)))


def decode_entry(word_raw: bytes, scale_raw: bytes, codes_raw: bytes,
                 bits: int = RESOLUTION_BITS, vector_size: int | None = None) -> Entry:
    if len(scale_raw) != SCALE_SIZE:
        raise CorruptShardError(f"scale frame is {len(scale_raw)} bytes, expected {SCALE_SIZE}")
    try:
        word = word_raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CorruptShardError(f"word frame is not valid UTF-8: {exc}") from exc

    if vector_size is None:
        # exact at 8 bits; at other widths the padding bits may decode as extra codes
        vector_size = len(codes_raw) * 8 // bits
    if len(codes_raw) != packed_size(vector_size, bits):
        raise CorruptShardError(
            f"vector frame for {word!r} is {len(codes_raw)} bytes, "
            f"expected {packed_size(vector_size, bits)}")
    codes = unpack_codes(codes_raw, vector_size, bits)
    return Entry(word, _SCALE.unpack(scale_raw)[0], codes)


def iter_entries(source, bits: int = RESOLUTION_BITS,
                 vector_size: int | None = None) -> Iterator[Entry]:
    """Decode frames three at a time; a partial trailing group is corruption."""
    frames = iter_frames(source)
    for word_raw in frames:
        group = [word_raw]
        for frame in frames:
            group.append(frame)
            if len(group) == FRAMES_PER_ENTRY:
                break
        if len(group) != FRAMES_PER_ENTRY:
            raise CorruptShardError(
                f"shard ends mid-entry after {len(group)} of {FRAMES_PER_ENTRY} frames")
        yield decode_entry(*group, bits=bits, vector_size=vector_size)
