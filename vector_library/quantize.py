# ==================================================
# vector_library/quantize.py
# ==================================================
"""
Per-vector max-abs quantization.

Each component is divided by the vector's largest magnitude, shifted from
[-1, 1] into [0, 2**bits - 1] and rounded half-up. Codes are stored one byte
each at 8 bits, otherwise packed MSB-first into a big-endian bit string.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from .const import MAX_RESOLUTION, RESOLUTION_BITS


def _levels(bits: int) -> int:
    if not 1 <= bits <= MAX_RESOLUTION:
        raise ValueError(f"bits must be in [1, {MAX_RESOLUTION}], got {bits}")
    return (1 << bits) - 1


def _code_dtype(bits: int):
    return np.uint8 if bits <= 8 else np.uint16


def quantize(vector: Sequence[float] | np.ndarray,
             bits: int = RESOLUTION_BITS) -> tuple[np.float32, np.ndarray]:
    """Return ``(scale, codes)`` for ``vector``.

    An all-zero vector has scale 0 and every code at the midpoint.
    """
    levels = _levels(bits)
    v = np.asarray(vector, dtype=np.float64)
    if v.ndim != 1:
        raise ValueError(f"expected a 1-d vector, got shape {v.shape}")
    if not np.all(np.isfinite(v)):
        raise ValueError("vector contains NaN or infinite components")

    scale = float(np.max(np.abs(v))) if v.size else 0.0
    if scale > np.finfo(np.float32).max:
        raise ValueError(f"scale {scale:g} does not fit in a float32")
    if scale == 0.0:
        mid = np.floor(levels / 2 + 0.5)
        return np.float32(0.0), np.full(v.shape, mid, dtype=_code_dtype(bits))

    raw = np.floor((v / scale + 1.0) / 2.0 * levels + 0.5)
    codes = np.clip(raw, 0, levels).astype(_code_dtype(bits))
    return np.float32(scale), codes


def dequantize(codes, scale: float, bits: int = RESOLUTION_BITS) -> np.ndarray:
    levels = _levels(bits)
    c = np.asarray(codes, dtype=np.float64)
    return ((c / levels) * 2.0 - 1.0) * float(scale)


# -------- bit packing -------------------------------------------------------

def packed_size(count: int, bits: int = RESOLUTION_BITS) -> int:
    _levels(bits)
    return (count * bits + 7) // 8


def pack_codes(codes, bits: int = RESOLUTION_BITS) -> bytes:
    levels = _levels(bits)
    c = np.asarray(codes)
    if c.size and (c.min() < 0 or c.max() > levels):
        raise ValueError(f"codes out of range for {bits}-bit resolution")
    if bits == 8:
        return c.astype(np.uint8).tobytes()
    shifts = np.arange(bits - 1, -1, -1, dtype=np.uint32)
    bit_matrix = (c.astype(np.uint32)[:, None] >> shifts) & 1
    return np.packbits(bit_matrix.astype(np.uint8).ravel()).tobytes()


def unpack_codes(data: bytes, count: int, bits: int = RESOLUTION_BITS) -> np.ndarray:
    _levels(bits)
    if len(data) != packed_size(count, bits):
        raise ValueError(f"expected {packed_size(count, bits)} bytes for {count} codes, "
                         f"got {len(data)}")
    buf = np.frombuffer(data, dtype=np.uint8)
    if bits == 8:
        return buf.copy()
    bit_matrix = np.unpackbits(buf)[:count * bits].reshape(count, bits)
    weights = (1 << np.arange(bits - 1, -1, -1)).astype(np.uint32)
    return (bit_matrix.astype(np.uint32) @ weights).astype(_code_dtype(bits))
