"""
Tests for max-abs quantization and bit packing.

Core claims:
- Reconstruction error per component is at most scale / (2**bits - 1)
- Codes always lie in [0, 2**bits - 1]
- An all-zero vector does not divide by zero and yields midpoint codes
"""

import numpy as np
import pytest

from vector_library.quantize import (
    dequantize,
    pack_codes,
    packed_size,
    quantize,
    unpack_codes,
)


class TestQuantize:
    def test_worked_example(self):
        """[0.1, -0.2, 0.05] -> scale 0.2, codes [191, 0, 159]."""
        scale, codes = quantize([0.1, -0.2, 0.05])
        assert scale == np.float32(0.2)
        assert codes.dtype == np.uint8
        assert codes.tolist() == [191, 0, 159]
        assert dequantize([191], scale)[0] == pytest.approx(0.0996, abs=1e-4)

    def test_extremes_map_to_ends(self):
        scale, codes = quantize([-3.0, 3.0, 0.0])
        assert scale == np.float32(3.0)
        assert codes.tolist() == [0, 255, 128]

    def test_all_zero_vector(self):
        scale, codes = quantize([0.0, 0.0, 0.0])
        assert scale == 0.0
        assert codes.tolist() == [128, 128, 128]
        assert dequantize(codes, scale).tolist() == [0.0, 0.0, 0.0]

    def test_all_zero_vector_other_resolution(self):
        _, codes = quantize([0.0, 0.0], bits=4)
        assert codes.tolist() == [8, 8]

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError):
            quantize([0.1, float("nan")])
        with pytest.raises(ValueError):
            quantize([float("inf"), 1.0])

    def test_rejects_scale_beyond_float32(self):
        with pytest.raises(ValueError, match="float32"):
            quantize([1e39, 1.0])

    @pytest.mark.parametrize("bits", [0, 17])
    def test_rejects_bad_resolution(self, bits):
        with pytest.raises(ValueError):
            quantize([1.0], bits=bits)

    @pytest.mark.parametrize("bits", [1, 4, 8, 12, 16])
    def test_error_bound(self, bits):
        """Property: |dequantize(quantize(v)) - v| <= scale / levels."""
        rng = np.random.default_rng(42)
        levels = 2 ** bits - 1
        for _ in range(50):
            v = rng.normal(0, rng.uniform(0.01, 10), size=32)
            scale, codes = quantize(v, bits)
            assert codes.min() >= 0 and codes.max() <= levels
            err = np.abs(dequantize(codes, scale, bits) - v)
            # the scale itself is stored as float32
            assert np.all(err <= float(scale) / levels * (1 + 1e-6) + 1e-12)


class TestPacking:
    def test_eight_bit_is_one_byte_per_code(self):
        assert pack_codes([1, 2, 255]) == bytes([1, 2, 255])
        assert packed_size(300) == 300

    def test_four_bit_msb_first(self):
        assert pack_codes([0xA, 0xB, 0xC], bits=4) == bytes([0xAB, 0xC0])
        assert packed_size(3, 4) == 2

    def test_twelve_bit(self):
        assert pack_codes([0xABC, 0x123], bits=12) == bytes([0xAB, 0xC1, 0x23])

    @pytest.mark.parametrize("bits", [1, 3, 5, 8, 10, 16])
    def test_unpack_restores_codes(self, bits):
        rng = np.random.default_rng(bits)
        codes = rng.integers(0, 2 ** bits, size=37)
        data = pack_codes(codes, bits)
        assert len(data) == packed_size(37, bits)
        assert unpack_codes(data, 37, bits).tolist() == codes.tolist()

    def test_pack_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            pack_codes([16], bits=4)

    def test_unpack_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            unpack_codes(b"\x00\x00", 3, bits=8)
