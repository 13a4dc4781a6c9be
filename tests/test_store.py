"""
Tests for the read side: find_entry() and VectorLibrary.

Core claims:
- A word whose bucket has no file is a miss, not an error
- A damaged shard raises CorruptShardError instead of reporting a miss
- Metadata from an unknown format version is refused
"""

import json

import numpy as np
import pytest

from vector_library import build
from vector_library.const import INFO_FILE
from vector_library.errors import CorruptShardError, LibraryFormatError
from vector_library.frames import encode_entry, encode_frame
from vector_library.info import LibraryInfo
from vector_library.sharding import bucket_of
from vector_library.store import VectorLibrary, find_entry, lookup, shard_path


@pytest.fixture
def library(small_corpus, tmp_path):
    out = tmp_path / "lib"
    build(small_corpus, out, shard_bits=4)
    return out


class TestFindEntry:
    def test_hit(self, library):
        entry = find_entry(library, "cat", shard_bits=4, vector_size=3)
        assert entry.word == "cat"
        assert entry.scale == pytest.approx(0.2)
        assert entry.codes.tolist() == [191, 255, 64]

    def test_missing_shard_file(self, tmp_path):
        assert find_entry(tmp_path, "cat", shard_bits=4) is None

    def test_stops_at_first_match(self, tmp_path):
        """Bytes after the matching entry are never read."""
        bucket = bucket_of("cat", 4)
        shard_path(tmp_path, bucket).write_bytes(
            encode_entry("cat", 1.0, [255]) + b"\x7f garbage")
        assert find_entry(tmp_path, "cat", shard_bits=4).word == "cat"

    def test_corrupt_shard_is_not_a_miss(self, tmp_path):
        bucket = bucket_of("dog", 4)
        shard_path(tmp_path, bucket).write_bytes(
            encode_entry("other", 1.0, [255]) + encode_frame(b"dangling"))
        with pytest.raises(CorruptShardError):
            find_entry(tmp_path, "dog", shard_bits=4)

    def test_truncated_shard(self, library):
        path = shard_path(library, bucket_of("cat", 4))
        data = path.read_bytes()
        path.write_bytes(data[:-1])
        with pytest.raises(CorruptShardError):
            find_entry(library, "cat", shard_bits=4, vector_size=3)


class TestVectorLibrary:
    def test_get_and_vector(self, library):
        lib = VectorLibrary(library)
        assert len(lib) == 2
        assert "cat" in lib and "CAT" in lib
        assert "emu" not in lib
        assert lib.get("emu") is None
        assert lib.vector("emu") is None
        np.testing.assert_allclose(lib.vector("dog"), [-0.2, 0.3, 0.1], atol=0.3 / 255 + 1e-6)

    def test_bucket_of_uses_library_settings(self, library):
        lib = VectorLibrary(library)
        assert lib.bucket_of(" Cat ") == bucket_of("cat", 4)

    def test_missing_info(self, tmp_path):
        with pytest.raises(LibraryFormatError):
            VectorLibrary(tmp_path)

    def test_unknown_version(self, library):
        meta = json.loads((library / INFO_FILE).read_text())
        meta["version"] = 99
        (library / INFO_FILE).write_text(json.dumps(meta))
        with pytest.raises(LibraryFormatError):
            VectorLibrary(library)

    def test_garbled_info(self, library):
        (library / INFO_FILE).write_text("{not json")
        with pytest.raises(LibraryFormatError):
            VectorLibrary(library)

    def test_first_generation_metadata(self, tmp_path):
        """info.json without the newer keys lowercases every word."""
        (tmp_path / INFO_FILE).write_text(json.dumps({
            "version": 5, "shardBits": 4, "entries": 1, "vectorSize": 1,
            "source": "x.vec", "built": "2020-01-01T00:00:00.000Z",
        }))
        shard_path(tmp_path, bucket_of("a", 4)).write_bytes(encode_entry("a", 1.0, [255]))
        lib = VectorLibrary(tmp_path)
        assert lib.info.keep_single_caps is False
        assert lib.info.resolution_bits == 8
        assert lib.vector("A").tolist() == [1.0]

    def test_lookup_helper(self, library):
        assert lookup(library, "nothing-here") is None
        assert lookup(library, "cat").shape == (3,)


class TestLibraryInfo:
    def test_dict_keys(self):
        info = LibraryInfo(vector_size=300, source="cc.en.300.vec.gz", entry_count=10)
        d = info.to_dict()
        assert d["vectorSize"] == 300 and d["entries"] == 10 and d["hash"] == "sha256"
        assert LibraryInfo.from_dict(d) == info

    def test_incomplete(self):
        with pytest.raises(LibraryFormatError):
            LibraryInfo.from_dict({"version": 5})
