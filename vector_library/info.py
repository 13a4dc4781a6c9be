# ==================================================
# vector_library/info.py
# ==================================================
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from .const import FORMAT_VERSION, HASH_NAME, RESOLUTION_BITS, SHARD_BITS
from .errors import LibraryFormatError


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LibraryInfo:
    """Contents of ``info.json`` at the root of a built library."""
    vector_size: int
    source: str = ""
    shard_bits: int = SHARD_BITS
    entry_count: int = 0
    resolution_bits: int = RESOLUTION_BITS
    keep_single_caps: bool = True
    total_words: int | None = None
    skipped_lines: int = 0
    format_version: int = FORMAT_VERSION
    hash_name: str = HASH_NAME
    built: str = field(default_factory=_now)

    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "version"       : self.format_version,
            "shardBits"     : self.shard_bits,
            "entries"       : self.entry_count,
            "vectorSize"    : self.vector_size,
            "source"        : self.source,
            "built"         : self.built,
            "resolutionBits": self.resolution_bits,
            "keepSingleCaps": self.keep_single_caps,
            "hash"          : self.hash_name,
            "totalWords"    : self.total_words,
            "skippedLines"  : self.skipped_lines,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LibraryInfo":
        """Missing optional keys fall back to what the first-generation tool wrote."""
        try:
            return cls(
                format_version=int(data["version"]),
                shard_bits=int(data["shardBits"]),
                entry_count=int(data["entries"]),
                vector_size=int(data["vectorSize"]),
                source=str(data.get("source", "")),
                built=str(data.get("built", "")),
                resolution_bits=int(data.get("resolutionBits", 8)),
                keep_single_caps=bool(data.get("keepSingleCaps", False)),
                hash_name=str(data.get("hash", "sha256")),
                total_words=data.get("totalWords"),
                skipped_lines=int(data.get("skippedLines", 0)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise LibraryFormatError(f"incomplete library metadata: {exc}") from exc

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    # ------------------------------------------------------------------
    def write(self, path: str | os.PathLike):
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def read(cls, path: str | os.PathLike) -> "LibraryInfo":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise LibraryFormatError(f"no library metadata at {path}") from exc
        except json.JSONDecodeError as exc:
            raise LibraryFormatError(f"unreadable library metadata at {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise LibraryFormatError(f"library metadata at {path} is not an object")
        return cls.from_dict(data)
