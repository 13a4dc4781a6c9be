# ==================================================
# vector_library/build.py
# ==================================================
from __future__ import annotations

import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from tqdm import tqdm

from .builder import ShardBuilder, check_settings
from .const import INFO_FILE, MAX_ENTRIES, RESOLUTION_BITS, SHARD_BITS, SHARD_SUFFIX
from .corpus import iter_lines, open_source, parse_header, parse_record
from .errors import CorpusHeaderError, MalformedLineError
from .info import LibraryInfo
from .store import shard_path

logger = logging.getLogger(__name__)


def build(source: str | os.PathLike,
          output_dir: str | os.PathLike,
          shard_bits: int = SHARD_BITS,
          max_entries: int = MAX_ENTRIES,
          resolution_bits: int = RESOLUTION_BITS,
          keep_single_caps: bool = True,
          progress: bool = False,
          workers: int = 1) -> LibraryInfo:
    """
    Convert the corpus at ``source`` into a shard library in ``output_dir``.
    • the first non-blank line must be the ``totalWords vectorSize`` header
    • malformed records are logged and skipped
    • reading stops as soon as ``max_entries`` distinct words are collected
    Nothing is written until the whole input has been consumed.
    """
    check_settings(shard_bits, max_entries, resolution_bits, workers)
    source = str(source)
    logger.info(f"building vector library from {source}")

    builder: ShardBuilder | None = None
    skipped = 0
    with open_source(source) as stream:
        lines = iter_lines(stream)
        bar = None
        try:
            for line_no, line in enumerate(lines, start=1):
                if not line.strip():
                    continue
                if builder is None:
                    total_words, vector_size = parse_header(line)
                    logger.info(f"corpus holds {total_words} words with vector size {vector_size}")
                    info = LibraryInfo(
                        vector_size=vector_size, source=source, shard_bits=shard_bits,
                        resolution_bits=resolution_bits, keep_single_caps=keep_single_caps,
                        total_words=total_words)
                    builder = ShardBuilder(vector_size, shard_bits, max_entries,
                                           resolution_bits, keep_single_caps, info=info)
                    bar = tqdm(total=min(total_words, max_entries), unit="word",
                               disable=not progress)
                    if builder.full:
                        break
                    continue

                try:
                    word, components = parse_record(line, builder.vector_size, line_no)
                except MalformedLineError as exc:
                    skipped += 1
                    logger.warning(f"skipping malformed record: {exc}")
                    continue
                if builder.ingest(word, components):
                    bar.update(1)
                if builder.full:
                    logger.info(f"reached {max_entries} entries, stopping input")
                    break
        finally:
            lines.close()
            if bar is not None:
                bar.close()

    if builder is None:
        raise CorpusHeaderError(f"{source} is empty, no header line found")

    builder.info.skipped_lines = skipped
    shards = builder.finish()
    publish(output_dir, shards, builder.info, workers=workers)
    logger.info(f"vector library complete: {builder.info.entry_count} entries "
                f"in {len(shards)} shards, {skipped} lines skipped")
    return builder.info


# ------------------------------------------------------------------

def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _write_atomic(path: Path, data: bytes, mode: int = 0o644):
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp, mode)  # mkstemp creates 0600
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise


def publish(output_dir: str | os.PathLike, shards: dict[int, bytes],
            info: LibraryInfo, workers: int = 1):
    """Write every shard, drop shards from any previous build, then ``info.json``.

    Each file is renamed into place whole, so readers never see a partial shard.
    Files get ``0666 & ~umask`` like any other newly created file.

    Rebuilding into a directory that readers are using is not supported: the
    old ``info.json`` is removed first, so a reader that opens the library
    mid-publish gets LibraryFormatError, but one that already holds the old
    metadata may read shards from the new build.
    """
    root = Path(output_dir)
    root.mkdir(parents=True, exist_ok=True)
    mode = 0o666 & ~_current_umask()

    old_info = root / INFO_FILE
    if old_info.exists():
        old_info.unlink()
        logger.info(f"replacing existing library in {root}")

    def flush(item):
        bucket, data = item
        _write_atomic(shard_path(root, bucket), data, mode)
        logger.debug(f"wrote shard {bucket} ({len(data)} bytes)")

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(flush, shards.items()))
    else:
        for item in shards.items():
            flush(item)

    # buckets left over from an earlier build into the same directory
    keep = {shard_path(root, bucket).name for bucket in shards}
    for stale in root.glob(f"*{SHARD_SUFFIX}"):
        if stale.name not in keep:
            stale.unlink()
            logger.debug(f"removed stale shard {stale.name}")

    _write_atomic(root / INFO_FILE, info.to_json().encode("utf-8"), mode)
