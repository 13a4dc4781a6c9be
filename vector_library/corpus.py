# ==================================================
# vector_library/corpus.py
# ==================================================
"""
Reading fastText ``.vec`` corpora.

A locator is either an ``http(s)://`` URL or a local path; a ``.gz`` or ``.zst``
suffix is decompressed on the fly. Lines are pulled lazily so a build can stop
reading (and drop the connection) as soon as it has enough entries.
"""
from __future__ import annotations

import contextlib
import gzip
import http.client
import io
import logging
import math
from pathlib import Path
from typing import BinaryIO, Iterator

import requests
import urllib3
import zstandard as zstd

from .const import FLOAT32_MAX
from .errors import CorpusHeaderError, MalformedLineError

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 60          # seconds, connect + per-read
READ_CHUNK    = 1 << 20

# upstream went away mid-transfer; whatever arrived so far is still usable
TRUNCATION_ERRORS = (
    EOFError,
    zstd.ZstdError,
    http.client.IncompleteRead,
    urllib3.exceptions.ProtocolError,
    requests.exceptions.ChunkedEncodingError,
)


def is_remote(locator: str) -> bool:
    return str(locator).startswith(("http://", "https://"))


@contextlib.contextmanager
def open_source(locator: str) -> Iterator[BinaryIO]:
    """Yield a binary stream over the (decompressed) corpus at ``locator``."""
    locator = str(locator)
    with contextlib.ExitStack() as stack:
        if is_remote(locator):
            r = requests.get(locator, stream=True, timeout=FETCH_TIMEOUT)
            stack.callback(r.close)
            r.raise_for_status()
            r.raw.decode_content = True
            r.raw.auto_close = False     # closed by the stack, not at end of body
            raw: BinaryIO = r.raw
        else:
            raw = stack.enter_context(open(Path(locator), "rb"))

        name = locator.split("?", 1)[0].lower()
        if name.endswith(".gz"):
            raw = stack.enter_context(gzip.GzipFile(fileobj=raw, mode="rb"))
        elif name.endswith(".zst"):
            dctx = zstd.ZstdDecompressor()
            raw = stack.enter_context(dctx.stream_reader(raw, read_size=READ_CHUNK))
        yield raw


def iter_lines(stream: BinaryIO, encoding: str = "utf-8") -> Iterator[str]:
    """Decoded lines without their line terminator.

    A truncated transport ends the iteration with a warning instead of an
    error. Calling ``close()`` on the generator stops the pull.
    """
    text = io.TextIOWrapper(io.BufferedReader(stream, READ_CHUNK)
                            if not hasattr(stream, "peek") else stream,
                            encoding=encoding, errors="replace", newline=None)
    try:
        while True:
            try:
                line = text.readline()
            except TRUNCATION_ERRORS as exc:
                logger.warning(f"input ended early ({type(exc).__name__}: {exc}); "
                               f"keeping what was read")
                return
            if not line:
                return
            yield line.rstrip("\n")
    finally:
        if not text.closed:
            text.detach()


# -------- parsing -----------------------------------------------------------

def parse_header(line: str) -> tuple[int, int]:
    """``"totalWords vectorSize"`` -> (total_words, vector_size)."""
    fields = line.split()
    if len(fields) != 2:
        raise CorpusHeaderError(f"expected 'totalWords vectorSize', got {line[:80]!r}")
    try:
        total_words, vector_size = (int(f) for f in fields)
    except ValueError as exc:
        raise CorpusHeaderError(f"header fields are not integers: {line[:80]!r}") from exc
    if total_words < 0 or vector_size <= 0:
        raise CorpusHeaderError(f"header out of range: {line[:80]!r}")
    return total_words, vector_size


def parse_record(line: str, vector_size: int,
                 line_no: int | None = None) -> tuple[str, list[float]]:
    """``"word c1 ... cN"`` -> (word, components).

    Fields are space separated; trailing whitespace (fastText writes a trailing
    space) is ignored.
    """
    fields = line.rstrip().split(" ")
    if len(fields) != vector_size + 1:
        raise MalformedLineError(
            f"expected {vector_size + 1} fields, got {len(fields)}", line_no)
    word, *rest = fields
    try:
        components = [float(x) for x in rest]
    except ValueError as exc:
        raise MalformedLineError(f"non-numeric component for {word!r}: {exc}", line_no) from exc
    if not all(math.isfinite(c) for c in components):
        raise MalformedLineError(f"non-finite component for {word!r}", line_no)
    if any(abs(c) > FLOAT32_MAX for c in components):
        raise MalformedLineError(f"component of {word!r} overflows float32", line_no)
    return word, components
