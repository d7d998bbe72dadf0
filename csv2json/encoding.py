"""
Input encoding detection.

Rules:
- A UTF-8 BOM selects utf-8-sig so the BOM never ends up in the first header.
- Input that decodes as strict UTF-8 end to end is UTF-8.
- Anything else goes through charset-normalizer over the whole input, never a
  prefix: the first non-UTF-8 byte may sit anywhere in the file.
- No guess at all falls back to UTF-8.
"""

from __future__ import annotations

import codecs
import logging
from pathlib import Path

from charset_normalizer import from_bytes, from_path

from .rules import ENCODING_CHUNK_SIZE

logger = logging.getLogger(__name__)

_UTF8_BOM = codecs.BOM_UTF8
_UTF8_ALIASES = ("utf_8", "utf8", "ascii")


def _normalize_guess(match) -> str:
    if match is None:
        return "utf-8"

    detected = match.encoding
    if detected.lower().replace("-", "_") in _UTF8_ALIASES:
        return "utf-8"
    return detected


def _is_utf8(raw: bytes) -> bool:
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def detect_encoding(raw: bytes) -> str:
    """Encoding of ``raw``, which must be the complete input."""
    if raw.startswith(_UTF8_BOM):
        return "utf-8-sig"
    if _is_utf8(raw):
        return "utf-8"
    return _normalize_guess(from_bytes(raw).best())


def _file_is_utf8(path: Path) -> bool:
    # incremental so multi-byte characters may straddle chunk boundaries
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(ENCODING_CHUNK_SIZE), b""):
                decoder.decode(chunk)
        decoder.decode(b"", final=True)
    except UnicodeDecodeError:
        return False
    return True


def detect_file_encoding(path: Path) -> str:
    with open(path, "rb") as f:
        head = f.read(len(_UTF8_BOM))

    if head == _UTF8_BOM:
        encoding = "utf-8-sig"
    elif _file_is_utf8(path):
        encoding = "utf-8"
    else:
        encoding = _normalize_guess(from_path(path).best())

    logger.debug(f"Detected encoding {encoding} for {path}")
    return encoding
