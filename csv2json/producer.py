"""
Row producer: turns delimited text lines into records.

Splitting is a plain separator split. Quoted fields, escaped separators and
embedded newlines are not supported.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .encoding import detect_file_encoding
from .errors import InvalidInputError, MalformedRowError
from .models import SkippedRow

logger = logging.getLogger(__name__)

Record = Dict[str, str]


def _strip_terminator(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith(("\n", "\r")):
        return line[:-1]
    return line


def split_headers(raw_line: str, separator: str) -> Tuple[str, ...]:
    return tuple(_strip_terminator(raw_line).split(separator))


def process_line(headers: Tuple[str, ...], raw_line: str, separator: str) -> Record:
    fields = _strip_terminator(raw_line).split(separator)

    if len(fields) != len(headers):
        raise MalformedRowError(
            f"Line doesn't match headers format: expected {len(headers)} fields, "
            f"got {len(fields)}. Skipping."
        )

    return dict(zip(headers, fields))


class RowProducer:
    """
    Lazy, single-pass sequence of records over an iterable of text lines.

    The first line is the header row; a missing header row raises
    InvalidInputError. Data lines with the wrong field count are logged,
    recorded in ``skipped`` and dropped.
    """

    def __init__(self, lines: Iterable[str], separator: str):
        self._lines = iter(lines)
        self.separator = separator
        self.headers: Optional[Tuple[str, ...]] = None
        self.skipped: List[SkippedRow] = []
        self.rows_read = 0
        self.rows_emitted = 0

    def read_headers(self) -> Tuple[str, ...]:
        if self.headers is None:
            first = next(self._lines, None)
            if first is None:
                raise InvalidInputError("Invalid csv content: no header line")
            self.headers = split_headers(first, self.separator)
        return self.headers

    def __iter__(self) -> Iterator[Record]:
        headers = self.read_headers()

        # line 1 is the header row
        for line_number, line in enumerate(self._lines, start=2):
            self.rows_read += 1
            try:
                record = process_line(headers, line, self.separator)
            except MalformedRowError as e:
                content = _strip_terminator(line)
                logger.warning(f"Line {line_number}: {content!r} Error: {e}")
                self.skipped.append(SkippedRow(line=line_number, content=content, reason=str(e)))
                continue

            self.rows_emitted += 1
            yield record


@contextmanager
def open_producer(path: Path, separator: str) -> Iterator[RowProducer]:
    """Open ``path`` and yield a RowProducer over its lines.

    The file handle is released on every exit path, including a missing
    header row.
    """
    try:
        encoding = detect_file_encoding(path)
        f = open(path, "r", encoding=encoding, errors="replace", newline="")
    except OSError as e:
        raise InvalidInputError(f"Cannot open input file {path}: {e}") from e

    with f:
        try:
            yield RowProducer(f, separator)
        except OSError as e:
            raise InvalidInputError(f"Cannot read input file {path}: {e}") from e
