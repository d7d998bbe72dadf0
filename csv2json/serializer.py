"""
Record serializer: writes records as one JSON array, incrementally.

States: idle -> opened ("[" written) -> writing -> closed ("]" written, flushed).
An array with no records is valid: "[]" compact, "[", two newlines, "]" pretty.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, TextIO

from .errors import OutputWriteError, SerializerStateError
from .rules import OUTPUT_ENCODING, PRETTY_INDENT


IDLE = "idle"
OPENED = "opened"
WRITING = "writing"
CLOSED = "closed"


def encode_record(record: Dict[str, str], pretty: bool = False) -> str:
    if not pretty:
        return json.dumps(record, separators=(",", ":"), ensure_ascii=False)

    prefix = " " * PRETTY_INDENT
    body = json.dumps(record, indent=PRETTY_INDENT, ensure_ascii=False)
    return "\n".join(prefix + line for line in body.splitlines())


class JsonArrayWriter:
    def __init__(self, sink: TextIO, pretty: bool = False, owns_sink: bool = False):
        self.sink = sink
        self.pretty = pretty
        self.state = IDLE
        self.count = 0
        self._owns_sink = owns_sink

    @classmethod
    def create(cls, path: Path, pretty: bool = False) -> "JsonArrayWriter":
        """Create (or truncate) ``path`` and return a writer that owns it."""
        try:
            f = open(path, "w", encoding=OUTPUT_ENCODING, newline="\n")
        except OSError as e:
            raise OutputWriteError(f"Cannot create output file {path}: {e}") from e
        return cls(f, pretty=pretty, owns_sink=True)

    def _write(self, data: str) -> None:
        try:
            self.sink.write(data)
        except OSError as e:
            raise OutputWriteError(f"Cannot write output: {e}") from e

    def _expect(self, *states: str) -> None:
        if self.state not in states:
            raise SerializerStateError(f"writer is {self.state}, expected one of {states}")

    def open(self) -> None:
        self._expect(IDLE)
        self._write("[\n" if self.pretty else "[")
        self.state = OPENED

    def write_record(self, record: Dict[str, str]) -> None:
        self._expect(OPENED, WRITING)
        if self.state == WRITING:
            self._write(",\n" if self.pretty else ",")
        self._write(encode_record(record, self.pretty))
        self.state = WRITING
        self.count += 1

    def close(self) -> None:
        self._expect(OPENED, WRITING)
        self._write("\n]" if self.pretty else "]")
        try:
            self.sink.flush()
        except OSError as e:
            raise OutputWriteError(f"Cannot flush output: {e}") from e
        finally:
            self.release()
        self.state = CLOSED

    def release(self) -> None:
        # Closes an owned file without finishing the array; used on abort.
        if self._owns_sink and not self.sink.closed:
            try:
                self.sink.close()
            except OSError as e:
                raise OutputWriteError(f"Cannot close output: {e}") from e


def write_json_array(records: Iterable[Dict[str, str]], writer: JsonArrayWriter) -> int:
    """Write every record as one JSON array and close the writer."""
    writer.open()
    for record in records:
        writer.write_record(record)
    writer.close()
    return writer.count
