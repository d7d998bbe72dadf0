"""
Conversion coordinator.

The producer and the serializer run as two threads joined by a HandoffChannel.
Neither thread ends the process: fatal errors are collected and re-raised
here, in the caller's thread, once the serializer has signalled completion
or failure and both threads have stopped.
"""

from __future__ import annotations

import io
import logging
import threading
from typing import Dict, Iterable, List, Tuple

from .channel import CompletionSignal, HandoffChannel
from .errors import PipelineAborted
from .models import ConversionConfig, ConversionSummary
from .producer import RowProducer, open_producer
from .rules import SEPARATORS
from .serializer import JsonArrayWriter, write_json_array

logger = logging.getLogger(__name__)


def run_pipeline(records: Iterable[Dict[str, str]], writer: JsonArrayWriter) -> int:
    """Stream ``records`` through ``writer``; return the number written."""
    channel = HandoffChannel()
    done = CompletionSignal()
    failures: List[BaseException] = []
    written: List[int] = []

    def produce() -> None:
        try:
            for record in records:
                channel.send(record)
            channel.close()
        except PipelineAborted:
            pass
        except Exception as e:
            failures.append(e)
            channel.abort(e)

    def serialize() -> None:
        try:
            written.append(write_json_array(channel, writer))
        except Exception as e:
            if not isinstance(e, PipelineAborted):
                failures.append(e)
                channel.abort(e)
            done.fail(e)
            writer.release()
        else:
            done.set()

    threads = [
        threading.Thread(target=produce, name="csv2json-producer", daemon=True),
        threading.Thread(target=serialize, name="csv2json-serializer", daemon=True),
    ]
    for t in threads:
        t.start()

    done.wait()
    # both sides have stopped or are about to: the channel is closed or aborted
    for t in threads:
        t.join()

    if failures:
        raise failures[0]
    if not done.completed():
        raise PipelineAborted("serializer stopped without completing the array") from done.error
    return written[0]


def _summarize(producer: RowProducer, written: int, output_path=None) -> ConversionSummary:
    return ConversionSummary(
        rows_read=producer.rows_read,
        rows_written=written,
        rows_skipped=len(producer.skipped),
        output_path=output_path,
        skipped=list(producer.skipped),
    )


def convert_file(config: ConversionConfig) -> ConversionSummary:
    output_path = config.output_path

    with open_producer(config.input_path, config.separator_char) as producer:
        # no output file is created for input without a header row
        producer.read_headers()
        writer = JsonArrayWriter.create(output_path, pretty=config.pretty)
        logger.info(f"Writing JSON file {output_path}...")
        written = run_pipeline(producer, writer)

    summary = _summarize(producer, written, output_path)
    logger.info(
        f"Completed! {summary.rows_written} records written, "
        f"{summary.rows_skipped} lines skipped"
    )
    return summary


def convert_text(
    lines: Iterable[str],
    separator: str = "comma",
    pretty: bool = False,
) -> Tuple[str, ConversionSummary]:
    """Convert in memory. ``separator`` is a name from rules.SEPARATORS."""
    producer = RowProducer(lines, SEPARATORS[separator])
    producer.read_headers()

    sink = io.StringIO()
    written = run_pipeline(producer, JsonArrayWriter(sink, pretty=pretty))
    return sink.getvalue(), _summarize(producer, written)
