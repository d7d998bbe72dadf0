import io
import json
import threading

import pytest

from csv2json.channel import CompletionSignal, HandoffChannel
from csv2json.errors import InvalidInputError, OutputWriteError, PipelineAborted
from csv2json.models import ConversionConfig
from csv2json.pipeline import convert_file, convert_text, run_pipeline
from csv2json.serializer import JsonArrayWriter


def test_channel_delivers_in_order():
    channel = HandoffChannel()

    def produce():
        for i in range(100):
            channel.send(i)
        channel.close()

    t = threading.Thread(target=produce)
    t.start()
    received = list(channel)
    t.join()

    assert received == list(range(100))


def test_channel_send_waits_for_consumer():
    channel = HandoffChannel()
    returned = threading.Event()

    def produce():
        channel.send("record")
        returned.set()

    t = threading.Thread(target=produce)
    t.start()

    assert not returned.wait(0.1)
    assert channel.receive() == "record"
    assert returned.wait(5)
    t.join()


def test_channel_abort_wakes_consumer():
    channel = HandoffChannel()
    channel.abort(ValueError("boom"))
    with pytest.raises(PipelineAborted):
        channel.receive()
    with pytest.raises(PipelineAborted):
        channel.send("record")


def test_completion_signal_is_one_shot():
    done = CompletionSignal()
    assert not done.is_set()
    done.set()
    assert done.wait(0)
    with pytest.raises(RuntimeError):
        done.set()
    assert done.completed()


def test_completion_signal_failure_wakes_waiter():
    done = CompletionSignal()
    error = ValueError("disk full")

    t = threading.Thread(target=done.fail, args=(error,))
    t.start()
    assert done.wait(5)
    t.join()

    assert not done.completed()
    assert done.error is error
    with pytest.raises(RuntimeError):
        done.set()


def test_run_pipeline_streams_all_records():
    records = [{"n": str(i)} for i in range(50)]
    sink = io.StringIO()

    assert run_pipeline(iter(records), JsonArrayWriter(sink)) == 50
    assert json.loads(sink.getvalue()) == records


def test_run_pipeline_propagates_producer_failure():
    def records():
        yield {"a": "1"}
        raise ValueError("read failed")

    sink = io.StringIO()
    with pytest.raises(ValueError, match="read failed"):
        run_pipeline(records(), JsonArrayWriter(sink))
    assert not sink.getvalue().endswith("]")


class BrokenSink(io.StringIO):
    def write(self, data):
        if data not in ("[", "[\n"):
            raise OSError("disk full")
        return super().write(data)


def test_run_pipeline_propagates_writer_failure():
    records = ({"n": str(i)} for i in range(10))
    with pytest.raises(OutputWriteError):
        run_pipeline(records, JsonArrayWriter(BrokenSink()))


def test_convert_text_examples():
    content, summary = convert_text(["COL1,COL2,COL3\n", "1,2,3\n", "4,5,6\n"])
    assert content == '[{"COL1":"1","COL2":"2","COL3":"3"},{"COL1":"4","COL2":"5","COL3":"6"}]'
    assert summary.rows_written == 2

    content, _ = convert_text(["COL1;COL2;COL3\n", "1;2;3\n"], separator="semicolon")
    assert content == '[{"COL1":"1","COL2":"2","COL3":"3"}]'


def test_convert_text_header_only():
    content, summary = convert_text(["COL1,COL2\n"])
    assert content == "[]"
    assert summary.rows_read == 0


def test_convert_file_writes_sibling_json(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("COL1,COL2,COL3\n1,2,3\n4,5\n6,7,8\n", encoding="utf-8")

    summary = convert_file(ConversionConfig(input_path=path, pretty=True))

    output = tmp_path / "data.json"
    assert summary.output_path == output
    assert summary.rows_read == 3
    assert summary.rows_written == 2
    assert summary.rows_skipped == 1
    assert json.loads(output.read_text(encoding="utf-8")) == [
        {"COL1": "1", "COL2": "2", "COL3": "3"},
        {"COL1": "6", "COL2": "7", "COL3": "8"},
    ]


def test_convert_file_without_header_creates_no_output(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_bytes(b"")

    with pytest.raises(InvalidInputError):
        convert_file(ConversionConfig(input_path=path))

    assert not (tmp_path / "empty.json").exists()
