"""
Tests for the batch driver

Uses an in-memory generation client and sink; the end-to-end scenario runs
through HttpGenerationClient with httpx.MockTransport.
"""

import itertools
import json
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

import httpx
import pandas as pd
import pytest

from testgen_harness.domain.entities import WorkItem
from testgen_harness.domain.errors import (
    NonSuccessStatusError,
    SinkWriteError,
    StreamDecodeError,
    TransportError,
)
from testgen_harness.harness_config import RequestDefaults
from testgen_harness.infrastructure.generation_clients.base import GenerationClient
from testgen_harness.infrastructure.generation_clients.http import HttpGenerationClient
from testgen_harness.infrastructure.result_sink import CsvResultSink, ResultSink
from testgen_harness.use_cases.batch import BatchDriver, BatchState

ROOT = "/proj"
T0 = datetime(2026, 1, 1, 8, 0, 0, tzinfo=timezone.utc)


def _events(*objs) -> list[bytes]:
    return [(json.dumps(o) + "\n").encode("utf-8") for o in objs]


def _coverage(text):
    return {"dataType": "calculatedCoverage", "calculatedCoverage": text}


def _summary(delta, lines="10", total="20", tests="2"):
    return {
        "dataType": "summary",
        "coverageIncreased": delta,
        "linesCovered": lines,
        "totalLines": total,
        "testAdded": tests,
    }


def _item(name: str) -> WorkItem:
    return WorkItem(path=f"{ROOT}/{name}", relative_path=name)


class FakeClock:
    """Advances one second per call and remembers every value handed out"""

    def __init__(self):
        self._ticks = itertools.count()
        self.issued: list[datetime] = []

    def __call__(self) -> datetime:
        value = T0 + timedelta(seconds=next(self._ticks))
        self.issued.append(value)
        return value


class FakeClient(GenerationClient):
    """Serves scripted chunks (or raises) per source file"""

    def __init__(self, script: dict):
        self.script = script
        self.requests = []

    @contextmanager
    def open_stream(self, request):
        self.requests.append(request)
        outcome = self.script[request.source_file_path]
        if isinstance(outcome, Exception):
            raise outcome
        yield iter(outcome)


class MemorySink(ResultSink):
    def __init__(self, fail_on: set[str] | None = None):
        self.records = []
        self.fail_on = fail_on or set()

    def append(self, record):
        if record.relative_path in self.fail_on:
            raise SinkWriteError("disk full")
        self.records.append(record)


class TestProcessItem:
    """BatchDriver.process_item()"""

    def test_builds_record_with_timing(self):
        client = FakeClient({f"{ROOT}/a.py": _events(_coverage("30%"), _summary("45"))})
        clock = FakeClock()
        driver = BatchDriver(client, MemorySink(), ROOT, clock=clock)

        record = driver.process_item(_item("a.py"))

        assert record.relative_path == "a.py"
        assert record.metrics.initial_coverage == 30.0
        assert record.metrics.final_coverage == 45.0
        assert record.start_time == T0
        assert record.end_time == T0 + timedelta(seconds=1)
        assert record.duration == timedelta(seconds=1)

    def test_prints_start_end_and_duration(self, capsys):
        client = FakeClient({f"{ROOT}/a.py": _events(_summary("45"))})
        BatchDriver(client, MemorySink(), ROOT, clock=FakeClock()).process_item(_item("a.py"))

        out = capsys.readouterr().out
        assert "Start Time: 2026-01-01T08:00:00+00:00" in out
        assert "End Time: 2026-01-01T08:00:01+00:00" in out
        assert "Duration: 1.0s" in out

    def test_request_uses_run_defaults(self):
        client = FakeClient({f"{ROOT}/a.py": []})
        driver = BatchDriver(client, MemorySink(), ROOT, request_defaults=RequestDefaults(max_iterations=3))

        driver.process_item(_item("a.py"))

        request = client.requests[0]
        assert request.source_file_path == f"{ROOT}/a.py"
        assert request.root_dir == ROOT
        assert request.max_iterations == 3

    def test_metrics_free_stream_gives_zero_record(self):
        client = FakeClient({f"{ROOT}/a.py": _events({"dataType": "log", "message": "hi"})})
        record = BatchDriver(client, MemorySink(), ROOT).process_item(_item("a.py"))
        assert record.metrics.final_coverage == 0.0

    def test_decode_error_propagates(self):
        client = FakeClient({f"{ROOT}/a.py": [b'{"dataType": "summ']})
        with pytest.raises(StreamDecodeError):
            BatchDriver(client, MemorySink(), ROOT).process_item(_item("a.py"))


class TestRun:
    """BatchDriver.run()"""

    def test_records_in_enumeration_order(self):
        client = FakeClient({
            f"{ROOT}/a.py": _events(_summary("10")),
            f"{ROOT}/b.py": _events(_summary("20")),
            f"{ROOT}/c.py": _events(_summary("30")),
        })
        sink = MemorySink()
        summary = BatchDriver(client, sink, ROOT).run([_item("a.py"), _item("b.py"), _item("c.py")], total=3)

        assert [r.relative_path for r in sink.records] == ["a.py", "b.py", "c.py"]
        assert [r.metrics.final_coverage for r in sink.records] == [10.0, 20.0, 30.0]
        assert summary.processed == 3
        assert summary.failures == []

    @pytest.mark.parametrize(
        "error",
        [
            NonSuccessStatusError(500, "boom"),
            TransportError("connection refused"),
            StreamDecodeError("error reading JSON stream"),
        ],
    )
    def test_failed_item_is_skipped_and_next_item_runs(self, error):
        client = FakeClient({
            f"{ROOT}/a.py": error,
            f"{ROOT}/b.py": _events(_summary("20")),
        })
        sink = MemorySink()
        clock = FakeClock()

        summary = BatchDriver(client, sink, ROOT, clock=clock).run([_item("a.py"), _item("b.py")])

        assert [r.relative_path for r in sink.records] == ["b.py"]
        assert [f.relative_path for f in summary.failures] == ["a.py"]
        # run start, a.py start, b.py start, b.py end, run end
        assert sink.records[0].start_time == clock.issued[2]
        assert sink.records[0].end_time == clock.issued[3]

    def test_decode_failure_mid_stream_records_nothing(self):
        client = FakeClient({
            f"{ROOT}/a.py": _events(_coverage("30%")) + [b'{"dataType": "summary", '],
            f"{ROOT}/b.py": _events(_summary("5")),
        })
        sink = MemorySink()
        summary = BatchDriver(client, sink, ROOT).run([_item("a.py"), _item("b.py")])

        assert [r.relative_path for r in sink.records] == ["b.py"]
        assert "JSON" in summary.failures[0].error

    def test_unexpected_error_does_not_stop_run(self):
        client = FakeClient({
            f"{ROOT}/a.py": RuntimeError("bug"),
            f"{ROOT}/b.py": _events(_summary("5")),
        })
        sink = MemorySink()
        summary = BatchDriver(client, sink, ROOT).run([_item("a.py"), _item("b.py")])

        assert len(sink.records) == 1
        assert "bug" in summary.failures[0].error

    def test_sink_failure_is_reported_and_run_continues(self):
        client = FakeClient({
            f"{ROOT}/a.py": _events(_summary("10")),
            f"{ROOT}/b.py": _events(_summary("20")),
        })
        sink = MemorySink(fail_on={"a.py"})
        summary = BatchDriver(client, sink, ROOT).run([_item("a.py"), _item("b.py")])

        assert summary.persist_failures == 1
        assert [r.relative_path for r in sink.records] == ["b.py"]
        assert len(summary.records) == 2

    def test_record_is_persisted_before_next_dispatch(self):
        sink = MemorySink()
        seen_by_dispatch = []

        class ObservingClient(FakeClient):
            @contextmanager
            def open_stream(self, request):
                seen_by_dispatch.append(len(sink.records))
                with super().open_stream(request) as chunks:
                    yield chunks

        client = ObservingClient({
            f"{ROOT}/a.py": _events(_summary("10")),
            f"{ROOT}/b.py": _events(_summary("20")),
            f"{ROOT}/c.py": _events(_summary("30")),
        })
        BatchDriver(client, sink, ROOT).run([_item("a.py"), _item("b.py"), _item("c.py")])

        assert seen_by_dispatch == [0, 1, 2]

    def test_empty_enumeration(self):
        clock = FakeClock()
        driver = BatchDriver(FakeClient({}), MemorySink(), ROOT, clock=clock)
        summary = driver.run([])

        assert summary.processed == 0
        assert summary.elapsed == timedelta(seconds=1)
        assert driver.state == BatchState.DONE

    def test_run_timing(self):
        client = FakeClient({f"{ROOT}/a.py": _events(_summary("10"))})
        clock = FakeClock()
        summary = BatchDriver(client, MemorySink(), ROOT, clock=clock).run([_item("a.py")])

        assert summary.started_at == T0
        assert summary.finished_at == clock.issued[-1]
        assert summary.elapsed == timedelta(seconds=3)


class TestEndToEnd:
    """Driver + HTTP client + CSV sink"""

    def test_two_files_one_failing(self, tmp_path, caplog):
        bodies = {
            f"{ROOT}/a.py": httpx.Response(
                200,
                content=b"".join(_events(_coverage("30%"), _summary("Coverage did not increase"))),
            ),
            f"{ROOT}/b.py": httpx.Response(500, content=b"generation failed"),
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return bodies[json.loads(request.content)["sourceFilePath"]]

        output = tmp_path / "execution_log.csv"
        client = HttpGenerationClient("http://testgen.local/api/generate", transport=httpx.MockTransport(handler))
        driver = BatchDriver(client, CsvResultSink(output), ROOT)
        try:
            with caplog.at_level(logging.ERROR, logger="testgen_harness.use_cases.batch"):
                summary = driver.run([_item("a.py"), _item("b.py")], total=2)
        finally:
            client.close()

        df = pd.read_csv(output)
        assert len(df) == 1
        row = df.iloc[0]
        assert row["relative_path"] == "a.py"
        assert row["initial_coverage"] == 30.0
        assert row["final_coverage"] == 30.0
        assert [f.relative_path for f in summary.failures] == ["b.py"]
        assert "generation failed" in summary.failures[0].error
        assert driver.state == BatchState.DONE
        errors = [r for r in caplog.records if r.name == "testgen_harness.use_cases.batch"]
        assert len(errors) == 1
        assert f"{ROOT}/b.py" in errors[0].getMessage()
        assert "500" in errors[0].getMessage()

    def test_connection_dropped_mid_body_skips_item(self, tmp_path):
        class DroppingStream(httpx.SyncByteStream):
            def __iter__(self):
                yield b"".join(_events(_coverage("30%")))
                raise httpx.RemoteProtocolError("peer closed connection without sending complete message body")

        def handler(request: httpx.Request) -> httpx.Response:
            if json.loads(request.content)["sourceFilePath"] == f"{ROOT}/a.py":
                return httpx.Response(200, stream=DroppingStream())
            return httpx.Response(200, content=b"".join(_events(_summary("50"))))

        output = tmp_path / "execution_log.csv"
        client = HttpGenerationClient("http://testgen.local/api/generate", transport=httpx.MockTransport(handler))
        driver = BatchDriver(client, CsvResultSink(output), ROOT)
        try:
            summary = driver.run([_item("a.py"), _item("b.py")], total=2)
        finally:
            client.close()

        df = pd.read_csv(output)
        assert list(df["relative_path"]) == ["b.py"]
        assert df.iloc[0]["final_coverage"] == 50.0
        assert [f.relative_path for f in summary.failures] == ["a.py"]
        assert "connection dropped" in summary.failures[0].error
