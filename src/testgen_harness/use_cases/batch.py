"""
Batch Execution

Drives the generation service over every work item, one at a time:

    Idle -> Dispatching -> AwaitingStream -> Recording -> Idle
                                  \\-> Failed -> Idle
    Idle -> Done (enumerator exhausted)

A failure only skips the current item. The record of item n is persisted
before item n+1 is dispatched.
"""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable

from testgen_harness.domain.entities import BatchRecord, BatchSummary, ItemFailure, WorkItem
from testgen_harness.domain.errors import SinkWriteError, WorkItemError
from testgen_harness.harness_config import RequestDefaults
from testgen_harness.infrastructure.generation_clients.base import GenerationClient
from testgen_harness.infrastructure.result_sink import ResultSink
from testgen_harness.metrics.reducer import reduce_events
from testgen_harness.request_builder import build_request
from testgen_harness.streaming.decoder import decode_events

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now().astimezone()


class BatchState(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    AWAITING_STREAM = "awaiting_stream"
    RECORDING = "recording"
    FAILED = "failed"
    DONE = "done"


class BatchDriver:
    """Sequences request -> decode -> reduce -> persist for each work item"""

    def __init__(
        self,
        client: GenerationClient,
        sink: ResultSink,
        root_dir: str,
        request_defaults: RequestDefaults | None = None,
        clock: Callable[[], datetime] = _now,
        cancel_event: threading.Event | None = None,
    ):
        """
        Args:
            client: Generation client
            sink: Destination for batch records
            root_dir: Project root reported to the service
            request_defaults: Run-wide request values
            clock: Timestamp source (overridable in tests)
            cancel_event: Optional event that stops the current decode when set
        """
        self.client = client
        self.sink = sink
        self.root_dir = root_dir
        self.request_defaults = request_defaults or RequestDefaults()
        self.clock = clock
        self.cancel_event = cancel_event
        self.state = BatchState.IDLE

    def _transition(self, state: BatchState) -> None:
        logger.debug("State: %s -> %s", self.state.value, state.value)
        self.state = state

    def process_item(self, item: WorkItem) -> BatchRecord:
        """
        Run one work item through the service and fold its stream.

        Args:
            item: Work item

        Returns:
            BatchRecord: Metrics with measured start/end timestamps

        Raises:
            WorkItemError: If the request, transport, status or stream fails
        """
        self._transition(BatchState.DISPATCHING)
        request = build_request(item, self.root_dir, self.request_defaults)

        start_time = self.clock()
        print(f"  Start Time: {start_time.isoformat(timespec='seconds')}")
        with self.client.open_stream(request) as chunks:
            self._transition(BatchState.AWAITING_STREAM)
            metrics, warnings = reduce_events(decode_events(chunks, cancel_event=self.cancel_event))
            end_time = self.clock()
        print(f"  End Time: {end_time.isoformat(timespec='seconds')}")
        print(f"  Duration: {(end_time - start_time).total_seconds():.1f}s")

        if warnings:
            logger.info("%d field warning(s) for %s", len(warnings), item.relative_path)
        return BatchRecord(
            relative_path=item.relative_path,
            metrics=metrics,
            start_time=start_time,
            end_time=end_time,
        )

    def run(self, items: Iterable[WorkItem], total: int | None = None) -> BatchSummary:
        """
        Process every work item in order.

        Args:
            items: Work items in enumeration order
            total: Item count for progress display (optional)

        Returns:
            BatchSummary: Records, failures and run timing
        """
        summary = BatchSummary(started_at=self.clock())
        print(f"Execution started at: {summary.started_at.isoformat(timespec='seconds')}\n")

        for index, item in enumerate(items, start=1):
            progress = f"{index}/{total}" if total is not None else str(index)
            print(f"[{progress}] {item.relative_path}")

            try:
                record = self.process_item(item)
            except WorkItemError as e:
                self._transition(BatchState.FAILED)
                logger.error("Failed to process %s: %s", item.path, e)
                summary.failures.append(ItemFailure(relative_path=item.relative_path, error=str(e)))
                print(f"  FAILED: {e}")
                self._transition(BatchState.IDLE)
                continue
            except Exception as e:
                self._transition(BatchState.FAILED)
                logger.exception("Unexpected error while processing %s", item.path)
                summary.failures.append(ItemFailure(relative_path=item.relative_path, error=repr(e)))
                print(f"  ERROR: {e!r}")
                self._transition(BatchState.IDLE)
                continue

            self._transition(BatchState.RECORDING)
            m = record.metrics
            print(
                f"  Initial: {m.initial_coverage:.2f} | Final: {m.final_coverage:.2f} | "
                f"Lines: {m.lines_covered:.0f}/{m.total_lines:.0f} | Tests added: {m.tests_added:.0f}"
            )
            summary.records.append(record)
            try:
                self.sink.append(record)
            except SinkWriteError as e:
                summary.persist_failures += 1
                logger.error("Failed to save progress after processing %s: %s", item.path, e)
                print(f"  WARNING: progress not saved ({e})")
            else:
                print(f"  Saved progress after processing {item.relative_path}")
            self._transition(BatchState.IDLE)

        summary.finished_at = self.clock()
        self._transition(BatchState.DONE)
        return summary
