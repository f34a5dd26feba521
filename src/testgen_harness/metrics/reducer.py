"""
Metrics Reducer

Folds the stream events of one work item into a single Metrics record.

State lives on a MetricsReducer instance, which is created fresh for every
work item:
- ``calculatedCoverage`` updates the running initial coverage (last number wins).
- ``summary`` recomputes final coverage, lines covered, total lines and tests
  added; a later summary overwrites an earlier one.
- any other event is ignored.

A summary whose coverage text is exactly "Coverage did not increase" carries
the running initial coverage forward as the final coverage. The sentinel is
checked before numeric extraction.
"""

import logging
from typing import Iterable

from testgen_harness.domain.constants import (
    COVERAGE_NOT_INCREASED,
    EVENT_CALCULATED_COVERAGE,
    EVENT_SUMMARY,
    FIELD_COVERAGE_INCREASED,
    FIELD_LINES_COVERED,
    FIELD_TESTS_ADDED,
    FIELD_TOTAL_LINES,
)
from testgen_harness.domain.entities import Metrics
from testgen_harness.domain.value_objects import (
    CalculatedCoverage,
    FieldExtractionWarning,
    StreamEvent,
    Summary,
)
from testgen_harness.metrics.extraction import extract_first_integer, extract_last_decimal

logger = logging.getLogger(__name__)


class MetricsReducer:
    """Accumulates metrics across the events of one work item"""

    def __init__(self):
        self.initial_coverage = 0.0
        self.final_coverage = 0.0
        self.lines_covered = 0.0
        self.total_lines = 0.0
        self.tests_added = 0.0
        self.warnings: list[FieldExtractionWarning] = []

    def _warn(self, event: str, field: str, reason: str, text: str | None) -> None:
        warning = FieldExtractionWarning(event=event, field=field, reason=reason, text=text)
        self.warnings.append(warning)
        logger.warning("Warning: %s", warning)

    def _summary_field(self, field: str, text: str | None) -> float:
        if text is None:
            self._warn(EVENT_SUMMARY, field, "value missing or not a string", text)
            return 0.0
        value = extract_first_integer(text)
        if value is None:
            self._warn(EVENT_SUMMARY, field, "no number found", text)
            return 0.0
        return value

    def apply_calculated_coverage(self, event: CalculatedCoverage) -> None:
        logger.info("Calculated Coverage: %s", event.text)
        value = extract_last_decimal(event.text)
        if value is None:
            reason = "value missing or not a string" if event.text is None else "no number found"
            self._warn(EVENT_CALCULATED_COVERAGE, EVENT_CALCULATED_COVERAGE, reason, event.text)
            return
        self.initial_coverage = value

    def apply_summary(self, event: Summary) -> None:
        logger.info("Final Coverage: %s", event.coverage_increased)
        if event.coverage_increased == COVERAGE_NOT_INCREASED:
            self.final_coverage = self.initial_coverage
        else:
            self.final_coverage = self._summary_field(FIELD_COVERAGE_INCREASED, event.coverage_increased)
        self.lines_covered = self._summary_field(FIELD_LINES_COVERED, event.lines_covered)
        self.total_lines = self._summary_field(FIELD_TOTAL_LINES, event.total_lines)
        self.tests_added = self._summary_field(FIELD_TESTS_ADDED, event.tests_added)

    def apply(self, event: StreamEvent) -> None:
        """Fold one event into the running state."""
        if isinstance(event, CalculatedCoverage):
            self.apply_calculated_coverage(event)
        elif isinstance(event, Summary):
            self.apply_summary(event)

    def result(self) -> Metrics:
        return Metrics(
            initial_coverage=self.initial_coverage,
            final_coverage=self.final_coverage,
            lines_covered=self.lines_covered,
            total_lines=self.total_lines,
            tests_added=self.tests_added,
        )


def reduce_events(events: Iterable[StreamEvent]) -> tuple[Metrics, list[FieldExtractionWarning]]:
    """
    Fold an event sequence into metrics.

    Args:
        events: Stream events of a single work item

    Returns:
        tuple: (Metrics, extraction warnings raised along the way)

    Raises:
        Whatever the event iterable raises (decode/transport errors pass through)
    """
    reducer = MetricsReducer()
    for event in events:
        reducer.apply(event)
    return reducer.result(), reducer.warnings
