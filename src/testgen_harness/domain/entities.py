"""
Domain Entities

Defines the primary data structures used while driving a batch run.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass(frozen=True)
class WorkItem:
    """One source file scheduled for test generation"""
    path: str           # Absolute path
    relative_path: str  # Path relative to the project root ("/"-separated)


@dataclass(frozen=True)
class Metrics:
    """Per-file coverage metrics folded from the response stream"""
    initial_coverage: float = 0.0
    final_coverage: float = 0.0
    lines_covered: float = 0.0
    total_lines: float = 0.0
    tests_added: float = 0.0


@dataclass(frozen=True)
class BatchRecord:
    """One row of the result table"""
    relative_path: str
    metrics: Metrics
    start_time: datetime
    end_time: datetime | None

    @property
    def duration(self) -> timedelta | None:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    def to_row(self) -> dict:
        """Flatten into a table row (column order follows REPORT_COLUMNS)."""
        duration = self.duration
        return {
            "relative_path": self.relative_path,
            "initial_coverage": self.metrics.initial_coverage,
            "final_coverage": self.metrics.final_coverage,
            "lines_covered": self.metrics.lines_covered,
            "total_lines": self.metrics.total_lines,
            "tests_added": self.metrics.tests_added,
            "duration_seconds": round(duration.total_seconds(), 3) if duration is not None else None,
            "start_time": self.start_time.isoformat(timespec="seconds"),
            "end_time": self.end_time.isoformat(timespec="seconds") if self.end_time else None,
        }


@dataclass(frozen=True)
class ItemFailure:
    """A work item that produced no record"""
    relative_path: str
    error: str


@dataclass
class BatchSummary:
    """Outcome of a whole batch run"""
    started_at: datetime
    finished_at: datetime | None = None
    records: list[BatchRecord] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)
    persist_failures: int = 0

    @property
    def elapsed(self) -> timedelta | None:
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    @property
    def processed(self) -> int:
        return len(self.records) + len(self.failures)
