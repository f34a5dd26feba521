"""
Result Sink

Append-only result table backed by a CSV file.

Every append rewrites the whole table to a temporary file in the same
directory, fsyncs it and atomically replaces the target, so a reader sees
either the table before the append or the table after it, never a partial row.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd

from testgen_harness.domain.constants import REPORT_COLUMNS
from testgen_harness.domain.entities import BatchRecord
from testgen_harness.domain.errors import SinkWriteError

logger = logging.getLogger(__name__)


class ResultSink(ABC):
    """Durable, append-only destination for batch records"""

    @abstractmethod
    def append(self, record: BatchRecord) -> None:
        """
        Persist one record before returning.

        Raises:
            SinkWriteError: If the record could not be made durable
        """
        pass


def load_existing_rows(path: Path) -> list[dict]:
    """
    Load rows from an existing result table.

    Args:
        path: Path to the CSV file

    Returns:
        list[dict]: Rows in file order (empty if the file is missing or empty)
    """
    if not path.exists():
        return []
    try:
        df = pd.read_csv(path)
    except pd.errors.EmptyDataError:
        return []
    if df.empty:
        return []
    # NaN -> None so missing end times round-trip
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict("records")


class CsvResultSink(ResultSink):
    """Result table rewritten atomically after every appended record"""

    def __init__(self, path: str | Path, existing_rows: list[dict] | None = None):
        """
        Args:
            path: Output CSV path
            existing_rows: Rows to keep at the head of the table (resume)
        """
        self.path = Path(path)
        self.rows: list[dict] = list(existing_rows or [])

    @classmethod
    def resume(cls, path: str | Path) -> "CsvResultSink":
        """Open a sink that keeps the rows already stored at path."""
        path = Path(path)
        return cls(path, existing_rows=load_existing_rows(path))

    def recorded_paths(self) -> set[str]:
        return {str(row["relative_path"]) for row in self.rows}

    def _write(self) -> None:
        df = pd.DataFrame(self.rows, columns=REPORT_COLUMNS)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        with open(tmp_path, "w", encoding="utf-8", newline="") as fh:
            df.to_csv(fh, index=False)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, self.path)

    def append(self, record: BatchRecord) -> None:
        # The row stays buffered even if this write fails; the next append rewrites it
        self.rows.append(record.to_row())
        try:
            self._write()
        except OSError as e:
            raise SinkWriteError(f"failed to save results to {self.path}: {e}") from e
        logger.info("Saved %d rows to %s", len(self.rows), self.path)
