"""
Domain Layer

Defines constants, entities, value objects and errors that form the core of the harness.
Has no dependencies on external libraries.
"""

from testgen_harness.domain.constants import (
    COVERAGE_NOT_INCREASED,
    DEFAULT_API_URL,
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_SOURCE_EXTENSIONS,
    REPORT_COLUMNS,
)
from testgen_harness.domain.entities import (
    BatchRecord,
    BatchSummary,
    ItemFailure,
    Metrics,
    WorkItem,
)
from testgen_harness.domain.errors import (
    HarnessError,
    NonSuccessStatusError,
    RequestConstructionError,
    SinkWriteError,
    StreamCancelledError,
    StreamDecodeError,
    TransportError,
    WorkItemError,
)
from testgen_harness.domain.value_objects import (
    CalculatedCoverage,
    FieldExtractionWarning,
    GenerationRequest,
    StreamEvent,
    Summary,
    UnknownEvent,
)

__all__ = [
    # constants
    "COVERAGE_NOT_INCREASED",
    "DEFAULT_API_URL",
    "DEFAULT_EXCLUDE_DIRS",
    "DEFAULT_OUTPUT_PATH",
    "DEFAULT_SOURCE_EXTENSIONS",
    "REPORT_COLUMNS",
    # entities
    "BatchRecord",
    "BatchSummary",
    "ItemFailure",
    "Metrics",
    "WorkItem",
    # errors
    "HarnessError",
    "NonSuccessStatusError",
    "RequestConstructionError",
    "SinkWriteError",
    "StreamCancelledError",
    "StreamDecodeError",
    "TransportError",
    "WorkItemError",
    # value objects
    "CalculatedCoverage",
    "FieldExtractionWarning",
    "GenerationRequest",
    "StreamEvent",
    "Summary",
    "UnknownEvent",
]
