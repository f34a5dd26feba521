"""
Domain Value Objects

Defines immutable data structures for the outbound request, the decoded
stream events and the non-fatal extraction diagnostics.
"""

from dataclasses import dataclass, field
from typing import Union

from testgen_harness.domain.errors import RequestConstructionError


@dataclass(frozen=True)
class GenerationRequest:
    """Request payload sent to the generation service"""
    source_file_path: str
    root_dir: str
    additional_prompt: str = ""
    max_iterations: int = 0           # 0 = service default
    flakiness: bool = False
    function_under_test: str = ""
    expected_coverage: float = 0.0    # 0.0 = unset

    def __post_init__(self):
        if self.max_iterations < 0:
            raise RequestConstructionError("max_iterations must be non-negative")
        if not 0.0 <= self.expected_coverage <= 100.0:
            raise RequestConstructionError("expected_coverage must be between 0 and 100")

    def to_payload(self) -> dict:
        """Wire representation (camelCase keys)."""
        return {
            "sourceFilePath": self.source_file_path,
            "rootDir": self.root_dir,
            "additionalPrompt": self.additional_prompt,
            "maxIterations": self.max_iterations,
            "flakiness": self.flakiness,
            "functionUnderTest": self.function_under_test,
            "expectedCoverage": self.expected_coverage,
        }


@dataclass(frozen=True)
class CalculatedCoverage:
    """Progress event carrying the running coverage inside prose"""
    text: str | None


@dataclass(frozen=True)
class Summary:
    """Final event of a generation run"""
    coverage_increased: str | None
    lines_covered: str | None
    total_lines: str | None
    tests_added: str | None


@dataclass(frozen=True)
class UnknownEvent:
    """Any event kind that carries no metrics"""
    data_type: str | None
    payload: dict = field(default_factory=dict, compare=False)


StreamEvent = Union[CalculatedCoverage, Summary, UnknownEvent]


@dataclass(frozen=True)
class FieldExtractionWarning:
    """Non-fatal diagnostic: a field was missing or held no number"""
    event: str
    field: str
    reason: str
    text: str | None = None

    def __str__(self) -> str:
        return f"{self.event}.{self.field}: {self.reason} (value={self.text!r})"
