"""
Request Builder

Turns a work item and the run-wide defaults into a generation request.
"""

from testgen_harness.domain.entities import WorkItem
from testgen_harness.domain.value_objects import GenerationRequest
from testgen_harness.harness_config import RequestDefaults


def build_request(
    item: WorkItem,
    root_dir: str,
    defaults: RequestDefaults | None = None,
) -> GenerationRequest:
    """
    Build the request for a single work item.

    Args:
        item: Work item to send
        root_dir: Project root reported to the service
        defaults: Run-wide request values (library defaults if not specified)

    Returns:
        GenerationRequest: A fresh request, never shared across items

    Raises:
        RequestConstructionError: If the defaults hold out-of-range values
    """
    defaults = defaults or RequestDefaults()
    return GenerationRequest(
        source_file_path=item.path,
        root_dir=root_dir,
        additional_prompt=defaults.additional_prompt,
        max_iterations=defaults.max_iterations,
        flakiness=defaults.flakiness,
        function_under_test=defaults.function_under_test,
        expected_coverage=defaults.expected_coverage,
    )
