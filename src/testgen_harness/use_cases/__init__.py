"""
Use Cases Layer

Aggregates business logic and provides use cases called from the runner.
"""

from testgen_harness.use_cases.batch import BatchDriver, BatchState

__all__ = ["BatchDriver", "BatchState"]
