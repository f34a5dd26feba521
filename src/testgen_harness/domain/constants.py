"""
Domain Constants

Centrally manages constants shared across the test-generation harness.
"""

# Generation service endpoint
DEFAULT_API_URL = "http://localhost:4407/api/generate"

# Directory names whose whole subtree is skipped during enumeration
DEFAULT_EXCLUDE_DIRS = ["venv", "migrations", "__pycache__"]

# Source file suffixes considered as work items
DEFAULT_SOURCE_EXTENSIONS = [".py"]

DEFAULT_OUTPUT_PATH = "execution_log.csv"

# Stream event discriminator and variant tags
DATA_TYPE_FIELD = "dataType"
EVENT_CALCULATED_COVERAGE = "calculatedCoverage"
EVENT_SUMMARY = "summary"

# Summary variant fields
FIELD_COVERAGE_INCREASED = "coverageIncreased"
FIELD_LINES_COVERED = "linesCovered"
FIELD_TOTAL_LINES = "totalLines"
FIELD_TESTS_ADDED = "testAdded"

# Sent by the service when a run did not improve coverage
COVERAGE_NOT_INCREASED = "Coverage did not increase"

# Result table column order
REPORT_COLUMNS = [
    "relative_path",
    "initial_coverage",
    "final_coverage",
    "lines_covered",
    "total_lines",
    "tests_added",
    "duration_seconds",
    "start_time",
    "end_time",
]
