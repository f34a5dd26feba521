"""
testgen-harness CLI Runner

Sends every source file under a project root to the test-generation service
and records the coverage metrics of each run in a CSV table.

Usage:
    python -m testgen_harness.runner --root path/to/project
    python -m testgen_harness.runner --root path/to/project --api-url http://localhost:4407/api/generate

Resume a previous run (skips files already in the output table):
    python -m testgen_harness.runner --root path/to/project --output execution_log.csv --resume
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

from testgen_harness.candidate_enumerator import enumerate_work_items
from testgen_harness.domain.entities import WorkItem
from testgen_harness.harness_config import load_config
from testgen_harness.infrastructure.generation_clients import create_client
from testgen_harness.infrastructure.result_sink import CsvResultSink
from testgen_harness.use_cases.batch import BatchDriver


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="testgen-harness: Drive a test-generation service over a project and record coverage",
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Project root to scan for source files (default: current directory)",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        help="Generation endpoint (default: TESTGEN_API_URL from .env)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output CSV path (default: TESTGEN_OUTPUT_PATH from .env)",
    )
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Keep existing rows in the output and skip files already recorded",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the candidate files without contacting the service",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level (default: WARNING)",
    )
    return parser.parse_args(argv)


def _pending_items(items: list[WorkItem], recorded: set[str]) -> list[WorkItem]:
    """Drop work items whose relative path is already in the table."""
    return [item for item in items if item.relative_path not in recorded]


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Load config
    config = load_config()
    root_dir = str(Path(args.root).resolve())
    output_path = Path(args.output or config.output.output_path)

    # Enumerate candidates
    print(f"\n=== Scanning: {root_dir} ===\n")
    items = list(enumerate_work_items(
        root_dir,
        exclude_dirs=config.enumeration.exclude_dirs,
        source_extensions=config.enumeration.source_extensions,
    ))
    print(f"  Files: {len(items)}")
    print(f"  Excluded dirs: {config.enumeration.exclude_dirs}")
    print(f"  Output: {output_path}")
    print()

    if args.dry_run:
        for item in items:
            print(f"  {item.relative_path}")
        return

    # Resume: load existing rows
    if args.resume:
        sink = CsvResultSink.resume(output_path)
        recorded = sink.recorded_paths()
        if recorded:
            items = _pending_items(items, recorded)
            print(f"=== Resuming: {len(recorded)} files already recorded, {len(items)} remaining ===\n")
    else:
        sink = CsvResultSink(output_path)

    client = create_client(config, api_url=args.api_url)
    driver = BatchDriver(
        client=client,
        sink=sink,
        root_dir=root_dir,
        request_defaults=config.request,
    )

    print(f"=== Generating Tests ({len(items)} files) ===\n")
    try:
        summary = driver.run(items, total=len(items))
    finally:
        client.close()

    print("\n=== Summary ===\n")
    print(f"  Execution completed at: {summary.finished_at.isoformat(timespec='seconds')}")
    print(f"  Total Execution Time: {summary.elapsed}")
    print(f"  Succeeded: {len(summary.records)}")
    print(f"  Failed: {len(summary.failures)}")
    for failure in summary.failures:
        print(f"    - {failure.relative_path}")
    if summary.persist_failures:
        print(f"  WARNING: {summary.persist_failures} save(s) failed; check {output_path}")
    print(f"  Results saved as {output_path}")
    print()


if __name__ == "__main__":
    main()
