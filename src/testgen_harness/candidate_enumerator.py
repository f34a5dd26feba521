"""
Candidate Enumerator

Walks a project root and yields the source files to send for test generation.

Traversal order is fixed (a directory's files sorted by name, then its
subdirectories sorted by name) so that runs are reproducible and resumable.
Denylisted directories are pruned before descending, so their whole subtree
is skipped.
"""

import os
from pathlib import Path
from typing import Iterator

from testgen_harness.domain.constants import DEFAULT_EXCLUDE_DIRS, DEFAULT_SOURCE_EXTENSIONS
from testgen_harness.domain.entities import WorkItem

PACKAGE_INIT = "__init__.py"


def is_test_file(file_name: str) -> bool:
    """Return True for test modules (test_*.py / *_test.py)."""
    stem = Path(file_name).stem
    return stem.startswith("test_") or stem.endswith("_test")


def _is_candidate(file_name: str, extensions: tuple[str, ...]) -> bool:
    if not file_name.endswith(extensions):
        return False
    if file_name == PACKAGE_INIT:
        return False
    return not is_test_file(file_name)


def relative_to_root(path: str, root_dir: str) -> str:
    """
    Express a path relative to the root, "/"-separated.

    Falls back to the absolute path when it does not live under the root.
    """
    try:
        return Path(path).relative_to(root_dir).as_posix()
    except ValueError:
        return path


def enumerate_work_items(
    root_dir: str | Path,
    exclude_dirs: list[str] | None = None,
    source_extensions: list[str] | None = None,
) -> Iterator[WorkItem]:
    """
    Lazily enumerate work items under a root directory.

    Args:
        root_dir: Project root
        exclude_dirs: Directory names whose subtree is skipped
        source_extensions: File suffixes that count as source files

    Yields:
        WorkItem: In stable traversal order
    """
    root = str(Path(root_dir).resolve())
    excluded = set(DEFAULT_EXCLUDE_DIRS if exclude_dirs is None else exclude_dirs)
    extensions = tuple(DEFAULT_SOURCE_EXTENSIONS if source_extensions is None else source_extensions)

    for dirpath, dirnames, filenames in os.walk(root):
        # In-place so os.walk never descends into excluded subtrees
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for file_name in sorted(filenames):
            if not _is_candidate(file_name, extensions):
                continue
            path = os.path.join(dirpath, file_name)
            yield WorkItem(path=path, relative_path=relative_to_root(path, root))
