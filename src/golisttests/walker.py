from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from golisttests.budget import ExecutionBudget, LimitedBudget, UnlimitedBudget
from golisttests.config import DEFAULT_FILE_SUFFIX, ExtractionConfig, WalkConfig
from golisttests.driver import extract_file_test_names
from golisttests.exceptions import BudgetExceeded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkResult:
    names: list[str]
    files_scanned: int
    error: BudgetExceeded | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def is_test_filename(name: str, suffix: str = DEFAULT_FILE_SUFFIX) -> bool:
    return name.endswith(suffix)


def _skip_directory(name: str, config: WalkConfig) -> bool:
    return name.startswith((".", "_")) or name in config.exclude_dirs


def iter_test_files(root: Path, config: WalkConfig) -> Iterator[Path]:
    """Candidate test files under ``root`` in a stable, sorted order."""
    if root.is_file():
        if is_test_filename(root.name, config.file_suffix):
            yield root
        return
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not _skip_directory(name, config))
        for filename in sorted(filenames):
            if is_test_filename(filename, config.file_suffix):
                yield Path(dirpath) / filename


def budget_for(config: WalkConfig) -> ExecutionBudget:
    if config.limit:
        return LimitedBudget.from_limits(config.max_files, config.max_execution_ms)
    return UnlimitedBudget()


def sort_uniq(names: list[str] | set[str]) -> list[str]:
    return sorted(set(names))


def list_test_names(
    root: Path,
    budget: ExecutionBudget | None = None,
    *,
    extraction: ExtractionConfig | None = None,
    walk: WalkConfig | None = None,
) -> WalkResult:
    """Every test name under ``root``, sorted and de-duplicated.

    The budget is ticked before each candidate file. When it runs out the walk
    stops and the names gathered so far come back together with the error.
    """
    walk_config = walk or WalkConfig()
    limiter = budget if budget is not None else budget_for(walk_config)
    collected: set[str] = set()
    scanned = 0
    for path in iter_test_files(root, walk_config):
        try:
            limiter.tick()
        except BudgetExceeded as exc:
            logger.debug("walk stopped before %s: %s", path, exc)
            return WalkResult(names=sort_uniq(collected), files_scanned=scanned, error=exc)
        collected.update(extract_file_test_names(path, extraction))
        scanned += 1
    return WalkResult(names=sort_uniq(collected), files_scanned=scanned)
