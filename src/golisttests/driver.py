from __future__ import annotations

import concurrent.futures
import logging
from pathlib import Path
from typing import Callable

from golisttests.analysis import ast_strategy, pattern_strategy
from golisttests.config import ExtractionConfig
from golisttests.exceptions import ParseFailure

logger = logging.getLogger(__name__)

Strategy = Callable[[Path], list[str]]


def _degrade_on_parse_failure(name: str, strategy: Strategy, path: Path) -> list[str]:
    try:
        return strategy(path)
    except ParseFailure as exc:
        logger.debug("%s strategy skipped %s: %s", name, path, exc.reason)
        return []


def extract_file_test_names(
    path: Path, config: ExtractionConfig | None = None
) -> set[str]:
    """Union of both strategies' names for one file.

    The strategies share no state and run as a two-task fork-join; a parse
    failure empties only the strategy that hit it.
    """
    extraction = config or ExtractionConfig()
    strategies: dict[str, Strategy] = {
        "ast": lambda target: ast_strategy.extract_test_names(target, extraction),
        "pattern": pattern_strategy.extract_test_names,
    }
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=len(strategies), thread_name_prefix="golisttests-extract"
    ) as executor:
        futures = [
            executor.submit(_degrade_on_parse_failure, name, strategy, path)
            for name, strategy in strategies.items()
        ]
        names: set[str] = set()
        for future in futures:
            names.update(future.result())
    return names
