"""Declaration-driven extraction: root tests, suite runners and suite methods."""

from __future__ import annotations

import logging
from pathlib import Path

from golisttests.analysis.classifier import FunctionKind, classify, find_suite_run_types
from golisttests.analysis.suite_tracker import SuiteTracker
from golisttests.config import ExtractionConfig
from golisttests.ingest.source_unit import SourceUnit, load_source_unit

logger = logging.getLogger(__name__)

# A runner may be declared before or after the methods of the suite it runs;
# two full passes make every binding visible to every lookup.
SCAN_PASSES = 2


def extract_from_unit(unit: SourceUnit, config: ExtractionConfig) -> list[str]:
    tracker = SuiteTracker()
    functions = unit.top_level_functions()

    def scan() -> None:
        for fn in functions:
            kind = classify(fn)
            if kind is FunctionKind.ROOT_TEST:
                tracker.add_test(fn.name)
                for ident in find_suite_run_types(fn, unit, config):
                    resolution = unit.resolve_identifier_type(ident)
                    if resolution.type_name:
                        tracker.suite_ran_by_test(resolution.type_name, fn.name)
            elif kind is FunctionKind.SUITE_METHOD and fn.receiver is not None:
                for runner in tracker.who_ran_suite_type(fn.receiver.type_name):
                    tracker.add_test(f"{runner}/{fn.name}")

    for _ in range(SCAN_PASSES):
        scan()
    return tracker.seen_tests()


def extract_test_names(path: Path, config: ExtractionConfig | None = None) -> list[str]:
    """Names found through declarations; raises ParseFailure for bad files."""
    unit = load_source_unit(path)
    names = extract_from_unit(unit, config or ExtractionConfig())
    logger.debug("ast strategy: %d name(s) in %s", len(names), path)
    return names
