from __future__ import annotations


class SuiteTracker:
    """Discovered names and suite bindings for a single file.

    Both collections keep insertion order; the binding table only ever grows.
    A tracker is built per file and dropped once its names are read.
    """

    def __init__(self) -> None:
        self._seen: dict[str, None] = {}
        self._runners_by_suite: dict[str, dict[str, None]] = {}

    def add_test(self, name: str) -> None:
        if name not in self._seen:
            self._seen[name] = None

    def suite_ran_by_test(self, suite_type: str, test_name: str) -> None:
        self._runners_by_suite.setdefault(suite_type, {})[test_name] = None

    def who_ran_suite_type(self, suite_type: str) -> tuple[str, ...]:
        return tuple(self._runners_by_suite.get(suite_type, ()))

    def seen_tests(self) -> list[str]:
        return sorted(self._seen)
