from __future__ import annotations

from dataclasses import dataclass

from golisttests.budget import Deadline, FileQuota, LimitedBudget
from golisttests.config import WalkConfig
from golisttests.exceptions import DeadlineExpired, FileQuotaExhausted
from golisttests.walker import is_test_filename, iter_test_files, list_test_names, sort_uniq


def _root_test(name: str) -> str:
    return f"package test\nfunc {name}(t *testing.T) {{}}\n"


def test_is_test_filename() -> None:
    assert is_test_filename("main_test.go")
    assert not is_test_filename("main.go")
    assert not is_test_filename("main_test.go.orig")
    assert is_test_filename("spec.go", suffix=".go")


def test_sort_uniq() -> None:
    assert sort_uniq(["b", "a", "b"]) == ["a", "b"]


def test_walk_collects_sorted_unique_names(spit, tmp_path) -> None:
    spit(_root_test("TestB"), name="b_test.go")
    spit(_root_test("TestA") + _root_test("TestB")[len("package test\n"):], name="a_test.go")
    spit(_root_test("TestNested"), directory=tmp_path / "pkg" / "inner")
    spit(_root_test("TestNotATestFile"), name="helpers.go")
    result = list_test_names(tmp_path)
    assert result.ok
    assert result.names == ["TestA", "TestB", "TestNested"]
    assert result.files_scanned == 3


def test_walk_skips_excluded_directories(spit, tmp_path) -> None:
    spit(_root_test("TestKept"))
    for skipped in ("vendor", "testdata", ".git", "_build"):
        spit(_root_test("TestSkipped"), directory=tmp_path / skipped)
    spit(_root_test("TestCustomSkip"), directory=tmp_path / "generated")
    config = WalkConfig(exclude_dirs=frozenset({"vendor", "testdata", "generated"}))
    assert list_test_names(tmp_path, walk=config).names == ["TestKept"]
    assert "TestCustomSkip" in list_test_names(tmp_path).names


def test_walk_continues_past_broken_file(spit, tmp_path) -> None:
    spit("package test\nfunc TestBroken(t *testing.T) {\n", name="a_test.go")
    spit(_root_test("TestAfter"), name="b_test.go")
    result = list_test_names(tmp_path)
    assert result.ok
    assert result.names == ["TestAfter"]
    assert result.files_scanned == 2


def test_single_file_root(spit, tmp_path) -> None:
    path = spit(_root_test("TestOnly"), name="only_test.go")
    spit(_root_test("TestOther"), name="other_test.go")
    assert list_test_names(path).names == ["TestOnly"]
    assert list(iter_test_files(tmp_path / "missing_test.go", WalkConfig())) == []


def test_quota_of_one_stops_after_first_file(spit, tmp_path) -> None:
    spit(_root_test("TestFirst"), name="a_test.go")
    spit(_root_test("TestSecond"), name="b_test.go")
    config = WalkConfig(limit=True, max_files=1)
    result = list_test_names(tmp_path, walk=config)
    assert isinstance(result.error, FileQuotaExhausted)
    assert not result.ok
    assert result.names == ["TestFirst"]
    assert result.files_scanned == 1


@dataclass
class _ManualClock:
    now: int = 0

    def get_mark(self) -> int:
        return self.now


class _AdvancingBudget(LimitedBudget):
    """Moves the injected clock past the deadline after the first file."""

    def tick(self) -> None:
        super().tick()
        self.deadline.clock.now += self.deadline.timeout_ms * 1_000_000


def test_deadline_stops_walk(spit, tmp_path) -> None:
    spit(_root_test("TestFirst"), name="a_test.go")
    spit(_root_test("TestSecond"), name="b_test.go")
    budget = _AdvancingBudget(
        quota=FileQuota(limit=100),
        deadline=Deadline.from_timeout_ms(10, clock=_ManualClock()),
    )
    result = list_test_names(tmp_path, budget)
    assert isinstance(result.error, DeadlineExpired)
    assert result.names == ["TestFirst"]
