from __future__ import annotations

from golisttests.analysis.suite_tracker import SuiteTracker


def test_add_test_dedupes_and_sorts() -> None:
    tracker = SuiteTracker()
    tracker.add_test("TestB")
    tracker.add_test("TestA")
    tracker.add_test("TestB")
    assert tracker.seen_tests() == ["TestA", "TestB"]


def test_binding_table_grows_per_suite_type() -> None:
    tracker = SuiteTracker()
    assert tracker.who_ran_suite_type("someType") == ()
    tracker.suite_ran_by_test("someType", "TestSampleSuite")
    tracker.suite_ran_by_test("someType", "TestOther")
    tracker.suite_ran_by_test("someType", "TestSampleSuite")
    tracker.suite_ran_by_test("otherType", "TestOther")
    assert tracker.who_ran_suite_type("someType") == ("TestSampleSuite", "TestOther")
    assert tracker.who_ran_suite_type("otherType") == ("TestOther",)


def test_fresh_trackers_share_nothing() -> None:
    first = SuiteTracker()
    first.add_test("TestA")
    first.suite_ran_by_test("S", "TestA")
    second = SuiteTracker()
    assert second.seen_tests() == []
    assert second.who_ran_suite_type("S") == ()
