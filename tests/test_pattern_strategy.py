from __future__ import annotations

import pytest

from golisttests.analysis import pattern_strategy
from golisttests.analysis.pattern_strategy import sanitize
from golisttests.exceptions import ParseFailure
from tests.go_helpers import must_parse


def _names(code: str) -> list[str]:
    unit = must_parse(code)
    return sorted(pattern_strategy.scan_tree(unit.source, unit.tree))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('"device event"', "device_event"),
        ('"works"', "works"),
        ("`raw name`", "raw_name"),
        ('"say \\"hi\\""', "say_hi"),
        ('"back\\\\slash"', "back\\slash"),
    ],
)
def test_sanitize(raw: str, expected: str) -> None:
    assert sanitize(raw) == expected


def test_string_literal_subtest() -> None:
    assert _names(
        """
        package test
        func TestWeb(t *testing.T) {
        	t.Run("works", func(t *testing.T) {
        	})
        }
        """
    ) == ["TestWeb/works"]


def test_struct_literal_table_subtest() -> None:
    assert _names(
        """
        package test
        func TestWeb(t *testing.T) {
        	tests := []struct {
        		name         string
        		path         string
        		data         []byte
        		expectedType EventType
        	}{
        		{
        			name:         "device event",
        			path:         "/api/timon/v1/onDeviceEvent",
        			data:         MakeDeviceEventStartCall(t, "hillary"),
        			expectedType: DeviceEvent,
        		},
        	}

        	for _, tc := range tests {
        		t.Run(tc.name, func(t *testing.T) {
        		})
        	}
        }
        """
    ) == ["TestWeb/device_event"]


def test_raw_and_escaped_literal_names() -> None:
    assert _names(
        """
        package test
        func TestWeb(t *testing.T) {
        	t.Run(`raw name`, func(t *testing.T) {})
        	t.Run("say \\"hi\\"", func(t *testing.T) {})
        }
        """
    ) == ["TestWeb/raw_name", "TestWeb/say_hi"]


def test_nested_literal_subtests_carry_full_path() -> None:
    assert _names(
        """
        package test
        func TestWeb(t *testing.T) {
        	t.Run("outer", func(t *testing.T) {
        		t.Run("inner", func(t *testing.T) {})
        	})
        }
        """
    ) == ["TestWeb/outer", "TestWeb/outer/inner"]


def test_positional_rows_use_struct_field_order() -> None:
    assert _names(
        """
        package test
        func TestWeb(t *testing.T) {
        	cases := []struct {
        		name string
        		want int
        	}{
        		{"first", 1},
        		{"second", 2},
        	}
        	for _, tc := range cases {
        		t.Run(tc.name, func(t *testing.T) {})
        	}
        }
        """
    ) == ["TestWeb/first", "TestWeb/second"]


def test_map_table_rows() -> None:
    assert _names(
        """
        package test
        func TestWeb(t *testing.T) {
        	cases := map[string]struct {
        		name string
        	}{
        		"key": {name: "mapped row"},
        	}
        	for _, tc := range cases {
        		t.Run(tc.name, func(t *testing.T) {})
        	}
        }
        """
    ) == ["TestWeb/mapped_row"]


def test_package_level_table() -> None:
    assert _names(
        """
        package test
        var cases = []struct {
        	title string
        }{
        	{title: "from package"},
        }
        func TestWeb(t *testing.T) {
        	for _, tt := range cases {
        		t.Run(tt.title, func(t *testing.T) {})
        	}
        }
        """
    ) == ["TestWeb/from_package"]


def test_only_the_selected_field_names_the_subtest() -> None:
    assert _names(
        """
        package test
        func TestWeb(t *testing.T) {
        	cases := []struct {
        		name string
        		path string
        	}{
        		{name: "picked", path: "/ignored"},
        	}
        	for _, tc := range cases {
        		t.Run(tc.name, func(t *testing.T) {})
        	}
        }
        """
    ) == ["TestWeb/picked"]


@pytest.mark.parametrize(
    "code",
    [
        # selector does not use the loop variable
        """
        package test
        func TestWeb(t *testing.T) {
        	cases := []struct{ name string }{{name: "a"}}
        	for _, tc := range cases {
        		t.Run(other.name, func(t *testing.T) {})
        	}
        }
        """,
        # dynamic name outside any table loop
        """
        package test
        func TestWeb(t *testing.T) {
        	name := "computed"
        	t.Run(name, func(t *testing.T) {})
        }
        """,
        # not a root test function
        """
        package test
        func helper(t *testing.T) {
        	t.Run("hidden", func(t *testing.T) {})
        }
        """,
        # Test-prefixed but with extra parameters, so never a root test
        """
        package test
        func TestHelper(t *testing.T, n int) {
        	t.Run("x", func(t *testing.T) {})
        }
        """,
        # benchmark-shaped handle
        """
        package test
        func TestBench(b *testing.B) {
        	b.Run("y", func(b *testing.B) {})
        }
        """,
        # sub-tests inside methods are not addressable by name
        """
        package test
        func (s *Suite) TestMethod() {
        	s.Run("inside", func() {})
        }
        """,
        # some other method named like a sub-test call
        """
        package test
        func TestWeb(t *testing.T) {
        	t.Go("nope", func(t *testing.T) {})
        }
        """,
    ],
)
def test_calls_that_do_not_produce_names(code: str) -> None:
    assert _names(code) == []


def test_literal_under_dynamic_parent_is_dropped() -> None:
    assert _names(
        """
        package test
        func TestWeb(t *testing.T) {
        	cases := []struct{ name string }{{name: "row"}}
        	for _, tc := range cases {
        		t.Run(tc.name, func(t *testing.T) {
        			t.Run("inner", func(t *testing.T) {})
        		})
        	}
        }
        """
    ) == ["TestWeb/row"]


def test_extract_test_names_reads_file(spit) -> None:
    path = spit(
        """
        package test
        func TestWeb(t *testing.T) {
        	t.Run("works", func(t *testing.T) {})
        }
        """
    )
    assert pattern_strategy.extract_test_names(path) == ["TestWeb/works"]


def test_extract_test_names_raises_parse_failure(spit) -> None:
    broken = spit("package test\nfunc TestWeb(t *testing.T) {\n\tt.Run(\"x\",\n")
    with pytest.raises(ParseFailure):
        pattern_strategy.extract_test_names(broken)
