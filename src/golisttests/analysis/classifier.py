"""Shape-based classification of Go function declarations.

A function is a root test when it has no receiver, a ``Test`` prefixed name,
and exactly one parameter of type ``testing.T`` (by value or pointer). A
suite method is a ``Test`` prefixed method with no parameters. Everything
else, including prefixed functions of the wrong arity, is not a test.
"""

from __future__ import annotations

from enum import Enum

from tree_sitter import Node

from golisttests.analysis.type_resolution import first_identifier
from golisttests.config import ExtractionConfig
from golisttests.ingest.go_parser import named_children, node_text, walk_preorder
from golisttests.ingest.source_unit import FunctionDeclaration, SourceUnit

TEST_NAME_PREFIX = "Test"
TESTING_HANDLE_TYPE = "testing.T"
TESTIFY_SUITE_IMPORT = "github.com/stretchr/testify/suite"
SUITE_RUN_FUNCTION = "Run"


class FunctionKind(str, Enum):
    NOT_A_TEST = "not_a_test"
    ROOT_TEST = "root_test"
    SUITE_METHOD = "suite_method"


def is_test_name(name: str) -> bool:
    return name.startswith(TEST_NAME_PREFIX)


def has_receiver(fn: FunctionDeclaration) -> bool:
    return fn.receiver is not None


def has_receiver_and_no_arguments(fn: FunctionDeclaration) -> bool:
    return has_receiver(fn) and not fn.parameters


def is_single_argument_testing_t(fn: FunctionDeclaration) -> bool:
    if len(fn.parameters) != 1:
        return False
    return fn.parameters[0].name == TESTING_HANDLE_TYPE


def classify(fn: FunctionDeclaration) -> FunctionKind:
    if not is_test_name(fn.name):
        return FunctionKind.NOT_A_TEST
    if not has_receiver(fn) and is_single_argument_testing_t(fn):
        return FunctionKind.ROOT_TEST
    if has_receiver_and_no_arguments(fn):
        return FunctionKind.SUITE_METHOD
    return FunctionKind.NOT_A_TEST


def suite_runners(unit: SourceUnit, config: ExtractionConfig) -> frozenset[str]:
    runners = set(config.suite_runners)
    for local_name, import_path in unit.imports.items():
        if import_path == TESTIFY_SUITE_IMPORT and local_name not in ("_", "."):
            runners.add(f"{local_name}.{SUITE_RUN_FUNCTION}")
    return frozenset(runners)


def _suite_argument(unit: SourceUnit, call: Node, runners: frozenset[str]) -> Node | None:
    function = call.child_by_field_name("function")
    arguments = call.child_by_field_name("arguments")
    if function is None or arguments is None:
        return None
    if function.type != "selector_expression":
        return None
    callee = "".join(unit.text(function).split())
    if callee not in runners:
        return None
    args = named_children(arguments)
    if len(args) != 2:
        return None
    return args[1]


def find_suite_run_types(
    fn: FunctionDeclaration,
    unit: SourceUnit,
    config: ExtractionConfig,
) -> list[Node]:
    """First identifiers of the suites passed to run-suite calls, unique by name."""
    runners = suite_runners(unit, config)
    seen: set[str] = set()
    result: list[Node] = []
    for node in walk_preorder(fn.node):
        if node.type != "call_expression":
            continue
        argument = _suite_argument(unit, node, runners)
        if argument is None:
            continue
        ident = first_identifier(unit.source, argument, config.skip_identifiers)
        if ident is None:
            continue
        name = node_text(unit.source, ident)
        if name not in seen:
            seen.add(name)
            result.append(ident)
    return result


def is_suite_runner(
    fn: FunctionDeclaration, unit: SourceUnit, config: ExtractionConfig
) -> bool:
    return classify(fn) is FunctionKind.ROOT_TEST and bool(
        find_suite_run_types(fn, unit, config)
    )
