"""Pattern-driven extraction of dynamically named sub-tests.

Two call shapes are recognised: ``t.Run("literal", ...)`` and
``t.Run(tc.field, ...)`` inside a range loop over a table of struct literals.
Sub-test names are composed the way ``testing.T.Run`` composes them.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from tree_sitter import Node, Tree

from golisttests.analysis.classifier import FunctionKind, classify
from golisttests.analysis.syntax_matcher import SyntaxPattern, iter_matches, load_pattern
from golisttests.analysis.type_resolution import SEQUENCE_TYPES, find_binding, type_name
from golisttests.ingest.go_parser import (
    named_children,
    node_text,
    parse_go_source,
    read_source,
    unwrap_element,
)
from golisttests.ingest.source_unit import declaration_from_node
from golisttests.invariants import require_not_none

logger = logging.getLogger(__name__)

STRING_LITERAL_PATTERN = "run_string_literal.scm"
STRUCT_LITERAL_PATTERN = "run_struct_literal.scm"
SUBTEST_METHOD = "Run"

_STRING_LITERALS = frozenset({"interpreted_string_literal", "raw_string_literal"})
_ESCAPED_QUOTE_RE = re.compile(r'\\(["\\])')


def sanitize(text: str) -> str:
    text = _ESCAPED_QUOTE_RE.sub(r"\1", text)
    text = text.replace('"', "").replace("`", "")
    return text.replace(" ", "_")


def _enclosing_run_call(source: bytes, func_literal: Node) -> Node | None:
    arguments = func_literal.parent
    if arguments is None or arguments.type != "argument_list":
        return None
    call = arguments.parent
    if call is None or call.type != "call_expression":
        return None
    function = call.child_by_field_name("function")
    if function is None or function.type != "selector_expression":
        return None
    method = function.child_by_field_name("field")
    if node_text(source, method) != SUBTEST_METHOD:
        return None
    args = named_children(arguments)
    if len(args) != 2 or args[1] != func_literal:
        return None
    return args[0]


def subtest_parent(source: bytes, call: Node) -> tuple[str, str] | None:
    """(root function name, parent test path) of a ``Run`` call.

    Enclosing ``Run`` calls with literal names contribute path segments. The
    parent is unknown under a dynamically named ``Run`` and under any
    declaration that is not a root test.
    """
    segments: list[str] = []
    node = call.parent
    while node is not None:
        if node.type == "func_literal":
            name_node = _enclosing_run_call(source, node)
            if name_node is not None:
                if name_node.type not in _STRING_LITERALS:
                    return None
                segments.append(sanitize(node_text(source, name_node)))
        elif node.type == "function_declaration":
            if classify(declaration_from_node(source, node)) is not FunctionKind.ROOT_TEST:
                return None
            name = require_not_none(
                node.child_by_field_name("name"), reason="function declaration without name"
            )
            func_name = node_text(source, name)
            return func_name, "/".join([func_name, *reversed(segments)])
        elif node.type == "method_declaration":
            return None
        node = node.parent
    return None


def _struct_field_names(source: bytes, table_type: Node | None) -> list[str]:
    if table_type is None:
        return []
    if table_type.type in SEQUENCE_TYPES:
        table_type = table_type.child_by_field_name("element")
    elif table_type.type == "map_type":
        table_type = table_type.child_by_field_name("value")
    if table_type is None or table_type.type != "struct_type":
        return []
    fields: list[str] = []
    for declarations in named_children(table_type):
        if declarations.type != "field_declaration_list":
            continue
        for declaration in named_children(declarations):
            if declaration.type != "field_declaration":
                continue
            names = declaration.children_by_field_name("name")
            if names:
                fields.extend(node_text(source, name) for name in names)
            else:
                embedded = declaration.child_by_field_name("type")
                if embedded is not None:
                    fields.append(type_name(source, embedded).rsplit(".", 1)[-1])
    return fields


def _row_candidates(
    source: bytes, row: Node, fields: list[str]
) -> Iterator[dict[str, str]]:
    for position, element in enumerate(named_children(row)):
        if element.type == "keyed_element":
            parts = named_children(element)
            if len(parts) != 2:
                continue
            key = node_text(source, unwrap_element(parts[0]))
            value = unwrap_element(parts[1])
        elif position < len(fields):
            key = fields[position]
            value = unwrap_element(element)
        else:
            continue
        if value.type in _STRING_LITERALS:
            yield {"row.key": key, "test.name": node_text(source, value)}


def _table_rows(table: Node) -> Iterator[Node]:
    body = table.child_by_field_name("body")
    if body is None:
        return
    for element in named_children(body):
        row = element
        if row.type == "keyed_element":
            row = named_children(row)[-1]
        row = unwrap_element(row)
        if row.type == "composite_literal":
            row = row.child_by_field_name("body")
        if row is not None and row.type == "literal_value":
            yield row


def _resolve_table(source: bytes, expr: Node) -> Node | None:
    while expr.type == "parenthesized_expression":
        inner = named_children(expr)
        if not inner:
            return None
        expr = inner[0]
    if expr.type == "composite_literal":
        return expr
    if expr.type != "identifier":
        return None
    binding = find_binding(source, expr)
    if binding is None or binding.value_node is None:
        return None
    value = binding.value_node
    return value if value.type == "composite_literal" else None


def _range_loop(source: bytes, loop: Node) -> tuple[str, Node] | None:
    clause = next(
        (child for child in named_children(loop) if child.type == "range_clause"), None
    )
    if clause is None:
        return None
    left = clause.child_by_field_name("left")
    right = clause.child_by_field_name("right")
    if left is None or right is None:
        return None
    variables = named_children(left)
    if len(variables) < 2:
        return None
    return node_text(source, variables[1]), right


def table_candidates(source: bytes, call: Node) -> Iterator[dict[str, str]]:
    """Capture candidates for every enclosing range loop and table row."""
    node = call.parent
    while node is not None and node.type != "function_declaration":
        if node.type == "for_statement":
            loop = _range_loop(source, node)
            table = _resolve_table(source, loop[1]) if loop is not None else None
            if loop is not None and table is not None:
                fields = _struct_field_names(source, table.child_by_field_name("type"))
                for row in _table_rows(table):
                    for candidate in _row_candidates(source, row, fields):
                        yield {"loop.var": loop[0], **candidate}
        node = node.parent


def _scan_string_literal(source: bytes, root: Node, pattern: SyntaxPattern) -> Iterator[str]:
    for match in iter_matches(pattern, root):
        parent = subtest_parent(source, match.nodes["run.call"])
        if parent is None:
            continue
        captures = match.texts(source)
        captures["func.name"] = parent[0]
        if pattern.accepts(captures):
            yield f"{parent[1]}/{sanitize(captures['test.name'])}"


def _scan_struct_literal(source: bytes, root: Node, pattern: SyntaxPattern) -> Iterator[str]:
    for match in iter_matches(pattern, root):
        call = match.nodes["run.call"]
        parent = subtest_parent(source, call)
        if parent is None:
            continue
        base = match.texts(source)
        base["func.name"] = parent[0]
        for candidate in table_candidates(source, call):
            captures = {**base, **candidate}
            if pattern.accepts(captures):
                yield f"{parent[1]}/{sanitize(captures['test.name'])}"


def scan_tree(source: bytes, tree: Tree) -> list[str]:
    root = tree.root_node
    names: list[str] = []
    names.extend(_scan_string_literal(source, root, load_pattern(STRING_LITERAL_PATTERN)))
    names.extend(_scan_struct_literal(source, root, load_pattern(STRUCT_LITERAL_PATTERN)))
    return names


def extract_test_names(path: Path) -> list[str]:
    """Dynamic sub-test names in ``path``; raises ParseFailure for bad files."""
    source = read_source(path)
    names = scan_tree(source, parse_go_source(source, path=path))
    logger.debug("pattern strategy: %d name(s) in %s", len(names), path)
    return names
