"""Best-effort identifier binding and type naming over a Go syntax tree.

There is no type checker here. A use-site identifier is bound by scanning
enclosing scopes outward for the nearest preceding declaration, and a type
name is read off the declaration: an explicit type, a composite literal,
``new(T)``, or another identifier followed recursively. Anything else is
reported as unresolved and callers fall back to the identifier's own text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from tree_sitter import Node

from golisttests.ingest.go_parser import named_children, node_text, walk_preorder

logger = logging.getLogger(__name__)

_IDENTIFIER_TYPES = frozenset({"identifier", "type_identifier"})
_FUNCTION_SCOPES = frozenset({"function_declaration", "method_declaration", "func_literal"})
_POINTER_WRAPPERS = frozenset({"pointer_type", "parenthesized_type"})
SEQUENCE_TYPES = frozenset({"slice_type", "array_type", "implicit_length_array_type"})
_MAX_INFERENCE_DEPTH = 8


@dataclass(frozen=True)
class Resolution:
    type_name: str
    resolved: bool

    @classmethod
    def fallback(cls, literal: str) -> "Resolution":
        return cls(type_name=literal, resolved=False)


@dataclass(frozen=True)
class Binding:
    name: str
    type_node: Node | None = None
    value_node: Node | None = None
    # range value variables: the ranged expression
    element_of: Node | None = None


def type_name(source: bytes, node: Node) -> str:
    """Name of a type expression with all pointer indirection stripped."""
    while True:
        if node.type in _POINTER_WRAPPERS:
            inner = named_children(node)
            if not inner:
                break
            node = inner[0]
            continue
        if node.type == "generic_type":
            base = node.child_by_field_name("type")
            if base is None:
                break
            node = base
            continue
        break
    if node.type == "qualified_type":
        package = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        if package is not None and name is not None:
            return f"{node_text(source, package)}.{node_text(source, name)}"
    return " ".join(node_text(source, node).split())


def first_identifier(source: bytes, expr: Node, skip: Iterable[str]) -> Node | None:
    skipped = frozenset(skip)
    for node in walk_preorder(expr):
        if node.type in _IDENTIFIER_TYPES and node_text(source, node) not in skipped:
            return node
    return None


def resolve_identifier(source: bytes, ident: Node) -> Resolution:
    text = node_text(source, ident)
    if ident.type == "type_identifier":
        parent = ident.parent
        if parent is not None and parent.type == "qualified_type":
            return Resolution(type_name(source, parent), resolved=True)
        return Resolution(text, resolved=True)
    if _is_new_type_argument(source, ident):
        return Resolution(text, resolved=True)
    call = ident.parent
    if (
        call is not None
        and call.type == "call_expression"
        and call.child_by_field_name("function") == ident
    ):
        inferred = infer_expression_type(source, call)
    else:
        inferred = _infer_identifier(source, ident, depth=0)
    if inferred is None:
        logger.debug(
            "unresolved identifier %r at line %d, using literal name",
            text,
            ident.start_point[0] + 1,
        )
        return Resolution.fallback(text)
    return Resolution(inferred, resolved=True)


def _is_new_type_argument(source: bytes, ident: Node) -> bool:
    # new(T) may surface T as a plain identifier argument.
    arguments = ident.parent
    if arguments is None or arguments.type != "argument_list":
        return False
    call = arguments.parent
    if call is None or call.type != "call_expression":
        return False
    function = call.child_by_field_name("function")
    if function is None or node_text(source, function) != "new":
        return False
    args = named_children(arguments)
    return bool(args) and args[0] == ident


def infer_expression_type(source: bytes, expr: Node, depth: int = 0) -> str | None:
    if depth > _MAX_INFERENCE_DEPTH:
        return None
    kind = expr.type
    if kind == "parenthesized_expression":
        inner = named_children(expr)
        return infer_expression_type(source, inner[0], depth + 1) if inner else None
    if kind == "composite_literal":
        literal_type = expr.child_by_field_name("type")
        return type_name(source, literal_type) if literal_type is not None else None
    if kind == "unary_expression":
        operator = expr.child_by_field_name("operator")
        operand = expr.child_by_field_name("operand")
        if operator is None or operand is None or node_text(source, operator) != "&":
            return None
        return infer_expression_type(source, operand, depth + 1)
    if kind == "call_expression":
        function = expr.child_by_field_name("function")
        arguments = expr.child_by_field_name("arguments")
        if function is None or arguments is None or function.type != "identifier":
            return None
        if node_text(source, function) != "new":
            return function_result_type(source, function)
        args = named_children(arguments)
        return type_name(source, args[0]) if args else None
    if kind == "identifier":
        return _infer_identifier(source, expr, depth + 1)
    return None


def function_result_type(source: bytes, callee: Node) -> str | None:
    """Single result type of the same-file top-level function named by ``callee``."""
    name = node_text(source, callee)
    root = callee
    while root.parent is not None:
        root = root.parent
    for declaration in named_children(root):
        if declaration.type != "function_declaration":
            continue
        if node_text(source, declaration.child_by_field_name("name")) != name:
            continue
        result = declaration.child_by_field_name("result")
        if result is not None and result.type == "parameter_list":
            results = [
                parameter
                for parameter in named_children(result)
                if parameter.type == "parameter_declaration"
            ]
            if len(results) != 1 or len(results[0].children_by_field_name("name")) > 1:
                return None
            result = results[0].child_by_field_name("type")
        return type_name(source, result) if result is not None else None
    return None


def _container_type(source: bytes, expr: Node, depth: int) -> Node | None:
    """Declared type node of a ranged expression, when one can be read."""
    if depth > _MAX_INFERENCE_DEPTH:
        return None
    while expr.type == "parenthesized_expression":
        inner = named_children(expr)
        if not inner:
            return None
        expr = inner[0]
    if expr.type == "composite_literal":
        return expr.child_by_field_name("type")
    if expr.type != "identifier":
        return None
    binding = find_binding(source, expr)
    if binding is None:
        return None
    if binding.type_node is not None:
        return binding.type_node
    if binding.value_node is not None:
        return _container_type(source, binding.value_node, depth + 1)
    return None


def element_type_name(source: bytes, container: Node) -> str | None:
    while container.type in _POINTER_WRAPPERS:
        inner = named_children(container)
        if not inner:
            return None
        container = inner[0]
    if container.type in SEQUENCE_TYPES:
        element = container.child_by_field_name("element")
    elif container.type == "map_type":
        element = container.child_by_field_name("value")
    else:
        return None
    return type_name(source, element) if element is not None else None


def _infer_identifier(source: bytes, ident: Node, depth: int) -> str | None:
    binding = find_binding(source, ident)
    if binding is None:
        return None
    if binding.type_node is not None:
        return type_name(source, binding.type_node)
    if binding.value_node is not None:
        return infer_expression_type(source, binding.value_node, depth)
    if binding.element_of is not None:
        container = _container_type(source, binding.element_of, depth + 1)
        return element_type_name(source, container) if container is not None else None
    return None


def find_binding(source: bytes, ident: Node) -> Binding | None:
    """Nearest declaration of ``ident`` visible at its use site."""
    name = node_text(source, ident)
    use_at = ident.start_byte
    scope = ident.parent
    while scope is not None:
        if scope.type in _FUNCTION_SCOPES:
            binding = _parameter_binding(source, scope, name)
        elif scope.type == "source_file":
            return _statement_binding(source, scope, name, before=None)
        else:
            binding = _statement_binding(source, scope, name, before=use_at)
        if binding is not None:
            return binding
        scope = scope.parent
    return None


def _statements(scope: Node) -> list[Node]:
    statements: list[Node] = []
    for child in named_children(scope):
        if child.type == "statement_list":
            statements.extend(named_children(child))
        else:
            statements.append(child)
    return statements


def _statement_binding(
    source: bytes, scope: Node, name: str, *, before: int | None
) -> Binding | None:
    for statement in reversed(_statements(scope)):
        if before is not None and statement.end_byte > before:
            continue
        binding = declaration_binding(source, statement, name)
        if binding is not None:
            return binding
    return None


def declaration_binding(source: bytes, statement: Node, name: str) -> Binding | None:
    if statement.type == "range_clause":
        left = statement.child_by_field_name("left")
        if left is None:
            return None
        for index, candidate in enumerate(named_children(left)):
            if node_text(source, candidate) != name:
                continue
            # only the value variable is typed; the key shadows without a type
            element_of = statement.child_by_field_name("right") if index == 1 else None
            return Binding(name=name, element_of=element_of)
        return None
    if statement.type == "short_var_declaration":
        left = statement.child_by_field_name("left")
        right = statement.child_by_field_name("right")
        if left is None:
            return None
        names = named_children(left)
        values = named_children(right) if right is not None else []
        for index, candidate in enumerate(names):
            if node_text(source, candidate) != name:
                continue
            value = values[index] if len(values) == len(names) else None
            return Binding(name=name, value_node=value)
        return None
    if statement.type in ("var_declaration", "const_declaration"):
        spec_type = "var_spec" if statement.type == "var_declaration" else "const_spec"
        for spec in walk_preorder(statement):
            if spec.type != spec_type:
                continue
            names = spec.children_by_field_name("name")
            value_list = spec.child_by_field_name("value")
            values = named_children(value_list) if value_list is not None else []
            for index, candidate in enumerate(names):
                if node_text(source, candidate) != name:
                    continue
                value = values[index] if len(values) == len(names) else None
                return Binding(
                    name=name,
                    type_node=spec.child_by_field_name("type"),
                    value_node=value,
                )
    return None


def _parameter_binding(source: bytes, function: Node, name: str) -> Binding | None:
    for field_name in ("receiver", "parameters"):
        parameters = function.child_by_field_name(field_name)
        if parameters is None:
            continue
        for parameter in named_children(parameters):
            if parameter.type != "parameter_declaration":
                continue
            for candidate in parameter.children_by_field_name("name"):
                if node_text(source, candidate) == name:
                    return Binding(name=name, type_node=parameter.child_by_field_name("type"))
    return None
