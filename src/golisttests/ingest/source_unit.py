from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path

import tree_sitter

from golisttests.analysis.type_resolution import Resolution, resolve_identifier, type_name
from golisttests.ingest.go_parser import (
    named_children,
    node_text,
    parse_go_source,
    read_source,
)
from golisttests.invariants import never


@dataclass(frozen=True)
class TypeDescriptor:
    """A parameter type with one level of pointer indirection peeled off."""

    name: str
    pointer: bool = False


@dataclass(frozen=True)
class Receiver:
    type_name: str
    by_pointer: bool


@dataclass(frozen=True)
class FunctionDeclaration:
    name: str
    receiver: Receiver | None
    parameters: tuple[TypeDescriptor, ...]
    node: tree_sitter.Node = field(compare=False, repr=False)


def describe_type(source: bytes, node: tree_sitter.Node) -> TypeDescriptor:
    if node.type == "pointer_type":
        inner = named_children(node)
        if not inner:
            never("pointer type without element", text=node_text(source, node))
        return TypeDescriptor(name=_spelled_type(source, inner[0]), pointer=True)
    return TypeDescriptor(name=_spelled_type(source, node), pointer=False)


def _spelled_type(source: bytes, node: tree_sitter.Node) -> str:
    if node.type == "qualified_type":
        return type_name(source, node)
    return " ".join(node_text(source, node).split())


def _parameters(source: bytes, parameter_list: tree_sitter.Node | None) -> tuple[TypeDescriptor, ...]:
    if parameter_list is None:
        return ()
    descriptors: list[TypeDescriptor] = []
    for parameter in named_children(parameter_list):
        if parameter.type not in ("parameter_declaration", "variadic_parameter_declaration"):
            continue
        type_node = parameter.child_by_field_name("type")
        if type_node is None:
            never("parameter without type", text=node_text(source, parameter))
        descriptor = describe_type(source, type_node)
        if parameter.type == "variadic_parameter_declaration":
            descriptor = TypeDescriptor(name=f"...{descriptor.name}", pointer=descriptor.pointer)
        names = parameter.children_by_field_name("name")
        descriptors.extend([descriptor] * max(1, len(names)))
    return tuple(descriptors)


def _receiver(source: bytes, receiver_list: tree_sitter.Node | None) -> Receiver | None:
    if receiver_list is None:
        return None
    for parameter in named_children(receiver_list):
        if parameter.type != "parameter_declaration":
            continue
        type_node = parameter.child_by_field_name("type")
        if type_node is None:
            break
        descriptor = describe_type(source, type_node)
        return Receiver(
            type_name=type_name(source, type_node),
            by_pointer=descriptor.pointer,
        )
    never("unknown receiver type", text=node_text(source, receiver_list))


def _import_local_name(source: bytes, spec: tree_sitter.Node) -> tuple[str, str] | None:
    path_node = spec.child_by_field_name("path")
    if path_node is None:
        return None
    import_path = node_text(source, path_node).strip('"`')
    alias = spec.child_by_field_name("name")
    if alias is not None:
        return node_text(source, alias), import_path
    return import_path.rsplit("/", 1)[-1], import_path


def declaration_from_node(source: bytes, node: tree_sitter.Node) -> FunctionDeclaration:
    receiver = None
    if node.type == "method_declaration":
        receiver = _receiver(source, node.child_by_field_name("receiver"))
    return FunctionDeclaration(
        name=node_text(source, node.child_by_field_name("name")),
        receiver=receiver,
        parameters=_parameters(source, node.child_by_field_name("parameters")),
        node=node,
    )


@dataclass(frozen=True)
class SourceUnit:
    """One parsed Go file: top-level declarations plus identifier resolution."""

    source: bytes
    tree: tree_sitter.Tree = field(compare=False, repr=False)
    path: Path | None = None

    @classmethod
    def from_source(cls, source: bytes, *, path: Path | None = None) -> "SourceUnit":
        return cls(source=source, tree=parse_go_source(source, path=path), path=path)

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node

    def text(self, node: tree_sitter.Node | None) -> str:
        return node_text(self.source, node)

    @cached_property
    def _functions(self) -> tuple[FunctionDeclaration, ...]:
        functions: list[FunctionDeclaration] = []
        for node in named_children(self.root):
            if node.type in ("function_declaration", "method_declaration"):
                functions.append(declaration_from_node(self.source, node))
        return tuple(functions)

    def top_level_functions(self) -> tuple[FunctionDeclaration, ...]:
        return self._functions

    @cached_property
    def imports(self) -> dict[str, str]:
        """Local package name -> import path."""
        table: dict[str, str] = {}
        for node in named_children(self.root):
            if node.type != "import_declaration":
                continue
            for spec in _import_specs(node):
                entry = _import_local_name(self.source, spec)
                if entry is not None:
                    table[entry[0]] = entry[1]
        return table

    def resolve_identifier_type(self, ident: tree_sitter.Node) -> Resolution:
        return resolve_identifier(self.source, ident)


def _import_specs(declaration: tree_sitter.Node) -> list[tree_sitter.Node]:
    specs: list[tree_sitter.Node] = []
    for child in named_children(declaration):
        if child.type == "import_spec":
            specs.append(child)
        elif child.type == "import_spec_list":
            specs.extend(spec for spec in named_children(child) if spec.type == "import_spec")
    return specs


def load_source_unit(path: Path) -> SourceUnit:
    return SourceUnit.from_source(read_source(path), path=path)
