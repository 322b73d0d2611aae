"""Tree-sitter plumbing for Go sources.

Parsers are created per call: a ``tree_sitter.Parser`` keeps mutable state
and the two extraction strategies parse the same file on different threads.
The ``Language`` object is immutable and shared.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterator

import tree_sitter
import tree_sitter_go

from golisttests.exceptions import ParseFailure


@lru_cache(maxsize=1)
def go_language() -> tree_sitter.Language:
    return tree_sitter.Language(tree_sitter_go.language())


def read_source(path: Path) -> bytes:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ParseFailure(path, f"cannot read file: {exc.strerror or exc}") from exc
    try:
        data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseFailure(path, "file is not valid UTF-8") from exc
    return data


def parse_go_source(source: bytes, *, path: Path | None = None) -> tree_sitter.Tree:
    """Parse Go source, rejecting trees that contain error or missing nodes."""
    parser = tree_sitter.Parser(go_language())
    tree = parser.parse(source)
    root = tree.root_node
    if root.has_error:
        line = _first_error_line(root)
        raise ParseFailure(path, f"syntax error near line {line}")
    return tree


def _first_error_line(root: tree_sitter.Node) -> int:
    for node in walk_preorder(root):
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
    return root.start_point[0] + 1


def walk_preorder(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(source: bytes, node: tree_sitter.Node | None) -> str:
    if node is None:
        return ""
    return source[node.start_byte : node.end_byte].decode("utf-8")


def named_children(node: tree_sitter.Node) -> list[tree_sitter.Node]:
    """Named children without comments, which the grammar lets float anywhere."""
    return [child for child in node.named_children if child.type != "comment"]


def unwrap_element(node: tree_sitter.Node) -> tree_sitter.Node:
    """Peel ``literal_element`` wrappers some grammar versions put around values."""
    while node.type == "literal_element":
        inner = named_children(node)
        if len(inner) != 1:
            break
        node = inner[0]
    return node
