from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Mapping

from tree_sitter import Node, Query, QueryCursor

from golisttests.analysis.predicates import PredicateStep, evaluate, parse_predicate_forms, render_program
from golisttests.ingest.go_parser import go_language, node_text

logger = logging.getLogger(__name__)

QUERY_DIR = Path(__file__).with_name("queries")


@dataclass(frozen=True)
class SyntaxPattern:
    name: str
    query_source: str
    predicates: tuple[PredicateStep, ...] = ()

    def accepts(self, captures: Mapping[str, str]) -> bool:
        accepted = evaluate(self.predicates, captures)
        if not accepted and logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s rejected: %s", self.name, render_program(self.predicates, captures)
            )
        return accepted


@dataclass(frozen=True)
class RawMatch:
    pattern: SyntaxPattern
    nodes: Mapping[str, Node] = field(default_factory=dict)

    def texts(self, source: bytes) -> dict[str, str]:
        return {label: node_text(source, node) for label, node in self.nodes.items()}


def compile_pattern(name: str, source: str) -> SyntaxPattern:
    query_source, predicates = parse_predicate_forms(source)
    return SyntaxPattern(name=name, query_source=query_source, predicates=predicates)


@lru_cache(maxsize=None)
def load_pattern(filename: str) -> SyntaxPattern:
    source = (QUERY_DIR / filename).read_text(encoding="utf-8")
    return compile_pattern(Path(filename).stem, source)


@lru_cache(maxsize=None)
def _query(query_source: str) -> Query:
    return Query(go_language(), query_source)


def iter_matches(pattern: SyntaxPattern, root: Node) -> Iterator[RawMatch]:
    """Structural matches of ``pattern`` under ``root``, predicates not applied.

    Each capture label maps to the first node captured under it.
    """
    cursor = QueryCursor(_query(pattern.query_source))
    for _pattern_index, captures in cursor.matches(root):
        nodes = {label: found[0] for label, found in captures.items() if found}
        yield RawMatch(pattern=pattern, nodes=nodes)
