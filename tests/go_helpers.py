from __future__ import annotations

import textwrap

from golisttests.ingest.source_unit import FunctionDeclaration, SourceUnit


def must_parse(code: str) -> SourceUnit:
    return SourceUnit.from_source(textwrap.dedent(code).lstrip("\n").encode("utf-8"))


def first_function(code: str) -> tuple[FunctionDeclaration, SourceUnit]:
    unit = must_parse(code)
    functions = unit.top_level_functions()
    assert functions, "functions not found"
    return functions[0], unit


def function_named(unit: SourceUnit, name: str) -> FunctionDeclaration:
    for fn in unit.top_level_functions():
        if fn.name == name:
            return fn
    raise AssertionError(f"function {name} not found")
