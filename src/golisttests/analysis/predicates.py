"""Text predicates attached to syntax patterns.

A pattern source mixes structural query forms with predicate forms such as
``(#eq? @a @b)`` and ``(#match? @a "regex")``. The predicate forms are cut out
of the source and flattened into a step program: predicate name, operands,
then a DONE marker, repeated. The program is evaluated against the text of a
match's captures.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Callable, Mapping, Sequence

from golisttests.exceptions import MalformedPredicateProgram


class StepKind(str, Enum):
    STRING = "string"
    CAPTURE = "capture"
    DONE = "done"


@dataclass(frozen=True)
class PredicateStep:
    kind: StepKind
    value: str = ""


DONE = PredicateStep(StepKind.DONE)

PredicateTest = Callable[[Sequence[PredicateStep], Mapping[str, str]], bool]


@dataclass(frozen=True)
class _PredicateSpec:
    operands: tuple[StepKind, ...]
    test: PredicateTest


def _eq(operands: Sequence[PredicateStep], captures: Mapping[str, str]) -> bool:
    left = captures.get(operands[0].value)
    right = captures.get(operands[1].value)
    if left is None or right is None:
        return False
    return left == right


@lru_cache(maxsize=64)
def _compiled(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise MalformedPredicateProgram(
            "invalid predicate regex", env={"pattern": pattern, "error": str(exc)}
        ) from exc


def _match(operands: Sequence[PredicateStep], captures: Mapping[str, str]) -> bool:
    value = captures.get(operands[0].value)
    if value is None:
        return False
    return _compiled(operands[1].value).search(value) is not None


_PREDICATES: dict[str, _PredicateSpec] = {
    "eq?": _PredicateSpec((StepKind.CAPTURE, StepKind.CAPTURE), _eq),
    "match?": _PredicateSpec((StepKind.CAPTURE, StepKind.STRING), _match),
}


def _step(steps: Sequence[PredicateStep], index: int, kind: StepKind) -> PredicateStep:
    if index >= len(steps):
        raise MalformedPredicateProgram(
            "truncated predicate program", env={"index": index, "expected": kind.value}
        )
    step = steps[index]
    if step.kind is not kind:
        raise MalformedPredicateProgram(
            f"invalid step type: {step.kind.value}",
            env={"index": index, "expected": kind.value, "value": step.value},
        )
    return step


def evaluate(steps: Sequence[PredicateStep], captures: Mapping[str, str]) -> bool:
    """True when every predicate in the program holds for ``captures``.

    A capture missing from ``captures`` makes its predicate false; a program
    the interpreter cannot read raises MalformedPredicateProgram.
    """
    index = 0
    while index < len(steps):
        name = _step(steps, index, StepKind.STRING).value
        spec = _PREDICATES.get(name)
        if spec is None:
            raise MalformedPredicateProgram(
                f"invalid predicate: {name}", env={"index": index}
            )
        operands = [
            _step(steps, index + 1 + offset, kind)
            for offset, kind in enumerate(spec.operands)
        ]
        _step(steps, index + 1 + len(spec.operands), StepKind.DONE)
        if not spec.test(operands, captures):
            return False
        index += len(spec.operands) + 2
    return True


def render_program(steps: Sequence[PredicateStep], captures: Mapping[str, str]) -> str:
    parts: list[str] = []
    for step in steps:
        if step.kind is StepKind.DONE:
            parts.append("EOF")
        elif step.kind is StepKind.CAPTURE:
            parts.append(f"{step.value}({captures.get(step.value, '')})")
        else:
            parts.append(step.value)
    return " ".join(parts)


def _read_string(source: str, start: int) -> tuple[str, int]:
    """Decode a double-quoted query string starting at ``source[start]``."""
    chars: list[str] = []
    index = start + 1
    while index < len(source):
        char = source[index]
        if char == "\\" and index + 1 < len(source):
            escaped = source[index + 1]
            chars.append({"n": "\n", "t": "\t", "r": "\r", "0": "\0"}.get(escaped, escaped))
            index += 2
            continue
        if char == '"':
            return "".join(chars), index + 1
        chars.append(char)
        index += 1
    raise MalformedPredicateProgram("unterminated string in pattern", env={"offset": start})


def _predicate_steps(form: str) -> list[PredicateStep]:
    steps: list[PredicateStep] = []
    index = 0
    while index < len(form):
        char = form[index]
        if char.isspace():
            index += 1
        elif char == '"':
            value, index = _read_string(form, index)
            steps.append(PredicateStep(StepKind.STRING, value))
        elif char in "()":
            raise MalformedPredicateProgram("nested form in predicate", env={"form": form})
        else:
            end = index
            while end < len(form) and not form[end].isspace() and form[end] not in '()"':
                end += 1
            token = form[index:end]
            if token.startswith("@"):
                steps.append(PredicateStep(StepKind.CAPTURE, token[1:]))
            else:
                steps.append(PredicateStep(StepKind.STRING, token.removeprefix("#")))
            index = end
    steps.append(DONE)
    return steps


def _form_end(source: str, start: int) -> int:
    """Index just past the ``)`` closing the form opened at ``source[start]``."""
    depth = 0
    index = start
    while index < len(source):
        char = source[index]
        if char == '"':
            _, index = _read_string(source, index)
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1
    raise MalformedPredicateProgram("unbalanced predicate form", env={"offset": start})


def parse_predicate_forms(source: str) -> tuple[str, tuple[PredicateStep, ...]]:
    """Split a pattern into its structural query and its predicate program."""
    query: list[str] = []
    steps: list[PredicateStep] = []
    index = 0
    while index < len(source):
        char = source[index]
        if char == ";":
            end = source.find("\n", index)
            end = len(source) if end < 0 else end
            query.append(source[index:end])
            index = end
            continue
        if char == '"':
            _, end = _read_string(source, index)
            query.append(source[index:end])
            index = end
            continue
        if char == "(" and source[index + 1 :].lstrip().startswith("#"):
            end = _form_end(source, index)
            steps.extend(_predicate_steps(source[index + 1 : end - 1]))
            index = end
            continue
        query.append(char)
        index += 1
    return "".join(query), tuple(steps)
