"""Invariant markers for golisttests."""

from __future__ import annotations

from typing import NoReturn

from golisttests.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The env payload is metadata only; it is attached to the raised exception
    for diagnostics and is not evaluated.
    """
    raise NeverThrown(reason or "never() marker reached", env=env)


def require_not_none(value, *, reason: str = "", **env: object):
    if value is None:
        never(reason or "required value is None", **env)
    return value
