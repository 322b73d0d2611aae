from __future__ import annotations

import itertools
import sys
import textwrap
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


import pytest


@pytest.fixture
def spit(tmp_path: Path):
    """Write Go source to a fresh ``*_test.go`` file and return its path."""
    counter = itertools.count()

    def _spit(code: str, *, name: str | None = None, directory: Path | None = None) -> Path:
        target_dir = directory if directory is not None else tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        filename = name or f"sample{next(counter)}_test.go"
        path = target_dir / filename
        path.write_text(textwrap.dedent(code).lstrip("\n"), encoding="utf-8")
        return path

    return _spit
