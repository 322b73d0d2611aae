from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "golisttests.toml"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]

DEFAULT_SUITE_RUNNERS = ("suite.Run",)
DEFAULT_SKIP_IDENTIFIERS = ("new",)
DEFAULT_FILE_SUFFIX = "_test.go"
DEFAULT_EXCLUDE_DIRS = ("vendor", "testdata")
DEFAULT_MAX_FILES = 10000
DEFAULT_MAX_EXECUTION_MS = 1000


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        if base.is_file():
            base = base.parent
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def extraction_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("extraction", {})
    return section if isinstance(section, dict) else {}


def walk_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("walk", {})
    return section if isinstance(section, dict) else {}


def _normalize_name_list(value: TomlValue) -> list[str]:
    items: list[str] = []
    if value is None:
        return items
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set)):
        for item in value:
            if isinstance(item, str):
                items.extend([part.strip() for part in item.split(",") if part.strip()])
    return [item for item in items if item]


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _as_positive_int(value: TomlValue, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    if isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            return default
        return parsed if parsed > 0 else default
    return default


@dataclass(frozen=True)
class ExtractionConfig:
    suite_runners: tuple[str, ...] = DEFAULT_SUITE_RUNNERS
    skip_identifiers: frozenset[str] = frozenset(DEFAULT_SKIP_IDENTIFIERS)

    @classmethod
    def from_section(cls, section: TomlTable | None) -> "ExtractionConfig":
        if not isinstance(section, dict):
            return cls()
        runners = _normalize_name_list(section.get("suite_runners"))
        skip = _normalize_name_list(section.get("skip_identifiers"))
        return cls(
            suite_runners=tuple(runners) if runners else DEFAULT_SUITE_RUNNERS,
            skip_identifiers=(
                frozenset(skip) if skip else frozenset(DEFAULT_SKIP_IDENTIFIERS)
            ),
        )


@dataclass(frozen=True)
class WalkConfig:
    file_suffix: str = DEFAULT_FILE_SUFFIX
    exclude_dirs: frozenset[str] = frozenset(DEFAULT_EXCLUDE_DIRS)
    limit: bool = False
    max_files: int = DEFAULT_MAX_FILES
    max_execution_ms: int = DEFAULT_MAX_EXECUTION_MS

    @classmethod
    def from_section(cls, section: TomlTable | None) -> "WalkConfig":
        if not isinstance(section, dict):
            return cls()
        suffix = section.get("file_suffix")
        exclude = section.get("exclude_dirs")
        return cls(
            file_suffix=suffix if isinstance(suffix, str) and suffix else DEFAULT_FILE_SUFFIX,
            exclude_dirs=(
                frozenset(_normalize_name_list(exclude))
                if exclude is not None
                else frozenset(DEFAULT_EXCLUDE_DIRS)
            ),
            limit=_as_bool(section.get("limit")),
            max_files=_as_positive_int(section.get("max_files"), DEFAULT_MAX_FILES),
            max_execution_ms=_as_positive_int(
                section.get("max_execution_ms"), DEFAULT_MAX_EXECUTION_MS
            ),
        )
