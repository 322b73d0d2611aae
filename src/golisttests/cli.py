from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional
import logging
import sys

import typer

from golisttests.config import (
    ExtractionConfig,
    WalkConfig,
    extraction_defaults,
    walk_defaults,
)
from golisttests.schema import NameListResponse, ScanScopeDTO
from golisttests.walker import budget_for, list_test_names

app = typer.Typer(add_completion=False)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format=_LOG_FORMAT,
    )


def _walk_config(
    *,
    root: Path,
    config: Path | None,
    limit: bool,
    max_files: int | None,
    max_execution_ms: int | None,
) -> WalkConfig:
    walk = WalkConfig.from_section(walk_defaults(root=root, config_path=config))
    overrides: dict[str, object] = {}
    if limit:
        overrides["limit"] = True
    if max_files is not None:
        overrides["max_files"] = max_files
    if max_execution_ms is not None:
        overrides["max_execution_ms"] = max_execution_ms
    return replace(walk, **overrides) if overrides else walk


@app.command(help="List Go test names under ROOT without running them.")
def main(
    root: Path = typer.Option(Path("."), "--root", help="Root path to scan for *_test.go files."),
    limit: bool = typer.Option(
        False, "--limit", help="Enable the file-count and time limiter."
    ),
    max_files: Optional[int] = typer.Option(
        None, "--max-files", min=1, help="Max number of files to scan when limited."
    ),
    max_execution_ms: Optional[int] = typer.Option(
        None, "--max-execution-ms", min=1, help="Max scan time in milliseconds when limited."
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to golisttests.toml."),
    json_output: bool = typer.Option(False, "--json", help="Emit a JSON document."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log degraded files to stderr."),
) -> None:
    _configure_logging(verbose)
    if not root.exists():
        typer.echo(f"root path does not exist: {root}", err=True)
        raise typer.Exit(code=2)
    extraction = ExtractionConfig.from_section(
        extraction_defaults(root=root, config_path=config)
    )
    walk = _walk_config(
        root=root,
        config=config,
        limit=limit,
        max_files=max_files,
        max_execution_ms=max_execution_ms,
    )
    result = list_test_names(
        root, budget_for(walk), extraction=extraction, walk=walk
    )
    if json_output:
        response = NameListResponse(
            scope=ScanScopeDTO(
                root=str(root),
                file_suffix=walk.file_suffix,
                limit=walk.limit,
                max_files=walk.max_files,
                max_execution_ms=walk.max_execution_ms,
            ),
            names=result.names,
            files_scanned=result.files_scanned,
            error=str(result.error) if result.error is not None else None,
        )
        typer.echo(response.model_dump_json(indent=2))
    else:
        for name in result.names:
            typer.echo(name)
    if result.error is not None:
        typer.echo(str(result.error), err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
