from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class ScanScopeDTO(BaseModel):
    root: str
    file_suffix: str
    limit: bool
    max_files: int
    max_execution_ms: int


class NameListResponse(BaseModel):
    scope: ScanScopeDTO
    names: List[str]
    files_scanned: int
    error: Optional[str] = None
