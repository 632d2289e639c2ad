from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, field_validator

from gobru.render.descriptor import DEFAULT_BASE_URL


class GenerateConfig(BaseModel):
    """Settings for one generate run (filled from CLI options / GOBRU_* env vars)."""

    input_dir: Path
    output_dir: Path = Path("./bruno")
    base_url: str = DEFAULT_BASE_URL
    collection_name: Optional[str] = None
    include_tests: bool = True
    max_files: Optional[int] = None
    dry_run: bool = False

    @field_validator("input_dir", "output_dir")
    @classmethod
    def _expand(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("max_files")
    @classmethod
    def _positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("max_files must be at least 1")
        return v

    @property
    def resolved_collection_name(self) -> str:
        return self.collection_name or self.input_dir.resolve().name or "api"
