from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModMetadata(BaseModel):
    """One entry of `auto_mods.yml`."""

    model_config = ConfigDict(extra="forbid")

    slug: str
    path: str
    updated: str
    size_kb: float
    sha256_8: str = Field(min_length=8, max_length=8)
    keys_count: int = Field(ge=0)


class ProgressRecord(BaseModel):
    """Translation completion of one slug in `auto_progress.yml`."""

    pct: float = Field(ge=0.0, le=100.0)
    done: int = Field(ge=0)
    total: int = Field(ge=0)


class ProgressData(BaseModel):
    mods: dict[str, ProgressRecord] = Field(default_factory=dict)


class ChangelogItem(BaseModel):
    slug: str
    path: str


class ChangelogEntry(BaseModel):
    # Unknown keys written by hand are kept on rewrite.
    model_config = ConfigDict(extra="allow")

    date: str
    sha: str
    by: str = "local"
    items: list[ChangelogItem] = Field(default_factory=list)
