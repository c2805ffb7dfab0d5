"""Configuration for batch runs over many region files."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

from region.scanner import JunkMode, WindowPolicy


class BatchSettings(BaseModel):
    jobs: int = Field(16, ge=1, le=256)
    level: int = Field(5, ge=1, le=9)


@lru_cache
def get_settings() -> BatchSettings:
    defaults = BatchSettings()
    return BatchSettings(
        jobs=os.getenv("MCCOMPRESS_JOBS", defaults.jobs),
        level=os.getenv("MCCOMPRESS_LEVEL", defaults.level),
    )


class BatchConfig(BaseModel):
    inputs: List[Path] = Field(..., min_length=1)
    jobs: int = Field(16, ge=1, le=256)
    suffix: str = Field(".mca", min_length=1)

    model_config = {
        "arbitrary_types_allowed": True,
    }


class RecompressConfig(BatchConfig):
    level: int = Field(5, ge=1, le=9)


class AuditConfig(BatchConfig):
    mode: JunkMode = JunkMode.ALL_OR_NOTHING
    policy: WindowPolicy = WindowPolicy.SECTOR_COUNT
