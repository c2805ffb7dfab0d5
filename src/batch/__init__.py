"""Batch processing of region files."""

from .config import AuditConfig, BatchConfig, RecompressConfig
from .engine import BatchReport, FileResult, run_cleanup, run_junk_audit, run_recompress
from .scanner import discover_region_files

__all__ = [
    "AuditConfig",
    "BatchConfig",
    "BatchReport",
    "FileResult",
    "RecompressConfig",
    "discover_region_files",
    "run_cleanup",
    "run_junk_audit",
    "run_recompress",
]
