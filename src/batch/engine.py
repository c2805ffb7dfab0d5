"""Run region file operations over many files on a thread pool.

Every file is an independent job: it opens its own stream and its own
:class:`region.RegionFile`, so jobs share no state. A file that fails is
reported and the remaining files keep going.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from region import RegionError, RegionFile

from .config import AuditConfig, BatchConfig, RecompressConfig
from .scanner import discover_region_files

ProgressCallback = Optional[Callable[[int, int], None]]


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Size helpers
# ---------------------------------------------------------------------------


def bytes_to_human(num_bytes: int) -> str:
    for suffix, threshold in (
        ("TiB", 1024 ** 4),
        ("GiB", 1024 ** 3),
        ("MiB", 1024 ** 2),
        ("KiB", 1024),
    ):
        if num_bytes >= threshold:
            return f"{num_bytes / threshold:.2f} {suffix}"
    return f"{num_bytes} B"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class FileResult:
    path: Path
    junk_bytes: int = 0
    old_bytes: int = 0
    new_bytes: int = 0
    elapsed_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def saved_bytes(self) -> int:
        return self.old_bytes - self.new_bytes


@dataclass
class BatchReport:
    results: List[FileResult] = field(default_factory=list)

    @property
    def failures(self) -> List[FileResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return bool(self.results) and not self.failures

    @property
    def total_junk_bytes(self) -> int:
        return sum(result.junk_bytes for result in self.results)

    @property
    def total_old_bytes(self) -> int:
        return sum(result.old_bytes for result in self.results)

    @property
    def total_new_bytes(self) -> int:
        return sum(result.new_bytes for result in self.results)

    @property
    def total_saved_bytes(self) -> int:
        return self.total_old_bytes - self.total_new_bytes


# ---------------------------------------------------------------------------
# Per-file jobs
# ---------------------------------------------------------------------------


def _cleanup_file(path: Path) -> FileResult:
    with RegionFile.open(path, writable=True) as region:
        cleaned = region.clean_junk()
    return FileResult(path=path, junk_bytes=cleaned)


def _recompress_file(path: Path, level: int) -> FileResult:
    with RegionFile.open(path, writable=True) as region:
        old_bytes, new_bytes = region.recompress_region(level)
    return FileResult(path=path, old_bytes=old_bytes, new_bytes=new_bytes)


def _audit_file(path: Path, config: AuditConfig) -> FileResult:
    with RegionFile.open(path) as region:
        junk = region.total_junk_bytes(mode=config.mode, policy=config.policy)
    return FileResult(path=path, junk_bytes=junk)


def _timed(job: Callable[..., FileResult], path: Path, *args) -> FileResult:
    start = time.monotonic()
    result = job(path, *args)
    result.elapsed_seconds = round(time.monotonic() - start, 2)
    return result


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def _run(
    config: BatchConfig,
    job: Callable[..., FileResult],
    *args,
    progress: ProgressCallback = None,
) -> BatchReport:
    files = discover_region_files(config.inputs, config.suffix)
    total = len(files)
    if progress:
        progress(0, total)
    if not files:
        logger.warning("No region files found under %s", ", ".join(str(p) for p in config.inputs))
        return BatchReport()

    results: List[FileResult] = []
    with ThreadPoolExecutor(max_workers=config.jobs) as executor:
        futures = {executor.submit(_timed, job, path, *args): path for path in files}
        for completed in as_completed(futures):
            path = futures[completed]
            try:
                result = completed.result()
            except (RegionError, OSError) as exc:
                logger.error("Error while processing %s: %s", path, exc)
                result = FileResult(path=path, error=f"{type(exc).__name__}: {exc}")
            else:
                logger.info("Processed %s", path)
            results.append(result)
            if progress:
                progress(len(results), total)

    return BatchReport(results=sorted(results, key=lambda r: r.path))


def run_cleanup(config: BatchConfig, *, progress: ProgressCallback = None) -> BatchReport:
    return _run(config, _cleanup_file, progress=progress)


def run_recompress(config: RecompressConfig, *, progress: ProgressCallback = None) -> BatchReport:
    return _run(config, _recompress_file, config.level, progress=progress)


def run_junk_audit(config: AuditConfig, *, progress: ProgressCallback = None) -> BatchReport:
    return _run(config, _audit_file, config, progress=progress)


__all__ = [
    "BatchReport",
    "FileResult",
    "bytes_to_human",
    "run_cleanup",
    "run_junk_audit",
    "run_recompress",
]
