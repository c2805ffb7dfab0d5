"""Filesystem discovery of region files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List


logger = logging.getLogger(__name__)


def _is_candidate(path: Path, suffix: str) -> bool:
    if not path.name.endswith(suffix):
        return False
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError as exc:
        logger.warning("Skipping %s: %s", path, exc)
        return False


def _walk(root: Path, suffix: str) -> Iterator[Path]:
    if root.is_dir():
        for entry in sorted(root.rglob(f"*{suffix}")):
            if _is_candidate(entry, suffix):
                yield entry
    elif _is_candidate(root, suffix):
        yield root
    elif not root.exists():
        logger.warning("Input %s does not exist", root)


def discover_region_files(inputs: Iterable[Path], suffix: str = ".mca") -> List[Path]:
    """Collect non-empty region files below ``inputs``, sorted and de-duplicated."""

    found = set()
    for root in inputs:
        for path in _walk(Path(root), suffix):
            found.add(path.resolve())
    return sorted(found)
