"""
Artifact discovery under the Triton cache root.

Triton stores every compiled kernel in a content-hash subdirectory, so the
lookup is a recursive match of `<root>/**/<kernel_name>.<extension>`. The
scan is best-effort: a directory that cannot be listed is logged, recorded in
`DiscoveryResult.skipped`, and the walk moves on to its siblings.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Set, Tuple


logger = logging.getLogger("triton_cache.discovery")


@dataclass(frozen=True)
class SkippedEntry:
    path: Path
    error: OSError

    def __str__(self) -> str:
        return f"{self.path}: {self.error.strerror or self.error}"


@dataclass
class DiscoveryResult:
    pattern: str
    paths: List[Path] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.skipped


def artifact_pattern(root: Path, kernel_name: str, extension: str) -> str:
    return str(Path(root) / "**" / f"{kernel_name}.{_normalize_extension(extension)}")


def _normalize_extension(extension: str) -> str:
    return str(extension).lstrip(".")


def _check_query(kernel_name: str, extension: str) -> None:
    if not kernel_name:
        raise ValueError("kernel name must be non-empty")
    if os.sep in kernel_name or (os.altsep and os.altsep in kernel_name):
        raise ValueError(f"kernel name must not contain a path separator: {kernel_name!r}")
    if not _normalize_extension(extension):
        raise ValueError("artifact extension must be non-empty")


def find_artifacts(root: Path, kernel_name: str, extension: str) -> DiscoveryResult:
    """
    Return every file under `root`, at any depth, named `<kernel_name>.<extension>`.

    Nothing is cached between calls: the compiler may add entries at any time.
    """
    _check_query(kernel_name, extension)
    root = Path(root)
    ext = _normalize_extension(extension)
    result = DiscoveryResult(pattern=artifact_pattern(root, kernel_name, ext))
    if not os.path.lexists(root):
        logger.debug("cache root %s does not exist; no artifacts for %s", root, result.pattern)
        return result

    basename = f"{kernel_name}.{ext}"

    def _on_error(err: OSError) -> None:
        entry = SkippedEntry(Path(err.filename) if err.filename else root, err)
        logger.warning("skipping unreadable cache entry %s", entry)
        result.skipped.append(entry)

    # Hash directories may be symlinks; track visited directories to break cycles.
    visited: Set[Tuple[int, int]] = set()
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error, followlinks=True):
        try:
            st = os.stat(dirpath)
        except OSError as e:
            _on_error(e)
            dirnames[:] = []
            continue
        key = (st.st_dev, st.st_ino)
        if key in visited:
            dirnames[:] = []
            continue
        visited.add(key)
        dirnames.sort()
        for fname in filenames:
            if fnmatch.fnmatchcase(fname, basename):
                result.paths.append(Path(dirpath) / fname)
    result.paths.sort()
    return result


__all__ = ["SkippedEntry", "DiscoveryResult", "artifact_pattern", "find_artifacts"]
