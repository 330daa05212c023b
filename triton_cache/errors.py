"""
Error types raised while resolving Triton cache artifacts.

Every hard failure derives from `KernelCacheError` so a launch harness can
treat any of them as "kernel not ready" with a single except clause.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence


class KernelCacheError(Exception):
    """Base class for cache resolution failures."""


class ConfigurationError(KernelCacheError):
    """Raised when no cache root can be determined."""


class ArtifactResolutionError(KernelCacheError):
    """Raised when a lookup that needs exactly one artifact finds another count."""

    def __init__(self, kernel_name: str, extension: str, matches: Sequence[Path], pattern: str) -> None:
        self.kernel_name = kernel_name
        self.extension = extension
        self.matches: List[Path] = list(matches)
        self.pattern = pattern
        super().__init__(self._describe())

    def _describe(self) -> str:
        found = ", ".join(str(p) for p in self.matches) or "none"
        return f"expected exactly one '{self.kernel_name}.{self.extension}' under {self.pattern}, found {len(self.matches)}: {found}"


class MissingArtifactError(ArtifactResolutionError):
    """No artifact matched; the compiler may not have produced it yet."""


class AmbiguousArtifactError(ArtifactResolutionError):
    """Several artifacts matched; the cache holds more than one build of the kernel."""


class ArtifactReadError(KernelCacheError):
    """Raised when a resolved artifact cannot be read."""

    def __init__(self, path: Path, error: OSError) -> None:
        self.path = path
        self.error = error
        super().__init__(f"cannot read {path}: {error}")


class MalformedMetadataError(KernelCacheError):
    """Raised when a metadata document does not match the expected schema."""

    def __init__(self, diagnostic: str, path: Optional[Path] = None) -> None:
        self.diagnostic = diagnostic
        self.path = path
        where = f"{path}: " if path is not None else ""
        super().__init__(f"{where}malformed kernel metadata: {diagnostic}")


def resolution_error(kernel_name: str, extension: str, matches: Sequence[Path], pattern: str) -> ArtifactResolutionError:
    cls = MissingArtifactError if not matches else AmbiguousArtifactError
    return cls(kernel_name, extension, matches, pattern)


__all__ = [
    "KernelCacheError",
    "ConfigurationError",
    "ArtifactResolutionError",
    "MissingArtifactError",
    "AmbiguousArtifactError",
    "ArtifactReadError",
    "MalformedMetadataError",
    "resolution_error",
]
