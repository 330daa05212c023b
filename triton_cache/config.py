"""
Cache root resolution.

Triton writes compiled kernels under `$TRITON_CACHE_DIR`, falling back to
`~/.triton/cache`. The default root is resolved once per process and shared
read-only afterwards; resolvers can also be handed an explicit `CacheRoot`.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Literal, Mapping, Optional

from triton_cache.errors import ConfigurationError


logger = logging.getLogger("triton_cache.config")

CACHE_DIR_ENV = "TRITON_CACHE_DIR"
DEFAULT_CACHE_SUBDIR = Path(".triton") / "cache"

RootSource = Literal["env", "home", "explicit"]


@dataclass(frozen=True)
class CacheRoot:
    path: Path
    source: RootSource = "explicit"

    @classmethod
    def explicit(cls, path: str | os.PathLike[str]) -> "CacheRoot":
        return cls(Path(path), "explicit")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        home: Optional[Callable[[], Path]] = None,
    ) -> "CacheRoot":
        """
        Resolve the root from the environment override, else the home default.

        A blank override counts as unset, matching how Triton itself reads
        the variable.
        """
        env = os.environ if environ is None else environ
        override = env.get(CACHE_DIR_ENV, "")
        if override.strip():
            return cls(Path(override), "env")
        return cls(_home_dir(home or Path.home) / DEFAULT_CACHE_SUBDIR, "home")

    def __str__(self) -> str:
        return str(self.path)


def _home_dir(home: Callable[[], Path]) -> Path:
    try:
        path = Path(home())
    except (RuntimeError, KeyError, OSError) as e:
        raise ConfigurationError(f"{CACHE_DIR_ENV} is not set and the home directory cannot be determined: {e}") from e
    # expanduser() hands back "~" unchanged when it cannot resolve a home.
    if not path.is_absolute():
        raise ConfigurationError(f"{CACHE_DIR_ENV} is not set and the home directory resolved to {str(path)!r}")
    return path


_default_root: Optional[CacheRoot] = None
_default_root_lock = threading.Lock()


def default_cache_root() -> CacheRoot:
    """Process-wide cache root, computed on first call."""
    global _default_root
    root = _default_root
    if root is not None:
        return root
    with _default_root_lock:
        if _default_root is None:
            _default_root = CacheRoot.from_env()
            logger.debug("triton cache root: %s (from %s)", _default_root.path, _default_root.source)
        return _default_root


def reset_default_cache_root() -> None:
    """Forget the process-wide root. Only meant for tests."""
    global _default_root
    with _default_root_lock:
        _default_root = None


__all__ = [
    "CACHE_DIR_ENV",
    "DEFAULT_CACHE_SUBDIR",
    "CacheRoot",
    "default_cache_root",
    "reset_default_cache_root",
]
